"""
Normalization of legacy KV field shapes.

The legacy store sometimes serialized strings as objects keyed by
character position ({"0": "<", "1": "p", ...}). These helpers reassemble
them and give rich-content fields a canonical {"html": ...} shape.

All functions are pure and work on plain JSON values
(str | int | float | bool | None | list | dict).
"""

import re
from typing import Any

# Objects with more numeric keys than this are serialized HTML blobs
HTML_NUMERIC_KEY_THRESHOLD = 50

_NUMERIC_KEY_RE = re.compile(r"^(0|[1-9][0-9]*)$")
_UNSAFE_ID_CHARS_RE = re.compile(r"[^a-zA-Z0-9_-]")


def is_numeric_key(key: str) -> bool:
    """True for canonical non-negative integer strings ("0", "12"; not "01")."""
    return bool(_NUMERIC_KEY_RE.match(str(key)))


def _join_text(value: Any) -> str:
    # Same text the legacy exporter produced: null -> "", true -> "true"
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def join_numeric_keys(value: dict, keys: list = None) -> str:
    """Concatenate the values of numeric keys, ordered numerically ("10" after "2")."""
    keys = keys if keys is not None else [k for k in value if is_numeric_key(k)]
    return "".join(_join_text(value[k]) for k in sorted(keys, key=int))


def deep_normalize(value: Any) -> Any:
    """
    Reassemble stringly-indexed objects at every level.

    A non-empty object whose keys are all numeric becomes the concatenated
    string; lists and other objects are walked recursively; scalars are
    returned unchanged.
    """
    if isinstance(value, list):
        return [deep_normalize(item) for item in value]

    if isinstance(value, dict):
        if value and all(is_numeric_key(k) for k in value):
            return join_numeric_keys(value)
        return {k: deep_normalize(v) for k, v in value.items()}

    return value


def normalize_content_field(value: Any) -> Any:
    """
    Canonical form of a rich-content field.

    - None -> None
    - "text" -> {"html": "text"}
    - object with > HTML_NUMERIC_KEY_THRESHOLD numeric keys ->
      {"html": <joined>, **normalized non-numeric siblings}
    - anything else -> deep_normalize(value), without an {"html"} wrapper
    """
    if value is None:
        return None

    if isinstance(value, str):
        return {"html": value}

    if isinstance(value, dict):
        numeric_keys = [k for k in value if is_numeric_key(k)]
        if len(numeric_keys) > HTML_NUMERIC_KEY_THRESHOLD:
            out = {"html": join_numeric_keys(value, numeric_keys)}
            for k, v in value.items():
                if not is_numeric_key(k):
                    out[k] = deep_normalize(v)
            return out

    return deep_normalize(value)


# =============================================================================
# IDS
# =============================================================================


def safe_id(value: Any) -> str:
    """Id-safe form of a slug/identifier: anything outside [A-Za-z0-9_-] becomes "-"."""
    if value is None or value == "":
        return "unknown"
    return _UNSAFE_ID_CHARS_RE.sub("-", str(value))


def slugged_id(prefix: str, *candidates: Any) -> str:
    """Deterministic "<prefix>-<id>" from the first non-empty candidate."""
    for candidate in candidates:
        if candidate is not None and candidate != "":
            return f"{prefix}-{safe_id(candidate)}"
    return f"{prefix}-{safe_id(None)}"


def slug_field(slug: Any) -> dict:
    return {"_type": "slug", "current": slug}


def reference(ref_id: str) -> dict:
    return {"_type": "reference", "_ref": ref_id}
