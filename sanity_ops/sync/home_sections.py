"""
Home Section Reconciler

Keeps two views of the same fact consistent:
  - the home page's curated reference lists (sections of type "courses"
    and "courses2"), and
  - each content document's featuredInHome flag.

Invariant: a content document with featuredInHome = true is referenced by
exactly the section matching its category and not by the other one; a
document with featuredInHome = false is referenced by neither.

Two entry points, both idempotent:
  sync_content_to_home(client, doc)      content publish -> home sections
  sync_home_to_content(client, home_doc) home publish    -> featured flags

The home document is read then written without a conditional-write guard.
Two concurrent publishes can race on it; the next sync pass on either side
converges the invariant again.
"""

import copy
from typing import Optional

from sanity_ops.store.client import is_draft, normalize_id

# =============================================================================
# CONFIGURATION
# =============================================================================

HOME_ID = "page-home"
HOME_SLUG = "home"
PAGE_TYPE = "page"

CONTENT_TYPES = {
    "classContent",
    "workshopContent",
    "privateReservationContent",
    "giftCardContent",
    "curso",  # legacy single-type documents not yet split by seed_content_models
}

CATEGORIES = ("class", "workshop", "private", "gift-card")

REGULAR_SECTION = "courses"
TYPE_B_SECTION = "courses2"

# Only workshops are curated in the second home block; every other category
# lands in the regular block.
TYPE_B_CATEGORY = "workshop"

SECTION_TEMPLATES = {
    REGULAR_SECTION: {
        "_type": "coursesSection",
        "type": REGULAR_SECTION,
        "title": "Cursos y workshops",
        "titleLine1": "CURSOS Y",
        "titleLine2": "WORKSHOPS",
        "courses": [],
    },
    TYPE_B_SECTION: {
        "_type": "courses2Section",
        "type": TYPE_B_SECTION,
        "titleLine1": "WORKSHOP CERÁMICA",
        "titleLine2": "EN BARCELONA",
        "courses": [],
    },
}

HOME_QUERY = f'*[_type == "{PAGE_TYPE}" && _id == "{HOME_ID}"][0]{{_id, sections}}'
CONTENT_QUERY = (
    "*[_type in ["
    + ",".join(f'"{t}"' for t in sorted(CONTENT_TYPES))
    + "]]{_id, type, featuredInHome}"
)


# =============================================================================
# SECTION HELPERS
# =============================================================================


def section_for_category(category: Optional[str]) -> str:
    """Section type a content document of this category belongs to."""
    return TYPE_B_SECTION if category == TYPE_B_CATEGORY else REGULAR_SECTION


def other_section(section_type: str) -> str:
    return REGULAR_SECTION if section_type == TYPE_B_SECTION else TYPE_B_SECTION


def find_section(sections: list, section_type: str) -> Optional[dict]:
    for section in sections or []:
        if isinstance(section, dict) and section.get("type") == section_type:
            return section
    return None


def ensure_home_section(sections: list, section_type: str) -> int:
    """Index of the section of this type, appending an empty default one if missing."""
    for idx, section in enumerate(sections):
        if isinstance(section, dict) and section.get("type") == section_type:
            return idx

    sections.append(copy.deepcopy(SECTION_TEMPLATES[section_type]))
    return len(sections) - 1


def has_ref(refs: list, ref_id: str) -> bool:
    return any(isinstance(item, dict) and item.get("_ref") == ref_id for item in refs or [])


def add_ref(refs: list, ref_id: str) -> list:
    if has_ref(refs, ref_id):
        return list(refs or [])
    return list(refs or []) + [{"_type": "reference", "_ref": ref_id}]


def remove_ref(refs: list, ref_id: str) -> list:
    return [item for item in refs or [] if not (isinstance(item, dict) and item.get("_ref") == ref_id)]


def referenced_ids(section: Optional[dict]) -> set:
    """Draft-normalized ids referenced by a section's courses list."""
    ids = set()
    for item in (section or {}).get("courses") or []:
        if isinstance(item, dict):
            ref = normalize_id(item.get("_ref"))
            if ref:
                ids.add(ref)
    return ids


# =============================================================================
# CONTENT -> HOME
# =============================================================================


def apply_content_to_sections(sections: list, doc_id: str, category: str, featured: bool) -> list:
    """
    Return a new section list where doc_id is referenced only by the section
    matching its category, and only when featured. Input is not mutated.
    """
    next_sections = list(sections or [])
    regular_idx = ensure_home_section(next_sections, REGULAR_SECTION)
    type_b_idx = ensure_home_section(next_sections, TYPE_B_SECTION)

    if section_for_category(category) == TYPE_B_SECTION:
        target_idx, other_idx = type_b_idx, regular_idx
    else:
        target_idx, other_idx = regular_idx, type_b_idx

    target = dict(next_sections[target_idx])
    other = dict(next_sections[other_idx])

    if featured:
        target["courses"] = add_ref(target.get("courses"), doc_id)
    else:
        target["courses"] = remove_ref(target.get("courses"), doc_id)
    # Also covers a category change since the last sync
    other["courses"] = remove_ref(other.get("courses"), doc_id)

    next_sections[target_idx] = target
    next_sections[other_idx] = other
    return next_sections


def sync_content_to_home(client, doc: dict) -> Optional[list]:
    """
    Reconcile the home sections against one just-published content document.

    Silent no-op (returns None) when the document has no id/category or the
    home page does not exist yet. Otherwise writes the home sections once,
    even if nothing changed, and returns the new section list.
    """
    doc_id = normalize_id((doc or {}).get("_id"))
    category = (doc or {}).get("type")
    featured = bool((doc or {}).get("featuredInHome"))

    if not doc_id or not category:
        return None

    home = client.fetch(HOME_QUERY)
    if not home or not home.get("_id"):
        return None

    next_sections = apply_content_to_sections(home.get("sections") or [], doc_id, category, featured)

    client.patch(HOME_ID).set({"sections": next_sections}).commit()
    action = "added to" if featured else "removed from"
    print(f"[home-sync] {doc_id} ({category}) {action} {section_for_category(category)}")
    return next_sections


# =============================================================================
# HOME -> CONTENT
# =============================================================================


def plan_featured_changes(home_doc: dict, content_docs: list) -> list:
    """
    Compute (id, should_be_featured) for every content document whose
    featuredInHome flag disagrees with the home sections.

    The id is the stored _id of the version compared: the published one when
    it exists, otherwise the draft. A missing flag counts as false.
    """
    sections = (home_doc or {}).get("sections") or []
    in_regular = referenced_ids(find_section(sections, REGULAR_SECTION))
    in_type_b = referenced_ids(find_section(sections, TYPE_B_SECTION))

    # One entry per logical document; the published version wins over its draft
    by_id = {}
    for doc in content_docs or []:
        doc_id = normalize_id(doc.get("_id"))
        if not doc_id:
            continue
        if doc_id not in by_id or not is_draft(doc.get("_id")):
            by_id[doc_id] = doc

    changes = []
    for doc_id, doc in by_id.items():
        members = in_type_b if section_for_category(doc.get("type")) == TYPE_B_SECTION else in_regular
        should_be_featured = doc_id in members

        if bool(doc.get("featuredInHome")) != should_be_featured:
            changes.append((doc["_id"], should_be_featured))

    return changes


def sync_home_to_content(client, home_doc: dict) -> list:
    """
    Reconcile featuredInHome flags against a just-published home document.

    All flag changes are committed in one transaction; nothing is sent when
    every flag already matches. Returns the list of (id, featured) changes.
    """
    content_docs = client.fetch(CONTENT_QUERY) or []
    changes = plan_featured_changes(home_doc, content_docs)

    if not changes:
        return []

    tx = client.transaction()
    for doc_id, featured in changes:
        tx.patch(doc_id, {"set": {"featuredInHome": featured}})
    tx.commit()

    for doc_id, featured in changes:
        print(f"[home-sync] {doc_id} featuredInHome -> {str(featured).lower()}")
    return changes
