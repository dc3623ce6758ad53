"""
Publish Hook

Decorates the document "publish" action so that, once the publish itself
has completed, the home sections and featured flags are reconciled as a
best-effort side effect.

A document action is any callable `action(props) -> result | None` with an
`action` attribute naming its kind ("publish", "delete", ...). The result
is a dict or any object that may carry an `on_handle` callable (key or
attribute), which performs the operation. Only "publish" actions are wrapped; everything else passes
through untouched.

Contract of the wrapped on_handle:
  - the original on_handle runs first; its errors propagate (the publish
    itself failed)
  - sync errors are printed to stderr and returned as a FAILED outcome,
    never raised
  - props.on_complete() is called exactly once after the sync step,
    whatever the sync outcome
"""

import copy
import functools
import sys
from typing import Callable, Optional

from sanity_ops.config import DEFAULT_API_VERSION
from sanity_ops.store.client import normalize_id
from sanity_ops.sync.home_sections import (
    CONTENT_TYPES,
    HOME_SLUG,
    PAGE_TYPE,
    sync_content_to_home,
    sync_home_to_content,
)

# =============================================================================
# CONFIGURATION
# =============================================================================

API_VERSION = DEFAULT_API_VERSION
PUBLISH_ACTION = "publish"

SYNCED = "SYNCED"
SKIPPED = "SKIPPED"
FAILED = "FAILED"


class ActionProps:
    """
    Document-identifying props handed to a document action.

    get_client(api_version) must return a client with service credentials,
    not the editor's session.
    """

    def __init__(self, id: str, schema_type: str, get_client: Callable, on_complete: Callable):
        self.id = id
        self.schema_type = schema_type
        self.get_client = get_client
        self.on_complete = on_complete


class SyncOutcome:
    """Result of the post-publish sync step."""

    def __init__(self, status: str, document_id: str = None, detail: str = None, error: Exception = None):
        self.status = status
        self.document_id = document_id
        self.detail = detail
        self.error = error

    @property
    def ok(self) -> bool:
        return self.status != FAILED

    def __repr__(self):
        return f"SyncOutcome({self.status}, {self.document_id!r}, {self.detail or self.error!r})"


# =============================================================================
# SYNC STEP
# =============================================================================


def is_home_page(schema_type: str, doc: dict) -> bool:
    return schema_type == PAGE_TYPE and ((doc or {}).get("slug") or {}).get("current") == HOME_SLUG


def sync_published_document(props: ActionProps) -> SyncOutcome:
    """Re-fetch the published document and run the matching sync direction. May raise."""
    doc_id = normalize_id(props.id)
    client = props.get_client(API_VERSION)
    latest = client.get_document(doc_id)

    if not latest:
        return SyncOutcome(SKIPPED, doc_id, detail="published document not found")

    if props.schema_type in CONTENT_TYPES:
        sync_content_to_home(client, latest)
        return SyncOutcome(SYNCED, doc_id, detail="content -> home")

    if is_home_page(props.schema_type, latest):
        changes = sync_home_to_content(client, latest)
        return SyncOutcome(SYNCED, doc_id, detail=f"home -> content ({len(changes)} change(s))")

    return SyncOutcome(SKIPPED, doc_id, detail=f"no sync for type {props.schema_type}")


# =============================================================================
# DECORATOR
# =============================================================================


def _result_handle(result) -> Optional[Callable]:
    if isinstance(result, dict):
        return result.get("on_handle")
    return getattr(result, "on_handle", None)


def _with_handle(result, on_handle: Callable):
    """Copy of an action result (dict or object) with on_handle replaced."""
    if isinstance(result, dict):
        return {**result, "on_handle": on_handle}
    wrapped = copy.copy(result)
    wrapped.on_handle = on_handle
    return wrapped


def create_publish_with_sync_action(original: Callable) -> Callable:
    """Wrap a publish action so a successful publish is followed by a best-effort sync."""

    @functools.wraps(original)
    def publish_with_sync(props: ActionProps):
        original_result = original(props)
        if not original_result:
            return original_result

        def on_handle() -> Optional[SyncOutcome]:
            original_handle = _result_handle(original_result)
            if original_handle:
                original_handle()

            try:
                return sync_published_document(props)
            except Exception as e:
                # Publishing must not fail because of the sync
                print(f"[home-sync] publish sync failed for {props.id}: {e}", file=sys.stderr)
                return SyncOutcome(FAILED, normalize_id(props.id), error=e)
            finally:
                props.on_complete()

        return _with_handle(original_result, on_handle)

    publish_with_sync.action = getattr(original, "action", PUBLISH_ACTION)
    return publish_with_sync


def resolve_document_actions(actions: list) -> list:
    """Wrap every publish action in the list; other actions pass through unchanged."""
    resolved = []
    for action in actions:
        if getattr(action, "action", None) == PUBLISH_ACTION:
            resolved.append(create_publish_with_sync_action(action))
        else:
            resolved.append(action)
    return resolved
