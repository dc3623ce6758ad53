#!/usr/bin/env python3
"""
Home sync CLI

Publishes documents through the sync-decorated publish action, and re-runs
reconciliation by hand when the home lists and featured flags drifted
(e.g. after two editors published at the same time).

Usage:
    python -m sanity_ops.sync.cli publish <doc_id> [--type workshopContent]
    python -m sanity_ops.sync.cli resync-home [--dry-run]
    python -m sanity_ops.sync.cli resync-content <doc_id> [--dry-run]
"""

import argparse
import sys

from sanity_ops.config import get_store_client, print_banner, run_script
from sanity_ops.store.client import draft_id, normalize_id
from sanity_ops.sync.actions import default_document_actions
from sanity_ops.sync.home_sections import (
    CONTENT_QUERY,
    HOME_ID,
    HOME_QUERY,
    apply_content_to_sections,
    plan_featured_changes,
    section_for_category,
    sync_content_to_home,
    sync_home_to_content,
)
from sanity_ops.sync.publish_hook import (
    PUBLISH_ACTION,
    ActionProps,
    resolve_document_actions,
)


# =============================================================================
# COMMANDS
# =============================================================================


def publish(client, doc_id: str, schema_type: str = None) -> dict:
    """Publish one document via the decorated publish action."""
    doc_id = normalize_id(doc_id)
    if not schema_type:
        doc = client.get_document(draft_id(doc_id)) or client.get_document(doc_id)
        if not doc:
            raise ValueError(f"Document not found: {doc_id}")
        schema_type = doc.get("_type")

    actions = resolve_document_actions(default_document_actions(client))
    publish_action = next(a for a in actions if getattr(a, "action", None) == PUBLISH_ACTION)

    completed = []
    props = ActionProps(
        id=doc_id,
        schema_type=schema_type,
        get_client=lambda api_version: client,
        on_complete=lambda: completed.append(doc_id),
    )
    result = publish_action(props)
    outcome = result["on_handle"]()

    print(f"  Sync: {outcome.status} ({outcome.detail or outcome.error})")
    return {"document_id": doc_id, "sync_status": outcome.status, "completed": bool(completed)}


def resync_home(client, dry_run: bool = False) -> list:
    """Re-apply the home sections onto every content document's featured flag."""
    home = client.fetch(HOME_QUERY)
    if not home:
        print(f"  [SKIP] {HOME_ID} does not exist")
        return []

    if dry_run:
        changes = plan_featured_changes(home, client.fetch(CONTENT_QUERY) or [])
        for doc_id, featured in changes:
            print(f"  [DRY RUN] {doc_id} featuredInHome -> {str(featured).lower()}")
    else:
        changes = sync_home_to_content(client, home)

    print(f"  {len(changes)} flag change(s)")
    return changes


def resync_content(client, doc_id: str, dry_run: bool = False):
    """Re-apply one content document's featured flag onto the home sections."""
    doc = client.get_document(normalize_id(doc_id))
    if not doc:
        raise ValueError(f"Published document not found: {doc_id}")

    if dry_run:
        section = section_for_category(doc.get("type"))
        state = "featured" if doc.get("featuredInHome") else "not featured"
        print(f"  [DRY RUN] {doc['_id']} ({state}) would be reconciled against section {section}")
        home = client.fetch(HOME_QUERY)
        if not home:
            print(f"  [SKIP] {HOME_ID} does not exist")
            return None
        return apply_content_to_sections(
            home.get("sections") or [], doc["_id"], doc.get("type"), bool(doc.get("featuredInHome"))
        )

    sections = sync_content_to_home(client, doc)
    if sections is None:
        print(f"  [SKIP] nothing to reconcile for {doc_id}")
    return sections


# =============================================================================
# CLI
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Home page <-> featured content sync")
    sub = parser.add_subparsers(dest="command", required=True)

    p_publish = sub.add_parser("publish", help="Publish a document and sync")
    p_publish.add_argument("doc_id")
    p_publish.add_argument("--type", dest="schema_type", help="Schema type (read from the document if omitted)")

    p_home = sub.add_parser("resync-home", help="Home sections -> featured flags")
    p_home.add_argument("--dry-run", action="store_true")

    p_content = sub.add_parser("resync-content", help="One content document -> home sections")
    p_content.add_argument("doc_id")
    p_content.add_argument("--dry-run", action="store_true")

    return parser


def run(args):
    print_banner(f"HOME SYNC - {args.command}")
    client = get_store_client()

    if args.command == "publish":
        return publish(client, args.doc_id, args.schema_type)
    if args.command == "resync-home":
        return resync_home(client, dry_run=args.dry_run)
    return resync_content(client, args.doc_id, dry_run=args.dry_run)


def main(argv=None):
    args = build_parser().parse_args(argv)
    run_script(run, args)
    print("\nDone.")
    sys.exit(0)


if __name__ == "__main__":
    main()
