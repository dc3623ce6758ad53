#!/usr/bin/env python3
"""
Fix duplicate home drafts

Several drafts can end up carrying slug "home" (pages created before the
home page had a fixed id). Keeps drafts.page-home when present, otherwise
the first draft; publishes it as page-home, deletes the other drafts and
moves the kept draft to drafts.page-home so editing continues there.

Re-running finds only drafts.page-home and does nothing.

Usage:
    python -m sanity_ops.fixers.fix_home_duplicate [--dry-run]
"""

import argparse
import sys

from sanity_ops.config import get_store_client, print_banner, run_script
from sanity_ops.store.client import draft_id, strip_system_fields
from sanity_ops.sync.home_sections import HOME_ID

HOME_DRAFT_ID = draft_id(HOME_ID)
HOME_DRAFTS_QUERY = '*[_type == "page" && slug.current == "home" && _id in path("drafts.**")]'


def plan_home_dedupe(drafts: list):
    """
    Returns (keep, remove_ids) or None when there is nothing to fix.
    """
    if not drafts:
        return None
    if len(drafts) == 1 and drafts[0]["_id"] == HOME_DRAFT_ID:
        return None

    keep = next((d for d in drafts if d["_id"] == HOME_DRAFT_ID), drafts[0])
    remove_ids = [d["_id"] for d in drafts if d["_id"] != keep["_id"]]
    return keep, remove_ids


def run(client, dry_run: bool = False) -> dict:
    drafts = client.fetch(HOME_DRAFTS_QUERY) or []
    plan = plan_home_dedupe(drafts)
    if plan is None:
        print("No duplicate home drafts found.")
        return {"published": None, "deleted": [], "normalized": False}

    keep, remove_ids = plan
    normalize = keep["_id"] != HOME_DRAFT_ID
    prefix = "[DRY RUN] " if dry_run else ""

    print(f"{prefix}Publish {HOME_ID} from draft: {keep['_id']}")
    for doc_id in remove_ids:
        print(f"{prefix}Delete extra draft: {doc_id}")
    if normalize:
        print(f"{prefix}Move kept draft {keep['_id']} -> {HOME_DRAFT_ID}")

    if not dry_run:
        body = strip_system_fields(keep)
        client.create_or_replace({**body, "_id": HOME_ID})
        for doc_id in remove_ids:
            client.delete(doc_id)
        if normalize:
            client.create_or_replace({**body, "_id": HOME_DRAFT_ID})
            client.delete(keep["_id"])

    return {"published": keep["_id"], "deleted": remove_ids, "normalized": normalize}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Merge duplicate home page drafts")
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    print_banner("FIX HOME DUPLICATE")
    run_script(lambda: run(get_store_client(), dry_run=args.dry_run))
    sys.exit(0)


if __name__ == "__main__":
    main()
