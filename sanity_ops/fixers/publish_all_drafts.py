#!/usr/bin/env python3
"""
Publish every pending draft.

Each draft is copied over its published id and deleted in one transaction,
so a second run finds no drafts left.

Usage:
    python -m sanity_ops.fixers.publish_all_drafts [--dry-run]
"""

import argparse
import sys

from sanity_ops.config import get_store_client, print_banner, run_script
from sanity_ops.store.client import normalize_id, strip_system_fields

DRAFT_IDS_QUERY = '*[_id in path("drafts.**")]{_id}'
DOC_BY_ID_QUERY = "*[_id == $id][0]"


def run(client, dry_run: bool = False) -> list:
    drafts = client.fetch(DRAFT_IDS_QUERY) or []
    if not drafts:
        print("No drafts found.")
        return []

    published = []
    for draft in drafts:
        published_id = normalize_id(draft["_id"])
        doc = client.fetch(DOC_BY_ID_QUERY, {"id": draft["_id"]})
        if not doc:
            continue

        if dry_run:
            print(f"[DRY RUN] Would publish {published_id}")
        else:
            tx = client.transaction()
            tx.create_or_replace({**strip_system_fields(doc), "_id": published_id})
            tx.delete(draft["_id"])
            tx.commit()
            print(f"Published {published_id}")
        published.append(published_id)

    return published


def main(argv=None):
    parser = argparse.ArgumentParser(description="Publish all drafts")
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    print_banner("PUBLISH ALL DRAFTS")
    run_script(lambda: run(get_store_client(), dry_run=args.dry_run))
    sys.exit(0)


if __name__ == "__main__":
    main()
