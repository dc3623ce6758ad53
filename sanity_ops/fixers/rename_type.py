#!/usr/bin/env python3
"""
Rename a document type in bulk (default: contentItem -> curso).

All patches go out in one transaction. A second run finds no documents of
the old type.

Usage:
    python -m sanity_ops.fixers.rename_type [--from contentItem] [--to curso] [--dry-run]
"""

import argparse
import sys

from sanity_ops.config import get_store_client, print_banner, run_script

DEFAULT_FROM_TYPE = "contentItem"
DEFAULT_TO_TYPE = "curso"

DOCS_BY_TYPE_QUERY = "*[_type == $type]{_id}"


def run(client, from_type: str = DEFAULT_FROM_TYPE, to_type: str = DEFAULT_TO_TYPE,
        dry_run: bool = False) -> int:
    docs = client.fetch(DOCS_BY_TYPE_QUERY, {"type": from_type}) or []
    if not docs:
        print(f"No {from_type} docs found.")
        return 0

    if dry_run:
        for doc in docs:
            print(f"  [DRY RUN] {doc['_id']}: {from_type} -> {to_type}")
        return len(docs)

    tx = client.transaction()
    for doc in docs:
        tx.patch(doc["_id"], {"set": {"_type": to_type}})
    tx.commit()
    print(f"Renamed {len(docs)} documents to type {to_type}.")
    return len(docs)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Rename a Sanity document type in bulk")
    parser.add_argument("--from", dest="from_type", default=DEFAULT_FROM_TYPE)
    parser.add_argument("--to", dest="to_type", default=DEFAULT_TO_TYPE)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    print_banner(f"RENAME TYPE {args.from_type} -> {args.to_type}")
    run_script(lambda: run(get_store_client(), args.from_type, args.to_type, dry_run=args.dry_run))
    sys.exit(0)


if __name__ == "__main__":
    main()
