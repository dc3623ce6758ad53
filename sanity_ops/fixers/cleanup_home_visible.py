#!/usr/bin/env python3
"""
Drop the legacy visible/deleted flags from the home page (published and
draft). The home page is always shown; those flags only confused the
admin listing.

Usage:
    python -m sanity_ops.fixers.cleanup_home_visible [--dry-run]
"""

import argparse
import sys

from sanity_ops.config import get_store_client, print_banner, run_script

LEGACY_FLAGS = ["visible", "deleted"]
FLAGGED_HOME_QUERY = (
    '*[_type == "page" && slug.current == "home" && (defined(visible) || defined(deleted))]._id'
)


def run(client, dry_run: bool = False) -> list:
    ids = client.fetch(FLAGGED_HOME_QUERY) or []
    if not ids:
        print("No home page carries visible/deleted.")
        return []

    for doc_id in ids:
        if dry_run:
            print(f"[DRY RUN] Would remove visible/deleted from {doc_id}")
            continue
        client.patch(doc_id).unset(LEGACY_FLAGS).commit()
        print(f"Removed visible/deleted from {doc_id}")
    return ids


def main(argv=None):
    parser = argparse.ArgumentParser(description="Unset legacy visible/deleted flags on the home page")
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    print_banner("CLEANUP HOME FLAGS")
    run_script(lambda: run(get_store_client(), dry_run=args.dry_run))
    sys.exit(0)


if __name__ == "__main__":
    main()
