#!/usr/bin/env python3
"""
Shorten the legacy class slugs.

Usage:
    python -m sanity_ops.fixers.update_slugs [--type contentItem] [--dry-run]
"""

import argparse
import sys

from sanity_ops.config import get_store_client, print_banner, run_script

SLUG_MAP = {
    "clases-de-un-dia-iniciacion-en-ceramica": "iniciacion",
    "cursos-ceramica-barcelona-modelado": "regular",
    "cursos-ceramica-barcelona-torno": "torno",
    "laboratorio-ceramico": "laboratorio",
}

DEFAULT_DOC_TYPE = "contentItem"
CLASS_DOCS_QUERY = '*[_type == $type && type == "class"]{_id, slug}'


def plan_slug_updates(docs: list) -> list:
    """(id, current, next) for every doc whose slug is in SLUG_MAP."""
    updates = []
    for doc in docs or []:
        current = (doc.get("slug") or {}).get("current")
        next_slug = SLUG_MAP.get(current)
        if next_slug and next_slug != current:
            updates.append((doc["_id"], current, next_slug))
    return updates


def run(client, doc_type: str = DEFAULT_DOC_TYPE, dry_run: bool = False) -> list:
    docs = client.fetch(CLASS_DOCS_QUERY, {"type": doc_type}) or []
    updates = plan_slug_updates(docs)

    if not updates:
        print("No slug updates needed.")
        return []

    prefix = "[DRY RUN] " if dry_run else ""
    for doc_id, current, next_slug in updates:
        print(f"  {prefix}Will update {doc_id}: {current} -> {next_slug}")

    if not dry_run:
        tx = client.transaction()
        for doc_id, _, next_slug in updates:
            tx.patch(doc_id, {"set": {"slug": {"_type": "slug", "current": next_slug}}})
        tx.commit()
        print(f"Updated {len(updates)} slugs.")

    return updates


def main(argv=None):
    parser = argparse.ArgumentParser(description="Remap legacy class slugs")
    parser.add_argument("--type", dest="doc_type", default=DEFAULT_DOC_TYPE)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    print_banner("UPDATE SLUGS")
    run_script(lambda: run(get_store_client(), args.doc_type, dry_run=args.dry_run))
    sys.exit(0)


if __name__ == "__main__":
    main()
