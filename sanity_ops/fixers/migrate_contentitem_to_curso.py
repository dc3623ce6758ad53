#!/usr/bin/env python3
"""
Move contentItem documents to the curso type.

Sanity cannot change a document's _type in place, so each published
contentItem-* document is copied to curso-*, every page section that
referenced the old id is rewritten, and the old document and its draft are
deleted.

Usage:
    python -m sanity_ops.fixers.migrate_contentitem_to_curso [--dry-run]
"""

import argparse
import sys

from sanity_ops.config import get_store_client, print_banner, run_script
from sanity_ops.store.client import draft_id, strip_system_fields

OLD_TYPE = "contentItem"
NEW_TYPE = "curso"
OLD_PREFIX = "contentItem-"
NEW_PREFIX = "curso-"

PUBLISHED_CONTENT_ITEMS_QUERY = '*[_type == "contentItem" && !(_id in path("drafts.**"))]'
PAGES_QUERY = '*[_type == "page"]{_id, sections}'


def new_id_for(old_id: str) -> str:
    if old_id.startswith(OLD_PREFIX):
        return NEW_PREFIX + old_id[len(OLD_PREFIX):]
    return NEW_PREFIX + old_id


def rewrite_section_refs(sections: list, id_map: dict) -> tuple:
    """Returns (new_sections, changed) with course references remapped through id_map."""
    changed = False
    new_sections = []
    for section in sections or []:
        if not isinstance(section, dict) or not section.get("courses"):
            new_sections.append(section)
            continue
        courses = []
        for ref in section["courses"]:
            if isinstance(ref, dict) and ref.get("_ref") in id_map:
                courses.append({**ref, "_ref": id_map[ref["_ref"]]})
                changed = True
            else:
                courses.append(ref)
        new_sections.append({**section, "courses": courses})
    return new_sections, changed


def run(client, dry_run: bool = False) -> dict:
    docs = client.fetch(PUBLISHED_CONTENT_ITEMS_QUERY) or []
    if not docs:
        print(f"No {OLD_TYPE} docs found.")
        return {"migrated": 0, "pages_updated": []}

    id_map = {doc["_id"]: new_id_for(doc["_id"]) for doc in docs}
    prefix = "[DRY RUN] " if dry_run else ""

    for doc in docs:
        print(f"  {prefix}{doc['_id']} -> {id_map[doc['_id']]}")
        if not dry_run:
            client.create_or_replace({**strip_system_fields(doc), "_id": id_map[doc["_id"]], "_type": NEW_TYPE})

    pages_updated = []
    for page in client.fetch(PAGES_QUERY) or []:
        sections, changed = rewrite_section_refs(page.get("sections"), id_map)
        if not changed:
            continue
        pages_updated.append(page["_id"])
        print(f"  {prefix}Rewrite references in {page['_id']}")
        if not dry_run:
            client.patch(page["_id"]).set({"sections": sections}).commit()

    if not dry_run:
        for doc in docs:
            client.delete(doc["_id"])
            client.delete(draft_id(doc["_id"]))

    print(f"{prefix}Migrated {len(docs)} documents to type {NEW_TYPE}.")
    return {"migrated": len(docs), "pages_updated": pages_updated}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Copy contentItem docs to curso and rewrite references")
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    print_banner("MIGRATE contentItem -> curso")
    run_script(lambda: run(get_store_client(), dry_run=args.dry_run))
    sys.exit(0)


if __name__ == "__main__":
    main()
