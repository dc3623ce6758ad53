#!/usr/bin/env python3
"""
Create the home page (page-home) with its default sections when no page
has slug "home".

Usage:
    python -m sanity_ops.fixers.ensure_home_page [--dry-run]
"""

import argparse
import copy
import sys

from sanity_ops.config import get_store_client, print_banner, run_script
from sanity_ops.sync.home_sections import (
    HOME_ID,
    HOME_SLUG,
    PAGE_TYPE,
    REGULAR_SECTION,
    SECTION_TEMPLATES,
    TYPE_B_SECTION,
)

HOME_PAGE_QUERY = '*[_type == "page" && slug.current == "home"][0]{_id}'


def build_home_page() -> dict:
    return {
        "_id": HOME_ID,
        "_type": PAGE_TYPE,
        "title": "Inicio",
        "slug": {"_type": "slug", "current": HOME_SLUG},
        "content": "",
        "sections": [
            {"_type": "aboutSection", "type": "about", "title": "Sobre Nosotros", "content": ""},
            copy.deepcopy(SECTION_TEMPLATES[REGULAR_SECTION]),
            copy.deepcopy(SECTION_TEMPLATES[TYPE_B_SECTION]),
            {"_type": "bannerSection", "type": "banner", "title": "", "description": "", "link": ""},
        ],
    }


def run(client, dry_run: bool = False):
    home = client.fetch(HOME_PAGE_QUERY)
    if home and home.get("_id"):
        print(f"Home page already exists: {home['_id']}")
        return None

    doc = build_home_page()
    if dry_run:
        print(f"[DRY RUN] Would create {doc['_id']} with {len(doc['sections'])} sections")
        return doc

    created = client.create(doc)
    print(f"Home page created: {created['_id']}")
    return created


def main(argv=None):
    parser = argparse.ArgumentParser(description="Ensure the home page document exists")
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    print_banner("ENSURE HOME PAGE")
    run_script(lambda: run(get_store_client(), dry_run=args.dry_run))
    sys.exit(0)


if __name__ == "__main__":
    main()
