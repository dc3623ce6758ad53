#!/usr/bin/env python3
"""
Seed the typed content models.

1. Split legacy curso documents into one document type per category
   (class -> classContent, workshop -> workshopContent, ...). The new id is
   "<newType>-<oldId>"; drafts keep their drafts. prefix. Documents with an
   unknown category are skipped, and targets that already exist are left
   alone so a second run writes nothing.
2. Make sure every singleton page exists under its fixed id, cloning an
   existing published page with the same slug when there is one.

Usage:
    python -m sanity_ops.fixers.seed_content_models [--dry-run]
"""

import argparse
import sys

from sanity_ops.config import get_store_client, print_banner, run_script
from sanity_ops.store.client import DRAFTS_PREFIX, is_draft, normalize_id, strip_system_fields

# =============================================================================
# CONFIGURATION
# =============================================================================

TYPE_MAP = {
    "class": "classContent",
    "workshop": "workshopContent",
    "private": "privateReservationContent",
    "gift-card": "giftCardContent",
}

SINGLETON_PAGES = [
    {"id": "page-home", "slug": "home", "title": "Inicio"},
    {"id": "page-el-estudio", "slug": "el-estudio", "title": "El Estudio"},
    {"id": "page-tarjeta-regalo", "slug": "tarjeta-regalo", "title": "Tarjeta de regalo"},
    {"id": "page-clases", "slug": "clases", "title": "Clases"},
    {"id": "page-workshops", "slug": "workshops", "title": "Workshops"},
    {"id": "page-blog", "slug": "blog", "title": "Blog"},
]

LEGACY_CURSO_QUERY = '*[_type == "curso"]'
PAGE_BY_SLUG_QUERY = (
    '*[_type == "page" && !(_id in path("drafts.**")) && slug.current == $slug][0]'
    "{_id, _type, title, slug, sections, seo}"
)


# =============================================================================
# LEGACY CURSO SPLIT
# =============================================================================


def target_for(doc: dict):
    """(next_id, next_type) for a legacy curso doc, or None when its category is unknown."""
    next_type = TYPE_MAP.get(doc.get("type"))
    if not next_type:
        return None
    target_id = f"{next_type}-{normalize_id(doc['_id'])}"
    if is_draft(doc["_id"]):
        target_id = f"{DRAFTS_PREFIX}{target_id}"
    return target_id, next_type


def plan_curso_split(docs: list) -> tuple:
    """Returns (payloads, skipped_docs)."""
    payloads, skipped = [], []
    for doc in docs or []:
        target = target_for(doc)
        if target is None:
            skipped.append(doc)
            continue
        next_id, next_type = target
        body = {k: v for k, v in strip_system_fields(doc).items() if k not in ("_id", "_type")}
        payloads.append({"_id": next_id, "_type": next_type, **body, "type": doc.get("type") or "class"})
    return payloads, skipped


def migrate_legacy_curso_docs(client, dry_run: bool = False) -> dict:
    legacy_docs = client.fetch(LEGACY_CURSO_QUERY) or []
    if not legacy_docs:
        print("No legacy curso documents found.")
        return {"migrated": 0, "skipped": 0, "existing": 0}

    payloads, skipped = plan_curso_split(legacy_docs)
    for doc in skipped:
        print(f"  WARNING: Skipping {doc['_id']} ({doc.get('title') or 'Untitled'}) - unknown type: {doc.get('type')}")

    pending = [p for p in payloads if not client.get_document(p["_id"])]
    existing = len(payloads) - len(pending)

    if pending:
        print(f"Preparing to migrate {len(pending)} legacy docs:")
    for payload in pending:
        slug = (payload.get("slug") or {}).get("current") or "no-slug"
        print(f"  - {payload['_id']} [{payload['_type']}] ({slug})")

    if dry_run:
        print("  [DRY RUN] no mutations committed.")
    else:
        for payload in pending:
            client.create_or_replace(payload)

    return {"migrated": len(pending), "skipped": len(skipped), "existing": existing}


# =============================================================================
# SINGLETON PAGES
# =============================================================================


def ensure_singleton_page(client, page: dict, dry_run: bool = False):
    """Returns the document written (or that would be written), None when it exists."""
    if client.get_document(page["id"]):
        print(f"  Singleton already exists: {page['id']}")
        return None

    existing = client.fetch(PAGE_BY_SLUG_QUERY, {"slug": page["slug"]})
    if existing and existing.get("_id"):
        doc = {
            **existing,
            "_id": page["id"],
            "_type": "page",
            "title": existing.get("title") or page["title"],
            "slug": existing.get("slug") or {"_type": "slug", "current": page["slug"]},
            "sections": existing.get("sections") or [],
        }
        print(f"  Cloning page slug \"{page['slug']}\" from {existing['_id']} to singleton {page['id']}")
    else:
        doc = {
            "_id": page["id"],
            "_type": "page",
            "title": page["title"],
            "slug": {"_type": "slug", "current": page["slug"]},
            "sections": [],
        }
        print(f"  Creating missing singleton {page['id']} (slug: {page['slug']})")

    if not dry_run:
        client.create_or_replace(doc)
    return doc


def ensure_singleton_pages(client, dry_run: bool = False) -> list:
    written = []
    for page in SINGLETON_PAGES:
        doc = ensure_singleton_page(client, page, dry_run=dry_run)
        if doc:
            written.append(doc["_id"])
    return written


def run(client, dry_run: bool = False) -> dict:
    print(f"Running seed/migration{' (dry-run)' if dry_run else ''}...")
    migration = migrate_legacy_curso_docs(client, dry_run=dry_run)
    pages = ensure_singleton_pages(client, dry_run=dry_run)

    print()
    print(f"Migrated legacy docs: {migration['migrated']}")
    print(f"Skipped legacy docs: {migration['skipped']}")
    print(f"Already migrated: {migration['existing']}")
    print(f"Singleton pages written: {len(pages)}")
    return {**migration, "pages": pages}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Split legacy curso docs and ensure singleton pages")
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    print_banner("SEED CONTENT MODELS")
    run_script(lambda: run(get_store_client(), dry_run=args.dry_run))
    sys.exit(0)


if __name__ == "__main__":
    main()
