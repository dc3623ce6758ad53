#!/usr/bin/env python3
"""
Legacy KV -> Sanity migration

One-shot batch import of the Supabase KV export into typed Sanity
documents. Safe to re-run end to end: every document id is derived
deterministically from its type and slug/id, and every write is a
createOrReplace.

Steps:
    1. Partition rows by key prefix (content:, post:, page:) + fixed keys
       (site:settings, menu, landing_pages)
    2. Resolve image fields (upload once, cached by URL in the image map)
    3. Normalize legacy rich-content shapes
    4. Build typed documents with slugged ids
    5. Write the staging file for review
    6. Upsert each document; a failed document is reported and skipped

Usage:
    python -m sanity_ops.migrate.legacy_kv                 # full run
    python -m sanity_ops.migrate.legacy_kv --dry-run       # no uploads, no writes
    python -m sanity_ops.migrate.legacy_kv --skip-import   # stage only

Inputs:
    <data dir>/kv_export.json          (from sanity_ops.migrate.export_kv)
    <data dir>/sanity-image-map.json   (created/updated by this script)

Output:
    <data dir>/sanity_import.json
"""

import argparse
import json
import sys
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

from sanity_ops.config import get_data_dir, get_store_client, print_banner, run_script
from sanity_ops.migrate.images import ImageMap, ImageResolver
from sanity_ops.migrate.normalize import (
    deep_normalize,
    normalize_content_field,
    reference,
    slug_field,
    slugged_id,
)

# =============================================================================
# CONFIGURATION
# =============================================================================

KV_FILENAME = "kv_export.json"
IMAGE_MAP_FILENAME = "sanity-image-map.json"
STAGING_FILENAME = "sanity_import.json"

CONTENT_PREFIX = "content:"
POST_PREFIX = "post:"
PAGE_PREFIX = "page:"

SETTINGS_KEY = "site:settings"
MENU_KEY = "menu"
LANDING_PAGES_KEY = "landing_pages"

LANDING_PAGE_FIELDS = [
    "visible", "heroTitle", "heroSubtitle", "heroCta", "heroCtaLink",
    "valueTitle", "valueSubtitle", "benefitsTitle", "galleryTitle",
    "testimonialsTitle", "faqTitle", "finalCtaTitle", "finalCtaSubtitle",
    "finalCtaButton", "finalCtaLink", "contactFormTitle", "contactFormSubtitle",
    "showContactForm", "showContactInfo", "contactEmail", "contactPhone",
    "contactHours", "contactAddress", "seo", "benefits", "valuePoints",
    "testimonials", "faqs",
]

SETTINGS_FIELDS = [
    "siteName", "siteDescription", "seoTitle", "seoDescription", "seoKeywords",
    "ogUrl", "ogType", "ogTitle", "ogDescription", "contactEmail", "contactEmail2",
    "contactPhone", "whatsappNumber", "instagramTitle", "instagramHandle",
    "instagramLink", "googleAnalyticsId", "homeCoursesDescription",
    "homeWorkshopsDescription", "paymentMethods", "redirects",
]

SETTINGS_IMAGE_FIELDS = [
    "ogImage", "heroImageDesktop", "heroImageMobile", "heroTextImage1",
    "heroTextImage2", "blogHeroImage", "blogTitleImage", "clasesHeroTitleImage",
]

CONTENT_ITEM_FIELDS = [
    "title", "type", "subtitle", "shortDescription", "excerpt", "price",
    "priceOptions", "duration", "includes", "schedule", "menuLocations",
    "whatsappNumber", "visible", "showInHome", "showInHomeWorkshops",
    "createdAt", "updatedAt", "seo",
]

PAGE_FIELDS = ["title", "visible", "deleted", "createdAt", "updatedAt", "seo"]

BLOG_POST_FIELDS = [
    "title", "author", "excerpt", "featured", "published", "createdAt",
    "updatedAt", "seo",
]

INSTAGRAM_FIELDS = ["date", "title", "description", "link", "source"]


def pick(record: dict, fields: list) -> dict:
    """Copy the fields present in record (missing fields stay absent)."""
    return {field: record[field] for field in fields if field in record}


def set_image(doc: dict, field: str, value):
    """Set an image field only when the image resolved."""
    if value:
        doc[field] = value


# =============================================================================
# PARTITION
# =============================================================================


class LegacyBuckets:
    """Legacy KV rows grouped by what they become."""

    def __init__(self, content_items: list, posts: list, pages: list, by_key: dict):
        self.content_items = content_items
        self.posts = posts
        self.pages = pages
        self.by_key = by_key

    @property
    def settings(self):
        return self.by_key.get(SETTINGS_KEY)

    @property
    def menu(self):
        return self.by_key.get(MENU_KEY)

    @property
    def landing_pages(self) -> list:
        landing = self.by_key.get(LANDING_PAGES_KEY)
        if not landing and isinstance(self.settings, dict):
            landing = self.settings.get("landingPages")
        return landing or []


def partition_rows(rows: list) -> LegacyBuckets:
    by_key = {}
    content_items, posts, pages = [], [], []

    for row in rows or []:
        key = row.get("key") or ""
        value = row.get("value")
        by_key[key] = value
        if not isinstance(value, dict):
            continue
        if key.startswith(CONTENT_PREFIX):
            content_items.append(value)
        elif key.startswith(POST_PREFIX):
            posts.append(value)
        elif key.startswith(PAGE_PREFIX):
            pages.append(value)

    return LegacyBuckets(content_items, posts, pages, by_key)


def summarize_prefixes(rows: list) -> dict:
    """Row count per key prefix (text before the first ':'; whole key otherwise)."""
    counts = Counter()
    for row in rows or []:
        key = row.get("key") or ""
        counts[key.split(":", 1)[0]] += 1
    return dict(counts)


# =============================================================================
# DOCUMENT BUILDERS
# =============================================================================


def build_instagram_posts(settings: dict, images: ImageResolver) -> list:
    docs = []
    for index, item in enumerate((settings or {}).get("instagramImages") or []):
        if not isinstance(item, dict):
            continue
        doc = {
            "_id": slugged_id("instagramPost", item.get("date"), item.get("title"), item.get("url"), index),
            "_type": "instagramPost",
            **pick(item, INSTAGRAM_FIELDS),
        }
        set_image(doc, "image", images.to_image_field(item.get("url") or item.get("image")))
        docs.append(doc)
    return docs


def landing_page_id(lp: dict) -> str:
    return slugged_id("landingPage", lp.get("id"), lp.get("slug"))


def build_landing_pages(landing_pages: list, images: ImageResolver) -> list:
    docs = []
    for lp in landing_pages or []:
        if not isinstance(lp, dict):
            continue
        doc = {
            "_id": landing_page_id(lp),
            "_type": "landingPage",
            "title": lp.get("heroTitle") or lp.get("slug") or "Landing Page",
            "slug": slug_field(lp.get("slug")),
            **pick(lp, LANDING_PAGE_FIELDS),
        }
        set_image(doc, "heroImage", images.to_image_field(lp.get("heroImage")))
        doc["galleryImages"] = images.to_image_list(lp.get("galleryImages"))
        docs.append(doc)
    return docs


def build_menu(menu: dict) -> list:
    if not menu:
        return []
    return [{"_id": "siteMenu", "_type": "siteMenu", "items": menu.get("items") or []}]


def build_settings(settings: dict, landing_pages: list, instagram_docs: list, images: ImageResolver) -> list:
    if not settings:
        return []

    doc = {
        "_id": "siteSettings",
        "_type": "siteSettings",
        **pick(settings, SETTINGS_FIELDS),
        "landingPages": [reference(landing_page_id(lp)) for lp in landing_pages or [] if isinstance(lp, dict)],
    }
    for field in SETTINGS_IMAGE_FIELDS:
        set_image(doc, field, images.to_image_field(settings.get(field)))

    if instagram_docs:
        doc["instagramImages"] = [reference(ig["_id"]) for ig in instagram_docs]

    return [doc]


def build_content_items(items: list, images: ImageResolver) -> list:
    docs = []
    for item in items:
        doc = {
            "_id": slugged_id("contentItem", item.get("id"), item.get("slug")),
            "_type": "contentItem",
            "slug": slug_field(item.get("slug")),
            **pick(item, CONTENT_ITEM_FIELDS),
        }
        if "description" in item:
            doc["description"] = deep_normalize(item["description"])
        if "content" in item:
            doc["content"] = normalize_content_field(item["content"])

        set_image(doc, "heroImage", images.to_image_field(item.get("heroImage")))
        set_image(doc, "image", images.to_image_field(item.get("image")))
        doc["images"] = images.to_image_list(item.get("images"))
        docs.append(doc)
    return docs


def build_pages(pages: list, images: ImageResolver) -> list:
    docs = []
    for page in pages:
        doc = {
            "_id": slugged_id("page", page.get("slug")),
            "_type": "page",
            "slug": slug_field(page.get("slug")),
            **pick(page, PAGE_FIELDS),
        }
        if "content" in page:
            doc["content"] = normalize_content_field(page["content"])
        set_image(doc, "heroImage", images.to_image_field(page.get("heroImage")))
        docs.append(doc)
    return docs


def build_blog_posts(posts: list, images: ImageResolver) -> list:
    docs = []
    for post in posts:
        doc = {
            "_id": slugged_id("blogPost", post.get("slug")),
            "_type": "blogPost",
            "slug": slug_field(post.get("slug")),
            **pick(post, BLOG_POST_FIELDS),
        }
        if "content" in post:
            doc["content"] = normalize_content_field(post["content"])
        set_image(doc, "featuredImage", images.to_image_field(post.get("featuredImage")))
        docs.append(doc)
    return docs


def build_documents(rows: list, images: ImageResolver) -> list:
    """All Sanity documents for a legacy export, in import order."""
    buckets = partition_rows(rows)
    settings = buckets.settings if isinstance(buckets.settings, dict) else None
    menu = buckets.menu if isinstance(buckets.menu, dict) else None

    instagram_docs = build_instagram_posts(settings, images)

    docs = []
    docs.extend(instagram_docs)
    docs.extend(build_landing_pages(buckets.landing_pages, images))
    docs.extend(build_menu(menu))
    docs.extend(build_settings(settings, buckets.landing_pages, instagram_docs, images))
    docs.extend(build_content_items(buckets.content_items, images))
    docs.extend(build_pages(buckets.pages, images))
    docs.extend(build_blog_posts(buckets.posts, images))
    return docs


# =============================================================================
# STAGING + IMPORT
# =============================================================================


def load_rows(kv_path: Path) -> list:
    with open(kv_path) as f:
        return json.load(f)


def write_staging(docs: list, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(docs, f, indent=2, ensure_ascii=False)
    return path


def import_documents(client, docs: list, dry_run: bool = False) -> dict:
    """createOrReplace each document. Failures are reported and do not stop the batch."""
    summary = {"imported": 0, "failed": 0, "failed_ids": [], "dry_run": dry_run}

    for doc in docs:
        if dry_run:
            print(f"  [DRY RUN] createOrReplace {doc['_id']} ({doc['_type']})")
            continue
        try:
            client.create_or_replace(doc)
            summary["imported"] += 1
        except Exception as e:
            print(f"  ERROR: [import] Failed to import {doc['_id']}: {e}")
            summary["failed"] += 1
            summary["failed_ids"].append(doc["_id"])

    return summary


def migrate(client, kv_path: Path, image_map_path: Path, staging_path: Path,
            dry_run: bool = False, skip_import: bool = False, session=None) -> dict:
    """Run the full pipeline. Returns a summary dict."""
    started = datetime.now(timezone.utc)

    print(f"Loading KV export: {kv_path}")
    rows = load_rows(kv_path)
    print(f"  Rows: {len(rows)}")
    for prefix, count in sorted(summarize_prefixes(rows).items()):
        print(f"    {prefix}: {count}")

    image_map = ImageMap(image_map_path)
    print(f"  Cached images: {len(image_map)}")

    print("\nBuilding documents...")
    images = ImageResolver(client, image_map, session=session, dry_run=dry_run)
    docs = build_documents(rows, images)

    by_type = Counter(doc["_type"] for doc in docs)
    for doc_type, count in sorted(by_type.items()):
        print(f"  {doc_type}: {count}")

    write_staging(docs, staging_path)
    print(f"\nPrepared {len(docs)} docs -> {staging_path}")

    if skip_import:
        print("[SKIP] Import skipped (--skip-import)")
        result = {"imported": 0, "failed": 0, "failed_ids": [], "dry_run": dry_run}
    else:
        print(f"\nImporting documents ({'DRY_RUN' if dry_run else 'LIVE'})...")
        result = import_documents(client, docs, dry_run=dry_run)

    return {
        "started_utc": started.isoformat(),
        "rows": len(rows),
        "documents": len(docs),
        "by_type": dict(by_type),
        "images": dict(images.stats),
        "staging_path": str(staging_path),
        **result,
    }


# =============================================================================
# CLI
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    data_dir = get_data_dir()
    parser = argparse.ArgumentParser(description="Migrate the legacy KV export into Sanity")
    parser.add_argument("--kv-path", type=Path, default=data_dir / KV_FILENAME)
    parser.add_argument("--image-map", type=Path, default=data_dir / IMAGE_MAP_FILENAME)
    parser.add_argument("--staging-path", type=Path, default=data_dir / STAGING_FILENAME)
    parser.add_argument("--dry-run", action="store_true", help="Build and stage documents without uploads or writes")
    parser.add_argument("--skip-import", action="store_true", help="Stop after writing the staging file")
    return parser


def run(args) -> dict:
    print_banner("LEGACY KV MIGRATION")
    if args.dry_run:
        print("Running in DRY_RUN mode (no uploads, no writes)\n")

    client = get_store_client()
    return migrate(
        client,
        args.kv_path,
        args.image_map,
        args.staging_path,
        dry_run=args.dry_run,
        skip_import=args.skip_import,
    )


def main(argv=None):
    args = build_parser().parse_args(argv)
    summary = run_script(run, args)

    print()
    print("=" * 70)
    print("MIGRATION SUMMARY")
    print("=" * 70)
    print(f"Documents: {summary['documents']}")
    print(f"  Imported: {summary['imported']}")
    print(f"  Failed: {summary['failed']}")
    for doc_id in summary["failed_ids"]:
        print(f"    - {doc_id}")
    images = summary["images"]
    print(f"Images: {images['uploaded']} uploaded, {images['cached']} cached, "
          f"{images['failed']} failed, {images['pending']} pending")

    if summary["failed"]:
        print("\nSome documents failed. Fix them and re-run (upserts are idempotent).")
    print("\nDone.")
    sys.exit(0)


if __name__ == "__main__":
    main()
