"""
Image de-duplication + upload for the legacy migration.

Every image URL is uploaded at most once. The URL -> asset id map is
persisted to disk and rewritten after every single upload, so an
interrupted run never re-uploads what it already sent. The map is not
safe for concurrent runs.
"""

import json
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

import requests

from sanity_ops.migrate.normalize import safe_id
from sanity_ops.store.client import StoreError

DEFAULT_FETCH_TIMEOUT = 60
DRY_RUN_REF_PREFIX = "image-pending-"


def filename_from_url(url: str) -> str:
    try:
        path = urlparse(url).path
    except ValueError:
        return "image"
    base = path.rsplit("/", 1)[-1]
    return base or "image"


# =============================================================================
# PERSISTED URL -> ASSET MAP
# =============================================================================


class ImageMap:
    """Durable source-URL -> uploaded asset id map (JSON file)."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.entries = self._load()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path) as f:
            return json.load(f)

    def get(self, url: str) -> Optional[str]:
        return self.entries.get(url)

    def put(self, url: str, asset_id: str):
        self.entries[url] = asset_id
        self.save()

    def save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self.entries, f, indent=2)

    def __len__(self):
        return len(self.entries)

    def __contains__(self, url):
        return url in self.entries


# =============================================================================
# RESOLVER
# =============================================================================


def image_field(asset_id: str, alt: str = None, caption: str = None) -> dict:
    field = {
        "_type": "image",
        "asset": {"_type": "reference", "_ref": asset_id},
    }
    if alt is not None:
        field["alt"] = alt
    if caption is not None:
        field["caption"] = caption
    return field


class ImageResolver:
    """Turns legacy image values into Sanity image fields, uploading on first sight."""

    def __init__(self, client, image_map: ImageMap, session=None, dry_run: bool = False,
                 timeout: int = DEFAULT_FETCH_TIMEOUT):
        self.client = client
        self.image_map = image_map
        self.session = session or requests.Session()
        self.dry_run = dry_run
        self.timeout = timeout
        self.stats = {"uploaded": 0, "cached": 0, "failed": 0, "pending": 0}

    def upload_image(self, url: str, alt: str = None, caption: str = None) -> Optional[dict]:
        """Image field for url; None when it cannot be fetched."""
        if not url:
            return None

        cached = self.image_map.get(url)
        if cached:
            self.stats["cached"] += 1
            return image_field(cached, alt, caption)

        if self.dry_run:
            print(f"  [DRY RUN] would upload {url}")
            self.stats["pending"] += 1
            return image_field(f"{DRY_RUN_REF_PREFIX}{safe_id(filename_from_url(url))}", alt, caption)

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            print(f"  WARNING: [images] Failed to fetch image {url}: {e}")
            self.stats["failed"] += 1
            return None

        if response.status_code < 200 or response.status_code >= 300:
            print(f"  WARNING: [images] Failed to fetch image {url}: {response.status_code}")
            self.stats["failed"] += 1
            return None

        try:
            asset = self.client.assets.upload(
                "image",
                response.content,
                filename=filename_from_url(url),
                content_type=response.headers.get("Content-Type"),
            )
        except StoreError as e:
            print(f"  WARNING: [images] Failed to upload image {url}: {e}")
            self.stats["failed"] += 1
            return None

        self.image_map.put(url, asset["_id"])
        self.stats["uploaded"] += 1
        print(f"  [images] uploaded {url} -> {asset['_id']}")
        return image_field(asset["_id"], alt, caption)

    def to_image_field(self, value: Any) -> Optional[dict]:
        """Accepts a bare URL or {url|image, alt?, caption?, description?}."""
        if not value:
            return None
        if isinstance(value, str):
            return self.upload_image(value)
        if isinstance(value, dict):
            url = value.get("url") or value.get("image")
            if isinstance(url, str) and url:
                return self.upload_image(url, value.get("alt"), value.get("caption") or value.get("description"))
        return None

    def to_image_list(self, values: Any) -> list:
        """Resolve a list of image values, dropping the ones that fail."""
        fields = []
        for value in values or []:
            field = self.to_image_field(value)
            if field:
                fields.append(field)
        return fields
