#!/usr/bin/env python3
"""
Legacy KV export (Supabase)

READ-ONLY. Pages through the legacy KV table over the Supabase REST API
and writes every {key, value} row to the export file consumed by
legacy_kv.py.

Usage:
    python -m sanity_ops.migrate.export_kv
    python -m sanity_ops.migrate.export_kv --summary    # prefix counts of an existing export

Requires env: SUPABASE_URL (or VITE_SUPABASE_URL), SUPABASE_SERVICE_ROLE_KEY
"""

import argparse
import json
import os
import sys
from pathlib import Path

import requests

from sanity_ops.config import ConfigError, get_data_dir, print_banner, run_script
from sanity_ops.migrate.legacy_kv import KV_FILENAME, summarize_prefixes

# =============================================================================
# CONFIGURATION
# =============================================================================

KV_TABLE = "kv_store_0ba58e95"
PAGE_SIZE = 1000
DEFAULT_TIMEOUT = 60


class SupabaseKVClient:
    """Minimal PostgREST reader for the legacy KV table."""

    def __init__(self, url: str, service_key: str, table: str = KV_TABLE, session=None):
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.table = table
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
        })

    def fetch_page(self, start: int, end: int) -> list:
        response = self.session.get(
            f"{self.base_url}/{self.table}",
            params={"select": "key,value"},
            headers={"Range-Unit": "items", "Range": f"{start}-{end}"},
            timeout=DEFAULT_TIMEOUT,
        )
        if response.status_code not in (200, 206):
            raise Exception(f"Supabase error {response.status_code}: {response.text}")
        return response.json()

    def fetch_all(self, page_size: int = PAGE_SIZE) -> list:
        rows = []
        start = 0
        while True:
            page = self.fetch_page(start, start + page_size - 1)
            if not page:
                break
            rows.extend(page)
            if len(page) < page_size:
                break
            start += page_size
        return rows


def get_supabase_credentials() -> tuple:
    url = os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    if not url or not key:
        raise ConfigError("Missing SUPABASE_URL (or VITE_SUPABASE_URL) or SUPABASE_SERVICE_ROLE_KEY")
    return url, key


def export_rows(client: SupabaseKVClient, out_path: Path) -> int:
    rows = client.fetch_all()
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w") as f:
        json.dump(rows, f, indent=2, ensure_ascii=False)
    print(f"Exported {len(rows)} rows to {out_path}")
    return len(rows)


def print_summary(out_path: Path) -> dict:
    with open(out_path) as f:
        rows = json.load(f)
    counts = summarize_prefixes(rows)
    print(f"{len(rows)} rows in {out_path}")
    for prefix, count in sorted(counts.items(), key=lambda item: -item[1]):
        print(f"  {prefix}: {count}")
    return counts


# =============================================================================
# CLI
# =============================================================================


def run(args):
    if args.summary:
        return print_summary(args.out)

    url, key = get_supabase_credentials()
    return export_rows(SupabaseKVClient(url, key), args.out)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Export the legacy Supabase KV table")
    parser.add_argument("--out", type=Path, default=get_data_dir() / KV_FILENAME)
    parser.add_argument("--summary", action="store_true", help="Print prefix counts of an existing export")
    args = parser.parse_args(argv)

    print_banner("LEGACY KV EXPORT")
    run_script(run, args)
    sys.exit(0)


if __name__ == "__main__":
    main()
