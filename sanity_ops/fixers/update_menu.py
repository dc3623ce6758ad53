#!/usr/bin/env python3
"""
Point menu entries at the shortened class paths (see update_slugs.py).

Usage:
    python -m sanity_ops.fixers.update_menu [--dry-run]
"""

import argparse
import sys

from sanity_ops.config import get_store_client, print_banner, run_script

# Applied in order
MENU_PATH_MAP = [
    ("/clases/clases-de-un-dia-iniciacion-en-ceramica", "/clases/iniciacion"),
    ("/clases/cursos-ceramica-barcelona-modelado", "/clases/regular"),
    ("/clases/cursos-ceramica-barcelona-torno", "/clases/torno"),
    ("/clases/laboratorio-ceramico", "/clases/laboratorio"),
]

MENU_QUERY = '*[_type == "siteMenu"][0]'


def map_path(path):
    if not path:
        return path
    for old, new in MENU_PATH_MAP:
        path = path.replace(old, new)
    return path


def remap_menu_items(items: list) -> tuple:
    """Returns (new_items, changed_paths) where changed_paths lists (old, new)."""
    changed = []

    def remap(entry: dict) -> dict:
        old = entry.get("path")
        new = map_path(old)
        if new != old:
            changed.append((old, new))
        return {**entry, "path": new} if "path" in entry else dict(entry)

    new_items = []
    for item in items or []:
        new_item = remap(item)
        if item.get("submenu"):
            new_item["submenu"] = [remap(sub) for sub in item["submenu"]]
        new_items.append(new_item)

    return new_items, changed


def run(client, dry_run: bool = False) -> list:
    menu = client.fetch(MENU_QUERY)
    if not menu or not menu.get("_id"):
        print("No siteMenu document found.")
        return []

    items, changed = remap_menu_items(menu.get("items") or [])
    if not changed:
        print("Menu paths already up to date.")
        return []

    prefix = "[DRY RUN] " if dry_run else ""
    for old, new in changed:
        print(f"  {prefix}{old} -> {new}")

    if not dry_run:
        client.patch(menu["_id"]).set({"items": items}).commit()
        print(f"Menu updated ({len(changed)} path(s)).")
    return changed


def main(argv=None):
    parser = argparse.ArgumentParser(description="Remap legacy menu paths")
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    print_banner("UPDATE MENU")
    run_script(lambda: run(get_store_client(), dry_run=args.dry_run))
    sys.exit(0)


if __name__ == "__main__":
    main()
