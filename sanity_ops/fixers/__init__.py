# =============================================================================
# SANITY-OPS Fixers
# =============================================================================
"""
One-shot data-hygiene scripts. Each one queries the documents it affects,
computes a deterministic change, and commits it. All are safe to re-run:
the second run finds nothing left to fix.

- fix_home_duplicate:           merge duplicate home drafts into page-home
- rename_type:                  bulk _type rename
- update_slugs:                 shorten legacy class slugs
- update_menu:                  remap menu paths to the short slugs
- ensure_home_page:             create page-home with default sections
- cleanup_home_visible:         unset legacy visible/deleted on the home page
- migrate_contentitem_to_curso: copy contentItem -> curso, rewrite refs
- seed_content_models:          split curso by category, ensure singleton pages
- publish_all_drafts:           publish every pending draft
"""
