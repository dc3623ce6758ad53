# =============================================================================
# SANITY-OPS Legacy Migration
# =============================================================================
"""
One-shot migration of the legacy Supabase KV store into Sanity documents.

- export_kv:  dump the KV table to .data/kv_export.json (read-only)
- legacy_kv:  build, stage and upsert typed documents
- images:     URL -> asset de-duplication for image fields
- normalize:  legacy field-shape normalization + slugged ids
"""
