# =============================================================================
# SANITY-OPS
# Content sync + migration tooling for the studio website
# =============================================================================
"""
Operational tooling around the Sanity dataset that backs the website.

Subpackages:
- store:   thin HTTP client for the Sanity content API
- sync:    home page <-> content "featured" reconciliation + publish hook
- migrate: one-shot import of the legacy Supabase KV export
- fixers:  small idempotent data-hygiene scripts
"""

__version__ = "1.4.0"
