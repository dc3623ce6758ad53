# =============================================================================
# SANITY-OPS Store
# =============================================================================
"""
Sanity content API client.

All reads and writes against the dataset go through SanityClient.
"""

from sanity_ops.store.client import (
    DRAFTS_PREFIX,
    SanityClient,
    StoreError,
    draft_id,
    is_draft,
    normalize_id,
    strip_system_fields,
)

__all__ = [
    "DRAFTS_PREFIX",
    "SanityClient",
    "StoreError",
    "draft_id",
    "is_draft",
    "normalize_id",
    "strip_system_fields",
]
