# =============================================================================
# SANITY-OPS Home Sync
# =============================================================================
"""
Bidirectional sync between the home page's curated course sections and the
featuredInHome flag of content documents.
"""

from sanity_ops.sync.home_sections import sync_content_to_home, sync_home_to_content
from sanity_ops.sync.publish_hook import create_publish_with_sync_action, resolve_document_actions

__all__ = [
    "create_publish_with_sync_action",
    "resolve_document_actions",
    "sync_content_to_home",
    "sync_home_to_content",
]
