"""
Pydantic models and result containers.

This module contains the record model scraped from the listing page,
the persisted store schema, and per-run result containers.
"""

from disclosure_relay.models.record import (
    DisclosureRecord,
    create_dedup_key,
    create_item_slug,
    slugify,
)
from disclosure_relay.models.store import (
    ErrorEntry,
    ProcessedRelease,
    ProcessedStore,
    RunStats,
    filter_new,
)
from disclosure_relay.models.results import (
    CreatedItem,
    FailedItem,
    PublishBatchResult,
    RunSummary,
)

__all__ = [
    'DisclosureRecord',
    'create_dedup_key',
    'create_item_slug',
    'slugify',
    'ErrorEntry',
    'ProcessedRelease',
    'ProcessedStore',
    'RunStats',
    'filter_new',
    'CreatedItem',
    'FailedItem',
    'PublishBatchResult',
    'RunSummary',
]
