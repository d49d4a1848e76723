"""
Business logic layer services for disclosure-relay.

This module contains service classes for each external side of the pipeline:
- ListingService: Listing page fetch, parse, cutoff filter and ordering
- ContentExtractor: Body extraction (modal or direct page, with fallback)
- StoreService: Processed-releases JSON persistence
- CMSPublisher: Existence check, draft creation and publishing in the CMS
"""

from disclosure_relay.services.listing_service import ListingService
from disclosure_relay.services.content_extraction import (
    ContentExtractor,
    DirectPageStrategy,
    ExtractionStrategy,
    ModalStrategy
)
from disclosure_relay.services.store_service import StoreService
from disclosure_relay.services.cms_publisher import CMSPublisher

__all__ = [
    'ListingService',
    'ContentExtractor',
    'DirectPageStrategy',
    'ExtractionStrategy',
    'ModalStrategy',
    'StoreService',
    'CMSPublisher'
]
