"""
disclosure-relay: publish new financial disclosures from a listing page to a CMS.

Main package exports for user-facing API.
"""

from disclosure_relay.api import ReleasePipeline
from disclosure_relay.config import get_app_config, get_relay_config, load_relay_config
from disclosure_relay.models import DisclosureRecord, ProcessedStore, RunSummary

__all__ = [
    'ReleasePipeline',
    'get_app_config',
    'get_relay_config',
    'load_relay_config',
    'DisclosureRecord',
    'ProcessedStore',
    'RunSummary',
]
