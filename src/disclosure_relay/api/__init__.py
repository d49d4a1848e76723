"""
User-facing API interfaces for disclosure-relay.

This module provides the batch pipeline that an external scheduler (or the
command line) invokes once per trigger.
"""

from disclosure_relay.api.pipeline import ReleasePipeline

__all__ = [
    'ReleasePipeline'
]
