"""
Listing Service

Fetches the disclosure listing page and turns it into an ordered, filtered
list of candidate records:

    GET list_url (bounded retry) -> ListParser -> cutoff filter
        -> newest-first sort -> per-run limit

A failed fetch after all retries raises RuntimeError; the run has nothing
to work on without the listing.
"""

import logging
from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

import requests

from disclosure_relay.config import SourceSettings
from disclosure_relay.dates import filter_by_cutoff, sort_newest_first
from disclosure_relay.models.record import DisclosureRecord
from disclosure_relay.parsers.list_parser import ListParser
from disclosure_relay.retry import retry_call

logger = logging.getLogger(__name__)


class ListingService:
    """
    Service for reading the disclosure listing.

    Usage:
        service = ListingService(config.source, timezone='Europe/Oslo')
        records = service.get_latest_records(limit=10)
    """

    def __init__(
        self,
        source: SourceSettings,
        timezone: str = "Europe/Oslo",
        session: Optional[requests.Session] = None,
        parser: Optional[ListParser] = None
    ):
        """
        Initialize listing service.

        Args:
            source: Source settings (URLs, cutoff policy, retry, timeout)
            timezone: IANA timezone used to decide what "today" is
            session: HTTP session (a new requests.Session when omitted)
            parser: ListParser override (built from source URLs when omitted)
        """
        self.source = source
        self.timezone = timezone
        self.session = session or requests.Session()
        self.parser = parser or ListParser(
            list_url=source.list_url,
            base_url=source.base_url
        )

    def fetch_listing_html(self) -> str:
        """
        GET the listing page with bounded retry.

        Returns:
            Response body

        Raises:
            RuntimeError: If every attempt failed
        """
        headers = {
            'User-Agent': self.source.user_agent,
            'Accept': 'text/html,application/xhtml+xml',
        }

        def _get() -> str:
            response = self.session.get(
                self.source.list_url,
                headers=headers,
                timeout=self.source.request_timeout_s
            )
            response.raise_for_status()
            return response.text

        try:
            return retry_call(
                _get,
                attempts=self.source.retry_attempts,
                delay_ms=self.source.retry_delay_ms,
                description="Listing fetch",
                retry_on=(requests.RequestException,)
            )
        except requests.RequestException as e:
            raise RuntimeError(
                f"Failed to fetch listing page {self.source.list_url}: {e}"
            ) from e

    def today(self) -> date:
        """Current calendar day in the configured timezone."""
        return datetime.now(ZoneInfo(self.timezone)).date()

    def get_records(self, today: Optional[date] = None) -> List[DisclosureRecord]:
        """
        Fetch, parse, filter and sort the listing.

        Args:
            today: Reference day for rolling cutoffs (defaults to today())

        Returns:
            Records passing the cutoff, newest first
        """
        html = self.fetch_listing_html()
        parsed = list(self.parser.parse(html))
        recent = filter_by_cutoff(parsed, self.source, today or self.today())
        ordered = sort_newest_first(recent)

        logger.info(
            f"Found {len(parsed)} disclosures on listing, "
            f"{len(ordered)} within cutoff ({self.source.cutoff_mode})"
        )
        return ordered

    def get_latest_records(
        self,
        limit: int,
        today: Optional[date] = None
    ) -> List[DisclosureRecord]:
        """
        Newest records within the cutoff, at most limit of them.

        Args:
            limit: Maximum number of records to return
            today: Reference day for rolling cutoffs

        Returns:
            Up to limit records, newest first
        """
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        return self.get_records(today=today)[:limit]
