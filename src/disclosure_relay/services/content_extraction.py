"""
Content Extraction Service

Resolves the full body of a disclosure with one of two strategies:

- ModalStrategy: records with a node reference. A headless Chromium opens
  the listing page, clicks the row's trigger and reads the modal that
  appears. The browser lives only for one extraction and is always closed.
- DirectPageStrategy: records without a node reference. The disclosure
  page is fetched over HTTP and the main content block is located.

If the chosen strategy yields nothing usable, a minimal fallback body is
synthesized, so enriched records always carry non-empty content.
"""

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Iterable, Iterator, List, Optional

import requests
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from disclosure_relay.config import ExtractionSettings, RelayConfig, SourceSettings
from disclosure_relay.models.record import DisclosureRecord
from disclosure_relay.models.store import utc_now
from disclosure_relay.parsers.content import (
    ContentLocator,
    build_fallback_content,
    clean_html_content,
    extract_modal_content,
    extract_page_content,
)
from disclosure_relay.retry import retry_call

logger = logging.getLogger(__name__)


class ExtractionStrategy(ABC):
    """
    Abstract base class for body extraction strategies.

    Strategies return None instead of raising when they cannot produce a
    body; ContentExtractor then falls back.
    """

    name: str

    @abstractmethod
    def extract(self, record: DisclosureRecord) -> Optional[str]:
        """
        Extract the cleaned body HTML for a record.

        Args:
            record: Record from the listing

        Returns:
            Cleaned HTML fragment or None
        """
        pass


class DirectPageStrategy(ExtractionStrategy):
    """Fetch the disclosure page over HTTP and locate its content block."""

    name = "direct"

    def __init__(
        self,
        source: SourceSettings,
        min_length: int = 100,
        session: Optional[requests.Session] = None,
        locators: Optional[List[ContentLocator]] = None
    ):
        self.source = source
        self.min_length = min_length
        self.session = session or requests.Session()
        self.locators = locators

    def fetch_page(self, url: str) -> str:
        def _get() -> str:
            response = self.session.get(
                url,
                headers={'User-Agent': self.source.user_agent},
                timeout=self.source.request_timeout_s
            )
            response.raise_for_status()
            return response.text

        return retry_call(
            _get,
            attempts=self.source.retry_attempts,
            delay_ms=self.source.retry_delay_ms,
            description=f"Page fetch {url}",
            retry_on=(requests.RequestException,)
        )

    def extract(self, record: DisclosureRecord) -> Optional[str]:
        if record.source_url == self.source.list_url:
            # Row had no link of its own; the listing page is not the article
            logger.debug(f"No article URL for '{record.title[:60]}', skipping page fetch")
            return None

        try:
            page_html = self.fetch_page(record.source_url)
        except requests.RequestException as e:
            logger.warning(f"Page fetch failed for {record.source_url}: {e}")
            return None

        return extract_page_content(page_html, self.locators, self.min_length)


class ModalStrategy(ExtractionStrategy):
    """
    Open the row's modal in a headless browser and extract its body.

    Args:
        list_url: Listing page hosting the modals
        extraction: Selector templates, timeouts and minimum length
        user_agent: User agent for the browser context
        retry_attempts: Browser sessions to try before giving up
        retry_delay_ms: Pause between attempts
        playwright_factory: Callable returning a Playwright context manager
                            (sync_playwright by default; injectable for tests)
    """

    name = "modal"

    def __init__(
        self,
        list_url: str,
        extraction: ExtractionSettings,
        user_agent: Optional[str] = None,
        retry_attempts: int = 1,
        retry_delay_ms: int = 0,
        playwright_factory: Callable = sync_playwright
    ):
        self.list_url = list_url
        self.extraction = extraction
        self.user_agent = user_agent
        self.retry_attempts = retry_attempts
        self.retry_delay_ms = retry_delay_ms
        self._playwright_factory = playwright_factory

    def render_modal(self, node_ref: str) -> Optional[str]:
        """
        Trigger the modal for node_ref and return its outer HTML.

        Raises:
            playwright.sync_api.Error: On navigation, click or wait failures
        """
        trigger = self.extraction.modal_trigger_selector.format(node_ref=node_ref)
        container = self.extraction.modal_container_selector.format(node_ref=node_ref)
        timeout = self.extraction.browser_timeout_ms

        with self._playwright_factory() as p:
            browser = p.chromium.launch(headless=True)
            try:
                page = browser.new_page(user_agent=self.user_agent)
                page.goto(self.list_url, wait_until='domcontentloaded', timeout=timeout)
                page.click(trigger, timeout=timeout)
                modal = page.wait_for_selector(container, state='visible', timeout=timeout)
                if modal is None:
                    return None
                return modal.evaluate('element => element.outerHTML')
            finally:
                browser.close()

    def extract(self, record: DisclosureRecord) -> Optional[str]:
        if not record.node_ref:
            return None

        try:
            # Each attempt launches and closes its own browser
            modal_html = retry_call(
                lambda: self.render_modal(record.node_ref),
                attempts=self.retry_attempts,
                delay_ms=self.retry_delay_ms,
                description=f"Modal render for node {record.node_ref}",
                retry_on=(PlaywrightError,)
            )
        except PlaywrightError as e:
            logger.warning(f"Modal extraction failed for node {record.node_ref}: {e}")
            return None

        return extract_modal_content(modal_html, self.extraction.min_content_length)


class ContentExtractor:
    """
    Enrich records with body content, one record at a time.

    The strategy is chosen by node reference presence: modal when present,
    direct page otherwise. Fallback content is the default arm.

    Usage:
        extractor = ContentExtractor.from_config(relay_config)
        for record in extractor.iter_enriched(new_records):
            publisher.create_item(record)
    """

    def __init__(
        self,
        direct: ExtractionStrategy,
        modal: ExtractionStrategy,
        request_delay_ms: int = 1000
    ):
        self.direct = direct
        self.modal = modal
        self.request_delay_ms = request_delay_ms

    @classmethod
    def from_config(
        cls,
        config: RelayConfig,
        session: Optional[requests.Session] = None
    ) -> 'ContentExtractor':
        """Build an extractor with both strategies from RelayConfig."""
        direct = DirectPageStrategy(
            source=config.source,
            min_length=config.extraction.min_content_length,
            session=session
        )
        modal = ModalStrategy(
            list_url=config.source.list_url,
            extraction=config.extraction,
            user_agent=config.source.user_agent,
            retry_attempts=config.source.retry_attempts,
            retry_delay_ms=config.source.retry_delay_ms
        )
        return cls(direct, modal, request_delay_ms=config.extraction.request_delay_ms)

    def select_strategy(self, record: DisclosureRecord) -> ExtractionStrategy:
        return self.modal if record.node_ref else self.direct

    def extract_content(self, record: DisclosureRecord) -> str:
        """
        Resolve the body HTML for a record; never empty.

        Args:
            record: Record from the listing

        Returns:
            Cleaned HTML from the selected strategy, or fallback content
        """
        strategy = self.select_strategy(record)
        content = strategy.extract(record)

        if content:
            logger.debug(f"Extracted {len(content)} chars via {strategy.name} strategy")
            return clean_html_content(content)

        logger.warning(
            f"No content via {strategy.name} strategy for '{record.title[:60]}', "
            f"using fallback"
        )
        return build_fallback_content(record.title, record.date_text, record.source_url)

    def enrich(
        self,
        record: DisclosureRecord,
        now: Optional[datetime] = None
    ) -> DisclosureRecord:
        """
        Return a copy of record with content, publish_date and scraped_at set.

        publish_date is the normalized listing date, or the scrape time when
        the date could not be parsed.
        """
        logger.info(f"Fetching content for: {record.title}")
        content = self.extract_content(record)
        scraped_at = now or utc_now()

        return record.model_copy(update={
            'content': content,
            'publish_date': record.normalized_date or scraped_at,
            'scraped_at': scraped_at,
        })

    def iter_enriched(self, records: Iterable[DisclosureRecord]) -> Iterator[DisclosureRecord]:
        """
        Lazily enrich records in order, pausing between source requests.

        Each record is extracted only when the consumer asks for it.
        """
        for index, record in enumerate(records):
            if index and self.request_delay_ms:
                time.sleep(self.request_delay_ms / 1000)
            yield self.enrich(record)
