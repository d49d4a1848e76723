"""
Listing page parser.

Turns raw listing markup into DisclosureRecord candidates using the
selector chains in parsers.selectors.

Row pattern rule: patterns are tried in order and the FIRST pattern that
produces at least one accepted row is used for the whole page. Later
patterns are never consulted once a pattern succeeds, even if some of its
rows are dropped individually.
"""

import logging
from typing import Iterator, Optional, Sequence, Tuple
from urllib.parse import urljoin

import lxml.html
from lxml import etree

from disclosure_relay.dates import normalize_date
from disclosure_relay.models.record import DisclosureRecord
from disclosure_relay.parsers.selectors import (
    DATE_SELECTORS,
    HEADER_MARKER,
    NODE_REF_ATTRIBUTES,
    ROW_SELECTORS,
    TITLE_SELECTORS,
    CascadeSelector,
    XPathSelector,
    single_line,
)

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 10
UNKNOWN_DATE_TEXT = 'Unknown date'


def find_link(title_element, row) -> Optional[str]:
    """
    Resolve the href belonging to a title cell.

    Order: the title element itself, its first descendant <a>, then the
    first <a> anywhere in the row.
    """
    href = title_element.get('href')
    if href:
        return href

    for anchor in title_element.iter('a'):
        if anchor.get('href'):
            return anchor.get('href')

    for anchor in row.iter('a'):
        if anchor.get('href'):
            return anchor.get('href')

    return None


def find_node_ref(title_element) -> Optional[str]:
    """Return the first node reference attribute on the title element or below it."""
    for element in title_element.iter():
        if not isinstance(element.tag, str):
            continue
        for attribute in NODE_REF_ATTRIBUTES:
            value = element.get(attribute)
            if value and value.strip():
                return value.strip()
    return None


class ListParser:
    """
    Parser for the disclosure listing page.

    Usage:
        parser = ListParser(list_url=config.source.list_url,
                            base_url=config.source.base_url)
        for record in parser.parse(html):
            print(record.title, record.date_text)

    The returned iterator is lazy and single-pass.
    """

    def __init__(
        self,
        list_url: str,
        base_url: str,
        min_title_length: int = MIN_TITLE_LENGTH,
        row_selectors: Optional[Sequence[XPathSelector]] = None,
        title_selectors: Optional[Sequence[XPathSelector]] = None,
        date_selectors: Optional[Sequence[XPathSelector]] = None
    ):
        """
        Initialize parser.

        Args:
            list_url: Listing page URL (fallback link for rows without one)
            base_url: Base used to resolve relative hrefs
            min_title_length: Titles must be strictly longer than this
            row_selectors: Override for the row pattern chain
            title_selectors: Override for the title chain
            date_selectors: Override for the date chain
        """
        self.list_url = list_url
        self.base_url = base_url
        self.min_title_length = min_title_length
        self.row_selectors = list(row_selectors or ROW_SELECTORS)
        self.title_chain = CascadeSelector(title_selectors or TITLE_SELECTORS)
        self.date_chain = CascadeSelector(date_selectors or DATE_SELECTORS)

    def parse(self, html: str) -> Iterator[DisclosureRecord]:
        """
        Yield candidate records from listing markup.

        Args:
            html: Raw listing page HTML

        Yields:
            DisclosureRecord for every accepted row of the winning row pattern
        """
        if not html or not html.strip():
            logger.warning("Listing page is empty, nothing to parse")
            return

        try:
            document = lxml.html.fromstring(html)
        except (etree.ParserError, ValueError) as e:
            logger.warning(f"Listing page could not be parsed: {e}")
            return

        for row_selector in self.row_selectors:
            accepted = 0
            dropped = 0

            for row in row_selector.select_all(document):
                record = self.parse_row(row)
                if record is None:
                    dropped += 1
                    continue
                accepted += 1
                yield record

            if accepted:
                logger.debug(
                    f"Row pattern '{row_selector.name}' matched: "
                    f"{accepted} accepted, {dropped} dropped"
                )
                return

        logger.warning("No row pattern produced any disclosure on the listing page")

    def parse_row(self, row) -> Optional[DisclosureRecord]:
        """
        Build a record from one row, or None if the row is not a disclosure.

        Header rows, rows without a title and rows with a title of at most
        min_title_length characters are dropped without error.
        """
        if HEADER_MARKER.select(row) is not None:
            return None

        title_hit = self.title_chain.select(row)
        if title_hit is None:
            return None

        selector_name, title_element, title_text = title_hit
        title = single_line(title_text)
        if len(title) <= self.min_title_length:
            return None

        date_text = self._extract_date(row) or UNKNOWN_DATE_TEXT
        link = find_link(title_element, row)

        logger.debug(f"Row accepted via '{selector_name}': {title[:60]}")

        return DisclosureRecord(
            title=title,
            date_text=date_text,
            normalized_date=normalize_date(date_text),
            source_url=self.resolve_url(link),
            node_ref=find_node_ref(title_element)
        )

    def _extract_date(self, row) -> Optional[str]:
        date_hit: Optional[Tuple] = self.date_chain.select(row)
        if date_hit is None:
            return None
        return date_hit[2]

    def resolve_url(self, link: Optional[str]) -> str:
        """Absolute URL for a row link; the listing URL when there is none."""
        if not link or link.strip() in ('', '#'):
            return self.list_url
        link = link.strip()
        if link.startswith('http'):
            return link
        return urljoin(self.base_url.rstrip('/') + '/', link.lstrip('/'))
