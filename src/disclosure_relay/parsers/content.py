"""
Disclosure body extraction from rendered markup.

Pure functions over HTML strings so that selection logic is testable
without a network or a browser:

- extract_modal_content(): body from a rendered modal (modal strategy)
- extract_page_content(): body from a full disclosure page (direct strategy)
- build_fallback_content(): minimal body when both strategies fail
- clean_html_content(): whitespace post-processing, idempotent

Direct-page locators follow the same Strategy layout as parsers.selectors:
an ordered list of ContentLocator objects, first acceptable block wins.
"""

import copy
import html
import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import lxml.html
from lxml import etree

from disclosure_relay.parsers.selectors import (
    XPathSelector,
    element_text,
    has_class,
    single_line,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_CONTENT_LENGTH = 100

# "Source", "Provider: Protector ASA", "ISIN: NO0010209331", ...
METADATA_LINE = re.compile(
    r'^\s*(source|provider|company name|issuer|ticker|isin|exchange|market|symbol)\s*(:|$)',
    re.IGNORECASE
)
_BARE_METADATA_LABEL = re.compile(
    r'^\s*(source|provider|company name|issuer|ticker|isin|exchange|market|symbol)\s*:?\s*$',
    re.IGNORECASE
)

# "18 Oct 2025", "18/10/2025 08:00 CEST", "2025-10-18", "08:00 CEST"
DATE_LINE = re.compile(
    r'^\s*('
    r'\d{1,2}[\s./-]+(\d{1,2}|[A-Za-z]{3,9})[\s./,-]+\d{2,4}'
    r'|\d{4}-\d{2}-\d{2}'
    r'|\d{1,2}:\d{2}'
    r')(\s+\d{1,2}:\d{2})?(\s*[A-Z]{2,5})?\s*$'
)


# === Post-processing ===

def clean_html_content(markup: Optional[str]) -> str:
    """
    Collapse whitespace runs and remove whitespace between tags.

    Idempotent: clean_html_content(clean_html_content(x)) == clean_html_content(x).

    Example:
        >>> clean_html_content('<p>\\n  Hello   world </p>\\n <p>Bye</p>')
        '<p> Hello world </p><p>Bye</p>'
    """
    if not markup:
        return ''
    collapsed = re.sub(r'\s+', ' ', markup)
    return re.sub(r'>\s+<', '><', collapsed).strip()


def build_fallback_content(title: str, date_text: str, source_url: str) -> str:
    """
    Synthesize a minimal body with the title, the date and a link back.

    Args:
        title: Disclosure title
        date_text: Raw date text (only the first line is shown)
        source_url: Original article URL

    Returns:
        Cleaned HTML fragment
    """
    date_line = single_line((date_text or '').splitlines()[0]) if date_text else ''
    markup = (
        f"<h2>{html.escape(title)}</h2>"
        f"<p>Press release content from {html.escape(date_line)}. "
        f"<a href=\"{html.escape(source_url, quote=True)}\">Read full article</a></p>"
    )
    return clean_html_content(markup)


def inner_html(element) -> str:
    """Serialize the children of element (text and tails included)."""
    parts = [html.escape(element.text)] if element.text else []
    for child in element:
        parts.append(lxml.html.tostring(child, encoding='unicode', with_tail=True))
    return ''.join(parts)


def text_lines(element) -> List[str]:
    """Non-empty, whitespace-collapsed lines; every text node starts a new line."""
    lines = []
    for chunk in element.itertext():
        lines.extend(single_line(line) for line in chunk.splitlines())
    return [line for line in lines if line]


def has_metadata_lines(lines: Sequence[str]) -> bool:
    """True if any line is an exchange/ticker/source style label."""
    return any(METADATA_LINE.match(line) for line in lines)


# === Modal strategy ===

MODAL_CONTENT_SELECTORS: List[XPathSelector] = [
    XPathSelector('.field--name-body', f".//*[{has_class('field--name-body')}]"),
    XPathSelector('.press-release-content', f".//*[{has_class('press-release-content')}]"),
    XPathSelector('.node__content', f".//*[{has_class('node__content')}]"),
    XPathSelector('.modal-body .content', f".//*[{has_class('modal-body')}]//*[{has_class('content')}]"),
    XPathSelector('.modal-body', f".//*[{has_class('modal-body')}]"),
    XPathSelector('article', './/article'),
]


def _body_lines(lines: Sequence[str]) -> List[str]:
    kept = []
    skip_next = False

    for line in lines:
        if skip_next:
            # Value line printed under a bare label ("Source" / "Protector ASA")
            skip_next = False
            continue
        if _BARE_METADATA_LABEL.match(line):
            skip_next = True
            continue
        if METADATA_LINE.match(line) or DATE_LINE.match(line):
            continue
        kept.append(line)

    return kept


def extract_modal_content(
    modal_html: Optional[str],
    min_length: int = DEFAULT_MIN_CONTENT_LENGTH,
    selectors: Sequence[XPathSelector] = MODAL_CONTENT_SELECTORS
) -> Optional[str]:
    """
    Extract the disclosure body from rendered modal markup.

    Candidate containers are tried in order; the first whose text is longer
    than min_length and carries no metadata labels is used. Otherwise every
    text line of the modal is scanned, metadata and date lines are dropped,
    and the rest is joined as <p> paragraphs if it is longer than min_length.

    Args:
        modal_html: Outer HTML of the modal container
        min_length: Minimum text length for a candidate or the scanned lines
        selectors: Candidate containers in priority order

    Returns:
        Cleaned HTML fragment, or None if nothing usable remains
    """
    if not modal_html or not modal_html.strip():
        return None

    try:
        root = lxml.html.fragment_fromstring(modal_html, create_parent='div')
    except (etree.ParserError, ValueError) as e:
        logger.warning(f"Modal markup could not be parsed: {e}")
        return None

    for selector in selectors:
        element = selector.select(root)
        if element is None:
            continue
        text = element_text(element)
        if len(text) <= min_length:
            continue
        if has_metadata_lines(text_lines(element)):
            logger.debug(f"Modal candidate '{selector.name}' rejected: metadata labels")
            continue
        logger.debug(f"Modal content taken from '{selector.name}' ({len(text)} chars)")
        return clean_html_content(inner_html(element))

    lines = _body_lines(text_lines(root))
    if len(' '.join(lines)) <= min_length:
        logger.debug("Modal text lines too short after dropping metadata")
        return None

    logger.debug("Modal content assembled from text lines")
    return clean_html_content(''.join(f"<p>{html.escape(line)}</p>" for line in lines))


# === Direct page strategy ===

NON_CONTENT_XPATH = etree.XPath(
    ".//nav | .//header | .//footer | .//aside | .//script | .//style"
    " | .//noscript | .//form | .//iframe | .//*[@role='navigation']"
    " | .//*[contains(@class, 'breadcrumb')] | .//*[contains(@class, 'advert')]"
    " | .//*[contains(@class, 'cookie')]"
    + "".join(
        f" | .//*[{has_class(name)}]"
        for name in ('ad', 'ads', 'social', 'social-share', 'share', 'sharing')
    )
)


def strip_non_content(element):
    """
    Return a copy of element without navigation, ads, social widgets and breadcrumbs.

    The original tree is left untouched.
    """
    clone = copy.deepcopy(element)
    for node in NON_CONTENT_XPATH(clone):
        node.drop_tree()
    return clone


class ContentLocator(ABC):
    """
    Abstract base class for locating the main content block of a page.
    """

    name: str

    @abstractmethod
    def locate(self, document) -> Optional[etree._Element]:
        """
        Return the candidate content element, or None.

        Args:
            document: Parsed lxml.html document
        """
        pass


class ThirdLayoutBlockLocator(ContentLocator):
    """
    Pick the third occurrence of a repeating layout block.

    Disclosure pages built with a Drupal layout repeat the region block;
    the first two hold page chrome and the third holds the article body.
    Pages with fewer than three blocks are left to the next locator.

    Args:
        block_class: CSS class of the repeating block
        occurrence: 1-based occurrence to take (also the minimum count)
    """

    def __init__(self, block_class: str = 'layout__region', occurrence: int = 3):
        if occurrence < 1:
            raise ValueError(f"occurrence must be >= 1, got {occurrence}")
        self.block_class = block_class
        self.occurrence = occurrence
        self.name = f".{block_class}[{occurrence}]"
        self._xpath = etree.XPath(f"//*[{has_class(block_class)}]")

    def locate(self, document) -> Optional[etree._Element]:
        blocks = self._xpath(document)
        if len(blocks) < self.occurrence:
            return None
        return blocks[self.occurrence - 1]


class SelectorLocator(ContentLocator):
    """First element matched by one selector."""

    def __init__(self, selector: XPathSelector):
        self.selector = selector
        self.name = selector.name

    def locate(self, document) -> Optional[etree._Element]:
        return self.selector.select(document)


PAGE_CONTENT_SELECTORS: List[XPathSelector] = [
    XPathSelector('.field--name-body', f"//*[{has_class('field--name-body')}]"),
    XPathSelector('.press-release-content', f"//*[{has_class('press-release-content')}]"),
    XPathSelector('article .node__content', f"//article//*[{has_class('node__content')}]"),
    XPathSelector('main article', '//main//article'),
    XPathSelector('article', '//article'),
    XPathSelector('[role="main"]', '//*[@role="main"]'),
    XPathSelector('main', '//main'),
    XPathSelector('#content', '//*[@id="content"]'),
]


def create_default_locators() -> List[ContentLocator]:
    """
    Default locator order for disclosure pages.

    Returns:
        ThirdLayoutBlockLocator first, then one SelectorLocator per
        PAGE_CONTENT_SELECTORS entry
    """
    return [ThirdLayoutBlockLocator()] + [
        SelectorLocator(selector) for selector in PAGE_CONTENT_SELECTORS
    ]


def extract_page_content(
    page_html: Optional[str],
    locators: Optional[Sequence[ContentLocator]] = None,
    min_length: int = DEFAULT_MIN_CONTENT_LENGTH
) -> Optional[str]:
    """
    Extract the disclosure body from a full page.

    Each locator is tried in order. The located block is cloned, stripped of
    non-content elements, and accepted if its remaining text is longer than
    min_length.

    Args:
        page_html: Raw page HTML
        locators: Locators in priority order (defaults to create_default_locators())
        min_length: Minimum text length for a block to be accepted

    Returns:
        Cleaned inner HTML of the accepted block, or None
    """
    if not page_html or not page_html.strip():
        return None

    try:
        document = lxml.html.fromstring(page_html)
    except (etree.ParserError, ValueError) as e:
        logger.warning(f"Page markup could not be parsed: {e}")
        return None

    for locator in locators or create_default_locators():
        element = locator.locate(document)
        if element is None:
            continue
        cleaned = strip_non_content(element)
        text = element_text(cleaned)
        if len(text) <= min_length:
            logger.debug(f"Locator '{locator.name}' block too short ({len(text)} chars)")
            continue
        logger.debug(f"Page content taken from '{locator.name}' ({len(text)} chars)")
        return clean_html_content(inner_html(cleaned))

    return None
