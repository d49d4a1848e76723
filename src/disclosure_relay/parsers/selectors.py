"""
Selector Chains

Ordered fallback chains over lxml XPath queries. The listing page has no
stable schema, so behaviour depends on selector PRIORITY, not only on which
selectors exist.

Design:
- Strategy Pattern: each selector is a named XPath query
- CascadeSelector tries selectors in order; first element with text wins
- Only the FIRST match of each selector is inspected; if its text is empty
  the chain moves to the next selector, not to the next match
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from lxml import etree


def has_class(name: str) -> str:
    """XPath predicate matching a whole CSS class token."""
    return f"contains(concat(' ', normalize-space(@class), ' '), ' {name} ')"


def nth_cell(position: int) -> str:
    """XPath equivalent of CSS 'td:nth-child(position)' below the context node."""
    return f".//td[count(preceding-sibling::*)={position - 1}]"


def element_text(element) -> str:
    """Text content with each line stripped and blank lines removed."""
    raw = element.text_content() if hasattr(element, 'text_content') else ''.join(element.itertext())
    lines = [' '.join(line.split()) for line in raw.splitlines()]
    return '\n'.join(line for line in lines if line)


def single_line(text: str) -> str:
    return ' '.join(text.split())


class FieldSelector(ABC):
    """
    Abstract base class for selectors applied to a listing row.
    """

    name: str

    @abstractmethod
    def select(self, node) -> Optional[etree._Element]:
        """
        Return the first element matched under node, or None.

        Args:
            node: lxml element used as the query context
        """
        pass


class XPathSelector(FieldSelector):
    """
    Selector backed by a compiled XPath expression.

    Args:
        name: CSS-style label used in logs (e.g. 'td:nth-child(3)')
        xpath: Equivalent XPath expression, relative to the context node
    """

    def __init__(self, name: str, xpath: str):
        self.name = name
        self.xpath = xpath
        self._compiled = etree.XPath(xpath)

    def select(self, node) -> Optional[etree._Element]:
        matches = self._compiled(node)
        return matches[0] if matches else None

    def select_all(self, node) -> List[etree._Element]:
        return list(self._compiled(node))

    def __repr__(self) -> str:
        return f"XPathSelector({self.name!r})"


class CascadeSelector:
    """
    Try selectors in order until one yields an element with non-empty text.

    Example:
        >>> chain = CascadeSelector([
        ...     XPathSelector('td:nth-child(3)', nth_cell(3)),
        ...     XPathSelector('.title', f".//*[{has_class('title')}]"),
        ... ])
        >>> hit = chain.select(row)
        >>> if hit:
        ...     name, element, text = hit
    """

    def __init__(self, selectors: Sequence[FieldSelector]):
        if not selectors:
            raise ValueError("Must provide at least one selector")

        self.selectors = list(selectors)

    def select(self, node) -> Optional[Tuple[str, etree._Element, str]]:
        """
        Returns:
            (selector name, element, text) for the first hit, None otherwise
        """
        for selector in self.selectors:
            element = selector.select(node)
            if element is None:
                continue
            text = element_text(element)
            if text:
                return selector.name, element, text

        return None


# === Listing chains (priority order matters) ===

ROW_SELECTORS: List[XPathSelector] = [
    XPathSelector('tr', '//tr'),
    XPathSelector('tbody tr', '//tbody//tr'),
    XPathSelector('.table-row', f"//*[{has_class('table-row')}]"),
    XPathSelector('.list-item', f"//*[{has_class('list-item')}]"),
    XPathSelector('.press-release-item', f"//*[{has_class('press-release-item')}]"),
    XPathSelector('[data-testid="table-row"]', '//*[@data-testid="table-row"]'),
    XPathSelector('.row', f"//*[{has_class('row')}]"),
    XPathSelector('tr[role="row"]', '//tr[@role="row"]'),
]

TITLE_SELECTORS: List[XPathSelector] = [
    XPathSelector('td:nth-child(3)', nth_cell(3)),
    XPathSelector('td:nth-child(2)', nth_cell(2)),
    XPathSelector('td:nth-child(4)', nth_cell(4)),
    XPathSelector('.title', f".//*[{has_class('title')}]"),
    XPathSelector('.press-release-title', f".//*[{has_class('press-release-title')}]"),
    XPathSelector('h3', './/h3'),
    XPathSelector('h4', './/h4'),
    XPathSelector('a[title]', './/a[@title]'),
    XPathSelector('td a', './/td//a'),
    XPathSelector('.link-title', f".//*[{has_class('link-title')}]"),
]

DATE_SELECTORS: List[XPathSelector] = [
    XPathSelector('td:first-child', './/td[not(preceding-sibling::*)]'),
    XPathSelector('td:nth-child(1)', nth_cell(1)),
    XPathSelector('.date', f".//*[{has_class('date')}]"),
    XPathSelector('.time', f".//*[{has_class('time')}]"),
    XPathSelector('.release-date', f".//*[{has_class('release-date')}]"),
]

HEADER_MARKER = XPathSelector('th', './/th')

NODE_REF_ATTRIBUTES = ('data-node-nid', 'data-nid', 'data-node-id')
