"""
HTML parsing modules for the disclosure listing and disclosure bodies.

- Listing structure is undocumented and unstable: ordered selector chains,
  first success wins
- Body extraction is pure (HTML string in, HTML fragment out) so that both
  extraction strategies can be tested without a browser
"""

from .selectors import (
    FieldSelector,
    XPathSelector,
    CascadeSelector,
    ROW_SELECTORS,
    TITLE_SELECTORS,
    DATE_SELECTORS,
)
from .list_parser import ListParser
from .content import (
    clean_html_content,
    build_fallback_content,
    extract_modal_content,
    extract_page_content,
    ContentLocator,
    ThirdLayoutBlockLocator,
    SelectorLocator,
    create_default_locators,
)

__all__ = [
    # Selector chains
    'FieldSelector',
    'XPathSelector',
    'CascadeSelector',
    'ROW_SELECTORS',
    'TITLE_SELECTORS',
    'DATE_SELECTORS',
    # Listing
    'ListParser',
    # Content
    'clean_html_content',
    'build_fallback_content',
    'extract_modal_content',
    'extract_page_content',
    'ContentLocator',
    'ThirdLayoutBlockLocator',
    'SelectorLocator',
    'create_default_locators',
]
