"""
Pydantic model for a disclosure scraped from the listing page.

Identity Design:
- dedup_key and slug are derived from (title, date), never stored separately
- Both derivations are pure: no wall-clock input, no randomness
- Identical normalized (title, date) pairs collide on purpose; that is how
  duplicates are detected across runs
"""

import hashlib
import re
import unicodedata
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from disclosure_relay.dates import normalize_date

MAX_KEY_LENGTH = 100
UNKNOWN_DATE_TOKEN = "unknown"
TITLE_HASH_LENGTH = 10

_NON_SLUG_CHARS = re.compile(r'[^a-z0-9]+')


def slugify(text: Optional[str]) -> str:
    """
    Reduce text to lower-case ASCII words joined by single dashes.

    Example:
        >>> slugify("Protector Forsikring ASA: Q3 2025 results")
        'protector-forsikring-asa-q3-2025-results'
        >>> slugify("Årsrapport 2024")
        'arsrapport-2024'
    """
    if not text:
        return ''
    folded = unicodedata.normalize('NFKD', text).encode('ascii', 'ignore').decode('ascii')
    return _NON_SLUG_CHARS.sub('-', folded.lower()).strip('-')


def _title_token(title: Optional[str]) -> str:
    """Slugified title, or a short hash of the raw title when nothing ASCII survives."""
    token = slugify(title)
    if token or not title or not title.strip():
        return token
    digest = hashlib.sha1(' '.join(title.split()).encode('utf-8')).hexdigest()[:TITLE_HASH_LENGTH]
    return f"t{digest}"


def _date_token(date_text: Optional[str], normalized_date: Optional[datetime] = None) -> str:
    parsed = normalized_date or normalize_date(date_text)
    if parsed is not None:
        return parsed.strftime('%Y-%m-%d')
    return slugify(date_text) or UNKNOWN_DATE_TOKEN


def create_dedup_key(
    title: str,
    date_text: Optional[str],
    normalized_date: Optional[datetime] = None
) -> str:
    """
    Create the local deduplication key for a disclosure.

    Args:
        title: Disclosure title as shown in the listing
        date_text: Raw date text from the listing
        normalized_date: Already parsed date (skips re-parsing when given)

    Returns:
        '{YYYY-MM-DD}-{title-slug}' truncated to 100 characters. Titles with
        no ASCII letters or digits use a short hash of the title. Unparsable
        dates contribute their slugified raw text, or 'unknown'.

    Example:
        >>> create_dedup_key("Q3 2025 results", "18 Oct 2025")
        '2025-10-18-q3-2025-results'
    """
    key = f"{_date_token(date_text, normalized_date)}-{_title_token(title)}"
    return key[:MAX_KEY_LENGTH]


def create_item_slug(
    title: str,
    date_text: Optional[str],
    normalized_date: Optional[datetime] = None
) -> str:
    """
    Create the CMS item slug for a disclosure.

    Same inputs as create_dedup_key, ordered title-first so the CMS URL reads
    naturally. Titles repeated on different days get distinct slugs.

    Example:
        >>> create_item_slug("Q3 2025 results", "18 Oct 2025")
        'q3-2025-results-2025-10-18'
    """
    slug = f"{_title_token(title)}-{_date_token(date_text, normalized_date)}"
    return slug[:MAX_KEY_LENGTH].strip('-')


class DisclosureRecord(BaseModel):
    """
    One disclosure row from the listing page, enriched with content later.

    Example:
        >>> record = DisclosureRecord(
        ...     title="Protector Forsikring ASA: Q3 2025 results",
        ...     date_text="18 Oct 2025\\n08:00 CEST",
        ...     normalized_date=datetime(2025, 10, 18),
        ...     source_url="https://live.euronext.com/en/node/12345",
        ... )
        >>> record.dedup_key
        '2025-10-18-protector-forsikring-asa-q3-2025-results'
    """

    # === Listing Fields ===
    title: str = Field(..., min_length=1, description="Title text from the listing row")

    date_text: str = Field(
        ...,
        description="Raw date text as printed in the listing",
        examples=["18 Oct 2025\n08:00 CEST"]
    )

    normalized_date: Optional[datetime] = Field(
        default=None,
        description="Parsed date; None when the text is unparsable"
    )

    source_url: str = Field(..., description="Absolute URL of the disclosure page")

    node_ref: Optional[str] = Field(
        default=None,
        description="Opaque node reference linking the row to its in-page modal"
    )

    # === Extraction Fields ===
    content: str = Field(default="", description="Cleaned HTML body")

    publish_date: Optional[datetime] = Field(
        default=None,
        description="Timestamp used for display in the CMS"
    )

    scraped_at: Optional[datetime] = Field(default=None)

    @computed_field
    @property
    def dedup_key(self) -> str:
        return create_dedup_key(self.title, self.date_text, self.normalized_date)

    @computed_field
    @property
    def slug(self) -> str:
        return create_item_slug(self.title, self.date_text, self.normalized_date)

    def __repr__(self) -> str:
        return (
            f"DisclosureRecord(title='{self.title[:60]}', "
            f"date_text='{self.date_text.splitlines()[0] if self.date_text else ''}', "
            f"node_ref={self.node_ref!r}, "
            f"content_chars={len(self.content)})"
        )
