"""
Date normalization, cutoff filtering and newest-first ordering.

The listing page prints dates as loose text, often with the time and
timezone on a second line:

    18 Oct 2025
    08:00 CEST

Only the first line is parsed. Anything that cannot be parsed is reported
as None ("unparsable") and is excluded by the cutoff filter in both modes.
"""

import functools
import logging
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Iterable, List, Optional

from dateutil import parser as date_parser

if TYPE_CHECKING:
    from disclosure_relay.config import SourceSettings
    from disclosure_relay.models.record import DisclosureRecord

logger = logging.getLogger(__name__)


def normalize_date(date_text: Optional[str]) -> Optional[datetime]:
    """
    Parse loosely formatted date text into a naive datetime.

    ISO 8601 is tried first so that '2025-01-05' is never read day-first;
    other formats are parsed with day-first precedence ('05/01/2025' is
    5 January), which is how European listing pages print numeric dates.

    Args:
        date_text: Raw date text from the listing

    Returns:
        Naive datetime, or None if the text is empty or unparsable

    Example:
        >>> normalize_date('18 Oct 2025\\n08:00 CEST')
        datetime.datetime(2025, 10, 18, 0, 0)
        >>> normalize_date('Unknown date') is None
        True
    """
    lines = (date_text or '').strip().splitlines()
    if not lines:
        return None

    head = lines[0].strip()
    if not head:
        return None

    try:
        return date_parser.isoparse(head).replace(tzinfo=None)
    except (ValueError, OverflowError):
        pass

    try:
        return date_parser.parse(head, dayfirst=True, ignoretz=True)
    except (ValueError, OverflowError):
        logger.debug(f"Unparsable date text: {head!r}")
        return None


def resolve_cutoff_day(source: 'SourceSettings', today: date) -> date:
    """
    Compute the first calendar day that passes the cutoff policy.

    Args:
        source: Source settings carrying cutoff_mode and its parameter
        today: Current day in the configured timezone

    Returns:
        only_after_date in absolute mode, today - only_recent_days in rolling mode
    """
    if source.cutoff_mode == 'absolute':
        return source.only_after_date
    return today - timedelta(days=source.only_recent_days)


def filter_by_cutoff(
    records: Iterable['DisclosureRecord'],
    source: 'SourceSettings',
    today: date
) -> List['DisclosureRecord']:
    """
    Keep records dated on or after the cutoff day.

    Comparison is by calendar day, so a record dated exactly on the cutoff
    day is kept. Records with an unparsable date are dropped in both modes.

    Args:
        records: Candidate records
        source: Source settings with the cutoff policy
        today: Current day in the configured timezone

    Returns:
        Records passing the cutoff, in input order
    """
    cutoff_day = resolve_cutoff_day(source, today)
    kept = []
    dropped_unparsable = 0

    for record in records:
        if record.normalized_date is None:
            dropped_unparsable += 1
            continue
        if record.normalized_date.date() >= cutoff_day:
            kept.append(record)

    if dropped_unparsable:
        logger.info(f"Dropped {dropped_unparsable} record(s) with unparsable dates")

    return kept


def _compare_newest_first(a: 'DisclosureRecord', b: 'DisclosureRecord') -> int:
    if a.normalized_date is not None and b.normalized_date is not None:
        if a.normalized_date == b.normalized_date:
            return 0
        return -1 if a.normalized_date > b.normalized_date else 1

    # Lexical fallback on raw text, still descending
    if a.date_text == b.date_text:
        return 0
    return -1 if a.date_text > b.date_text else 1


def sort_newest_first(records: Iterable['DisclosureRecord']) -> List['DisclosureRecord']:
    """
    Order records by normalized date, newest first.

    If either side of a comparison has no normalized date, the pair is
    ordered by descending raw date text instead.

    Example:
        >>> [r.date_text for r in sort_newest_first(records)]
        ['2025-01-05', '2025-01-02']
    """
    return sorted(records, key=functools.cmp_to_key(_compare_newest_first))
