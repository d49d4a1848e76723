"""
Reusable field validators for Pydantic models.

These validators back the configuration models in disclosure_relay.config
and can be used with the Pydantic @field_validator decorator.
"""

from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


VALID_LOG_LEVELS = ('debug', 'info', 'warning', 'error', 'critical')


def validate_hour(hour: int) -> int:
    """
    Validate an hour-of-day boundary for the active window.

    24 is accepted so that an end boundary can cover the whole last hour
    of the day (e.g. start_hour=6, end_hour=24 means 06:00-23:59).

    Args:
        hour: Hour value to validate

    Returns:
        The validated hour (unchanged if valid)

    Raises:
        ValueError: If hour is outside 0-24

    Example:
        >>> validate_hour(6)
        6
        >>> validate_hour(25)  # Raises ValueError
    """
    if hour is None or hour < 0 or hour > 24:
        raise ValueError(
            f"Hour must be between 0 and 24, got: {hour}"
        )

    return hour


def validate_timezone(name: str) -> str:
    """
    Validate an IANA timezone name.

    Args:
        name: Timezone name (e.g., 'Europe/Oslo')

    Returns:
        The validated timezone name

    Raises:
        ValueError: If the zone is not known to the tz database

    Example:
        >>> validate_timezone('Europe/Oslo')
        'Europe/Oslo'
        >>> validate_timezone('Mars/Olympus')  # Raises ValueError
    """
    if not name:
        raise ValueError("Timezone must not be empty. Example: 'Europe/Oslo'")

    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(
            f"Unknown timezone: '{name}'\n"
            f"Example: 'Europe/Oslo', 'UTC'"
        ) from e

    return name


def validate_weekdays(days: List[int]) -> List[int]:
    """
    Validate a list of ISO weekday numbers (Monday=1 ... Sunday=7).

    Args:
        days: Weekday numbers in which scheduled runs are active

    Returns:
        Sorted, de-duplicated list of weekday numbers

    Raises:
        ValueError: If the list is empty or contains values outside 1-7

    Example:
        >>> validate_weekdays([5, 1, 2, 3, 4])
        [1, 2, 3, 4, 5]
    """
    if not days:
        raise ValueError("At least one active weekday is required")

    invalid = [d for d in days if d < 1 or d > 7]
    if invalid:
        raise ValueError(
            f"Invalid ISO weekdays: {invalid}\n"
            f"Use 1 (Monday) through 7 (Sunday)."
        )

    return sorted(set(days))


def validate_log_level(level: Optional[str]) -> str:
    """
    Validate and normalize a logging level name.

    Args:
        level: Level name, case-insensitive ('info', 'DEBUG', ...)

    Returns:
        Lower-cased level name

    Raises:
        ValueError: If the level is not a standard logging level
    """
    normalized = (level or '').strip().lower()
    if normalized not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: '{level}'. "
            f"Valid levels: {list(VALID_LOG_LEVELS)}"
        )

    return normalized
