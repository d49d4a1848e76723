"""
Active-window check for scheduled runs.

The external scheduler fires every few minutes around the clock; runs
outside the configured hours or weekdays stop immediately without error.
"""

import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from disclosure_relay.config import ScheduleSettings

logger = logging.getLogger(__name__)


def local_now(schedule: ScheduleSettings, now: Optional[datetime] = None) -> datetime:
    """
    Current time in the schedule's timezone.

    Naive values of now are taken as UTC.
    """
    zone = ZoneInfo(schedule.timezone)
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        now = now.replace(tzinfo=ZoneInfo('UTC'))
    return now.astimezone(zone)


def is_within_active_window(
    schedule: ScheduleSettings,
    now: Optional[datetime] = None
) -> bool:
    """
    Check whether now falls inside the active window.

    Active means: ISO weekday in schedule.weekdays and
    start_hour <= local hour < end_hour.

    Args:
        schedule: Schedule settings
        now: Moment to check (defaults to the current time)

    Returns:
        True if a scheduled run should do work

    Example:
        >>> schedule = ScheduleSettings(start_hour=6, end_hour=24)
        >>> is_within_active_window(schedule, datetime(2025, 10, 20, 3, 0))  # 05:00 Oslo
        False
    """
    local = local_now(schedule, now)
    in_days = local.isoweekday() in schedule.weekdays
    in_hours = schedule.start_hour <= local.hour < schedule.end_hour

    logger.debug(
        f"Schedule check at {local.isoformat()} ({schedule.timezone}): "
        f"weekday={'ok' if in_days else 'off'}, hours={'ok' if in_hours else 'off'}"
    )
    return in_days and in_hours
