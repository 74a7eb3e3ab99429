"""
Date and time utility functions used across the project.

Notes:
- All "UTC" helpers use timezone-aware datetimes with `timezone.utc`.
- `to_utc` assumes naive datetimes are already in UTC and only attaches tzinfo
  (it does not perform any timezone conversion for naive datetimes).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta

UTC = timezone.utc
MILLISECONDS_PER_DAY = 86_400_000

Clock = Callable[[], datetime]


class DateUtilsError(Exception):
    """Custom exception for date utilities errors."""
    pass


def now_utc() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def to_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to timezone-aware UTC."""
    if dt is None:
        return None
    if not isinstance(dt, datetime):
        raise DateUtilsError("Input must be a datetime object")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def add_months(dt: datetime, months: int) -> datetime:
    """
    Add calendar months to a datetime.

    Month ends are clamped, so Jan 31 + 1 month is the last day of February.
    """
    if months < 0:
        raise DateUtilsError("months must be non-negative")
    return dt + relativedelta(months=months)


def days_left(end: datetime, now: datetime) -> int:
    """Whole days remaining, rounding any partial day up."""
    delta = to_utc(end) - to_utc(now)
    delta_ms = delta // timedelta(milliseconds=1)
    return -(-delta_ms // MILLISECONDS_PER_DAY)
