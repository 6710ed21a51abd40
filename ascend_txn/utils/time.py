"""
Date utilities for transaction records.

Transactions carry date-only timestamps. All "today" lookups go through
this module so callers and tests can pin the clock.
"""

from datetime import date, datetime, timezone
from typing import Callable, Optional, Union

Clock = Callable[[], date]


def utc_today() -> date:
    """Current UTC calendar date."""
    return datetime.now(timezone.utc).date()


def get_today(clock: Optional[Clock] = None) -> date:
    """
    Get today's date, preferring an injected clock over the wall clock.

    Args:
        clock: Optional zero-argument callable returning a date

    Returns:
        Date from the clock if provided, otherwise the current UTC date
    """
    if clock is not None:
        return clock()
    return utc_today()


def fixed_clock(value: date) -> Clock:
    """Build a clock that always returns ``value``."""
    return lambda: value


def format_date(value: Optional[date]) -> Optional[str]:
    """Format a date as ISO ``YYYY-MM-DD``; None passes through."""
    if value is None:
        return None
    return value.isoformat()


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Parse a date-only value.

    Accepts ISO date strings, full ISO timestamps (time part dropped),
    date and datetime objects.

    Raises:
        ValueError: if a string cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    return date.fromisoformat(text)


def is_same_month(value: date, reference: date) -> bool:
    """Check whether two dates fall in the same calendar month."""
    return value.year == reference.year and value.month == reference.month
