"""
Local calendar-day helpers for Outcome Tracker.

All calendar arithmetic happens on `date` objects in the local timezone of
the running process, never on raw second counts, so DST transitions do not
shift day boundaries.
"""

import math
from datetime import date, datetime, time, timedelta
from typing import Union

from dateutil import parser as date_parser

DateLike = Union[str, date, datetime]

WEEKDAY_LABELS = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half away from negative infinity (0.5 -> 1, -2.5 -> -2).

    Scores and percentages use this rather than the built-in round(),
    which rounds half to even.
    """
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded


def format_local_date(value: Union[date, datetime]) -> str:
    """Format the local calendar date as YYYY-MM-DD."""
    if isinstance(value, datetime):
        value = to_local_datetime(value)
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_local_date(value: str) -> datetime:
    """Parse YYYY-MM-DD into local midnight of that calendar date."""
    parts = [int(part) for part in value.split('-')]
    year = parts[0]
    month = parts[1] if len(parts) > 1 else 1
    day = parts[2] if len(parts) > 2 else 1
    return datetime(year, month, day)


def add_local_days(value: str, days: int) -> str:
    """Add calendar days to a YYYY-MM-DD string."""
    shifted = parse_local_date(value).date() + timedelta(days=days)
    return format_local_date(shifted)


def _is_date_only(value: str) -> bool:
    return len(value) == 10 and value[4] == '-' and value[7] == '-'


def to_local_datetime(value: DateLike) -> datetime:
    """
    Normalize a date, datetime or ISO string to a naive local datetime.

    Date-only strings are local calendar dates. Timezone-aware values are
    converted to the local zone before the tzinfo is dropped.
    """
    if isinstance(value, str):
        if _is_date_only(value):
            return parse_local_date(value)
        value = date_parser.isoparse(value)

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    return datetime.combine(value, time.min)


def to_instant(value: DateLike) -> datetime:
    """Return an aware datetime suitable for ordering timestamps."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value
    return to_local_datetime(value).astimezone()


def start_of_local_day(value: DateLike) -> datetime:
    """Local midnight of the calendar day containing value."""
    return datetime.combine(to_local_datetime(value).date(), time.min)


def days_between_local_dates(start: DateLike, end: DateLike) -> int:
    """
    Whole local calendar days from start to end.

    Only the calendar date of each input matters (23:55 to 00:05 the next
    day is 1). Never negative: an end before start yields 0.
    """
    start_day = to_local_datetime(start).date()
    end_day = to_local_datetime(end).date()
    return max(0, (end_day - start_day).days)


def js_weekday(value: DateLike) -> int:
    """Weekday numbered 0=Sunday .. 6=Saturday."""
    return to_local_datetime(value).isoweekday() % 7


def week_start_for(anchor: str, start_of_week: int = 1) -> str:
    """
    First day of the week containing anchor.

    Args:
        anchor: YYYY-MM-DD date inside the week
        start_of_week: 0 for Sunday-based weeks, 1 for Monday-based weeks

    Returns:
        YYYY-MM-DD of the week's first day
    """
    offset = (js_weekday(anchor) - start_of_week + 7) % 7
    return add_local_days(anchor, -offset)


def local_date_range(start: str, count: int):
    """Yield count consecutive YYYY-MM-DD strings beginning at start."""
    for index in range(count):
        yield add_local_days(start, index)
