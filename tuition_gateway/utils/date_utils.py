"""Date manipulation utilities"""

from datetime import date, datetime, time, timezone
from typing import Tuple


def as_datetime(value: date | datetime) -> datetime:
    """Promote a bare date to midnight; datetimes pass through unchanged"""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def align_timezones(a: datetime, b: datetime) -> Tuple[datetime, datetime]:
    """Make two instants comparable: when only one is aware, the naive one is read as UTC"""
    if (a.tzinfo is None) == (b.tzinfo is None):
        return a, b
    if a.tzinfo is None:
        return a.replace(tzinfo=timezone.utc), b
    return a, b.replace(tzinfo=timezone.utc)


def whole_days_between(start: date | datetime, end: date | datetime) -> int:
    """Calendar days from start to end (negative when end is earlier)"""
    start_dt, end_dt = align_timezones(as_datetime(start), as_datetime(end))
    return (end_dt.date() - start_dt.date()).days
