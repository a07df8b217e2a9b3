"""Date manipulation utilities"""

import calendar
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current time in UTC"""
    return datetime.now(timezone.utc)


def add_months(from_date: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the last day of the target month"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return from_date.replace(year=year, month=month, day=day)


def days_between(start: datetime, end: datetime) -> float:
    """Fractional days elapsed from start to end"""
    return (end - start).total_seconds() / 86400


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on round-trip)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
