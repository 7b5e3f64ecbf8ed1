from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise to an aware UTC datetime. SQLite hands back naive values for
    DateTime(timezone=True) columns; those are stored as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day(value: datetime) -> datetime:
    value = ensure_utc(value)
    return datetime.combine(value.date(), time.min, tzinfo=timezone.utc)


def day_window(now: datetime, days_ahead: int) -> tuple[datetime, datetime]:
    """[00:00:00, 23:59:59.999999] UTC of the calendar day `days_ahead` after `now`."""
    start = start_of_day(now) + timedelta(days=days_ahead)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)
