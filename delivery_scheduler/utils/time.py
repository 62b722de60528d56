"""Clock and calendar helpers shared by the scheduling services."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from delivery_scheduler.core.config import settings


def current_local_datetime() -> datetime:
    """Return naive wall-clock time in the shop timezone.

    Rule records carry wall-clock times without offsets, so "now" is compared
    against them as a naive local datetime.
    """
    return datetime.now(ZoneInfo(settings.app_timezone)).replace(tzinfo=None)


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def day_of_week(value: date) -> int:
    """Return weekday number with 0 = Sunday ... 6 = Saturday."""
    return (value.weekday() + 1) % 7


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date in the inclusive range."""
    current: date = start
    while current <= end:
        yield current
        current += timedelta(days=1)
