"""
Calendar-day arithmetic shared by every report metric.

All day counting goes through to_local_date() so that every metric
truncates timestamps the same way: to the calendar date in the
reporting timezone, never to the UTC date.
"""

import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Optional, Protocol, Union
from zoneinfo import ZoneInfo

from config import settings

DateLike = Union[date, datetime]

SECONDS_PER_DAY = 86400


@lru_cache()
def get_report_timezone(name: Optional[str] = None) -> tzinfo:
    """Resolve the reporting timezone (defaults to settings.report_timezone)."""
    return ZoneInfo(name or settings.report_timezone)


def ensure_aware(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Attach the reporting timezone to naive datetimes."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz or get_report_timezone())
    return value


def to_local_datetime(value: DateLike, tz: Optional[tzinfo] = None) -> datetime:
    """
    Convert to an aware datetime in the reporting timezone.

    A bare date means the start of that local day.
    """
    tz = tz or get_report_timezone()
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=tz)
    return ensure_aware(value, tz).astimezone(tz)


def to_local_date(value: DateLike, tz: Optional[tzinfo] = None) -> date:
    """Strip time-of-day using the local calendar fields."""
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(tz or get_report_timezone()).date()


def start_of_day(value: DateLike, tz: Optional[tzinfo] = None) -> datetime:
    """Local midnight of the day containing value."""
    tz = tz or get_report_timezone()
    return datetime.combine(to_local_date(value, tz), time.min, tzinfo=tz)


def end_of_day(value: DateLike, tz: Optional[tzinfo] = None) -> datetime:
    """Last representable instant of the local day containing value."""
    tz = tz or get_report_timezone()
    return datetime.combine(to_local_date(value, tz), time.max, tzinfo=tz)


def inclusive_days(start: DateLike, end: DateLike) -> int:
    """
    Count calendar days from start to end, both included.

    Same-day start and end is 1. Returns 0 when end is before start.
    """
    start_day = to_local_date(start)
    end_day = to_local_date(end)
    if end_day < start_day:
        return 0
    return (end_day - start_day).days + 1


def overlap_days_inclusive(
    start: DateLike,
    end: DateLike,
    window_start: DateLike,
    window_end: DateLike,
) -> int:
    """
    Inclusive day overlap of [start, end] with [window_start, window_end].

    Both intervals are clipped to local dates first. Disjoint intervals
    overlap by exactly 0 days.
    """
    overlap_start = max(to_local_date(start), to_local_date(window_start))
    overlap_end = min(to_local_date(end), to_local_date(window_end))
    if overlap_end < overlap_start:
        return 0
    return inclusive_days(overlap_start, overlap_end)


def days_until(target: DateLike, now: datetime) -> int:
    """ceil((target - now) / 1 day); negative when target is in the past."""
    delta = to_local_datetime(target) - ensure_aware(now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


# ===================
# CLOCK
# ===================

class Clock(Protocol):
    """Source of "now" for metrics that depend on wall-clock time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in the reporting timezone."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone(get_report_timezone())


class FixedClock:
    """Clock pinned to a single instant, expressed in the reporting timezone."""

    def __init__(self, instant: datetime):
        self.instant = to_local_datetime(instant)

    def now(self) -> datetime:
        return self.instant

    def advance(self, **kwargs) -> None:
        """Move the pinned instant forward (timedelta kwargs)."""
        self.instant = self.instant + timedelta(**kwargs)
