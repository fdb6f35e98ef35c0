"""
Time-range resolution for reports.

Maps a named preset or an explicit from/to pair onto a concrete
TimeWindow with a trend granularity.
"""

from datetime import datetime, timedelta
from typing import Optional, Union

import structlog

from config import settings
from exceptions import ConfigurationError, InvalidRangeError
from models.reports import Interval, Preset, TimeWindow
from utils.date_utils import end_of_day, ensure_aware, start_of_day, to_local_datetime

logger = structlog.get_logger(__name__)

DEFAULT_PRESET = Preset.LAST_30D

ROLLING_PRESET_DAYS = {
    Preset.LAST_7D: 7,
    Preset.LAST_30D: 30,
    Preset.LAST_90D: 90,
}


def resolve_preset(preset: Union[Preset, str, None], now: datetime) -> TimeWindow:
    """
    Resolve a named preset relative to now.

    Day, month and year boundaries are taken in the reporting timezone,
    whatever zone now carries. Unknown presets fall back to last30d.
    """
    now = to_local_datetime(now)
    tz = now.tzinfo

    try:
        preset = Preset(preset)
    except ValueError:
        logger.warning("unknown_preset_fallback", preset=preset, fallback=DEFAULT_PRESET.value)
        preset = DEFAULT_PRESET

    if preset == Preset.TODAY:
        return TimeWindow(from_date=start_of_day(now, tz), to_date=end_of_day(now, tz), interval=Interval.DAY)

    if preset == Preset.YESTERDAY:
        yesterday = start_of_day(now, tz) - timedelta(days=1)
        return TimeWindow(from_date=start_of_day(yesterday, tz), to_date=end_of_day(yesterday, tz), interval=Interval.DAY)

    if preset == Preset.LAST_24H:
        return TimeWindow(from_date=now - timedelta(hours=24), to_date=now, interval=Interval.DAY)

    if preset in ROLLING_PRESET_DAYS:
        days = ROLLING_PRESET_DAYS[preset]
        return TimeWindow(from_date=now - timedelta(days=days), to_date=now, interval=Interval.DAY)

    if preset == Preset.THIS_YEAR:
        jan_first = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        return TimeWindow(from_date=jan_first, to_date=now, interval=Interval.MONTH)

    if preset == Preset.PREV_MONTH:
        first_of_month = start_of_day(now, tz).replace(day=1)
        last_of_prev = first_of_month - timedelta(days=1)
        return TimeWindow(
            from_date=start_of_day(last_of_prev.replace(day=1), tz),
            to_date=end_of_day(last_of_prev, tz),
            interval=Interval.DAY,
        )

    # Preset.PREV_YEAR
    year = now.year - 1
    return TimeWindow(
        from_date=datetime(year, 1, 1, tzinfo=tz),
        to_date=datetime(year, 12, 31, 23, 59, 59, 999999, tzinfo=tz),
        interval=Interval.MONTH,
    )


def resolve_custom_range(
    from_date: datetime,
    to_date: datetime,
    interval: Optional[Interval] = None,
    max_days: Optional[int] = None,
) -> TimeWindow:
    """
    Validate an explicit range.

    Raises:
        InvalidRangeError: If to <= from or the span exceeds max_days
    """
    max_days = max_days or settings.max_custom_range_days
    from_date = ensure_aware(from_date)
    to_date = ensure_aware(to_date)

    if to_date <= from_date:
        raise InvalidRangeError("'to' must be after 'from'", from_date, to_date, max_days)

    if to_date - from_date > timedelta(days=max_days):
        raise InvalidRangeError(
            f"Range cannot exceed {max_days} days", from_date, to_date, max_days
        )

    return TimeWindow(from_date=from_date, to_date=to_date, interval=interval or Interval.DAY)


def resolve_time_range(
    now: datetime,
    preset: Optional[str] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    interval: Optional[Interval] = None,
) -> TimeWindow:
    """
    Resolve the report window from either a preset or an explicit range.

    A preset wins when both are given. An explicit interval overrides the
    preset's own granularity.

    Raises:
        ConfigurationError: If neither a preset nor a full range is supplied
        InvalidRangeError: If the explicit range is invalid
    """
    if preset:
        window = resolve_preset(preset, now)
        if interval is not None:
            window = window.model_copy(update={"interval": interval})
        return window

    if from_date is not None and to_date is not None:
        return resolve_custom_range(from_date, to_date, interval)

    raise ConfigurationError()


def previous_window(window: TimeWindow) -> TimeWindow:
    """Mirrored window of equal length ending just before window.from_date."""
    span = window.to_date - window.from_date
    return TimeWindow(
        from_date=window.from_date - span,
        to_date=window.from_date - timedelta(microseconds=1),
        interval=window.interval,
    )
