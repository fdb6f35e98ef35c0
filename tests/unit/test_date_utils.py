"""
Unit tests for calendar-day arithmetic.

Covers:
1. Inclusive day counting
2. Day overlap of two intervals
3. Local date truncation
4. Days until a deadline
5. Clocks
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from utils.date_utils import (
    FixedClock,
    days_until,
    end_of_day,
    ensure_aware,
    inclusive_days,
    overlap_days_inclusive,
    start_of_day,
    to_local_date,
    to_local_datetime,
)
from tests.factories import utc


# ===================
# TEST 1: INCLUSIVE DAYS
# ===================

class TestInclusiveDays:
    """Both endpoints count as full days."""

    def test_same_day_is_one(self):
        """Start and end on the same date count as 1 day."""
        assert inclusive_days(date(2025, 3, 4), date(2025, 3, 4)) == 1

    def test_same_day_different_times(self):
        """Time of day is ignored."""
        assert inclusive_days(utc(2025, 3, 4, 8), utc(2025, 3, 4, 22)) == 1

    def test_ten_day_span(self):
        """1st to 10th is 10 days."""
        assert inclusive_days(utc(2025, 3, 1, 23), utc(2025, 3, 10, 1)) == 10

    def test_reversed_bounds_is_zero(self):
        """End before start counts nothing."""
        assert inclusive_days(date(2025, 3, 10), date(2025, 3, 1)) == 0

    def test_crosses_month_end(self):
        """Counting continues across month boundaries."""
        assert inclusive_days(date(2025, 1, 30), date(2025, 2, 2)) == 4


# ===================
# TEST 2: OVERLAP DAYS
# ===================

class TestOverlapDaysInclusive:
    """Overlap of [start, end] with a window."""

    def test_partial_overlap(self):
        """Rental 1-10 against window 5-20 overlaps on 6 days."""
        result = overlap_days_inclusive(
            utc(2025, 3, 1), utc(2025, 3, 10), utc(2025, 3, 5), utc(2025, 3, 20)
        )
        assert result == 6

    def test_contained(self):
        """Interval fully inside the window counts all its days."""
        result = overlap_days_inclusive(
            utc(2025, 3, 5), utc(2025, 3, 7), utc(2025, 3, 1), utc(2025, 3, 31)
        )
        assert result == 3

    def test_disjoint_is_zero(self):
        """Disjoint intervals overlap by exactly 0."""
        result = overlap_days_inclusive(
            utc(2025, 1, 1), utc(2025, 1, 10), utc(2025, 2, 1), utc(2025, 2, 28)
        )
        assert result == 0

    def test_touching_on_one_day(self):
        """Ending on the window's first day is a 1-day overlap."""
        result = overlap_days_inclusive(
            utc(2025, 1, 25), utc(2025, 2, 1, 9), utc(2025, 2, 1), utc(2025, 2, 28)
        )
        assert result == 1


# ===================
# TEST 3: LOCAL DATES
# ===================

class TestLocalDates:
    """Truncation uses the reporting timezone's calendar."""

    def test_late_utc_is_next_day_in_tokyo(self):
        """23:30 UTC is already the next day in Tokyo."""
        value = datetime(2025, 1, 1, 23, 30, tzinfo=timezone.utc)
        assert to_local_date(value, ZoneInfo("Asia/Tokyo")) == date(2025, 1, 2)

    def test_early_utc_is_previous_day_in_new_york(self):
        """02:00 UTC is still the previous evening in New York."""
        value = datetime(2025, 1, 2, 2, 0, tzinfo=timezone.utc)
        assert to_local_date(value, ZoneInfo("America/New_York")) == date(2025, 1, 1)

    def test_naive_datetime_uses_its_own_fields(self):
        """Naive values are already local."""
        assert to_local_date(datetime(2025, 5, 5, 23, 59)) == date(2025, 5, 5)

    def test_bare_date_passes_through(self):
        assert to_local_date(date(2025, 5, 5)) == date(2025, 5, 5)

    def test_bare_date_is_local_midnight(self):
        """to_local_datetime turns a date into the start of that day."""
        tz = ZoneInfo("Europe/Paris")
        result = to_local_datetime(date(2025, 5, 5), tz)
        assert result == datetime(2025, 5, 5, 0, 0, tzinfo=tz)

    def test_ensure_aware_keeps_existing_zone(self):
        value = utc(2025, 5, 5, 10)
        assert ensure_aware(value) is value

    def test_ensure_aware_attaches_zone(self):
        result = ensure_aware(datetime(2025, 5, 5, 10))
        assert result.tzinfo is not None

    def test_day_bounds(self):
        """start_of_day and end_of_day bracket the local day."""
        tz = ZoneInfo("UTC")
        value = utc(2025, 5, 5, 15, 30)
        assert start_of_day(value, tz) == datetime(2025, 5, 5, tzinfo=tz)
        assert end_of_day(value, tz) == datetime.combine(date(2025, 5, 5), time.max, tzinfo=tz)


# ===================
# TEST 4: DAYS UNTIL
# ===================

class TestDaysUntil:
    """ceil((target - now) / 1 day)."""

    def test_partial_day_rounds_up(self):
        """2.5 days ahead rounds up to 3."""
        now = utc(2025, 6, 15, 12)
        assert days_until(date(2025, 6, 18), now) == 3

    def test_exact_days(self):
        now = utc(2025, 6, 15)
        assert days_until(utc(2025, 6, 22), now) == 7

    def test_same_instant_is_zero(self):
        now = utc(2025, 6, 15)
        assert days_until(now, now) == 0

    def test_past_is_negative(self):
        """Past deadlines give negative values."""
        now = utc(2025, 6, 15)
        assert days_until(utc(2025, 6, 12), now) == -3


# ===================
# TEST 5: CLOCKS
# ===================

class TestFixedClock:
    """Deterministic clock for now-dependent metrics."""

    def test_returns_pinned_instant(self):
        clock = FixedClock(utc(2025, 6, 15, 12))
        assert clock.now() == utc(2025, 6, 15, 12)

    def test_advance(self):
        """advance() moves the instant forward."""
        clock = FixedClock(utc(2025, 6, 15, 12))
        clock.advance(days=2, hours=1)
        assert clock.now() == utc(2025, 6, 15, 12) + timedelta(days=2, hours=1)

    def test_naive_instant_made_aware(self):
        clock = FixedClock(datetime(2025, 6, 15, 12))
        assert clock.now().tzinfo is not None
