"""
Trend metrics: per-bucket revenue and rental counts.

The bucket scaffold is built first so the series has no gaps; each
rental is then attributed to exactly one bucket (the one holding
max(start_date, window start)) and the aggregates are left-joined onto
the scaffold.
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List

from models.records import RentalRecord
from models.reports import BucketPoint, Interval, TimeWindow
from utils.date_utils import DateLike, to_local_date


def week_start(day: date) -> date:
    """Monday of the ISO week containing day."""
    return day - timedelta(days=day.weekday())


def month_start(day: date) -> date:
    return day.replace(day=1)


def next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def bucket_key(value: DateLike, interval: Interval) -> str:
    """
    Bucket key for a timestamp.

    Returns:
        YYYY-MM-DD for day, the Monday's YYYY-MM-DD for week, YYYY-MM for month
    """
    day = to_local_date(value)
    if interval == Interval.WEEK:
        return week_start(day).isoformat()
    if interval == Interval.MONTH:
        return day.strftime("%Y-%m")
    return day.isoformat()


def build_bucket_scaffold(from_date: DateLike, to_date: DateLike, interval: Interval) -> List[str]:
    """
    Ordered bucket keys covering [from_date, to_date] with no gaps.

    Weeks start on the Monday of the week containing from_date; months
    on the first of from_date's month.
    """
    start = to_local_date(from_date)
    end = to_local_date(to_date)
    if end < start:
        return []

    keys: List[str] = []

    if interval == Interval.WEEK:
        current = week_start(start)
        while current <= end:
            keys.append(current.isoformat())
            current += timedelta(days=7)
    elif interval == Interval.MONTH:
        current = month_start(start)
        while current <= end:
            keys.append(current.strftime("%Y-%m"))
            current = next_month(current)
    else:
        current = start
        while current <= end:
            keys.append(current.isoformat())
            current += timedelta(days=1)

    return keys


def trend_revenue(rental: RentalRecord) -> Decimal:
    """Paid amount when recorded, else the contract price."""
    if rental.total_paid is not None:
        return rental.total_paid
    return rental.total_price or Decimal("0")


def calculate_trends(rentals: Iterable[RentalRecord], window: TimeWindow) -> List[BucketPoint]:
    """
    Build the zero-filled trend series for the window.

    Rentals that started before the window count in its first bucket.
    Rentals attributed outside the scaffold are dropped.
    """
    scaffold = build_bucket_scaffold(window.from_date, window.to_date, window.interval)

    revenue_by_bucket: Dict[str, Decimal] = defaultdict(Decimal)
    rents_by_bucket: Dict[str, int] = defaultdict(int)

    for rental in rentals:
        anchor = max(rental.start_date, window.from_date)
        key = bucket_key(anchor, window.interval)
        revenue_by_bucket[key] += trend_revenue(rental)
        rents_by_bucket[key] += 1

    return [
        BucketPoint(
            date=key,
            revenue=revenue_by_bucket.get(key, Decimal("0")),
            rents=rents_by_bucket.get(key, 0),
        )
        for key in scaffold
    ]
