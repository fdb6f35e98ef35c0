"""
Utilization metrics: rented car-days against fleet capacity.
"""

from decimal import Decimal
from typing import Iterable

from models.records import RentalRecord
from models.reports import TimeWindow, UtilizationSummary
from metrics.rounding import round_decimal, safe_divide
from utils.date_utils import inclusive_days, overlap_days_inclusive


def rented_days_in_window(rentals: Iterable[RentalRecord], window: TimeWindow) -> int:
    """
    Sum each rental's inclusive day overlap with the window.

    A rental without return or expected end runs to the window end.
    """
    total = 0
    for rental in rentals:
        end = rental.effective_end(window.to_date)
        total += overlap_days_inclusive(rental.start_date, end, window.from_date, window.to_date)
    return total


def calculate_utilization(
    rentals: Iterable[RentalRecord],
    window: TimeWindow,
    fleet_size: int,
    revenue_billed: Decimal,
) -> UtilizationSummary:
    """
    Compute utilization, ADR and RevPAR for the window.

    Rented days are clamped to fleet capacity so double-booked data can
    never push utilization above 1.
    """
    fleet_size = max(0, fleet_size)
    period_days = inclusive_days(window.from_date, window.to_date)
    available_car_days = fleet_size * period_days
    rented_days = min(rented_days_in_window(rentals, window), available_car_days)

    return UtilizationSummary(
        fleet_size=fleet_size,
        period_days=period_days,
        rented_days=rented_days,
        available_car_days=available_car_days,
        utilization=round_decimal(safe_divide(rented_days, available_car_days), 4),
        adr=round_decimal(safe_divide(revenue_billed, rented_days)),
        rev_par=round_decimal(safe_divide(revenue_billed, available_car_days)),
    )
