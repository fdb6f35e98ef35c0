"""
Revenue metrics: billed vs collected vs outstanding receivable.

Totals are snapshot totals of every contract in the set; nothing is
apportioned to the window here.
"""

from decimal import Decimal
from typing import Iterable

from models.records import RentalRecord
from models.reports import RevenueSummary


def billed_amount(rental: RentalRecord) -> Decimal:
    """Open contracts have no fixed total yet: billed equals paid so far."""
    if rental.is_open_contract:
        return rental.total_paid or Decimal("0")
    return rental.total_price or Decimal("0")


def calculate_revenue(rentals: Iterable[RentalRecord]) -> RevenueSummary:
    """Sum billed and collected amounts; open_ar is never negative."""
    revenue_billed = Decimal("0")
    revenue_collected = Decimal("0")

    for rental in rentals:
        revenue_billed += billed_amount(rental)
        revenue_collected += rental.total_paid or Decimal("0")

    return RevenueSummary(
        revenue_billed=revenue_billed,
        revenue_collected=revenue_collected,
        open_ar=max(Decimal("0"), revenue_billed - revenue_collected),
    )
