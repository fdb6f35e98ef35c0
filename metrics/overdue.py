"""
Overdue metrics: rentals still out past their expected end.
"""

from datetime import datetime
from typing import Iterable, List

from models.records import CLOSED_RENTAL_STATUSES, RentalRecord
from models.reports import OverdueRow
from utils.date_utils import days_until


def find_overdue_rentals(rentals: Iterable[RentalRecord], now: datetime) -> List[OverdueRow]:
    """Open rentals whose expected end is strictly before now, oldest first."""
    overdue = [
        OverdueRow(
            id=rental.id,
            vehicle_id=rental.vehicle_id,
            customer_id=rental.customer_id,
            expected_end_date=rental.expected_end_date,
            days_overdue=max(0, -days_until(rental.expected_end_date, now)),
        )
        for rental in rentals
        if rental.status not in CLOSED_RENTAL_STATUSES
        and rental.expected_end_date is not None
        and rental.expected_end_date < now
    ]
    overdue.sort(key=lambda r: r.expected_end_date)
    return overdue
