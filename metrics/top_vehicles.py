"""
Top vehicles leaderboard by collected revenue.
"""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List

from models.records import RentalRecord, VehicleRecord
from models.reports import LeaderboardRow, TimeWindow
from utils.date_utils import overlap_days_inclusive

DEFAULT_LIMIT = 5


def rank_top_vehicles(
    rentals: Iterable[RentalRecord],
    vehicles: Iterable[VehicleRecord],
    window: TimeWindow,
    now: datetime,
    limit: int = DEFAULT_LIMIT,
) -> List[LeaderboardRow]:
    """
    Group window-overlapping rentals by vehicle and rank by revenue.

    Revenue is the sum of total_paid. Ties keep first-seen order.
    """
    revenue: Dict[str, Decimal] = defaultdict(Decimal)
    rents: Dict[str, int] = defaultdict(int)

    for rental in rentals:
        if rental.is_deleted:
            continue
        end = rental.effective_end(now)
        if overlap_days_inclusive(rental.start_date, end, window.from_date, window.to_date) == 0:
            continue
        revenue[rental.vehicle_id] += rental.total_paid or Decimal("0")
        rents[rental.vehicle_id] += 1

    vehicles_by_id = {v.id: v for v in vehicles}
    ranked = sorted(revenue.keys(), key=lambda vid: revenue[vid], reverse=True)[:limit]

    rows = []
    for vehicle_id in ranked:
        vehicle = vehicles_by_id.get(vehicle_id)
        rows.append(LeaderboardRow(
            vehicle_id=vehicle_id,
            make=vehicle.make if vehicle else None,
            model=vehicle.model if vehicle else None,
            plate_number=vehicle.plate_number if vehicle else None,
            revenue=revenue[vehicle_id],
            rents=rents[vehicle_id],
        ))
    return rows
