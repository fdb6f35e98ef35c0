"""
Targets metrics: proportional attribution of rental revenue to target periods.

A rental that straddles two adjacent target periods contributes to each
in proportion to the days it spends inside them:

    allocated = total_paid * overlap_days / rental_duration_days

so the full payment is never counted twice across back-to-back periods.

Overlapping targets of the same vehicle are not rejected. Each one is
attributed independently (their sum can then exceed the payment) and the
affected rows are flagged with overlaps_other_target.
"""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set

import structlog

from models.records import (
    CURRENT_RENTAL_STATUSES,
    RentalRecord,
    TargetPeriod,
    VehicleRecord,
)
from models.reports import TargetRow, TimeWindow
from metrics.rounding import percentage, round_to_unit
from utils.date_utils import days_until, inclusive_days

logger = structlog.get_logger(__name__)


def target_overlaps_window(target: TargetPeriod, window: TimeWindow) -> bool:
    """Target period intersects the report window."""
    return target.start_date <= window.to_date and target.end_date >= window.from_date


def rental_matches_target(rental: RentalRecord, target: TargetPeriod, now: datetime) -> bool:
    """
    Rental of the target's vehicle whose lifespan overlaps the target period.

    Active, reserved and open-contract rentals count as current even
    without a concrete end date.
    """
    if rental.is_deleted or rental.vehicle_id != target.vehicle_id:
        return False
    if rental.start_date > target.end_date:
        return False
    if rental.is_open_contract or rental.status in CURRENT_RENTAL_STATUSES:
        return True
    return rental.effective_end(now) >= target.start_date


def allocate_rental_revenue(
    rental: RentalRecord,
    period_start: datetime,
    period_end: datetime,
    now: datetime,
) -> Decimal:
    """
    Share of rental.total_paid earned inside [period_start, period_end].

    Day counts are inclusive calendar days; a rental shorter than one
    day still lasts one day.
    """
    effective_end = rental.effective_end(now)
    duration_days = max(1, inclusive_days(rental.start_date, effective_end))
    overlap_days = max(
        0,
        inclusive_days(
            max(rental.start_date, period_start),
            min(effective_end, period_end),
        ),
    )
    paid = rental.total_paid or Decimal("0")
    return paid * Decimal(overlap_days) / Decimal(duration_days)


def find_overlapping_targets(targets: Iterable[TargetPeriod]) -> Set[str]:
    """Ids of targets that overlap another target of the same vehicle."""
    by_vehicle: Dict[str, List[TargetPeriod]] = defaultdict(list)
    for target in targets:
        by_vehicle[target.vehicle_id].append(target)

    overlapping: Set[str] = set()
    for vehicle_targets in by_vehicle.values():
        ordered = sorted(vehicle_targets, key=lambda t: (t.start_date, t.end_date))
        for i, current in enumerate(ordered):
            for other in ordered[i + 1:]:
                if other.start_date > current.end_date:
                    break
                overlapping.add(current.id)
                overlapping.add(other.id)
    return overlapping


def build_target_row(
    target: TargetPeriod,
    rentals: Iterable[RentalRecord],
    now: datetime,
    vehicle: Optional[VehicleRecord] = None,
    overlaps_other_target: bool = False,
) -> TargetRow:
    """Attribute actuals to one target and derive its progress KPIs."""
    actual_revenue = Decimal("0")
    actual_rents = 0

    for rental in rentals:
        if not rental_matches_target(rental, target, now):
            continue
        actual_revenue += allocate_rental_revenue(rental, target.start_date, target.end_date, now)
        actual_rents += 1

    actual_revenue = round_to_unit(actual_revenue)

    return TargetRow(
        id=target.id,
        vehicle_id=target.vehicle_id,
        make=vehicle.make if vehicle else None,
        model=vehicle.model if vehicle else None,
        plate_number=vehicle.plate_number if vehicle else None,
        start_date=target.start_date,
        end_date=target.end_date,
        target_rents=target.target_rents,
        revenue_goal=target.revenue_goal,
        actual_revenue=actual_revenue,
        actual_rents=actual_rents,
        revenue_progress=percentage(actual_revenue, target.revenue_goal),
        rent_progress=percentage(actual_rents, target.target_rents),
        days_remaining=max(0, days_until(target.end_date, now)),
        is_expired=target.end_date < now,
        is_active=target.start_date <= now <= target.end_date,
        overlaps_other_target=overlaps_other_target,
    )


def calculate_targets(
    targets: Iterable[TargetPeriod],
    rentals: Iterable[RentalRecord],
    vehicles: Iterable[VehicleRecord],
    window: TimeWindow,
    now: datetime,
) -> List[TargetRow]:
    """
    Attribute revenue and rental counts to every target intersecting the window.

    Returns:
        TargetRow list ordered by start date, then vehicle
    """
    in_window = [t for t in targets if target_overlaps_window(t, window)]
    if not in_window:
        return []

    rentals = list(rentals)
    vehicles_by_id = {v.id: v for v in vehicles}

    rentals_by_vehicle: Dict[str, List[RentalRecord]] = defaultdict(list)
    for rental in rentals:
        rentals_by_vehicle[rental.vehicle_id].append(rental)

    overlapping = find_overlapping_targets(in_window)
    if overlapping:
        logger.warning(
            "overlapping_targets_detected",
            target_ids=sorted(overlapping),
        )

    rows = [
        build_target_row(
            target,
            rentals_by_vehicle.get(target.vehicle_id, []),
            now,
            vehicle=vehicles_by_id.get(target.vehicle_id),
            overlaps_other_target=target.id in overlapping,
        )
        for target in in_window
    ]
    rows.sort(key=lambda r: (r.start_date, r.vehicle_id))
    return rows


def build_active_target_card(
    vehicle_id: str,
    targets: Iterable[TargetPeriod],
    rentals: Iterable[RentalRecord],
    now: datetime,
    vehicle: Optional[VehicleRecord] = None,
) -> Optional[TargetRow]:
    """
    The vehicle's target whose period contains now, with actuals.

    When several targets contain now, the earliest start wins.
    Returns None when the vehicle has no running target.
    """
    vehicle_targets = [t for t in targets if t.vehicle_id == vehicle_id]
    running = sorted(
        (t for t in vehicle_targets if t.start_date <= now <= t.end_date),
        key=lambda t: t.start_date,
    )
    if not running:
        return None

    target = running[0]
    return build_target_row(
        target,
        rentals,
        now,
        vehicle=vehicle,
        overlaps_other_target=target.id in find_overlapping_targets(vehicle_targets),
    )
