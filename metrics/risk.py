"""
Expiry risk metrics for insurance and technical inspection.

Only active vehicles whose expiry falls within the risk horizon are
risky at all. Each is tagged with its bucket so consumers can filter
without recomputing:

- expired:  expiry already passed
- critical: 0 to 3 days, expiry at now included
- warning:  4 to 7 days
- info:     8 days up to the horizon (30 by default)
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from models.records import VehicleRecord, VehicleStatus
from models.reports import RiskLevel, RiskSummary, RiskVehicle
from utils.date_utils import days_until, to_local_datetime

INSURANCE_EXPIRY_FIELD = "insurance_expiry_date"
TECHNICAL_VISIT_EXPIRY_FIELD = "technical_visit_expiry_date"

DEFAULT_HORIZON_DAYS = 30
CRITICAL_DAYS = 3
WARNING_DAYS = 7


def classify_expiry(expiry: datetime, now: datetime) -> RiskLevel:
    """Bucket an expiry date that is already known to be inside the horizon."""
    if expiry < now:
        return RiskLevel.EXPIRED

    days = days_until(expiry, now)
    if days <= CRITICAL_DAYS:
        return RiskLevel.CRITICAL
    if days <= WARNING_DAYS:
        return RiskLevel.WARNING
    return RiskLevel.INFO


def calculate_expiry_risk(
    vehicles: Iterable[VehicleRecord],
    expiry_field: str,
    now: datetime,
    horizon_days: Optional[int] = None,
) -> RiskSummary:
    """
    Summarize vehicles whose `expiry_field` date is expired or near.

    Args:
        vehicles: Fleet rows
        expiry_field: insurance_expiry_date or technical_visit_expiry_date
        now: Reference instant
        horizon_days: Days ahead considered risky (default 30)

    Returns:
        RiskSummary with per-bucket counts and tagged vehicles, earliest expiry first
    """
    horizon = now + timedelta(days=horizon_days or DEFAULT_HORIZON_DAYS)
    risky: List[RiskVehicle] = []

    for vehicle in vehicles:
        if vehicle.status != VehicleStatus.ACTIVE:
            continue

        raw_expiry = getattr(vehicle, expiry_field)
        if raw_expiry is None:
            continue

        expiry = to_local_datetime(raw_expiry)
        if expiry > horizon:
            continue

        level = classify_expiry(expiry, now)
        risky.append(RiskVehicle(
            vehicle_id=vehicle.id,
            make=vehicle.make,
            model=vehicle.model,
            plate_number=vehicle.plate_number,
            expiry_date=expiry,
            days_to_expiry=days_until(expiry, now),
            risk_level=level,
        ))

    risky.sort(key=lambda v: v.expiry_date)

    return RiskSummary(
        total=len(risky),
        expired=sum(1 for v in risky if v.risk_level == RiskLevel.EXPIRED),
        critical=sum(1 for v in risky if v.risk_level == RiskLevel.CRITICAL),
        warning=sum(1 for v in risky if v.risk_level == RiskLevel.WARNING),
        info=sum(1 for v in risky if v.risk_level == RiskLevel.INFO),
        vehicles=risky,
    )
