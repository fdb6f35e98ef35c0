"""
Maintenance cost aggregation.
"""

from decimal import Decimal
from typing import Iterable, Optional

from models.records import MaintenanceLogRecord
from models.reports import MaintenanceSummary, TimeWindow
from metrics.rounding import round_decimal, safe_divide


def summarize_maintenance(
    logs: Iterable[MaintenanceLogRecord],
    window: TimeWindow,
    vehicle_id: Optional[str] = None,
) -> MaintenanceSummary:
    """Sum, count and average cost of logs created inside the window."""
    total = Decimal("0")
    count = 0

    for log in logs:
        if vehicle_id and log.vehicle_id != vehicle_id:
            continue
        if not (window.from_date <= log.created_at <= window.to_date):
            continue
        total += log.cost or Decimal("0")
        count += 1

    return MaintenanceSummary(
        total_maintenance_cost=total,
        maintenance_count=count,
        avg_maintenance_cost=round_decimal(safe_divide(total, count)),
    )
