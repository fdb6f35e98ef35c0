"""
Report metric calculations.

Pure functions over already-fetched rows. Nothing in this package
touches the database or reads the wall clock.
"""

from metrics.time_range import (
    resolve_preset,
    resolve_custom_range,
    resolve_time_range,
    previous_window,
)
from metrics.revenue import calculate_revenue
from metrics.utilization import calculate_utilization
from metrics.trends import calculate_trends, build_bucket_scaffold, bucket_key
from metrics.targets import (
    calculate_targets,
    build_active_target_card,
    allocate_rental_revenue,
)
from metrics.risk import (
    calculate_expiry_risk,
    INSURANCE_EXPIRY_FIELD,
    TECHNICAL_VISIT_EXPIRY_FIELD,
)
from metrics.overdue import find_overdue_rentals
from metrics.top_vehicles import rank_top_vehicles
from metrics.maintenance import summarize_maintenance

__all__ = [
    "resolve_preset",
    "resolve_custom_range",
    "resolve_time_range",
    "previous_window",
    "calculate_revenue",
    "calculate_utilization",
    "calculate_trends",
    "build_bucket_scaffold",
    "bucket_key",
    "calculate_targets",
    "build_active_target_card",
    "allocate_rental_revenue",
    "calculate_expiry_risk",
    "INSURANCE_EXPIRY_FIELD",
    "TECHNICAL_VISIT_EXPIRY_FIELD",
    "find_overdue_rentals",
    "rank_top_vehicles",
    "summarize_maintenance",
]
