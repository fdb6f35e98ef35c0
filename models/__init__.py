"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.records import (
    RentalStatus,
    VehicleStatus,
    RentalRecord,
    VehicleRecord,
    TargetPeriod,
    MaintenanceLogRecord,
)
from models.reports import (
    Interval,
    Preset,
    RiskLevel,
    TimeWindow,
    ReportQuery,
    RevenueSummary,
    UtilizationSummary,
    BucketPoint,
    LeaderboardRow,
    OverdueRow,
    RiskVehicle,
    RiskSummary,
    MaintenanceSummary,
    TargetRow,
    ReportFilters,
    ReportSnapshot,
    ReportSummary,
)

__all__ = [
    # Base
    "BaseSchema",

    # Records
    "RentalStatus",
    "VehicleStatus",
    "RentalRecord",
    "VehicleRecord",
    "TargetPeriod",
    "MaintenanceLogRecord",

    # Reports
    "Interval",
    "Preset",
    "RiskLevel",
    "TimeWindow",
    "ReportQuery",
    "RevenueSummary",
    "UtilizationSummary",
    "BucketPoint",
    "LeaderboardRow",
    "OverdueRow",
    "RiskVehicle",
    "RiskSummary",
    "MaintenanceSummary",
    "TargetRow",
    "ReportFilters",
    "ReportSnapshot",
    "ReportSummary",
]
