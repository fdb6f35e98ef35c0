"""
Report schemas for the analytics summary endpoint.

Defines the resolved time window, the request shape and every block of
the assembled snapshot returned to the dashboard.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from models.base import BaseSchema
from utils.date_utils import ensure_aware


class Interval(str, Enum):
    """Trend bucketing granularity."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class Preset(str, Enum):
    """Named report ranges."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    LAST_24H = "last24h"
    LAST_7D = "last7d"
    LAST_30D = "last30d"
    LAST_90D = "last90d"
    THIS_YEAR = "thisYear"
    PREV_MONTH = "prevMonth"
    PREV_YEAR = "prevYear"


class RiskLevel(str, Enum):
    """Expiry risk bucket."""

    EXPIRED = "expired"    # Already past expiry
    CRITICAL = "critical"  # 3 days or less
    WARNING = "warning"    # 4 to 7 days
    INFO = "info"          # 8 to 30 days


class TimeWindow(BaseSchema):
    """Resolved report window. `to_date` is inclusive for day counts."""

    from_date: datetime
    to_date: datetime
    interval: Interval = Interval.DAY

    @field_validator("from_date", "to_date")
    @classmethod
    def _attach_timezone(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class ReportQuery(BaseSchema):
    """Summary request. Exactly one of preset or (from, to) is expected."""

    user_id: Optional[str] = None
    preset: Optional[str] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    interval: Optional[Interval] = None
    vehicle_id: Optional[str] = None


# ===================
# SNAPSHOT BLOCKS
# ===================

class RevenueSummary(BaseSchema):
    """Billed vs collected totals for a rental set."""

    revenue_billed: Decimal = Field(default=Decimal("0"))
    revenue_collected: Decimal = Field(default=Decimal("0"))
    open_ar: Decimal = Field(default=Decimal("0"), description="Outstanding receivable, never negative")


class UtilizationSummary(BaseSchema):
    """Rented-day share of fleet capacity plus rate metrics."""

    fleet_size: int = 0
    period_days: int = 0
    rented_days: int = 0
    available_car_days: int = 0
    utilization: Decimal = Field(default=Decimal("0"), description="Fraction between 0 and 1")
    adr: Decimal = Field(default=Decimal("0"), description="Average daily rate")
    rev_par: Decimal = Field(default=Decimal("0"), description="Revenue per available car-day")


class BucketPoint(BaseSchema):
    """One point of a trend series."""

    date: str = Field(..., description="Bucket key (YYYY-MM-DD or YYYY-MM)")
    revenue: Decimal = Field(default=Decimal("0"))
    rents: int = 0


class LeaderboardRow(BaseSchema):
    """Top vehicles by collected revenue."""

    vehicle_id: str
    make: Optional[str] = None
    model: Optional[str] = None
    plate_number: Optional[str] = None
    revenue: Decimal
    rents: int


class OverdueRow(BaseSchema):
    """Rental not returned past its expected end."""

    id: str
    vehicle_id: str
    customer_id: Optional[str] = None
    expected_end_date: datetime
    days_overdue: int


class RiskVehicle(BaseSchema):
    """A vehicle inside the expiry risk horizon."""

    vehicle_id: str
    make: Optional[str] = None
    model: Optional[str] = None
    plate_number: Optional[str] = None
    expiry_date: datetime
    days_to_expiry: int
    risk_level: RiskLevel


class RiskSummary(BaseSchema):
    """Expiry risk counts per bucket and the tagged vehicles."""

    total: int = 0
    expired: int = 0
    critical: int = 0
    warning: int = 0
    info: int = 0
    vehicles: List[RiskVehicle] = Field(default_factory=list)


class MaintenanceSummary(BaseSchema):
    """Maintenance cost aggregation."""

    total_maintenance_cost: Decimal = Field(default=Decimal("0"))
    maintenance_count: int = 0
    avg_maintenance_cost: Decimal = Field(default=Decimal("0"))


class TargetRow(BaseSchema):
    """A target period with its attributed actuals."""

    id: str
    vehicle_id: str
    make: Optional[str] = None
    model: Optional[str] = None
    plate_number: Optional[str] = None
    start_date: datetime
    end_date: datetime
    target_rents: int
    revenue_goal: Decimal
    actual_revenue: Decimal = Field(..., description="Proportionally attributed revenue, whole units")
    actual_rents: int
    revenue_progress: Decimal = Field(default=Decimal("0"), description="Percent of revenue goal")
    rent_progress: Decimal = Field(default=Decimal("0"), description="Percent of rental goal")
    days_remaining: int = 0
    is_expired: bool = False
    is_active: bool = False
    overlaps_other_target: bool = Field(
        default=False,
        description="Another target of the same vehicle overlaps this period"
    )


# ===================
# RESPONSE
# ===================

class ReportFilters(BaseSchema):
    """Echo of the resolved scope and window."""

    org_id: str
    from_date: datetime
    to_date: datetime
    interval: Interval
    vehicle_id: Optional[str] = None


class ReportSnapshot(BaseSchema):
    """Headline numbers for the window."""

    revenue_billed: Decimal
    revenue_collected: Decimal
    open_ar: Decimal
    total_rents: int
    fleet_size: int
    period_days: int
    rented_days: int
    adr: Decimal
    rev_par: Decimal
    utilization: Decimal
    total_maintenance_cost: Decimal
    net_profit: Decimal


class ReportSummary(BaseSchema):
    """Full analytics snapshot returned by the summary endpoint."""

    filters: ReportFilters
    snapshot: ReportSnapshot
    trends: List[BucketPoint]
    prev_trends: List[BucketPoint]
    top_vehicles: List[LeaderboardRow]
    overdue: List[OverdueRow]
    insurance: RiskSummary
    technical_inspection: RiskSummary
    maintenance: MaintenanceSummary
    targets: List[TargetRow]
