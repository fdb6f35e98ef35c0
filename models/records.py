"""
Row models read by the reporting engine.

These mirror the columns fetched from Supabase. The engine never writes
them back; they are validated once after fetch and then handed to the
pure metric functions.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import Field, field_validator

from models.base import BaseSchema
from utils.date_utils import ensure_aware


class RentalStatus(str, Enum):
    """Rental contract lifecycle status."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELED = "canceled"
    RESERVED = "reserved"


class VehicleStatus(str, Enum):
    """Vehicle availability status."""

    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    SOLD = "sold"
    DELETED = "deleted"


# Statuses that keep a rental "current" even without a concrete end date
CURRENT_RENTAL_STATUSES = (RentalStatus.ACTIVE, RentalStatus.RESERVED)

# Statuses that close a rental for overdue purposes
CLOSED_RENTAL_STATUSES = (RentalStatus.COMPLETED, RentalStatus.CANCELED)


class RentalRecord(BaseSchema):
    """A rental contract row."""

    id: str
    vehicle_id: str
    customer_id: Optional[str] = None
    start_date: datetime
    expected_end_date: Optional[datetime] = None
    returned_at: Optional[datetime] = None
    total_price: Optional[Decimal] = None
    total_paid: Optional[Decimal] = None
    status: RentalStatus = RentalStatus.ACTIVE
    is_open_contract: bool = False
    is_deleted: bool = False

    @field_validator("start_date", "expected_end_date", "returned_at")
    @classmethod
    def _attach_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(value) if value is not None else None

    def effective_end(self, fallback: datetime) -> datetime:
        """Returned date, else expected end, else the metric's fallback."""
        return self.returned_at or self.expected_end_date or fallback


class VehicleRecord(BaseSchema):
    """A fleet vehicle row."""

    id: str
    make: Optional[str] = None
    model: Optional[str] = None
    plate_number: Optional[str] = None
    status: VehicleStatus = VehicleStatus.ACTIVE
    price_per_day: Optional[Decimal] = None
    insurance_expiry_date: Optional[Union[datetime, date]] = None
    technical_visit_expiry_date: Optional[Union[datetime, date]] = None


class TargetPeriod(BaseSchema):
    """Management-set revenue/rental goal for one vehicle over a period."""

    id: str
    vehicle_id: str
    start_date: datetime
    end_date: datetime
    target_rents: int = Field(default=0, ge=0)
    revenue_goal: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("start_date", "end_date")
    @classmethod
    def _attach_timezone(cls, value: datetime) -> datetime:
        return ensure_aware(value)


class MaintenanceLogRecord(BaseSchema):
    """A maintenance cost entry."""

    id: str
    vehicle_id: str
    cost: Optional[Decimal] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _attach_timezone(cls, value: datetime) -> datetime:
        return ensure_aware(value)
