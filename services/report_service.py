"""
Report service: assembles the analytics summary.

Resolves the organization scope and the time window, fetches each row
set once, runs the pure metric functions over it and returns one
ReportSummary. Any failed fetch fails the whole request; a partially
populated snapshot is never returned.

Row sets:
  - window rentals + fleet: revenue, utilization, trends, overdue
  - previous-window rentals: prev_trends only
  - targets + their rentals: target attribution
  - active vehicles: insurance and technical inspection risk
  - leaderboard rentals: top vehicles
  - maintenance logs: maintenance cost, net profit
"""

from datetime import datetime
from typing import Iterable, List, Optional, Type, TypeVar

import structlog
from pydantic import BaseModel, ValidationError as PydanticValidationError

from config import get_supabase_client, settings
from exceptions import ConfigurationError, DatabaseError
from models.records import (
    CURRENT_RENTAL_STATUSES,
    MaintenanceLogRecord,
    RentalRecord,
    TargetPeriod,
    VehicleRecord,
    VehicleStatus,
)
from models.reports import (
    ReportFilters,
    ReportQuery,
    ReportSnapshot,
    ReportSummary,
    TargetRow,
    TimeWindow,
)
from metrics import (
    INSURANCE_EXPIRY_FIELD,
    TECHNICAL_VISIT_EXPIRY_FIELD,
    build_active_target_card,
    calculate_expiry_risk,
    calculate_revenue,
    calculate_targets,
    calculate_trends,
    calculate_utilization,
    find_overdue_rentals,
    previous_window,
    rank_top_vehicles,
    resolve_time_range,
    summarize_maintenance,
)
from services.organization_service import OrganizationService
from utils.date_utils import Clock, SystemClock

logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

RENTAL_COLUMNS = (
    "id, vehicle_id, customer_id, start_date, expected_end_date, returned_at, "
    "total_price, total_paid, status, is_open_contract, is_deleted"
)
VEHICLE_COLUMNS = (
    "id, make, model, plate_number, status, price_per_day, "
    "insurance_expiry_date, technical_visit_expiry_date"
)
TARGET_COLUMNS = "id, vehicle_id, start_date, end_date, target_rents, revenue_goal"
MAINTENANCE_COLUMNS = "id, vehicle_id, cost, created_at"


def _ts(value: datetime) -> str:
    """Timestamp literal for PostgREST filters."""
    return value.isoformat()


def _in_vehicle_scope(row_vehicle_id: str, vehicle_id: Optional[str]) -> bool:
    return vehicle_id is None or row_vehicle_id == vehicle_id


def rental_in_window(rental: RentalRecord, window: TimeWindow) -> bool:
    """
    Rental overlapping the window, or still open.

    Started on or before the window end, and either ends on or after the
    window start or is still running (active, reserved, open contract).
    """
    if rental.is_deleted or rental.start_date > window.to_date:
        return False
    if rental.is_open_contract or rental.status in CURRENT_RENTAL_STATUSES:
        return True
    if rental.returned_at is not None and rental.returned_at >= window.from_date:
        return True
    return rental.expected_end_date is not None and rental.expected_end_date >= window.from_date


class ReportService:
    """
    Reporting & metrics aggregation.

    All "now"-dependent metrics (risk, overdue, target status) read the
    injected clock once per request.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        organizations: Optional[OrganizationService] = None,
    ):
        self.db = get_supabase_client()
        self.clock = clock or SystemClock()
        self.organizations = organizations or OrganizationService()

    # ===================
    # SUMMARY
    # ===================

    def get_summary(self, query: ReportQuery) -> ReportSummary:
        """
        Build the full analytics snapshot for a request.

        Args:
            query: Preset or explicit range, optional interval and vehicle scope

        Returns:
            ReportSummary

        Raises:
            ConfigurationError: Neither preset nor from/to supplied
            ScopeResolutionError: Caller has no organization
            InvalidRangeError: Explicit range invalid
            DatabaseError: Any row fetch failed
        """
        if not query.preset and (query.from_date is None or query.to_date is None):
            raise ConfigurationError()

        org_id = self.organizations.resolve_org_id(query.user_id)
        now = self.clock.now()

        window = resolve_time_range(
            now,
            preset=query.preset,
            from_date=query.from_date,
            to_date=query.to_date,
            interval=query.interval,
        )
        prev_window = previous_window(window)
        vehicle_id = query.vehicle_id

        logger.info(
            "calculating_report_summary",
            org_id=org_id,
            preset=query.preset,
            from_date=window.from_date.isoformat(),
            to_date=window.to_date.isoformat(),
            interval=window.interval.value,
            vehicle_id=vehicle_id,
        )

        # === 1. FETCH SHARED ROW SETS ===

        rentals = self.fetch_window_rentals(org_id, window, vehicle_id)
        fleet = self.fetch_fleet(org_id, vehicle_id)
        prev_rentals = self.fetch_window_rentals(org_id, prev_window, vehicle_id)

        # === 2. SNAPSHOT METRICS ===

        revenue = calculate_revenue(rentals)
        utilization = calculate_utilization(rentals, window, len(fleet), revenue.revenue_billed)
        trends = calculate_trends(rentals, window)
        prev_trends = calculate_trends(prev_rentals, prev_window)
        overdue = find_overdue_rentals(rentals, now)

        # === 3. SCOPED METRICS ===

        targets = self.get_targets(org_id, window, now, fleet, vehicle_id)

        risk_vehicles = self.fetch_active_vehicles(org_id, vehicle_id)
        insurance = calculate_expiry_risk(
            risk_vehicles, INSURANCE_EXPIRY_FIELD, now, settings.risk_horizon_days
        )
        technical_inspection = calculate_expiry_risk(
            risk_vehicles, TECHNICAL_VISIT_EXPIRY_FIELD, now, settings.risk_horizon_days
        )

        leaderboard_rentals = self.fetch_leaderboard_rentals(org_id, window, vehicle_id)
        top_vehicles = rank_top_vehicles(
            leaderboard_rentals, fleet, window, now, limit=settings.top_vehicles_limit
        )

        maintenance_logs = self.fetch_maintenance_logs(org_id, window, vehicle_id)
        maintenance = summarize_maintenance(maintenance_logs, window, vehicle_id)

        # === 4. ASSEMBLE ===

        snapshot = ReportSnapshot(
            revenue_billed=revenue.revenue_billed,
            revenue_collected=revenue.revenue_collected,
            open_ar=revenue.open_ar,
            total_rents=len(rentals),
            fleet_size=utilization.fleet_size,
            period_days=utilization.period_days,
            rented_days=utilization.rented_days,
            adr=utilization.adr,
            rev_par=utilization.rev_par,
            utilization=utilization.utilization,
            total_maintenance_cost=maintenance.total_maintenance_cost,
            net_profit=revenue.revenue_collected - maintenance.total_maintenance_cost,
        )

        logger.info(
            "report_summary_calculated",
            org_id=org_id,
            total_rents=snapshot.total_rents,
            fleet_size=snapshot.fleet_size,
            revenue_billed=float(snapshot.revenue_billed),
            utilization=float(snapshot.utilization),
            targets=len(targets),
        )

        return ReportSummary(
            filters=ReportFilters(
                org_id=org_id,
                from_date=window.from_date,
                to_date=window.to_date,
                interval=window.interval,
                vehicle_id=vehicle_id,
            ),
            snapshot=snapshot,
            trends=trends,
            prev_trends=prev_trends,
            top_vehicles=top_vehicles,
            overdue=overdue,
            insurance=insurance,
            technical_inspection=technical_inspection,
            maintenance=maintenance,
            targets=targets,
        )

    # ===================
    # TARGETS
    # ===================

    def get_targets(
        self,
        org_id: str,
        window: TimeWindow,
        now: datetime,
        vehicles: Iterable[VehicleRecord],
        vehicle_id: Optional[str] = None,
    ) -> List[TargetRow]:
        """Targets intersecting the window with attributed actuals."""
        targets = self.fetch_targets(org_id, window, vehicle_id)
        if not targets:
            return []

        vehicle_ids = sorted({t.vehicle_id for t in targets})
        latest_end = max(t.end_date for t in targets)
        rentals = self.fetch_vehicle_rentals(org_id, vehicle_ids, latest_end)

        return calculate_targets(targets, rentals, vehicles, window, now)

    def get_active_target(self, user_id: Optional[str], vehicle_id: str) -> Optional[TargetRow]:
        """
        Active target card for one vehicle.

        Returns:
            TargetRow for the target running now, or None
        """
        org_id = self.organizations.resolve_org_id(user_id)
        now = self.clock.now()

        logger.info("getting_active_target", org_id=org_id, vehicle_id=vehicle_id)

        targets = self._fetch(
            "fetch_active_targets",
            TargetPeriod,
            self.db.table("vehicle_targets").select(TARGET_COLUMNS)
            .eq("org_id", org_id)
            .eq("vehicle_id", vehicle_id)
            .lte("start_date", _ts(now))
            .gte("end_date", _ts(now))
            .order("start_date"),
        )
        if not targets:
            return None

        rentals = self.fetch_vehicle_rentals(org_id, [vehicle_id], max(t.end_date for t in targets))
        vehicles = self.fetch_fleet(org_id, vehicle_id)

        return build_active_target_card(
            vehicle_id,
            targets,
            rentals,
            now,
            vehicle=next(iter(vehicles), None),
        )

    # ===================
    # ROW FETCHING
    # ===================

    def _fetch(self, operation: str, model: Type[RecordT], query) -> List[RecordT]:
        """Execute a query and validate its rows; any failure is a DatabaseError."""
        try:
            result = query.execute()
        except Exception as e:
            logger.error("report_fetch_failed", operation=operation, error=str(e))
            raise DatabaseError("select", str(e), details={"fetch": operation})

        try:
            return [model.model_validate(row) for row in result.data or []]
        except PydanticValidationError as e:
            logger.error("report_rows_invalid", operation=operation, error=str(e))
            raise DatabaseError("parse", str(e), details={"fetch": operation})

    def fetch_window_rentals(
        self,
        org_id: str,
        window: TimeWindow,
        vehicle_id: Optional[str] = None,
    ) -> List[RentalRecord]:
        """Non-deleted rentals overlapping the window or still open."""
        from_ts = _ts(window.from_date)
        query = (
            self.db.table("rentals").select(RENTAL_COLUMNS)
            .eq("org_id", org_id)
            .eq("is_deleted", False)
            .lte("start_date", _ts(window.to_date))
            .or_(
                f'returned_at.gte."{from_ts}",'
                f'expected_end_date.gte."{from_ts}",'
                "status.in.(active,reserved),"
                "is_open_contract.eq.true"
            )
        )
        if vehicle_id:
            query = query.eq("vehicle_id", vehicle_id)

        rentals = self._fetch("fetch_window_rentals", RentalRecord, query)
        return [
            r for r in rentals
            if rental_in_window(r, window) and _in_vehicle_scope(r.vehicle_id, vehicle_id)
        ]

    def fetch_fleet(self, org_id: str, vehicle_id: Optional[str] = None) -> List[VehicleRecord]:
        """Vehicles that are not deleted (the utilization denominator)."""
        query = (
            self.db.table("vehicles").select(VEHICLE_COLUMNS)
            .eq("org_id", org_id)
            .neq("status", VehicleStatus.DELETED.value)
        )
        if vehicle_id:
            query = query.eq("id", vehicle_id)

        vehicles = self._fetch("fetch_fleet", VehicleRecord, query)
        return [
            v for v in vehicles
            if v.status != VehicleStatus.DELETED and _in_vehicle_scope(v.id, vehicle_id)
        ]

    def fetch_active_vehicles(self, org_id: str, vehicle_id: Optional[str] = None) -> List[VehicleRecord]:
        """Active vehicles, the subjects of expiry risk."""
        query = (
            self.db.table("vehicles").select(VEHICLE_COLUMNS)
            .eq("org_id", org_id)
            .eq("status", VehicleStatus.ACTIVE.value)
        )
        if vehicle_id:
            query = query.eq("id", vehicle_id)

        vehicles = self._fetch("fetch_active_vehicles", VehicleRecord, query)
        return [
            v for v in vehicles
            if v.status == VehicleStatus.ACTIVE and _in_vehicle_scope(v.id, vehicle_id)
        ]

    def fetch_targets(
        self,
        org_id: str,
        window: TimeWindow,
        vehicle_id: Optional[str] = None,
    ) -> List[TargetPeriod]:
        """Target periods intersecting the window."""
        query = (
            self.db.table("vehicle_targets").select(TARGET_COLUMNS)
            .eq("org_id", org_id)
            .lte("start_date", _ts(window.to_date))
            .gte("end_date", _ts(window.from_date))
        )
        if vehicle_id:
            query = query.eq("vehicle_id", vehicle_id)

        targets = self._fetch("fetch_targets", TargetPeriod, query)
        return [t for t in targets if _in_vehicle_scope(t.vehicle_id, vehicle_id)]

    def fetch_vehicle_rentals(
        self,
        org_id: str,
        vehicle_ids: List[str],
        started_before: datetime,
    ) -> List[RentalRecord]:
        """Non-deleted rentals of the given vehicles started on or before a date."""
        query = (
            self.db.table("rentals").select(RENTAL_COLUMNS)
            .eq("org_id", org_id)
            .eq("is_deleted", False)
            .in_("vehicle_id", vehicle_ids)
            .lte("start_date", _ts(started_before))
        )
        rentals = self._fetch("fetch_vehicle_rentals", RentalRecord, query)
        wanted = set(vehicle_ids)
        return [
            r for r in rentals
            if not r.is_deleted and r.vehicle_id in wanted and r.start_date <= started_before
        ]

    def fetch_leaderboard_rentals(
        self,
        org_id: str,
        window: TimeWindow,
        vehicle_id: Optional[str] = None,
    ) -> List[RentalRecord]:
        """Non-deleted rentals started on or before the window end."""
        query = (
            self.db.table("rentals").select(RENTAL_COLUMNS)
            .eq("org_id", org_id)
            .eq("is_deleted", False)
            .lte("start_date", _ts(window.to_date))
        )
        if vehicle_id:
            query = query.eq("vehicle_id", vehicle_id)

        rentals = self._fetch("fetch_leaderboard_rentals", RentalRecord, query)
        return [
            r for r in rentals
            if not r.is_deleted
            and r.start_date <= window.to_date
            and _in_vehicle_scope(r.vehicle_id, vehicle_id)
        ]

    def fetch_maintenance_logs(
        self,
        org_id: str,
        window: TimeWindow,
        vehicle_id: Optional[str] = None,
    ) -> List[MaintenanceLogRecord]:
        """Maintenance logs created inside the window."""
        query = (
            self.db.table("maintenance_logs").select(MAINTENANCE_COLUMNS)
            .eq("org_id", org_id)
            .gte("created_at", _ts(window.from_date))
            .lte("created_at", _ts(window.to_date))
        )
        if vehicle_id:
            query = query.eq("vehicle_id", vehicle_id)

        return self._fetch("fetch_maintenance_logs", MaintenanceLogRecord, query)


# Singleton instance
_report_service: Optional[ReportService] = None


def get_report_service() -> ReportService:
    """Get or create ReportService singleton instance."""
    global _report_service
    if _report_service is None:
        _report_service = ReportService()
    return _report_service
