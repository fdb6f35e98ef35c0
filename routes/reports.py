"""
Reports API routes.

Analytics summary for the fleet dashboard and per-vehicle target cards.
"""

from datetime import datetime
from fastapi import APIRouter, Header, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.reports import Interval, ReportQuery, ReportSummary, TargetRow
from services.report_service import get_report_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# SUMMARY
# ===================

@router.get("/summary", response_model=ReportSummary)
async def get_report_summary(
    preset: Optional[str] = Query(None, description="Named range, e.g. today, last30d, thisYear"),
    from_date: Optional[datetime] = Query(None, alias="from", description="Range start (with 'to')"),
    to_date: Optional[datetime] = Query(None, alias="to", description="Range end, inclusive"),
    interval: Optional[Interval] = Query(None, description="Trend granularity override"),
    vehicle_id: Optional[str] = Query(None, description="Scope the report to one vehicle"),
    user_id: Optional[str] = Header(None, alias="X-User-Id", description="Caller identity"),
):
    """
    Get the analytics snapshot for a time window.

    Provide either a preset or a from/to pair. Returns revenue, utilization,
    trend series (current and previous window), top vehicles, overdue
    rentals, insurance and technical inspection risk, maintenance cost
    and target attribution.

    Examples:
        /api/reports/summary?preset=last30d
        /api/reports/summary?from=2025-01-01T00:00:00&to=2025-01-31T23:59:59&interval=week
        /api/reports/summary?preset=last7d&vehicle_id=car-123
    """
    try:
        service = get_report_service()
        return service.get_summary(ReportQuery(
            user_id=user_id,
            preset=preset,
            from_date=from_date,
            to_date=to_date,
            interval=interval,
            vehicle_id=vehicle_id,
        ))
    except Exception as e:
        return handle_error(e)


# ===================
# VEHICLE TARGETS
# ===================

@router.get("/vehicles/{vehicle_id}/active-target", response_model=Optional[TargetRow])
async def get_active_target(
    vehicle_id: str,
    user_id: Optional[str] = Header(None, alias="X-User-Id", description="Caller identity"),
):
    """
    Get the target currently running for a vehicle.

    Returns the target with attributed revenue, rental count, progress
    percentages and days remaining, or null when no target is running.
    """
    try:
        service = get_report_service()
        return service.get_active_target(user_id, vehicle_id)
    except Exception as e:
        return handle_error(e)
