"""
Business logic services.

Each service handles one domain area.
"""

from services.organization_service import OrganizationService
from services.report_service import ReportService, get_report_service

__all__ = [
    "OrganizationService",
    "ReportService",
    "get_report_service",
]
