"""
Custom exception classes for the application.

Every error carries a stable code and maps onto one HTTP status.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "INVALID_RANGE")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# REPORT ERRORS
# ===================

class ConfigurationError(AppError):
    """Report request names neither a preset nor a complete from/to range."""

    def __init__(self, message: str = "Provide a preset or a from/to range"):
        super().__init__(
            code="REPORT_RANGE_REQUIRED",
            message=message,
            status_code=400,
            details={"accepted": ["preset", "from + to"]}
        )


class InvalidRangeError(ValidationError):
    """Explicit report range is reversed, empty or too long."""

    def __init__(self, reason: str, from_date: datetime, to_date: datetime, max_days: int):
        super().__init__(
            code="INVALID_RANGE",
            message=reason,
            details={
                "from": from_date.isoformat(),
                "to": to_date.isoformat(),
                "max_days": max_days,
            }
        )


class ScopeResolutionError(AppError):
    """No organization could be resolved for the caller."""

    def __init__(self, user_id: Optional[str]):
        super().__init__(
            code="ORGANIZATION_NOT_FOUND",
            message="No organization found for this user",
            status_code=403,
            details={"user_id": user_id}
        )
