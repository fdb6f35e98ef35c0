"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    DatabaseError,

    # Reports
    ConfigurationError,
    InvalidRangeError,
    ScopeResolutionError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "DatabaseError",

    # Reports
    "ConfigurationError",
    "InvalidRangeError",
    "ScopeResolutionError",
]
