"""
Validation results, sample grouping and configuration previews.
"""

from .models import (
    ValidationError,
    ValidationErrorType,
    ValidationResult,
    ValidationWarning,
    ValidationWarningType,
)

__all__ = [
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
    "ValidationWarning",
    "ValidationWarningType",
]
