"""Form validation that reports issues without fixing them."""

from estate_office.validation.validator import (
    RecordValidator,
    ValidationIssue,
    ValidationResult,
    format_cnic,
    format_pakistani_phone,
)

__all__ = [
    "RecordValidator",
    "ValidationIssue",
    "ValidationResult",
    "format_cnic",
    "format_pakistani_phone",
]
