"""Validation pipeline: issues as data, Fatal gates the calculation."""

from .issues import Severity, ValidationIssue, ValidationResult
from .ranges import (
    validate_non_negative_count,
    validate_non_negative_duration,
    validate_percentage,
    validate_range,
)
from .pipeline import STAGES, validate_input

__all__ = [
    "Severity",
    "ValidationIssue",
    "ValidationResult",
    "validate_non_negative_count",
    "validate_non_negative_duration",
    "validate_percentage",
    "validate_range",
    "STAGES",
    "validate_input",
]
