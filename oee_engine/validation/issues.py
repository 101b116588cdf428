"""Validation issue and result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


class Severity(str, Enum):
    FATAL = "fatal"       # aborts the calculation
    WARNING = "warning"   # surfaced, does not block
    INFO = "info"


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    severity: Severity
    message_key: str
    params: Dict[str, Any] = field(default_factory=dict)
    field_path: Optional[str] = None

    @classmethod
    def fatal(cls, code: str, params: Optional[Dict[str, Any]] = None,
              field_path: Optional[str] = None) -> "ValidationIssue":
        return cls(code, Severity.FATAL, f"validation.error.{code.lower()}", params or {}, field_path)

    @classmethod
    def warning(cls, code: str, params: Optional[Dict[str, Any]] = None,
                field_path: Optional[str] = None) -> "ValidationIssue":
        return cls(code, Severity.WARNING, f"validation.warning.{code.lower()}", params or {}, field_path)

    @classmethod
    def info(cls, code: str, params: Optional[Dict[str, Any]] = None,
             field_path: Optional[str] = None) -> "ValidationIssue":
        return cls(code, Severity.INFO, f"validation.info.{code.lower()}", params or {}, field_path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message_key": self.message_key,
            "params": dict(self.params),
            "field_path": self.field_path,
        }


@dataclass(frozen=True)
class ValidationResult:
    issues: Tuple[ValidationIssue, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "issues", tuple(self.issues))

    @classmethod
    def of(cls, issues: Iterable[ValidationIssue]) -> "ValidationResult":
        return cls(tuple(issues))

    def has_fatal_errors(self) -> bool:
        return any(i.severity == Severity.FATAL for i in self.issues)

    def has_warnings(self) -> bool:
        return any(i.severity == Severity.WARNING for i in self.issues)

    @property
    def is_valid(self) -> bool:
        return not self.has_fatal_errors()

    def by_severity(self, severity: Severity) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == severity]

    def fatal_errors(self) -> List[ValidationIssue]:
        return self.by_severity(Severity.FATAL)

    def warnings(self) -> List[ValidationIssue]:
        return self.by_severity(Severity.WARNING)

    def infos(self) -> List[ValidationIssue]:
        return self.by_severity(Severity.INFO)

    def codes(self) -> List[str]:
        return [i.code for i in self.issues]

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(self.issues + other.issues)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "fatal_count": len(self.fatal_errors()),
            "warning_count": len(self.warnings()),
            "info_count": len(self.infos()),
            "issues": [i.to_dict() for i in self.issues],
        }
