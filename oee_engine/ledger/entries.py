"""Assumption ledger records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..assumptions import AnalysisWindow, ValueSource, format_duration


class ImpactLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


def serialize_value(value: Any) -> Any:
    """JSON-friendly rendering; durations become seconds plus a readable form."""
    if isinstance(value, timedelta):
        return {"seconds": value.total_seconds(), "formatted": format_duration(value)}
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass(frozen=True)
class AssumptionEntry:
    assumption_key: str
    description_key: str
    value: Any
    source: ValueSource
    impact: ImpactLevel
    timestamp: datetime
    related_assumptions: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assumption_key": self.assumption_key,
            "description_key": self.description_key,
            "value": serialize_value(self.value),
            "source": self.source.value,
            "impact": self.impact.value,
            "timestamp": self.timestamp.isoformat(),
            "related_assumptions": list(self.related_assumptions),
        }


@dataclass(frozen=True)
class ThresholdRecord:
    threshold_key: str
    value: Any
    unit_key: str
    rationale_key: str
    source: ValueSource = ValueSource.DEFAULT
    impact: ImpactLevel = ImpactLevel.MEDIUM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "threshold_key": self.threshold_key,
            "value": serialize_value(self.value),
            "unit_key": self.unit_key,
            "rationale_key": self.rationale_key,
            "source": self.source.value,
            "impact": self.impact.value,
        }


@dataclass(frozen=True)
class LedgerWarning:
    code: str
    message_key: str
    severity: ImpactLevel
    params: Dict[str, Any] = field(default_factory=dict)
    related_assumptions: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message_key": self.message_key,
            "severity": self.severity.value,
            "params": dict(self.params),
            "related_assumptions": list(self.related_assumptions),
        }


@dataclass(frozen=True)
class SourceStatistics:
    explicit_count: int = 0
    inferred_count: int = 0
    default_count: int = 0

    @classmethod
    def from_sources(cls, sources: List[ValueSource]) -> "SourceStatistics":
        return cls(
            explicit_count=sources.count(ValueSource.EXPLICIT),
            inferred_count=sources.count(ValueSource.INFERRED),
            default_count=sources.count(ValueSource.DEFAULT),
        )

    @property
    def total(self) -> int:
        return self.explicit_count + self.inferred_count + self.default_count

    def _pct(self, count: int) -> float:
        return count / self.total * 100.0 if self.total else 0.0

    @property
    def explicit_percentage(self) -> float:
        return self._pct(self.explicit_count)

    @property
    def inferred_percentage(self) -> float:
        return self._pct(self.inferred_count)

    @property
    def default_percentage(self) -> float:
        return self._pct(self.default_count)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "explicit_count": self.explicit_count,
            "inferred_count": self.inferred_count,
            "default_count": self.default_count,
            "explicit_percentage": round(self.explicit_percentage, 2),
            "inferred_percentage": round(self.inferred_percentage, 2),
            "default_percentage": round(self.default_percentage, 2),
        }


@dataclass(frozen=True)
class AssumptionLedger:
    """Audit trail of a calculation. Observational only."""
    assumptions: Tuple[AssumptionEntry, ...]
    thresholds: Tuple[ThresholdRecord, ...]
    warnings: Tuple[LedgerWarning, ...]
    source_statistics: SourceStatistics
    analysis_timestamp: datetime
    analysis_window: Optional[AnalysisWindow] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def critical_assumptions(self) -> List[AssumptionEntry]:
        return [a for a in self.assumptions if a.impact == ImpactLevel.CRITICAL]

    def high_severity_warnings(self) -> List[LedgerWarning]:
        return [w for w in self.warnings if w.severity in (ImpactLevel.CRITICAL, ImpactLevel.HIGH)]

    def default_values_used(self) -> List[AssumptionEntry]:
        return [a for a in self.assumptions if a.source == ValueSource.DEFAULT]

    def get(self, assumption_key: str) -> Optional[AssumptionEntry]:
        for entry in self.assumptions:
            if entry.assumption_key == assumption_key:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analysis_timestamp": self.analysis_timestamp.isoformat(),
            "analysis_window": self.analysis_window.to_dict() if self.analysis_window else None,
            "assumptions": [a.to_dict() for a in self.assumptions],
            "thresholds": [t.to_dict() for t in self.thresholds],
            "warnings": [w.to_dict() for w in self.warnings],
            "source_statistics": self.source_statistics.to_dict(),
            "metadata": dict(self.metadata),
        }
