"""Analysis window and machine identification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class AnalysisWindow:
    """Start/end of the observed period. Duration never goes negative."""
    start: datetime
    end: datetime

    @classmethod
    def from_duration(cls, start: datetime, duration: timedelta) -> "AnalysisWindow":
        return cls(start=start, end=start + duration)

    @property
    def duration(self) -> timedelta:
        return max(self.end - self.start, timedelta(0))

    def contains(self, timestamp: datetime) -> bool:
        return self.start <= timestamp <= self.end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "duration_seconds": self.duration.total_seconds(),
        }


@dataclass(frozen=True)
class MachineContext:
    """Identifiers only. Never part of the arithmetic."""
    machine_id: str
    machine_name: Optional[str] = None
    line_id: Optional[str] = None
    product_id: Optional[str] = None
    shift_id: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.machine_name or self.machine_id

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "machine_id": self.machine_id,
            "machine_name": self.machine_name,
            "line_id": self.line_id,
            "product_id": self.product_id,
            "shift_id": self.shift_id,
        }
