"""Downtime records with hierarchical reason codes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from .provenance import ValueSource
from .time import sum_durations


@dataclass(frozen=True)
class ReasonCode:
    """Ordered category path, e.g. ("Mechanical", "Bearing Failure")."""
    path: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "path", tuple(self.path))

    @classmethod
    def parse(cls, text: str, separator: str = ">") -> "ReasonCode":
        return cls(tuple(part.strip() for part in text.split(separator) if part.strip()))

    @property
    def category(self) -> Optional[str]:
        return self.path[0] if self.path else None

    @property
    def leaf(self) -> Optional[str]:
        return self.path[-1] if self.path else None

    @property
    def depth(self) -> int:
        return len(self.path)

    def __str__(self) -> str:
        return " > ".join(self.path)


@dataclass(frozen=True)
class DowntimeRecord:
    duration: timedelta
    is_failure: bool = False
    reason: Optional[ReasonCode] = None
    source: ValueSource = ValueSource.EXPLICIT

    @property
    def seconds(self) -> float:
        return self.duration.total_seconds()


def total_downtime(records: Iterable[DowntimeRecord]) -> timedelta:
    return sum_durations(r.duration for r in records)


def failure_records(records: Sequence[DowntimeRecord]) -> List[DowntimeRecord]:
    return [r for r in records if r.is_failure]


def small_stop_records(
    records: Sequence[DowntimeRecord], small_stop_threshold: timedelta
) -> List[DowntimeRecord]:
    """Non-failure stops shorter than the small-stop threshold."""
    return [r for r in records if not r.is_failure and r.duration < small_stop_threshold]
