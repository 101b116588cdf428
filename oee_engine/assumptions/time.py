"""
Time model: planned production time and how it was spent.

    running_time   = Σ duration(allocations where state == RUNNING)
    allocated_time = Σ duration(all allocations)      (must be ≤ planned)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .provenance import ProvenanceValue, ValueSource


class MachineState(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"
    SETUP = "setup"
    STARVED = "starved"
    BLOCKED = "blocked"
    MAINTENANCE = "maintenance"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TimeAllocation:
    state: MachineState
    duration: timedelta
    source: ValueSource = ValueSource.EXPLICIT

    @property
    def seconds(self) -> float:
        return self.duration.total_seconds()

    @property
    def is_running(self) -> bool:
        return self.state == MachineState.RUNNING


def sum_durations(durations: Iterable[timedelta]) -> timedelta:
    return sum(durations, timedelta(0))


@dataclass(frozen=True)
class TimeModel:
    planned_production_time: ProvenanceValue[timedelta]
    allocations: Tuple[TimeAllocation, ...] = ()
    all_time: Optional[ProvenanceValue[timedelta]] = None

    def __post_init__(self):
        object.__setattr__(self, "allocations", tuple(self.allocations))

    @property
    def planned_time(self) -> timedelta:
        return self.planned_production_time.value

    @property
    def planned_seconds(self) -> float:
        return self.planned_time.total_seconds()

    @property
    def running_time(self) -> timedelta:
        return self.time_in_state(MachineState.RUNNING)

    @property
    def running_seconds(self) -> float:
        return self.running_time.total_seconds()

    @property
    def allocated_time(self) -> timedelta:
        return sum_durations(a.duration for a in self.allocations)

    @property
    def non_running_time(self) -> timedelta:
        return sum_durations(a.duration for a in self.allocations if not a.is_running)

    def time_in_state(self, state: MachineState) -> timedelta:
        return sum_durations(a.duration for a in self.allocations if a.state == state)

    def running_sources(self) -> List[ValueSource]:
        return [a.source for a in self.allocations if a.is_running]


def format_duration(duration: timedelta) -> str:
    """Render a duration as e.g. '7h 0m 0s'."""
    total = int(duration.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{sign}{hours}h {minutes}m {seconds}s"
