"""Cycle time model: ideal and (optionally) observed average cycle."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from .provenance import ProvenanceValue


@dataclass(frozen=True)
class CycleTimeModel:
    ideal_cycle_time: ProvenanceValue[timedelta]
    # May be below ideal for short bursts (warning, not error)
    average_cycle_time: Optional[ProvenanceValue[timedelta]] = None

    @property
    def ideal(self) -> timedelta:
        return self.ideal_cycle_time.value

    @property
    def ideal_seconds(self) -> float:
        return self.ideal.total_seconds()

    @property
    def average_seconds(self) -> Optional[float]:
        if self.average_cycle_time is None:
            return None
        return self.average_cycle_time.value.total_seconds()

    def theoretical_max_units(self, running_time: timedelta) -> int:
        """floor(running / ideal); 0 when the ideal cycle is not positive."""
        if self.ideal <= timedelta(0) or running_time <= timedelta(0):
            return 0
        return running_time // self.ideal

    @property
    def units_per_hour(self) -> float:
        if self.ideal_seconds <= 0:
            return 0.0
        return 3600.0 / self.ideal_seconds
