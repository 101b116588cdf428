"""
Time-stamped scrap events and startup-window configuration.

The startup window ends at the earliest of the configured strategies:
fixed duration from window start, a fraction of the window, or the first
rolling window whose average scrap per event drops below a threshold.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .downtime import ReasonCode


@dataclass(frozen=True)
class ScrapEvent:
    timestamp: datetime
    units: int
    reason: Optional[ReasonCode] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class StartupWindowConfig:
    fixed_duration: Optional[timedelta] = None
    percentage: Optional[float] = None          # fraction of the analysis window
    dynamic_threshold: Optional[float] = None   # avg units per event
    dynamic_window_size: int = 10

    @classmethod
    def fixed(cls, duration: timedelta) -> "StartupWindowConfig":
        return cls(fixed_duration=duration)

    @classmethod
    def of_percentage(cls, fraction: float) -> "StartupWindowConfig":
        return cls(percentage=fraction)

    @classmethod
    def dynamic(cls, threshold: float, window_size: int = 10) -> "StartupWindowConfig":
        return cls(dynamic_threshold=threshold, dynamic_window_size=window_size)

    @classmethod
    def default(cls) -> "StartupWindowConfig":
        """30 minutes or 10 % of the window, whichever ends first."""
        return cls(fixed_duration=timedelta(minutes=30), percentage=0.10)

    @property
    def has_strategy(self) -> bool:
        return (
            self.fixed_duration is not None
            or self.percentage is not None
            or self.dynamic_threshold is not None
        )
