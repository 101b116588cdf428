"""
Tunable thresholds for loss classification and data-quality heuristics.

Preset        micro   small stop   speed loss   high scrap   low utilization
default        30 s      5 min        5 %          20 %           30 %
strict         15 s      3 min        2 %          10 %           50 %
lenient        60 s     10 min       10 %          30 %           20 %
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Dict


class ThresholdProfile(str, Enum):
    DEFAULT = "default"
    STRICT = "strict"
    LENIENT = "lenient"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ThresholdConfiguration:
    micro_stoppage_threshold: timedelta = timedelta(seconds=30)
    small_stop_threshold: timedelta = timedelta(minutes=5)
    speed_loss_threshold: float = 0.05          # fraction of running time
    high_scrap_rate_threshold: float = 0.20     # scrap / total
    low_utilization_threshold: float = 0.30     # running / planned
    profile: ThresholdProfile = ThresholdProfile.DEFAULT

    @classmethod
    def defaults(cls) -> "ThresholdConfiguration":
        return cls()

    @classmethod
    def strict(cls) -> "ThresholdConfiguration":
        return cls(
            micro_stoppage_threshold=timedelta(seconds=15),
            small_stop_threshold=timedelta(minutes=3),
            speed_loss_threshold=0.02,
            high_scrap_rate_threshold=0.10,
            low_utilization_threshold=0.50,
            profile=ThresholdProfile.STRICT,
        )

    @classmethod
    def lenient(cls) -> "ThresholdConfiguration":
        return cls(
            micro_stoppage_threshold=timedelta(seconds=60),
            small_stop_threshold=timedelta(minutes=10),
            speed_loss_threshold=0.10,
            high_scrap_rate_threshold=0.30,
            low_utilization_threshold=0.20,
            profile=ThresholdProfile.LENIENT,
        )

    @classmethod
    def for_profile(cls, profile: ThresholdProfile) -> "ThresholdConfiguration":
        if profile == ThresholdProfile.STRICT:
            return cls.strict()
        if profile == ThresholdProfile.LENIENT:
            return cls.lenient()
        return cls.defaults()

    @property
    def is_preset(self) -> bool:
        return self.profile != ThresholdProfile.CUSTOM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.value,
            "micro_stoppage_threshold_seconds": self.micro_stoppage_threshold.total_seconds(),
            "small_stop_threshold_seconds": self.small_stop_threshold.total_seconds(),
            "speed_loss_threshold": self.speed_loss_threshold,
            "high_scrap_rate_threshold": self.high_scrap_rate_threshold,
            "low_utilization_threshold": self.low_utilization_threshold,
        }
