"""
═══════════════════════════════════════════════════════════════════════════════
                    TEMPORAL SCRAP - STARTUP VS. STEADY STATE
═══════════════════════════════════════════════════════════════════════════════

The startup window ends at the earliest candidate among the configured
strategies:

    fixed       window.start + fixed_duration
    percentage  window.start + percentage × window.duration
    dynamic     first event of the first full rolling window (size n) whose
                mean scrap per event is below dynamic_threshold

With no candidate the startup window spans the whole analysis window.
Scrap before the boundary is startup scrap. Time loss = count × ideal cycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from ..assumptions import AnalysisWindow, ScrapEvent, StartupWindowConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemporalScrapData:
    events: Tuple[ScrapEvent, ...]
    analysis_window: AnalysisWindow

    def __post_init__(self):
        object.__setattr__(
            self, "events", tuple(sorted(self.events, key=lambda e: e.timestamp))
        )

    def in_window(self) -> List[ScrapEvent]:
        return [e for e in self.events if self.analysis_window.contains(e.timestamp)]


@dataclass(frozen=True)
class TemporalScrapAnalysis:
    total_scrap: int
    startup_scrap: int
    steady_state_scrap: int
    startup_window_end: datetime
    startup_window_duration: timedelta
    startup_scrap_percentage: float     # 0-100
    startup_time_loss: timedelta
    steady_state_time_loss: timedelta
    detection_method: str               # fixed | percentage | dynamic | none
    events_outside_window: int = 0
    scrap_by_phase: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_scrap": self.total_scrap,
            "startup_scrap": self.startup_scrap,
            "steady_state_scrap": self.steady_state_scrap,
            "startup_window_end": self.startup_window_end.isoformat(),
            "startup_window_duration_seconds": self.startup_window_duration.total_seconds(),
            "startup_scrap_percentage": round(self.startup_scrap_percentage, 2),
            "startup_time_loss_seconds": self.startup_time_loss.total_seconds(),
            "steady_state_time_loss_seconds": self.steady_state_time_loss.total_seconds(),
            "detection_method": self.detection_method,
            "events_outside_window": self.events_outside_window,
            "scrap_by_phase": dict(self.scrap_by_phase),
        }


def detect_dynamic_startup_end(
    events: Sequence[ScrapEvent], threshold: float, window_size: int
) -> Optional[datetime]:
    """First timestamp of the first full rolling window with mean units < threshold."""
    if window_size < 1 or len(events) < window_size:
        return None
    units = pd.Series([e.units for e in events], dtype="float64")
    rolling_mean = units.rolling(window_size).mean()
    below = rolling_mean[rolling_mean < threshold]
    if below.empty:
        return None
    end_index = int(below.index[0])
    return events[end_index - window_size + 1].timestamp


def startup_window_end(
    data: TemporalScrapData, config: StartupWindowConfig
) -> Tuple[datetime, str]:
    window = data.analysis_window
    candidates: List[Tuple[datetime, str]] = []

    if config.fixed_duration is not None:
        candidates.append((window.start + config.fixed_duration, "fixed"))
    if config.percentage is not None:
        candidates.append((window.start + window.duration * config.percentage, "percentage"))
    if config.dynamic_threshold is not None:
        detected = detect_dynamic_startup_end(
            data.in_window(), config.dynamic_threshold, config.dynamic_window_size
        )
        if detected is not None:
            candidates.append((detected, "dynamic"))

    if not candidates:
        return window.end, "none"
    end, method = min(candidates, key=lambda c: c[0])
    return min(max(end, window.start), window.end), method


def analyze_temporal_scrap(
    data: TemporalScrapData,
    config: StartupWindowConfig,
    ideal_cycle_time: timedelta,
) -> TemporalScrapAnalysis:
    events = data.in_window()
    outside = len(data.events) - len(events)
    if outside:
        logger.warning(f"{outside} scrap event(s) outside the analysis window were ignored")

    boundary, method = startup_window_end(data, config)
    startup = sum(e.units for e in events if e.timestamp < boundary)
    total = sum(e.units for e in events)
    steady = total - startup

    logger.debug(f"Startup window ends at {boundary.isoformat()} ({method}); startup scrap {startup}/{total}")
    return TemporalScrapAnalysis(
        total_scrap=total,
        startup_scrap=startup,
        steady_state_scrap=steady,
        startup_window_end=boundary,
        startup_window_duration=boundary - data.analysis_window.start,
        startup_scrap_percentage=startup / total * 100.0 if total > 0 else 0.0,
        startup_time_loss=ideal_cycle_time * startup,
        steady_state_time_loss=ideal_cycle_time * steady,
        detection_method=method,
        events_outside_window=outside,
        scrap_by_phase={"startup": startup, "steady_state": steady},
    )


def quick_temporal_analysis(
    events: Sequence[ScrapEvent], window: AnalysisWindow, ideal_cycle_time: timedelta
) -> TemporalScrapAnalysis:
    """Default startup window: 30 minutes or 10 % of the window."""
    return analyze_temporal_scrap(
        TemporalScrapData(tuple(events), window), StartupWindowConfig.default(), ideal_cycle_time
    )


def calculate_scrap_trend(
    data: TemporalScrapData,
    bucket_size: timedelta,
    ideal_cycle_time: Optional[timedelta] = None,
) -> pd.DataFrame:
    """
    Scrap per time bucket across the window.

    Columns: bucket_start, scrap_units, cumulative_scrap and, when the ideal
    cycle is given, scrap_rate = scrap / theoretical units in the bucket.
    """
    if bucket_size <= timedelta(0):
        raise ValueError("bucket_size must be positive")

    window = data.analysis_window
    n_buckets = max(1, -(-window.duration // bucket_size))
    starts = [window.start + bucket_size * i for i in range(n_buckets)]

    events = data.in_window()
    df = pd.DataFrame({
        "offset": [e.timestamp - window.start for e in events],
        "units": [e.units for e in events],
    })
    per_bucket = pd.Series(0, index=range(n_buckets), dtype="int64")
    if not df.empty:
        bucket_index = (df["offset"] // bucket_size).clip(upper=n_buckets - 1).astype("int64")
        per_bucket = per_bucket.add(df.groupby(bucket_index)["units"].sum(), fill_value=0).astype("int64")

    trend = pd.DataFrame({
        "bucket_start": starts,
        "scrap_units": per_bucket.to_numpy(),
    })
    trend["cumulative_scrap"] = trend["scrap_units"].cumsum()
    if ideal_cycle_time is not None and ideal_cycle_time > timedelta(0):
        capacity = bucket_size / ideal_cycle_time
        trend["scrap_rate"] = trend["scrap_units"] / capacity
    return trend
