"""
Input assumptions: provenance-tagged values and the structured
observations the engine consumes.
"""

from .provenance import ProvenanceValue, ValueSource, weakest_source
from .context import AnalysisWindow, MachineContext
from .time import MachineState, TimeAllocation, TimeModel, format_duration, sum_durations
from .counts import CountModelBuilder, ProductionSummary
from .cycle import CycleTimeModel
from .downtime import (
    DowntimeRecord,
    ReasonCode,
    failure_records,
    small_stop_records,
    total_downtime,
)
from .thresholds import ThresholdConfiguration, ThresholdProfile
from .scrap import ScrapEvent, StartupWindowConfig

__all__ = [
    "ProvenanceValue",
    "ValueSource",
    "weakest_source",
    "AnalysisWindow",
    "MachineContext",
    "MachineState",
    "TimeAllocation",
    "TimeModel",
    "format_duration",
    "sum_durations",
    "CountModelBuilder",
    "ProductionSummary",
    "CycleTimeModel",
    "DowntimeRecord",
    "ReasonCode",
    "failure_records",
    "small_stop_records",
    "total_downtime",
    "ThresholdConfiguration",
    "ThresholdProfile",
    "ScrapEvent",
    "StartupWindowConfig",
]
