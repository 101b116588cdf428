"""
═══════════════════════════════════════════════════════════════════════════════
                    OEE ENGINE - EQUIPMENT EFFECTIVENESS ANALYTICS
═══════════════════════════════════════════════════════════════════════════════

Pure, synchronous transformation from one immutable input to one immutable
result:

    OeeInput ──► validate ──► core metrics (A, P, Q, OEE)
                         ├──► extended metrics (TEEP, MTBF, MTTR, rates)
                         ├──► loss tree (six big losses)
                         └──► assumption ledger (provenance, thresholds, warnings)

Post-processing passes, invoked selectively:
    analyze_sensitivity      one-parameter-at-a-time what-if
    aggregate_system_oee     multi-machine roll-up and bottlenecks
    analyze_temporal_scrap   startup vs. steady-state scrap

Usage:
    from oee_engine import calculate
    result = calculate(oee_input)
    result.core.oee.value
"""

from .assumptions import (
    AnalysisWindow,
    CountModelBuilder,
    CycleTimeModel,
    DowntimeRecord,
    MachineContext,
    MachineState,
    ProductionSummary,
    ProvenanceValue,
    ReasonCode,
    ScrapEvent,
    StartupWindowConfig,
    ThresholdConfiguration,
    ThresholdProfile,
    TimeAllocation,
    TimeModel,
    ValueSource,
)
from .config import EngineSettings, Settings, configure_logging
from .models import EconomicParameters, OeeInput
from .validation import Severity, ValidationIssue, ValidationResult, validate_input
from .domain import (
    Confidence,
    CoreMetrics,
    EconomicAnalysis,
    EconomicImpact,
    ExtendedMetrics,
    LossTree,
    LossTreeNode,
    MetricValue,
)
from .ledger import AssumptionLedger, ImpactLevel
from .engine import (
    AggregationMethod,
    CalculationError,
    EngineError,
    EngineResult,
    InvalidInputError,
    SensitivityAnalysis,
    SensitivityParameter,
    SystemOeeAnalysis,
    TemporalScrapAnalysis,
    ValidationFailedError,
    aggregate_system_oee,
    analyze_sensitivity,
    analyze_temporal_scrap,
    calculate,
    calculate_with_economics,
    compare_aggregation_methods,
    quick_sensitivity_analysis,
    quick_system_analysis,
    quick_temporal_analysis,
)

__version__ = "1.0.0"

__all__ = [
    "AnalysisWindow",
    "CountModelBuilder",
    "CycleTimeModel",
    "DowntimeRecord",
    "MachineContext",
    "MachineState",
    "ProductionSummary",
    "ProvenanceValue",
    "ReasonCode",
    "ScrapEvent",
    "StartupWindowConfig",
    "ThresholdConfiguration",
    "ThresholdProfile",
    "TimeAllocation",
    "TimeModel",
    "ValueSource",
    "EngineSettings",
    "Settings",
    "configure_logging",
    "EconomicParameters",
    "OeeInput",
    "Severity",
    "ValidationIssue",
    "ValidationResult",
    "validate_input",
    "Confidence",
    "CoreMetrics",
    "EconomicAnalysis",
    "EconomicImpact",
    "ExtendedMetrics",
    "LossTree",
    "LossTreeNode",
    "MetricValue",
    "AssumptionLedger",
    "ImpactLevel",
    "AggregationMethod",
    "CalculationError",
    "EngineError",
    "EngineResult",
    "InvalidInputError",
    "SensitivityAnalysis",
    "SensitivityParameter",
    "SystemOeeAnalysis",
    "TemporalScrapAnalysis",
    "ValidationFailedError",
    "aggregate_system_oee",
    "analyze_sensitivity",
    "analyze_temporal_scrap",
    "calculate",
    "calculate_with_economics",
    "compare_aggregation_methods",
    "quick_sensitivity_analysis",
    "quick_system_analysis",
    "quick_temporal_analysis",
]
