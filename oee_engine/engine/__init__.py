"""
Engine entry points and post-processing analyses.

    calculate(input)                              → EngineResult
    calculate_with_economics(input, parameters)   → EngineResult

Both raise EngineError subclasses instead of returning partial results.
"""

from .errors import CalculationError, EngineError, InvalidInputError, ValidationFailedError
from .leverage import LeverageOpportunity, analyze_leverage
from .temporal_scrap import (
    TemporalScrapAnalysis,
    TemporalScrapData,
    analyze_temporal_scrap,
    calculate_scrap_trend,
    detect_dynamic_startup_end,
    quick_temporal_analysis,
)
from .result import EngineResult
from .oee import OeeCalculator, calculate, calculate_with_economics
from .sensitivity import (
    PERTURBATIONS,
    SensitivityAnalysis,
    SensitivityParameter,
    SensitivityResult,
    analyze_sensitivity,
    classify_impact,
    perturb,
    quick_sensitivity_analysis,
)
from .multi_machine import (
    AGGREGATION_STRATEGIES,
    AggregationMethod,
    BottleneckAnalysis,
    BottleneckInfo,
    MachineOeeData,
    SystemMetrics,
    SystemOeeAnalysis,
    aggregate_system_oee,
    compare_aggregation_methods,
    identify_bottlenecks,
    quick_system_analysis,
)

__all__ = [
    "CalculationError",
    "EngineError",
    "InvalidInputError",
    "ValidationFailedError",
    "LeverageOpportunity",
    "analyze_leverage",
    "TemporalScrapAnalysis",
    "TemporalScrapData",
    "analyze_temporal_scrap",
    "calculate_scrap_trend",
    "detect_dynamic_startup_end",
    "quick_temporal_analysis",
    "EngineResult",
    "OeeCalculator",
    "calculate",
    "calculate_with_economics",
    "PERTURBATIONS",
    "SensitivityAnalysis",
    "SensitivityParameter",
    "SensitivityResult",
    "analyze_sensitivity",
    "classify_impact",
    "perturb",
    "quick_sensitivity_analysis",
    "AGGREGATION_STRATEGIES",
    "AggregationMethod",
    "BottleneckAnalysis",
    "BottleneckInfo",
    "MachineOeeData",
    "SystemMetrics",
    "SystemOeeAnalysis",
    "aggregate_system_oee",
    "compare_aggregation_methods",
    "identify_bottlenecks",
    "quick_system_analysis",
]
