"""Metric formulas, loss decomposition and economic impact."""

from .confidence import Confidence
from .metrics import (
    CoreMetrics,
    MetricValue,
    calculate_availability,
    calculate_core_metrics,
    calculate_performance,
    calculate_quality,
)
from .extended import ExtendedMetrics, calculate_extended_metrics
from .loss_tree import LossTree, LossTreeNode, build_loss_tree
from .economics import EconomicAnalysis, EconomicImpact, calculate_economic_analysis

__all__ = [
    "Confidence",
    "CoreMetrics",
    "MetricValue",
    "calculate_availability",
    "calculate_core_metrics",
    "calculate_performance",
    "calculate_quality",
    "ExtendedMetrics",
    "calculate_extended_metrics",
    "LossTree",
    "LossTreeNode",
    "build_loss_tree",
    "EconomicAnalysis",
    "EconomicImpact",
    "calculate_economic_analysis",
]
