"""Assumption ledger: provenance, thresholds and warnings behind a result."""

from .entries import (
    AssumptionEntry,
    AssumptionLedger,
    ImpactLevel,
    LedgerWarning,
    SourceStatistics,
    ThresholdRecord,
)
from .tracking import SEVERITY_TO_IMPACT, AssumptionTracker, build_ledger

__all__ = [
    "AssumptionEntry",
    "AssumptionLedger",
    "ImpactLevel",
    "LedgerWarning",
    "SourceStatistics",
    "ThresholdRecord",
    "SEVERITY_TO_IMPACT",
    "AssumptionTracker",
    "build_ledger",
]
