"""
Builds the AssumptionLedger for one calculation.

Provenance tags are copied straight from the inputs, validation issues are
carried over with severity Fatal → HIGH, Warning → MEDIUM, Info → LOW.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..assumptions import AnalysisWindow, ProvenanceValue, ValueSource
from ..models import OeeInput
from ..validation import Severity, ValidationResult
from .entries import (
    AssumptionEntry,
    AssumptionLedger,
    ImpactLevel,
    LedgerWarning,
    SourceStatistics,
    ThresholdRecord,
)

logger = logging.getLogger(__name__)

SEVERITY_TO_IMPACT = {
    Severity.FATAL: ImpactLevel.HIGH,
    Severity.WARNING: ImpactLevel.MEDIUM,
    Severity.INFO: ImpactLevel.LOW,
}

# Which assumptions a validation issue is about
ISSUE_RELATIONS = {
    "TIME_ALLOCATION_EXCEEDS_PLANNED": ("assumption.planned_time",),
    "TIME_ALLOCATION_GAP": ("assumption.planned_time",),
    "ZERO_PLANNED_TIME": ("assumption.planned_time",),
    "ALL_TIME_LESS_THAN_PLANNED": ("assumption.all_time", "assumption.planned_time"),
    "PRODUCTION_COUNT_MISMATCH": ("assumption.total_units", "assumption.good_units", "assumption.scrap_units"),
    "PRODUCTION_EXCEEDS_CAPACITY": ("assumption.total_units", "assumption.ideal_cycle_time"),
    "CYCLE_TIME_BELOW_IDEAL": ("assumption.ideal_cycle_time", "assumption.average_cycle_time"),
    "CYCLE_TIME_SIGNIFICANTLY_HIGHER": ("assumption.ideal_cycle_time", "assumption.average_cycle_time"),
    "HIGH_SCRAP_RATE": ("assumption.scrap_units", "threshold.high_scrap_rate"),
    "LOW_UTILIZATION": ("assumption.planned_time", "threshold.low_utilization"),
}


class AssumptionTracker:
    """Mutable builder; `finish()` freezes it into an AssumptionLedger."""

    def __init__(self, timestamp: Optional[datetime] = None):
        self.timestamp = timestamp or datetime.now(timezone.utc)
        self._assumptions: List[AssumptionEntry] = []
        self._thresholds: List[ThresholdRecord] = []
        self._warnings: List[LedgerWarning] = []
        self._metadata: Dict[str, Any] = {}
        self._window: Optional[AnalysisWindow] = None

    def track(
        self,
        key: str,
        value: ProvenanceValue,
        impact: ImpactLevel,
        related: Sequence[str] = (),
    ) -> "AssumptionTracker":
        self._assumptions.append(AssumptionEntry(
            assumption_key=key,
            description_key=f"{key}_desc",
            value=value.value,
            source=value.source,
            impact=impact,
            timestamp=self.timestamp,
            related_assumptions=tuple(related),
        ))
        return self

    def track_threshold(
        self,
        key: str,
        value: Any,
        unit_key: str,
        source: ValueSource,
        impact: ImpactLevel = ImpactLevel.MEDIUM,
    ) -> "AssumptionTracker":
        self._thresholds.append(ThresholdRecord(
            threshold_key=key,
            value=value,
            unit_key=unit_key,
            rationale_key=f"{key}_rationale",
            source=source,
            impact=impact,
        ))
        return self

    def add_warning(self, warning: LedgerWarning) -> "AssumptionTracker":
        self._warnings.append(warning)
        return self

    def add_validation(self, validation: ValidationResult) -> "AssumptionTracker":
        for issue in validation.issues:
            self._warnings.append(LedgerWarning(
                code=issue.code,
                message_key=issue.message_key,
                severity=SEVERITY_TO_IMPACT[issue.severity],
                params=dict(issue.params),
                related_assumptions=ISSUE_RELATIONS.get(issue.code, ()),
            ))
        return self

    def set_window(self, window: AnalysisWindow) -> "AssumptionTracker":
        self._window = window
        return self

    def set_metadata(self, key: str, value: Any) -> "AssumptionTracker":
        if value is not None:
            self._metadata[key] = value
        return self

    def finish(self) -> AssumptionLedger:
        return AssumptionLedger(
            assumptions=tuple(self._assumptions),
            thresholds=tuple(self._thresholds),
            warnings=tuple(self._warnings),
            source_statistics=SourceStatistics.from_sources([a.source for a in self._assumptions]),
            analysis_timestamp=self.timestamp,
            analysis_window=self._window,
            metadata=dict(self._metadata),
        )


def build_ledger(
    inp: OeeInput,
    validation: ValidationResult,
    startup_window: Optional[ProvenanceValue] = None,
    timestamp: Optional[datetime] = None,
) -> AssumptionLedger:
    tracker = AssumptionTracker(timestamp)
    tm, prod, ct = inp.time_model, inp.production, inp.cycle_time

    tracker.track("assumption.planned_time", tm.planned_production_time, ImpactLevel.CRITICAL)
    if tm.all_time is not None:
        tracker.track("assumption.all_time", tm.all_time, ImpactLevel.HIGH,
                      related=("assumption.planned_time",))
    tracker.track("assumption.total_units", prod.total_units, ImpactLevel.CRITICAL)
    tracker.track("assumption.good_units", prod.good_units, ImpactLevel.CRITICAL,
                  related=("assumption.total_units",))
    tracker.track("assumption.scrap_units", prod.scrap_units, ImpactLevel.HIGH,
                  related=("assumption.total_units",))
    tracker.track("assumption.reworked_units", prod.reworked_units, ImpactLevel.MEDIUM,
                  related=("assumption.good_units",))
    tracker.track("assumption.ideal_cycle_time", ct.ideal_cycle_time, ImpactLevel.CRITICAL)
    if ct.average_cycle_time is not None:
        tracker.track("assumption.average_cycle_time", ct.average_cycle_time, ImpactLevel.MEDIUM,
                      related=("assumption.ideal_cycle_time",))
    if startup_window is not None:
        tracker.track("assumption.startup_window", startup_window, ImpactLevel.MEDIUM,
                      related=("assumption.scrap_units",))

    th = inp.thresholds
    th_source = ValueSource.DEFAULT if th.is_preset else ValueSource.EXPLICIT
    tracker.track_threshold("threshold.micro_stoppage", th.micro_stoppage_threshold, "units.seconds", th_source)
    tracker.track_threshold("threshold.small_stop", th.small_stop_threshold, "units.seconds", th_source)
    tracker.track_threshold("threshold.speed_loss", th.speed_loss_threshold, "units.percentage", th_source)
    # Heuristic thresholds only raise warnings
    tracker.track_threshold("threshold.high_scrap_rate", th.high_scrap_rate_threshold, "units.percentage",
                            th_source, ImpactLevel.LOW)
    tracker.track_threshold("threshold.low_utilization", th.low_utilization_threshold, "units.percentage",
                            th_source, ImpactLevel.LOW)

    tracker.add_validation(validation)
    tracker.set_window(inp.window)
    for key, value in inp.machine.to_dict().items():
        tracker.set_metadata(key, value)
    tracker.set_metadata("threshold_profile", th.profile.value)

    ledger = tracker.finish()
    logger.debug(
        f"Ledger for {inp.machine.machine_id}: {len(ledger.assumptions)} assumptions, "
        f"{len(ledger.warnings)} warnings, {ledger.source_statistics.default_count} defaults"
    )
    return ledger
