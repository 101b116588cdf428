"""
Validation pipeline.

Stages run in order; a stage that produces a Fatal issue stops the pipeline,
since later checks assume the earlier invariants hold.

    1. ranges     → negative values, fractions outside [0, 1]
    2. logical    → allocation overflow, count mismatch, capacity, reconciliation
    3. heuristics → high scrap, low utilization, default usage, window length
"""

from __future__ import annotations

import logging
from typing import Callable, List, Tuple

from ..models import OeeInput
from . import heuristics, logical, ranges
from .issues import Severity, ValidationIssue, ValidationResult

logger = logging.getLogger(__name__)

Check = Callable[[OeeInput], List[ValidationIssue]]

STAGES: Tuple[Tuple[str, Tuple[Check, ...]], ...] = (
    ("ranges", (ranges.check_input_ranges,)),
    ("logical", (
        logical.check_time_allocation,
        logical.check_production_counts,
        logical.check_cycle_time,
        logical.check_capacity,
        logical.check_downtime_reconciliation,
    )),
    ("heuristics", (
        heuristics.check_scrap_rate,
        heuristics.check_utilization,
        heuristics.check_reason_codes,
        heuristics.check_source_distribution,
        heuristics.check_window_length,
    )),
)


def validate_input(inp: OeeInput) -> ValidationResult:
    issues: List[ValidationIssue] = []
    for stage_name, checks in STAGES:
        for check in checks:
            issues.extend(check(inp))
        if any(i.severity == Severity.FATAL for i in issues):
            logger.debug(f"Validation stopped at stage '{stage_name}' for {inp.machine.machine_id}")
            break
    return ValidationResult.of(issues)
