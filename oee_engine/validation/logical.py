"""
Structural and physical consistency checks.

    (a) Σ allocations ≤ planned time
    (b) good + scrap ≤ total
    (c) ideal cycle > 0, average vs. ideal
    (d) total ≤ floor(running / ideal)
    (e) downtime records ≈ non-running allocations
"""

from __future__ import annotations

from datetime import timedelta
from typing import List

from ..assumptions import total_downtime
from ..models import OeeInput
from .issues import ValidationIssue

# Allocations covering less than this share of planned time are flagged
ALLOCATION_COVERAGE_FLOOR = 0.95
SLOW_CYCLE_RATIO = 1.5
DOWNTIME_TOLERANCE = timedelta(seconds=60)


def check_time_allocation(inp: OeeInput) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    tm = inp.time_model
    planned = tm.planned_time
    allocated = tm.allocated_time

    if allocated > planned:
        issues.append(ValidationIssue.fatal(
            "TIME_ALLOCATION_EXCEEDS_PLANNED",
            {
                "allocated_seconds": allocated.total_seconds(),
                "planned_seconds": planned.total_seconds(),
                "excess_seconds": (allocated - planned).total_seconds(),
            },
            "time_model.allocations",
        ))
    elif tm.allocations and planned > timedelta(0) and (
        allocated.total_seconds() < planned.total_seconds() * ALLOCATION_COVERAGE_FLOOR
    ):
        issues.append(ValidationIssue.warning(
            "TIME_ALLOCATION_GAP",
            {
                "allocated_seconds": allocated.total_seconds(),
                "planned_seconds": planned.total_seconds(),
                "gap_seconds": (planned - allocated).total_seconds(),
            },
            "time_model.allocations",
        ))

    if planned == timedelta(0):
        issues.append(ValidationIssue.warning(
            "ZERO_PLANNED_TIME", {}, "time_model.planned_production_time"
        ))

    if tm.all_time is not None and tm.all_time.value < planned:
        issues.append(ValidationIssue.warning(
            "ALL_TIME_LESS_THAN_PLANNED",
            {
                "all_time_seconds": tm.all_time.value.total_seconds(),
                "planned_seconds": planned.total_seconds(),
            },
            "time_model.all_time",
        ))
    return issues


def check_production_counts(inp: OeeInput) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    prod = inp.production

    if prod.good + prod.scrap > prod.total:
        issues.append(ValidationIssue.fatal(
            "PRODUCTION_COUNT_MISMATCH",
            {"total": prod.total, "good": prod.good, "scrap": prod.scrap},
            "production",
        ))
    if prod.reworked > prod.good:
        issues.append(ValidationIssue.warning(
            "REWORK_EXCEEDS_GOOD",
            {"reworked": prod.reworked, "good": prod.good},
            "production.reworked_units",
        ))
    if prod.total == 0:
        issues.append(ValidationIssue.info("ZERO_PRODUCTION", {}, "production.total_units"))
    return issues


def check_cycle_time(inp: OeeInput) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    ct = inp.cycle_time

    if ct.ideal <= timedelta(0):
        issues.append(ValidationIssue.fatal(
            "ZERO_CYCLE_TIME",
            {"ideal_cycle_time_seconds": ct.ideal_seconds},
            "cycle_time.ideal_cycle_time",
        ))
        return issues

    average = ct.average_seconds
    if average is not None:
        params = {"average_seconds": average, "ideal_seconds": ct.ideal_seconds}
        if average < ct.ideal_seconds:
            issues.append(ValidationIssue.warning(
                "CYCLE_TIME_BELOW_IDEAL", params, "cycle_time.average_cycle_time"
            ))
        elif average > ct.ideal_seconds * SLOW_CYCLE_RATIO:
            issues.append(ValidationIssue.warning(
                "CYCLE_TIME_SIGNIFICANTLY_HIGHER",
                {**params, "ratio": average / ct.ideal_seconds},
                "cycle_time.average_cycle_time",
            ))
    return issues


def check_capacity(inp: OeeInput) -> List[ValidationIssue]:
    """Producing more than running / ideal allows is physically impossible."""
    ct = inp.cycle_time
    if ct.ideal <= timedelta(0):
        return []
    max_units = ct.theoretical_max_units(inp.running_time)
    total = inp.production.total
    if total > max_units:
        return [ValidationIssue.fatal(
            "PRODUCTION_EXCEEDS_CAPACITY",
            {
                "total_units": total,
                "theoretical_max": max_units,
                "running_seconds": inp.time_model.running_seconds,
                "ideal_cycle_time_seconds": ct.ideal_seconds,
            },
            "production.total_units",
        )]
    return []


def check_downtime_reconciliation(inp: OeeInput) -> List[ValidationIssue]:
    if not inp.downtimes:
        return []
    recorded = total_downtime(inp.downtimes)
    allocated = inp.time_model.non_running_time
    if abs(recorded - allocated) > DOWNTIME_TOLERANCE:
        return [ValidationIssue.warning(
            "DOWNTIME_RECORD_MISMATCH",
            {
                "recorded_seconds": recorded.total_seconds(),
                "allocated_seconds": allocated.total_seconds(),
                "difference_seconds": (recorded - allocated).total_seconds(),
            },
            "downtimes",
        )]
    return []
