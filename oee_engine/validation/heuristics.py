"""Data-quality heuristics. Never fatal."""

from __future__ import annotations

from datetime import timedelta
from typing import List

from ..assumptions import ValueSource
from ..models import OeeInput
from .issues import ValidationIssue

HIGH_DEFAULT_SHARE = 0.30
SHORT_WINDOW = timedelta(hours=2)
LONG_WINDOW = timedelta(hours=24)


def check_scrap_rate(inp: OeeInput) -> List[ValidationIssue]:
    prod = inp.production
    if prod.total <= 0:
        return []
    rate = prod.scrap / prod.total
    threshold = inp.thresholds.high_scrap_rate_threshold
    if rate > threshold:
        return [ValidationIssue.warning(
            "HIGH_SCRAP_RATE",
            {"scrap_rate": rate, "threshold": threshold},
            "production.scrap_units",
        )]
    return []


def check_utilization(inp: OeeInput) -> List[ValidationIssue]:
    tm = inp.time_model
    if tm.planned_seconds <= 0:
        return []
    utilization = tm.running_seconds / tm.planned_seconds
    threshold = inp.thresholds.low_utilization_threshold
    if utilization < threshold:
        return [ValidationIssue.warning(
            "LOW_UTILIZATION",
            {"utilization": utilization, "threshold": threshold},
            "time_model.allocations",
        )]
    return []


def check_reason_codes(inp: OeeInput) -> List[ValidationIssue]:
    missing = sum(1 for r in inp.downtimes if r.reason is None or r.reason.depth == 0)
    if missing:
        return [ValidationIssue.info(
            "MISSING_REASON_CODES",
            {"missing": missing, "total_records": len(inp.downtimes)},
            "downtimes",
        )]
    return []


def check_source_distribution(inp: OeeInput) -> List[ValidationIssue]:
    sources = [value.source for _, value in inp.critical_inputs()]
    total = len(sources)
    explicit = sources.count(ValueSource.EXPLICIT)
    inferred = sources.count(ValueSource.INFERRED)
    defaults = sources.count(ValueSource.DEFAULT)

    issues = [ValidationIssue.info(
        "INPUT_SOURCE_DISTRIBUTION",
        {"explicit": explicit, "inferred": inferred, "default": defaults, "total": total},
    )]
    if total and defaults / total > HIGH_DEFAULT_SHARE:
        issues.append(ValidationIssue.warning(
            "HIGH_DEFAULT_USAGE",
            {
                "default_count": defaults,
                "total": total,
                "default_share": defaults / total,
                "fields": [name for name, value in inp.critical_inputs() if value.is_default],
            },
        ))
    return issues


def check_window_length(inp: OeeInput) -> List[ValidationIssue]:
    duration = inp.window.duration
    params = {"window_seconds": duration.total_seconds()}
    if duration < SHORT_WINDOW:
        return [ValidationIssue.info("SHORT_ANALYSIS_WINDOW", params, "window")]
    if duration > LONG_WINDOW:
        return [ValidationIssue.info("LONG_ANALYSIS_WINDOW", params, "window")]
    return []
