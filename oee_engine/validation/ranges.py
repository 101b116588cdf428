"""Range checks on raw input values (negative durations, counts, fractions)."""

from __future__ import annotations

from datetime import timedelta
from typing import List, Optional

from ..models import OeeInput
from .issues import ValidationIssue


def validate_non_negative_duration(value: timedelta, field_path: str) -> List[ValidationIssue]:
    if value < timedelta(0):
        return [ValidationIssue.fatal(
            "NEGATIVE_DURATION",
            {"value_seconds": value.total_seconds()},
            field_path,
        )]
    return []


def validate_non_negative_count(value: int, field_path: str) -> List[ValidationIssue]:
    if value < 0:
        return [ValidationIssue.fatal("NEGATIVE_COUNT", {"value": value}, field_path)]
    return []


def validate_percentage(value: float, field_path: str) -> List[ValidationIssue]:
    """Fractions must lie in [0, 1]."""
    if not 0.0 <= value <= 1.0:
        return [ValidationIssue.fatal("PERCENTAGE_OUT_OF_RANGE", {"value": value}, field_path)]
    return []


def validate_range(
    value: float,
    field_path: str,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> List[ValidationIssue]:
    if (minimum is not None and value < minimum) or (maximum is not None and value > maximum):
        return [ValidationIssue.fatal(
            "VALUE_OUT_OF_RANGE",
            {"value": value, "min": minimum, "max": maximum},
            field_path,
        )]
    return []


def check_input_ranges(inp: OeeInput) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    tm = inp.time_model

    issues += validate_non_negative_duration(tm.planned_time, "time_model.planned_production_time")
    if tm.all_time is not None:
        issues += validate_non_negative_duration(tm.all_time.value, "time_model.all_time")
    for idx, alloc in enumerate(tm.allocations):
        issues += validate_non_negative_duration(alloc.duration, f"time_model.allocations[{idx}].duration")

    prod = inp.production
    issues += validate_non_negative_count(prod.total, "production.total_units")
    issues += validate_non_negative_count(prod.good, "production.good_units")
    issues += validate_non_negative_count(prod.scrap, "production.scrap_units")
    issues += validate_non_negative_count(prod.reworked, "production.reworked_units")

    issues += validate_non_negative_duration(inp.cycle_time.ideal, "cycle_time.ideal_cycle_time")
    if inp.cycle_time.average_cycle_time is not None:
        issues += validate_non_negative_duration(
            inp.cycle_time.average_cycle_time.value, "cycle_time.average_cycle_time"
        )

    for idx, record in enumerate(inp.downtimes):
        issues += validate_non_negative_duration(record.duration, f"downtimes[{idx}].duration")
    for idx, event in enumerate(inp.scrap_events):
        issues += validate_non_negative_count(event.units, f"scrap_events[{idx}].units")

    th = inp.thresholds
    issues += validate_non_negative_duration(th.micro_stoppage_threshold, "thresholds.micro_stoppage_threshold")
    issues += validate_non_negative_duration(th.small_stop_threshold, "thresholds.small_stop_threshold")
    issues += validate_percentage(th.speed_loss_threshold, "thresholds.speed_loss_threshold")
    issues += validate_percentage(th.high_scrap_rate_threshold, "thresholds.high_scrap_rate_threshold")
    issues += validate_percentage(th.low_utilization_threshold, "thresholds.low_utilization_threshold")

    if inp.startup_window is not None:
        sw = inp.startup_window
        if sw.fixed_duration is not None:
            issues += validate_non_negative_duration(sw.fixed_duration, "startup_window.fixed_duration")
        if sw.percentage is not None:
            issues += validate_percentage(sw.percentage, "startup_window.percentage")
        issues += validate_range(sw.dynamic_window_size, "startup_window.dynamic_window_size", minimum=1)

    return issues
