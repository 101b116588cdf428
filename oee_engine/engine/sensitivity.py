"""
═══════════════════════════════════════════════════════════════════════════════
                    SENSITIVITY ANALYSIS - ONE PARAMETER AT A TIME
═══════════════════════════════════════════════════════════════════════════════

Each parameter is perturbed by v% on a copy of the input and the core metrics
are recomputed. A positive v is an improvement for downtime, cycle time, good
units and scrap units, and an increase for planned time and production count.

    planned_time      planned × (1 + v), allocations untouched
    downtime          non-running allocations and downtime records × (1 − v);
                      the removed time goes back to RUNNING, counts scale with
                      running time (capped at the new capacity)
    cycle_time        actual cycle = ideal × (1 − v); counts scale by 1 / (1 − v),
                      capped at floor(running / actual cycle)
    production_count  total × (1 + v), quality ratio kept
    good_units        moves floor(good × v) units from scrap to good
    scrap_units       moves floor(scrap × v) units from scrap to good

Counts are rescaled with the original good/scrap/rework ratios. Results are
classified by |ΔOEE|: > 5 pp CRITICAL, > 2 pp HIGH, > 0.5 pp MEDIUM, else LOW.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from ..assumptions import (
    MachineState,
    ProductionSummary,
    ProvenanceValue,
    TimeAllocation,
    ValueSource,
)
from ..config import Settings
from ..domain import CoreMetrics, calculate_core_metrics
from ..ledger import ImpactLevel
from ..models import OeeInput

logger = logging.getLogger(__name__)

ZERO = timedelta(0)


class SensitivityParameter(str, Enum):
    PLANNED_TIME = "sensitivity.planned_time"
    DOWNTIME = "sensitivity.downtime"
    CYCLE_TIME = "sensitivity.cycle_time"
    PRODUCTION_COUNT = "sensitivity.production_count"
    GOOD_UNITS = "sensitivity.good_units"
    SCRAP_UNITS = "sensitivity.scrap_units"


@dataclass(frozen=True)
class SensitivityResult:
    parameter: SensitivityParameter
    baseline_value: float
    varied_value: float
    variation_percent: float
    baseline_oee: float          # percentage points
    varied_oee: float            # percentage points
    oee_delta: float             # percentage points, signed
    impact_level: ImpactLevel
    metric_changes: Dict[str, float] = field(default_factory=dict)

    @property
    def parameter_key(self) -> str:
        return self.parameter.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameter_key": self.parameter_key,
            "baseline_value": self.baseline_value,
            "varied_value": self.varied_value,
            "variation_percent": self.variation_percent,
            "baseline_oee": round(self.baseline_oee, 4),
            "varied_oee": round(self.varied_oee, 4),
            "oee_delta": round(self.oee_delta, 4),
            "impact_level": self.impact_level.value,
            "metric_changes": {k: round(v, 4) for k, v in self.metric_changes.items()},
        }


@dataclass(frozen=True)
class SensitivityAnalysis:
    results: Tuple[SensitivityResult, ...]
    variation_percent: float
    most_sensitive_parameter: Optional[str] = None
    least_sensitive_parameter: Optional[str] = None

    def get(self, parameter: SensitivityParameter) -> Optional[SensitivityResult]:
        for result in self.results:
            if result.parameter == parameter:
                return result
        return None

    def to_dataframe(self) -> pd.DataFrame:
        rows = []
        for r in self.results:
            row = {
                "parameter_key": r.parameter_key,
                "baseline_value": r.baseline_value,
                "varied_value": r.varied_value,
                "oee_delta": r.oee_delta,
                "impact_level": r.impact_level.value,
            }
            row.update(r.metric_changes)
            rows.append(row)
        return pd.DataFrame(rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variation_percent": self.variation_percent,
            "most_sensitive_parameter": self.most_sensitive_parameter,
            "least_sensitive_parameter": self.least_sensitive_parameter,
            "results": [r.to_dict() for r in self.results],
        }


def classify_impact(oee_delta_points: float) -> ImpactLevel:
    magnitude = abs(oee_delta_points)
    if magnitude > 5.0:
        return ImpactLevel.CRITICAL
    if magnitude > 2.0:
        return ImpactLevel.HIGH
    if magnitude > 0.5:
        return ImpactLevel.MEDIUM
    return ImpactLevel.LOW


# ════════════════════════════════════════════════════════════════════════════════
# PERTURBATIONS
# ════════════════════════════════════════════════════════════════════════════════

Perturbation = Callable[[OeeInput, float], Tuple[OeeInput, float, float]]


def scale_production(
    production: ProductionSummary, factor: float, cap: Optional[int] = None
) -> ProductionSummary:
    """Scale total by `factor` (floored, optionally capped) keeping the count ratios."""
    total = production.total
    new_total = int(total * factor)
    if cap is not None:
        new_total = min(new_total, cap)
    new_total = max(new_total, 0)

    if total == 0:
        return replace(
            production,
            total_units=production.total_units.map(lambda _: new_total),
            good_units=production.good_units.map(lambda _: new_total),
        )

    def rescale(n: int) -> int:
        return n * new_total // total

    return ProductionSummary(
        total_units=production.total_units.map(lambda _: new_total),
        good_units=production.good_units.map(rescale),
        scrap_units=production.scrap_units.map(rescale),
        reworked_units=production.reworked_units.map(rescale),
    )


def _perturb_planned_time(inp: OeeInput, v: float) -> Tuple[OeeInput, float, float]:
    tm = inp.time_model
    planned = tm.planned_production_time.map(lambda d: d * (1.0 + v))
    varied = replace(inp, time_model=replace(tm, planned_production_time=planned))
    return varied, tm.planned_seconds, planned.value.total_seconds()


def _perturb_downtime(inp: OeeInput, v: float) -> Tuple[OeeInput, float, float]:
    tm = inp.time_model
    factor = 1.0 - v
    old_running = tm.running_time

    allocations: List[TimeAllocation] = []
    removed = ZERO
    for alloc in tm.allocations:
        if alloc.is_running:
            allocations.append(alloc)
            continue
        shrunk = max(alloc.duration * factor, ZERO)
        removed += alloc.duration - shrunk
        allocations.append(replace(alloc, duration=shrunk))

    # Time saved goes back to RUNNING
    running_index = next((i for i, a in enumerate(allocations) if a.is_running), None)
    if running_index is not None:
        target = allocations[running_index]
        allocations[running_index] = replace(target, duration=max(target.duration + removed, ZERO))
    elif removed > ZERO:
        allocations.append(TimeAllocation(MachineState.RUNNING, removed, ValueSource.INFERRED))

    new_tm = replace(tm, allocations=tuple(allocations))
    new_running = new_tm.running_time
    production = inp.production
    if old_running > ZERO:
        production = scale_production(
            production,
            new_running / old_running,
            inp.cycle_time.theoretical_max_units(new_running),
        )

    varied = replace(
        inp,
        time_model=new_tm,
        production=production,
        downtimes=tuple(replace(r, duration=max(r.duration * factor, ZERO)) for r in inp.downtimes),
    )
    return varied, tm.non_running_time.total_seconds(), new_tm.non_running_time.total_seconds()


def _perturb_cycle_time(inp: OeeInput, v: float) -> Tuple[OeeInput, float, float]:
    ct = inp.cycle_time
    actual = ct.ideal * (1.0 - v)
    if actual <= ZERO:
        raise ValueError("cycle time variation must stay below 100 %")
    running = inp.running_time
    cap = running // actual if running > ZERO else 0
    production = scale_production(inp.production, 1.0 / (1.0 - v), cap)
    varied = replace(
        inp,
        production=production,
        cycle_time=replace(ct, average_cycle_time=ProvenanceValue.inferred(actual)),
    )
    return varied, ct.ideal_seconds, actual.total_seconds()


def _perturb_production_count(inp: OeeInput, v: float) -> Tuple[OeeInput, float, float]:
    production = scale_production(inp.production, 1.0 + v)
    return replace(inp, production=production), float(inp.production.total), float(production.total)


def _move_scrap_to_good(production: ProductionSummary, moved: int) -> ProductionSummary:
    moved = max(-production.good, min(moved, production.scrap))
    return replace(
        production,
        good_units=production.good_units.map(lambda n: n + moved),
        scrap_units=production.scrap_units.map(lambda n: n - moved),
    )


def _perturb_good_units(inp: OeeInput, v: float) -> Tuple[OeeInput, float, float]:
    production = _move_scrap_to_good(inp.production, int(inp.production.good * v))
    return replace(inp, production=production), float(inp.production.good), float(production.good)


def _perturb_scrap_units(inp: OeeInput, v: float) -> Tuple[OeeInput, float, float]:
    production = _move_scrap_to_good(inp.production, int(inp.production.scrap * v))
    return replace(inp, production=production), float(inp.production.scrap), float(production.scrap)


PERTURBATIONS: Mapping[SensitivityParameter, Perturbation] = MappingProxyType({
    SensitivityParameter.PLANNED_TIME: _perturb_planned_time,
    SensitivityParameter.DOWNTIME: _perturb_downtime,
    SensitivityParameter.CYCLE_TIME: _perturb_cycle_time,
    SensitivityParameter.PRODUCTION_COUNT: _perturb_production_count,
    SensitivityParameter.GOOD_UNITS: _perturb_good_units,
    SensitivityParameter.SCRAP_UNITS: _perturb_scrap_units,
})


def perturb(inp: OeeInput, parameter: SensitivityParameter, variation_percent: float) -> OeeInput:
    """Perturbed copy of the input. The original is never touched."""
    varied, _, _ = PERTURBATIONS[parameter](inp, variation_percent / 100.0)
    return varied


# ════════════════════════════════════════════════════════════════════════════════
# ANALYSIS
# ════════════════════════════════════════════════════════════════════════════════

def _evaluate(
    inp: OeeInput,
    baseline: CoreMetrics,
    parameter: SensitivityParameter,
    variation_percent: float,
) -> SensitivityResult:
    varied_input, base_value, varied_value = PERTURBATIONS[parameter](inp, variation_percent / 100.0)
    varied = calculate_core_metrics(varied_input)
    delta = (varied.oee.value - baseline.oee.value) * 100.0
    return SensitivityResult(
        parameter=parameter,
        baseline_value=base_value,
        varied_value=varied_value,
        variation_percent=variation_percent,
        baseline_oee=baseline.oee.value * 100.0,
        varied_oee=varied.oee.value * 100.0,
        oee_delta=delta,
        impact_level=classify_impact(delta),
        metric_changes={
            "availability_delta": (varied.availability.value - baseline.availability.value) * 100.0,
            "performance_delta": (varied.performance.value - baseline.performance.value) * 100.0,
            "quality_delta": (varied.quality.value - baseline.quality.value) * 100.0,
        },
    )


def analyze_sensitivity(
    inp: OeeInput,
    variation_percent: Optional[float] = None,
    baseline: Optional[CoreMetrics] = None,
    parameters: Optional[Sequence[SensitivityParameter]] = None,
    max_workers: Optional[int] = None,
) -> SensitivityAnalysis:
    """
    Perturb each parameter independently and rank them by |ΔOEE|.

    Args:
        inp: validated input (e.g. the one passed to `calculate`)
        variation_percent: size of the perturbation, defaults to settings
        baseline: core metrics of `inp`, recomputed when omitted
        parameters: subset to test, defaults to all six in registry order
        max_workers: > 1 runs perturbations on a thread pool
    """
    settings = Settings.get_config()
    if variation_percent is None:
        variation_percent = settings.sensitivity_variation_percent
    if not -100.0 < variation_percent < 100.0:
        raise ValueError(f"variation_percent must be within (-100, 100), got {variation_percent}")
    if max_workers is None:
        max_workers = settings.sensitivity_workers

    baseline = baseline or calculate_core_metrics(inp)
    selected = list(parameters) if parameters is not None else list(PERTURBATIONS)

    if max_workers and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(_evaluate, inp, baseline, p, variation_percent) for p in selected
            ]
            results = [f.result() for f in futures]
    else:
        results = [_evaluate(inp, baseline, p, variation_percent) for p in selected]

    most = least = None
    if results:
        most = max(results, key=lambda r: abs(r.oee_delta)).parameter_key
        least = min(results, key=lambda r: abs(r.oee_delta)).parameter_key

    logger.debug(
        f"Sensitivity for {inp.machine.machine_id} at ±{variation_percent}%: "
        f"most={most} least={least}"
    )
    return SensitivityAnalysis(
        results=tuple(results),
        variation_percent=variation_percent,
        most_sensitive_parameter=most,
        least_sensitive_parameter=least,
    )


def quick_sensitivity_analysis(inp: OeeInput) -> SensitivityAnalysis:
    """All six parameters at the configured default variation."""
    return analyze_sensitivity(inp)
