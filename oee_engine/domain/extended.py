"""
Extended metrics derived from core metrics and raw input.

    Utilization        = running / planned
    Loading factor     = running / all_time              (only with all_time)
    TEEP               = loading_factor × P × Q          (only with all_time)
    MTBF               = running / n_failures            (omitted when n_failures = 0)
    MTTR               = Σ failure downtime / n_failures (omitted when n_failures = 0)
    Scrap rate         = scrap / total
    Rework rate        = reworked / total
    Net operating time = total × ideal_cycle_time
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..assumptions import failure_records, total_downtime
from ..models import OeeInput
from .confidence import Confidence
from .metrics import CoreMetrics, MetricValue, availability_sources


@dataclass(frozen=True)
class ExtendedMetrics:
    utilization: MetricValue
    scrap_rate: MetricValue
    rework_rate: MetricValue
    net_operating_time: MetricValue
    failure_count: int = 0
    loading_factor: Optional[MetricValue] = None
    teep: Optional[MetricValue] = None
    mtbf: Optional[MetricValue] = None
    mttr: Optional[MetricValue] = None

    def to_dict(self) -> Dict[str, Any]:
        optional = {
            "loading_factor": self.loading_factor,
            "teep": self.teep,
            "mtbf": self.mtbf,
            "mttr": self.mttr,
        }
        data = {
            "utilization": self.utilization.to_dict(),
            "scrap_rate": self.scrap_rate.to_dict(),
            "rework_rate": self.rework_rate.to_dict(),
            "net_operating_time": self.net_operating_time.to_dict(),
            "failure_count": self.failure_count,
        }
        data.update({k: v.to_dict() for k, v in optional.items() if v is not None})
        return data


def _rate(numerator: int, total: int) -> float:
    return numerator / total if total > 0 else 0.0


def calculate_extended_metrics(inp: OeeInput, core: CoreMetrics) -> ExtendedMetrics:
    tm = inp.time_model
    prod = inp.production
    planned = tm.planned_seconds
    running = tm.running_seconds

    utilization = MetricValue(
        value=running / planned if planned > 0 else 0.0,
        confidence=Confidence.from_sources(availability_sources(inp)),
        name_key="metrics.utilization",
        unit_key="units.percentage",
        formula_key="formulas.utilization",
        formula_params={"operating_time_seconds": running, "planned_time_seconds": planned},
    )

    count_confidence = Confidence.from_sources([prod.scrap_units.source, prod.total_units.source])
    scrap_rate = MetricValue(
        value=_rate(prod.scrap, prod.total),
        confidence=count_confidence,
        name_key="metrics.scrap_rate",
        unit_key="units.percentage",
        formula_key="formulas.scrap_rate",
        formula_params={"scrap_count": float(prod.scrap), "total_count": float(prod.total)},
    )
    rework_rate = MetricValue(
        value=_rate(prod.reworked, prod.total),
        confidence=Confidence.from_sources([prod.reworked_units.source, prod.total_units.source]),
        name_key="metrics.rework_rate",
        unit_key="units.percentage",
        formula_key="formulas.rework_rate",
        formula_params={"rework_count": float(prod.reworked), "total_count": float(prod.total)},
    )
    net_operating_time = MetricValue(
        value=prod.total * inp.cycle_time.ideal_seconds,
        confidence=core.performance.confidence,
        name_key="metrics.net_operating_time",
        unit_key="units.seconds",
        formula_key="formulas.net_operating_time",
        formula_params={
            "total_count": float(prod.total),
            "ideal_cycle_time_seconds": inp.cycle_time.ideal_seconds,
        },
    )

    loading_factor = teep = None
    if tm.all_time is not None:
        all_time = tm.all_time.value.total_seconds()
        loading = running / all_time if all_time > 0 else 0.0
        all_time_confidence = Confidence.from_sources([tm.all_time.source] + tm.running_sources())
        loading_factor = MetricValue(
            value=loading,
            confidence=all_time_confidence,
            name_key="metrics.loading_factor",
            unit_key="units.percentage",
            formula_key="formulas.loading_factor",
            formula_params={"operating_time_seconds": running, "all_time_seconds": all_time},
        )
        teep = MetricValue(
            value=loading * core.performance.value * core.quality.value,
            confidence=Confidence.weakest(
                all_time_confidence, core.performance.confidence, core.quality.confidence
            ),
            name_key="metrics.teep",
            unit_key="units.percentage",
            formula_key="formulas.teep",
            formula_params={
                "operating_time_seconds": running,
                "all_time_seconds": all_time,
                "loading_factor": loading,
                "performance": core.performance.value,
                "quality": core.quality.value,
            },
        )

    failures = failure_records(inp.downtimes)
    mtbf = mttr = None
    if failures:
        n = len(failures)
        failure_seconds = total_downtime(failures).total_seconds()
        reliability_confidence = Confidence.from_sources(
            [r.source for r in failures] + tm.running_sources()
        )
        mtbf = MetricValue(
            value=running / n,
            confidence=reliability_confidence,
            name_key="metrics.mtbf",
            unit_key="units.seconds",
            formula_key="formulas.mtbf",
            formula_params={"operating_time_seconds": running, "failure_count": float(n)},
        )
        mttr = MetricValue(
            value=failure_seconds / n,
            confidence=Confidence.from_sources([r.source for r in failures]),
            name_key="metrics.mttr",
            unit_key="units.seconds",
            formula_key="formulas.mttr",
            formula_params={"failure_downtime_seconds": failure_seconds, "failure_count": float(n)},
        )

    return ExtendedMetrics(
        utilization=utilization,
        scrap_rate=scrap_rate,
        rework_rate=rework_rate,
        net_operating_time=net_operating_time,
        failure_count=len(failures),
        loading_factor=loading_factor,
        teep=teep,
        mtbf=mtbf,
        mttr=mttr,
    )
