"""
═══════════════════════════════════════════════════════════════════════════════
                    MULTI-MACHINE AGGREGATION & BOTTLENECKS
═══════════════════════════════════════════════════════════════════════════════

AGGREGATION METHODS
═══════════════════

    SIMPLE_AVERAGE       mean(OEE_i)
    PRODUCTION_WEIGHTED  Σ OEE_i × total_i / Σ total_i
    TIME_WEIGHTED        Σ OEE_i × planned_i / Σ planned_i      (default)
    MINIMUM              min(OEE_i)             tightly coupled serial line
    MULTIPLICATIVE       Π OEE_i                serial line, no buffers

Weighted methods fall back to the simple mean when all weights are zero.

BOTTLENECKS
═══════════

A machine is a bottleneck when it sits in the bottom 20 % by OEE and its OEE
is below the 0.70 floor. Throughput impact = (1 − OEE) × 100. The recommended
action targets the weakest of its three factors.

    system capacity   = min(3600 / ideal_cycle_i)        units/hour
    potential gain    = (best − worst) / worst × 100
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..config import Settings
from ..domain import Confidence
from .result import EngineResult

logger = logging.getLogger(__name__)


class AggregationMethod(str, Enum):
    SIMPLE_AVERAGE = "simple_average"
    PRODUCTION_WEIGHTED = "production_weighted"
    TIME_WEIGHTED = "time_weighted"
    MINIMUM = "minimum"
    MULTIPLICATIVE = "multiplicative"


@dataclass(frozen=True)
class MachineOeeData:
    machine_id: str
    machine_name: str
    result: EngineResult
    sequence_position: int
    is_bottleneck: bool = False

    @classmethod
    def from_result(cls, result: EngineResult, sequence_position: int) -> "MachineOeeData":
        return cls(
            machine_id=result.machine.machine_id,
            machine_name=result.machine.display_name,
            result=result,
            sequence_position=sequence_position,
        )

    @property
    def oee(self) -> float:
        return self.result.core.oee.value

    @property
    def total_units(self) -> float:
        return self.result.core.performance.formula_params.get("total_count", 0.0)

    @property
    def good_units(self) -> float:
        return self.result.core.quality.formula_params.get("good_count", 0.0)

    @property
    def planned_seconds(self) -> float:
        return self.result.core.availability.formula_params.get("planned_time_seconds", 0.0)

    @property
    def downtime_seconds(self) -> float:
        return self.result.core.availability.formula_params.get("downtime_seconds", 0.0)

    @property
    def ideal_cycle_seconds(self) -> float:
        return self.result.core.performance.formula_params.get("ideal_cycle_time_seconds", 0.0)


@dataclass(frozen=True)
class SystemMetrics:
    avg_availability: float
    avg_performance: float
    avg_quality: float
    total_planned_seconds: float
    total_downtime_seconds: float
    total_production: float
    total_good: float
    best_machine_id: Optional[str]
    worst_machine_id: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "avg_availability": round(self.avg_availability, 6),
            "avg_performance": round(self.avg_performance, 6),
            "avg_quality": round(self.avg_quality, 6),
            "total_planned_seconds": self.total_planned_seconds,
            "total_downtime_seconds": self.total_downtime_seconds,
            "total_production": self.total_production,
            "total_good": self.total_good,
            "best_machine_id": self.best_machine_id,
            "worst_machine_id": self.worst_machine_id,
        }


@dataclass(frozen=True)
class BottleneckInfo:
    machine_id: str
    oee: float
    throughput_impact: float
    limiting_factor: str
    recommended_action_key: str
    sequence_position: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "machine_id": self.machine_id,
            "sequence_position": self.sequence_position,
            "oee": round(self.oee, 6),
            "throughput_impact": round(self.throughput_impact, 4),
            "limiting_factor": self.limiting_factor,
            "recommended_action_key": self.recommended_action_key,
        }


@dataclass(frozen=True)
class BottleneckAnalysis:
    primary_bottlenecks: Tuple[BottleneckInfo, ...]
    system_capacity_limit: float        # units/hour
    potential_throughput_gain: float    # %

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary_bottlenecks": [b.to_dict() for b in self.primary_bottlenecks],
            "system_capacity_limit": round(self.system_capacity_limit, 4),
            "potential_throughput_gain": round(self.potential_throughput_gain, 4),
        }


@dataclass(frozen=True)
class SystemOeeAnalysis:
    system_oee: float
    aggregation_method: AggregationMethod
    machines: Tuple[MachineOeeData, ...]
    system_metrics: SystemMetrics
    bottleneck_analysis: BottleneckAnalysis
    confidence: Confidence

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([
            {
                "machine_id": m.machine_id,
                "machine_name": m.machine_name,
                "sequence_position": m.sequence_position,
                "availability": m.result.core.availability.value,
                "performance": m.result.core.performance.value,
                "quality": m.result.core.quality.value,
                "oee": m.oee,
                "is_bottleneck": m.is_bottleneck,
            }
            for m in self.machines
        ])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "system_oee": round(self.system_oee, 6),
            "aggregation_method": self.aggregation_method.value,
            "confidence": self.confidence.value,
            "system_metrics": self.system_metrics.to_dict(),
            "bottleneck_analysis": self.bottleneck_analysis.to_dict(),
            "machines": [
                {
                    "machine_id": m.machine_id,
                    "machine_name": m.machine_name,
                    "sequence_position": m.sequence_position,
                    "oee": round(m.oee, 6),
                    "is_bottleneck": m.is_bottleneck,
                }
                for m in self.machines
            ],
        }


# ════════════════════════════════════════════════════════════════════════════════
# STRATEGIES
# ════════════════════════════════════════════════════════════════════════════════

Strategy = Callable[[Sequence[MachineOeeData]], float]


def _oees(machines: Sequence[MachineOeeData]) -> np.ndarray:
    return np.array([m.oee for m in machines], dtype=float)


def _weighted(machines: Sequence[MachineOeeData], weights: Sequence[float]) -> float:
    weights = np.array(weights, dtype=float)
    if weights.sum() <= 0:
        return float(np.mean(_oees(machines)))
    return float(np.average(_oees(machines), weights=weights))


AGGREGATION_STRATEGIES: Mapping[AggregationMethod, Strategy] = MappingProxyType({
    AggregationMethod.SIMPLE_AVERAGE: lambda ms: float(np.mean(_oees(ms))),
    AggregationMethod.PRODUCTION_WEIGHTED: lambda ms: _weighted(ms, [m.total_units for m in ms]),
    AggregationMethod.TIME_WEIGHTED: lambda ms: _weighted(ms, [m.planned_seconds for m in ms]),
    AggregationMethod.MINIMUM: lambda ms: float(np.min(_oees(ms))),
    AggregationMethod.MULTIPLICATIVE: lambda ms: float(np.prod(_oees(ms))),
})

ACTION_BY_FACTOR = {
    "availability": "bottleneck.action.reduce_downtime",
    "performance": "bottleneck.action.improve_speed",
    "quality": "bottleneck.action.improve_quality",
}


def _limiting_factor(machine: MachineOeeData) -> str:
    core = machine.result.core
    factors = [
        ("availability", core.availability.value),
        ("performance", core.performance.value),
        ("quality", core.quality.value),
    ]
    return min(factors, key=lambda f: f[1])[0]


def identify_bottlenecks(
    machines: Sequence[MachineOeeData],
    oee_floor: Optional[float] = None,
    bottom_fraction: Optional[float] = None,
) -> List[BottleneckInfo]:
    settings = Settings.get_config()
    oee_floor = settings.bottleneck_floor if oee_floor is None else oee_floor
    bottom_fraction = settings.bottleneck_fraction if bottom_fraction is None else bottom_fraction
    if not machines:
        return []

    n_bottom = max(1, math.ceil(len(machines) * bottom_fraction))
    ranked = sorted(machines, key=lambda m: m.oee)
    bottlenecks = []
    for machine in ranked[:n_bottom]:
        if machine.oee >= oee_floor:
            continue
        factor = _limiting_factor(machine)
        bottlenecks.append(BottleneckInfo(
            machine_id=machine.machine_id,
            oee=machine.oee,
            throughput_impact=(1.0 - machine.oee) * 100.0,
            limiting_factor=factor,
            recommended_action_key=ACTION_BY_FACTOR[factor],
            sequence_position=machine.sequence_position,
        ))
    return bottlenecks


def _system_metrics(machines: Sequence[MachineOeeData]) -> SystemMetrics:
    if not machines:
        return SystemMetrics(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, None, None)
    oees = _oees(machines)
    return SystemMetrics(
        avg_availability=float(np.mean([m.result.core.availability.value for m in machines])),
        avg_performance=float(np.mean([m.result.core.performance.value for m in machines])),
        avg_quality=float(np.mean([m.result.core.quality.value for m in machines])),
        total_planned_seconds=float(sum(m.planned_seconds for m in machines)),
        total_downtime_seconds=float(sum(m.downtime_seconds for m in machines)),
        total_production=float(sum(m.total_units for m in machines)),
        total_good=float(sum(m.good_units for m in machines)),
        best_machine_id=machines[int(np.argmax(oees))].machine_id,
        worst_machine_id=machines[int(np.argmin(oees))].machine_id,
    )


def aggregate_system_oee(
    results: Sequence[EngineResult],
    method: AggregationMethod = AggregationMethod.TIME_WEIGHTED,
) -> SystemOeeAnalysis:
    """
    Roll per-machine results up into one system figure.

    Results are taken in line order; their index is the sequence position.
    """
    machines = [MachineOeeData.from_result(r, i) for i, r in enumerate(results)]
    if not machines:
        return SystemOeeAnalysis(
            system_oee=0.0,
            aggregation_method=method,
            machines=(),
            system_metrics=_system_metrics([]),
            bottleneck_analysis=BottleneckAnalysis((), 0.0, 0.0),
            confidence=Confidence.LOW,
        )

    system_oee = AGGREGATION_STRATEGIES[method](machines)
    bottlenecks = identify_bottlenecks(machines)
    flagged = {b.sequence_position for b in bottlenecks}
    machines = [replace(m, is_bottleneck=m.sequence_position in flagged) for m in machines]

    capacities = [3600.0 / m.ideal_cycle_seconds for m in machines if m.ideal_cycle_seconds > 0]
    oees = _oees(machines)
    best, worst = float(oees.max()), float(oees.min())
    gain = (best - worst) / worst * 100.0 if worst > 0 else 0.0

    analysis = SystemOeeAnalysis(
        system_oee=system_oee,
        aggregation_method=method,
        machines=tuple(machines),
        system_metrics=_system_metrics(machines),
        bottleneck_analysis=BottleneckAnalysis(
            primary_bottlenecks=tuple(bottlenecks),
            system_capacity_limit=min(capacities) if capacities else 0.0,
            potential_throughput_gain=gain,
        ),
        confidence=Confidence.weakest(*(m.result.core.oee.confidence for m in machines)),
    )
    logger.info(
        f"System OEE ({method.value}) over {len(machines)} machines: {system_oee:.4f}, "
        f"{len(bottlenecks)} bottleneck(s)"
    )
    return analysis


def compare_aggregation_methods(results: Sequence[EngineResult]) -> Dict[AggregationMethod, float]:
    return {
        method: aggregate_system_oee(results, method).system_oee
        for method in AGGREGATION_STRATEGIES
    }


def quick_system_analysis(results: Sequence[EngineResult]) -> SystemOeeAnalysis:
    return aggregate_system_oee(results, AggregationMethod.TIME_WEIGHTED)
