"""
═══════════════════════════════════════════════════════════════════════════════
                    CORE METRICS - AVAILABILITY · PERFORMANCE · QUALITY · OEE
═══════════════════════════════════════════════════════════════════════════════

1. AVAILABILITY
   ────────────
   A = running_time / planned_production_time
   A = 0 when planned_production_time = 0

2. PERFORMANCE
   ───────────
   P = (total_units × ideal_cycle_time) / running_time
   P = 0 when running_time = 0
   Not clamped: cycles faster than ideal give P > 1.0.

3. QUALITY
   ───────
   Q = good_units / total_units
   Q = 1.0 when total_units = 0

4. OEE
   ───
   OEE = A × P × Q   (exact product of the three values above)

Confidence per factor comes from the provenance of its own inputs;
OEE takes the weakest of the three.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..assumptions import ValueSource
from ..models import OeeInput
from .confidence import Confidence


@dataclass(frozen=True)
class MetricValue:
    value: float
    confidence: Confidence
    name_key: str
    unit_key: str
    formula_key: str
    formula_params: Dict[str, float] = field(default_factory=dict)

    @property
    def percentage(self) -> float:
        return self.value * 100.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": round(self.value, 6),
            "confidence": self.confidence.value,
            "name_key": self.name_key,
            "unit_key": self.unit_key,
            "formula_key": self.formula_key,
            "formula_params": {k: round(v, 6) for k, v in self.formula_params.items()},
        }


@dataclass(frozen=True)
class CoreMetrics:
    availability: MetricValue
    performance: MetricValue
    quality: MetricValue
    oee: MetricValue

    def to_dict(self) -> Dict[str, Any]:
        return {
            "availability": self.availability.to_dict(),
            "performance": self.performance.to_dict(),
            "quality": self.quality.to_dict(),
            "oee": self.oee.to_dict(),
        }


def availability_sources(inp: OeeInput) -> List[ValueSource]:
    tm = inp.time_model
    return [tm.planned_production_time.source] + tm.running_sources()


def performance_sources(inp: OeeInput) -> List[ValueSource]:
    return [
        inp.cycle_time.ideal_cycle_time.source,
        inp.production.total_units.source,
    ] + inp.time_model.running_sources()


def quality_sources(inp: OeeInput) -> List[ValueSource]:
    return [inp.production.good_units.source, inp.production.total_units.source]


def calculate_availability(inp: OeeInput) -> MetricValue:
    planned = inp.time_model.planned_seconds
    running = inp.time_model.running_seconds
    value = running / planned if planned > 0 else 0.0
    return MetricValue(
        value=value,
        confidence=Confidence.from_sources(availability_sources(inp)),
        name_key="metrics.availability",
        unit_key="units.percentage",
        formula_key="formulas.availability",
        formula_params={
            "planned_time_seconds": planned,
            "downtime_seconds": max(planned - running, 0.0),
            "operating_time_seconds": running,
        },
    )


def calculate_performance(inp: OeeInput) -> MetricValue:
    running = inp.time_model.running_seconds
    ideal = inp.cycle_time.ideal_seconds
    total = inp.production.total
    ideal_production_time = total * ideal
    value = ideal_production_time / running if running > 0 else 0.0
    return MetricValue(
        value=value,
        confidence=Confidence.from_sources(performance_sources(inp)),
        name_key="metrics.performance",
        unit_key="units.percentage",
        formula_key="formulas.performance",
        formula_params={
            "ideal_cycle_time_seconds": ideal,
            "total_count": float(total),
            "operating_time_seconds": running,
            "ideal_production_time": ideal_production_time,
        },
    )


def calculate_quality(inp: OeeInput) -> MetricValue:
    total = inp.production.total
    good = inp.production.good
    value = good / total if total > 0 else 1.0
    return MetricValue(
        value=value,
        confidence=Confidence.from_sources(quality_sources(inp)),
        name_key="metrics.quality",
        unit_key="units.percentage",
        formula_key="formulas.quality",
        formula_params={"good_count": float(good), "total_count": float(total)},
    )


def calculate_core_metrics(inp: OeeInput) -> CoreMetrics:
    availability = calculate_availability(inp)
    performance = calculate_performance(inp)
    quality = calculate_quality(inp)
    oee = MetricValue(
        value=availability.value * performance.value * quality.value,
        confidence=Confidence.weakest(
            availability.confidence, performance.confidence, quality.confidence
        ),
        name_key="metrics.oee",
        unit_key="units.percentage",
        formula_key="formulas.oee",
        formula_params={
            "availability": availability.value,
            "performance": performance.value,
            "quality": quality.value,
        },
    )
    return CoreMetrics(availability, performance, quality, oee)
