"""
Engine input values.

OeeInput bundles every observation for one machine over one analysis window.
EconomicParameters carries (low, central, high) bands for cost figures.
All of it is immutable; what-if analysis works on `dataclasses.replace` copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from .assumptions import (
    AnalysisWindow,
    CycleTimeModel,
    DowntimeRecord,
    MachineContext,
    ProductionSummary,
    ProvenanceValue,
    ScrapEvent,
    StartupWindowConfig,
    ThresholdConfiguration,
    TimeModel,
)

Band = Tuple[float, float, float]


@dataclass(frozen=True)
class OeeInput:
    machine: MachineContext
    window: AnalysisWindow
    time_model: TimeModel
    production: ProductionSummary
    cycle_time: CycleTimeModel
    downtimes: Tuple[DowntimeRecord, ...] = ()
    thresholds: ThresholdConfiguration = field(default_factory=ThresholdConfiguration)
    scrap_events: Tuple[ScrapEvent, ...] = ()
    startup_window: Optional[StartupWindowConfig] = None

    def __post_init__(self):
        object.__setattr__(self, "downtimes", tuple(self.downtimes))
        object.__setattr__(self, "scrap_events", tuple(self.scrap_events))

    @property
    def running_time(self) -> timedelta:
        return self.time_model.running_time

    @property
    def has_temporal_scrap(self) -> bool:
        return len(self.scrap_events) > 0

    def critical_inputs(self) -> List[Tuple[str, ProvenanceValue]]:
        """Inputs whose provenance drives confidence and default-usage checks."""
        items: List[Tuple[str, ProvenanceValue]] = [
            ("planned_production_time", self.time_model.planned_production_time),
            ("total_units", self.production.total_units),
            ("good_units", self.production.good_units),
            ("scrap_units", self.production.scrap_units),
            ("reworked_units", self.production.reworked_units),
            ("ideal_cycle_time", self.cycle_time.ideal_cycle_time),
        ]
        if self.time_model.all_time is not None:
            items.append(("all_time", self.time_model.all_time))
        if self.cycle_time.average_cycle_time is not None:
            items.append(("average_cycle_time", self.cycle_time.average_cycle_time))
        return items


def _spread(value: float, spread: float) -> Band:
    return (value * (1.0 - spread), value, value * (1.0 + spread))


@dataclass(frozen=True)
class EconomicParameters:
    unit_price: Band
    marginal_contribution: Band
    material_cost: Band
    labor_cost_per_hour: Band
    currency: str = "USD"

    @classmethod
    def from_point_estimates(
        cls,
        unit_price: float,
        marginal_contribution: float,
        material_cost: float,
        labor_cost_per_hour: float,
        currency: str = "USD",
        spread: float = 0.10,
    ) -> "EconomicParameters":
        """Expand point values into ±spread bands."""
        return cls(
            unit_price=_spread(unit_price, spread),
            marginal_contribution=_spread(marginal_contribution, spread),
            material_cost=_spread(material_cost, spread),
            labor_cost_per_hour=_spread(labor_cost_per_hour, spread),
            currency=currency,
        )

    def band_errors(self) -> List[str]:
        """Names of bands that are negative or not ordered low ≤ central ≤ high."""
        errors = []
        for name in ("unit_price", "marginal_contribution", "material_cost", "labor_cost_per_hour"):
            low, central, high = getattr(self, name)
            if low < 0 or not (low <= central <= high):
                errors.append(name)
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unit_price": list(self.unit_price),
            "marginal_contribution": list(self.marginal_contribution),
            "material_cost": list(self.material_cost),
            "labor_cost_per_hour": list(self.labor_cost_per_hour),
            "currency": self.currency,
        }
