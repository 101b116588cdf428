"""
═══════════════════════════════════════════════════════════════════════════════
                    ECONOMIC IMPACT OF OEE LOSSES
═══════════════════════════════════════════════════════════════════════════════

Every figure is a (low, central, high) band, computed from the matching band
of the economic parameters.

    lost_units        = max(0, floor(running / ideal) − total)
    throughput_loss   = lost_units × marginal_contribution
    material_waste    = scrap × material_cost
    rework_cost       = rework × material_cost × 0.5
                      + rework × rework_hours_per_unit × labor_cost_per_hour
    opportunity_cost  = downtime_hours × (3600 / ideal) × marginal_contribution
    total             = Σ of the above
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from ..models import Band, EconomicParameters, OeeInput

REWORK_MATERIAL_SHARE = 0.5


@dataclass(frozen=True)
class EconomicImpact:
    low: float
    central: float
    high: float

    @classmethod
    def zero(cls) -> "EconomicImpact":
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_band(cls, band: Band, factor: float) -> "EconomicImpact":
        low, central, high = band
        return cls(low * factor, central * factor, high * factor)

    def __add__(self, other: "EconomicImpact") -> "EconomicImpact":
        return EconomicImpact(
            self.low + other.low, self.central + other.central, self.high + other.high
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "low": round(self.low, 2),
            "central": round(self.central, 2),
            "high": round(self.high, 2),
        }


@dataclass(frozen=True)
class EconomicAnalysis:
    throughput_loss: EconomicImpact
    material_waste: EconomicImpact
    rework_cost: EconomicImpact
    opportunity_cost: EconomicImpact
    total: EconomicImpact
    currency: str
    lost_units: int
    assumptions: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currency": self.currency,
            "lost_units": self.lost_units,
            "throughput_loss": self.throughput_loss.to_dict(),
            "material_waste": self.material_waste.to_dict(),
            "rework_cost": self.rework_cost.to_dict(),
            "opportunity_cost": self.opportunity_cost.to_dict(),
            "total": self.total.to_dict(),
            "assumptions": list(self.assumptions),
        }


def calculate_economic_analysis(
    inp: OeeInput,
    params: EconomicParameters,
    rework_hours_per_unit: float = 0.1,
) -> EconomicAnalysis:
    prod = inp.production
    running = inp.running_time
    max_units = inp.cycle_time.theoretical_max_units(running)
    lost_units = max(0, max_units - prod.total)

    assumptions = {"economics.assumption.marginal_contribution_per_unit"}

    throughput_loss = EconomicImpact.from_band(params.marginal_contribution, lost_units)
    material_waste = EconomicImpact.from_band(params.material_cost, prod.scrap)

    rework_cost = EconomicImpact.zero()
    if prod.reworked > 0:
        assumptions.add("economics.assumption.rework_material_share")
        assumptions.add("economics.assumption.rework_time_per_unit")
        rework_cost = (
            EconomicImpact.from_band(params.material_cost, prod.reworked * REWORK_MATERIAL_SHARE)
            + EconomicImpact.from_band(
                params.labor_cost_per_hour, prod.reworked * rework_hours_per_unit
            )
        )

    opportunity_cost = EconomicImpact.zero()
    downtime_hours = max(inp.time_model.planned_seconds - inp.time_model.running_seconds, 0.0) / 3600.0
    units_per_hour = inp.cycle_time.units_per_hour
    if downtime_hours > 0 and units_per_hour > 0:
        assumptions.add("economics.assumption.downtime_at_ideal_rate")
        opportunity_cost = EconomicImpact.from_band(
            params.marginal_contribution, downtime_hours * units_per_hour
        )

    total = throughput_loss + material_waste + rework_cost + opportunity_cost
    return EconomicAnalysis(
        throughput_loss=throughput_loss,
        material_waste=material_waste,
        rework_cost=rework_cost,
        opportunity_cost=opportunity_cost,
        total=total,
        currency=params.currency,
        lost_units=lost_units,
        assumptions=tuple(sorted(assumptions)),
    )
