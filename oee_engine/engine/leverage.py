"""
Leverage: how much OEE each loss family is holding back.

For each family the factor it depresses is set to 1.0 with the other two
unchanged:

    eliminate_downtime    OEE' = 1 × P × Q     throughput += floor(downtime / ideal)
    eliminate_speed_loss  OEE' = A × 1 × Q     throughput += max(0, floor(running / ideal) − total)
    eliminate_scrap       OEE' = A × P × 1     throughput += scrap

Gains are in OEE points (×100), sorted largest first.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List

from ..domain import CoreMetrics
from ..models import OeeInput


@dataclass(frozen=True)
class LeverageOpportunity:
    action_key: str
    oee_gain_points: float
    throughput_gain_units: int
    sensitivity_score: float
    description_key: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action_key": self.action_key,
            "oee_gain_points": round(self.oee_gain_points, 4),
            "throughput_gain_units": self.throughput_gain_units,
            "sensitivity_score": self.sensitivity_score,
            "description_key": self.description_key,
        }


def analyze_leverage(inp: OeeInput, core: CoreMetrics) -> List[LeverageOpportunity]:
    a = core.availability.value
    p = core.performance.value
    q = core.quality.value
    oee = core.oee.value

    ideal = inp.cycle_time.ideal
    running = inp.running_time
    downtime = max(inp.time_model.planned_time - running, timedelta(0))
    downtime_units = downtime // ideal if ideal > timedelta(0) else 0
    speed_units = max(0, inp.cycle_time.theoretical_max_units(running) - inp.production.total)

    # Nothing to recover without planned time
    downtime_oee = 1.0 * p * q if inp.time_model.planned_time > timedelta(0) else oee

    opportunities = [
        LeverageOpportunity(
            action_key="leverage.eliminate_downtime",
            oee_gain_points=max(0.0, (downtime_oee - oee) * 100.0),
            throughput_gain_units=downtime_units,
            sensitivity_score=0.9,
            description_key="leverage.eliminate_downtime_desc",
        ),
        LeverageOpportunity(
            action_key="leverage.eliminate_speed_loss",
            oee_gain_points=max(0.0, (a * max(p, 1.0) * q - oee) * 100.0),
            throughput_gain_units=speed_units,
            sensitivity_score=0.7,
            description_key="leverage.eliminate_speed_loss_desc",
        ),
        LeverageOpportunity(
            action_key="leverage.eliminate_scrap",
            oee_gain_points=max(0.0, (a * p * 1.0 - oee) * 100.0),
            throughput_gain_units=inp.production.scrap,
            sensitivity_score=0.8,
            description_key="leverage.eliminate_scrap_desc",
        ),
    ]
    return sorted(opportunities, key=lambda op: op.oee_gain_points, reverse=True)
