"""EngineResult: the single immutable output of a calculation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..assumptions import MachineContext
from ..domain import CoreMetrics, EconomicAnalysis, ExtendedMetrics, LossTree
from ..ledger import AssumptionLedger
from ..validation import ValidationResult
from .leverage import LeverageOpportunity
from .temporal_scrap import TemporalScrapAnalysis


@dataclass(frozen=True)
class EngineResult:
    machine: MachineContext
    core: CoreMetrics
    extended: ExtendedMetrics
    loss_tree: LossTree
    ledger: AssumptionLedger
    validation: ValidationResult
    leverage: Tuple[LeverageOpportunity, ...] = ()
    economics: Optional[EconomicAnalysis] = None
    temporal_scrap: Optional[TemporalScrapAnalysis] = None

    @property
    def oee(self) -> float:
        return self.core.oee.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "machine": self.machine.to_dict(),
            "core": self.core.to_dict(),
            "extended": self.extended.to_dict(),
            "loss_tree": self.loss_tree.to_dict(),
            "leverage": [op.to_dict() for op in self.leverage],
            "economics": self.economics.to_dict() if self.economics else None,
            "temporal_scrap": self.temporal_scrap.to_dict() if self.temporal_scrap else None,
            "ledger": self.ledger.to_dict(),
            "validation": self.validation.to_dict(),
        }
