"""
Production counts.

Invariant checked by validation: good + scrap ≤ total.
Reworked units are informational and drawn from good units.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from .provenance import ProvenanceValue

logger = logging.getLogger(__name__)


def _zero() -> ProvenanceValue[int]:
    return ProvenanceValue.default(0)


@dataclass(frozen=True)
class ProductionSummary:
    total_units: ProvenanceValue[int]
    good_units: ProvenanceValue[int]
    scrap_units: ProvenanceValue[int] = field(default_factory=_zero)
    reworked_units: ProvenanceValue[int] = field(default_factory=_zero)

    @classmethod
    def from_counts(
        cls, total: int, good: int, scrap: int = 0, reworked: int = 0
    ) -> "ProductionSummary":
        """All four counts supplied explicitly."""
        return cls(
            total_units=ProvenanceValue.explicit(total),
            good_units=ProvenanceValue.explicit(good),
            scrap_units=ProvenanceValue.explicit(scrap),
            reworked_units=ProvenanceValue.explicit(reworked),
        )

    @property
    def total(self) -> int:
        return self.total_units.value

    @property
    def good(self) -> int:
        return self.good_units.value

    @property
    def scrap(self) -> int:
        return self.scrap_units.value

    @property
    def reworked(self) -> int:
        return self.reworked_units.value

    @property
    def quality_ratio(self) -> float:
        return self.good / self.total if self.total > 0 else 1.0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_units": self.total,
            "good_units": self.good,
            "scrap_units": self.scrap,
            "reworked_units": self.reworked,
        }


class CountModelBuilder:
    """
    Builds a ProductionSummary from partial counts.

    Missing total → good + scrap (Inferred); rework is part of good.
    Missing good  → total - scrap, floored at 0 (Inferred).
    Missing scrap/rework → 0 (Default).
    Missing total and good → both 0 (Default).
    """

    def __init__(self):
        self._total: Optional[int] = None
        self._good: Optional[int] = None
        self._scrap: Optional[int] = None
        self._rework: Optional[int] = None

    def total(self, units: Optional[int]) -> "CountModelBuilder":
        self._total = units
        return self

    def good(self, units: Optional[int]) -> "CountModelBuilder":
        self._good = units
        return self

    def scrap(self, units: Optional[int]) -> "CountModelBuilder":
        self._scrap = units
        return self

    def rework(self, units: Optional[int]) -> "CountModelBuilder":
        self._rework = units
        return self

    def build(self) -> ProductionSummary:
        scrap = ProvenanceValue.explicit(self._scrap) if self._scrap is not None else _zero()
        rework = ProvenanceValue.explicit(self._rework) if self._rework is not None else _zero()

        if self._total is not None and self._good is not None:
            total = ProvenanceValue.explicit(self._total)
            good = ProvenanceValue.explicit(self._good)
        elif self._total is not None:
            total = ProvenanceValue.explicit(self._total)
            good = ProvenanceValue.inferred(max(0, self._total - scrap.value))
        elif self._good is not None:
            good = ProvenanceValue.explicit(self._good)
            total = ProvenanceValue.inferred(self._good + scrap.value)
        else:
            logger.warning("No production counts supplied; total and good default to 0")
            total = _zero()
            good = _zero()

        return ProductionSummary(
            total_units=total,
            good_units=good,
            scrap_units=scrap,
            reworked_units=rework,
        )
