"""
Confidence of a computed metric.

Derived from the provenance of the metric's critical inputs:
    any Default                  → LOW
    more Inferred than Explicit  → MEDIUM
    otherwise                    → HIGH
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from ..assumptions import ValueSource


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Higher rank = more trustworthy."""
        return _RANK[self]

    @classmethod
    def weakest(cls, *levels: "Confidence") -> "Confidence":
        if not levels:
            return cls.HIGH
        return min(levels, key=lambda level: level.rank)

    @classmethod
    def from_sources(cls, sources: Iterable[ValueSource]) -> "Confidence":
        sources = list(sources)
        if ValueSource.DEFAULT in sources:
            return cls.LOW
        inferred = sources.count(ValueSource.INFERRED)
        explicit = sources.count(ValueSource.EXPLICIT)
        if inferred > explicit:
            return cls.MEDIUM
        return cls.HIGH


_RANK = {
    Confidence.LOW: 0,
    Confidence.MEDIUM: 1,
    Confidence.HIGH: 2,
}
