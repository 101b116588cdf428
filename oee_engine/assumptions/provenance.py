"""
Provenance-tagged values.

Every externally supplied scalar or duration travels inside a ProvenanceValue
so downstream consumers (confidence scoring, assumption ledger) know whether
the number was given by the operator, derived from other inputs, or filled in
by the system.

    Explicit  → supplied directly by the caller
    Inferred  → derived from other inputs (e.g. total = good + scrap + rework)
    Default   → system fallback, no information from the caller
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Iterable, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class ValueSource(str, Enum):
    """Origin classification of an input value."""
    EXPLICIT = "explicit"
    INFERRED = "inferred"
    DEFAULT = "default"


@dataclass(frozen=True)
class ProvenanceValue(Generic[T]):
    """
    A value plus the tag describing where it came from.

    The tag survives every `map`; only building a new ProvenanceValue
    can change it.
    """
    value: T
    source: ValueSource = ValueSource.EXPLICIT

    @classmethod
    def explicit(cls, value: T) -> "ProvenanceValue[T]":
        return cls(value, ValueSource.EXPLICIT)

    @classmethod
    def inferred(cls, value: T) -> "ProvenanceValue[T]":
        return cls(value, ValueSource.INFERRED)

    @classmethod
    def default(cls, value: T) -> "ProvenanceValue[T]":
        return cls(value, ValueSource.DEFAULT)

    def map(self, fn: Callable[[T], U]) -> "ProvenanceValue[U]":
        """Transform the value, keeping the provenance tag."""
        return ProvenanceValue(fn(self.value), self.source)

    @property
    def is_explicit(self) -> bool:
        return self.source == ValueSource.EXPLICIT

    @property
    def is_inferred(self) -> bool:
        return self.source == ValueSource.INFERRED

    @property
    def is_default(self) -> bool:
        return self.source == ValueSource.DEFAULT


def weakest_source(
    sources: Iterable[ValueSource],
    empty: ValueSource = ValueSource.INFERRED,
) -> ValueSource:
    """Default beats Inferred beats Explicit. `empty` is returned for no sources."""
    seen = set(sources)
    if not seen:
        return empty
    if ValueSource.DEFAULT in seen:
        return ValueSource.DEFAULT
    if ValueSource.INFERRED in seen:
        return ValueSource.INFERRED
    return ValueSource.EXPLICIT
