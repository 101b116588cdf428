"""
═══════════════════════════════════════════════════════════════════════════════
                    LOSS TREE - SIX BIG LOSSES DECOMPOSITION
═══════════════════════════════════════════════════════════════════════════════

planned_time
├── availability_losses
│   ├── breakdowns          Σ failure-flagged downtime records
│   ├── setup_adjustments   Σ SETUP allocations
│   └── small_stops         Σ non-failure records shorter than small_stop_threshold
├── performance_losses
│   └── speed_losses        running − total × ideal   (when above speed_loss_threshold)
└── quality_losses
    ├── startup_rejects     startup scrap × ideal
    └── production_rejects  remaining scrap × ideal

Availability losses are capped, in that order, at planned − running, so the
direct children never add up to more than planned time. Productive time is
whatever planned time is left after the losses and is kept outside the tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from ..assumptions import (
    MachineState,
    ValueSource,
    failure_records,
    small_stop_records,
    sum_durations,
    total_downtime,
    weakest_source,
)
from ..models import OeeInput

ZERO = timedelta(0)


@dataclass(frozen=True)
class LossTreeNode:
    category_key: str
    description_key: str
    duration: timedelta
    percentage_of_planned: float
    percentage_of_parent: Optional[float] = None
    children: Tuple["LossTreeNode", ...] = ()
    source: ValueSource = ValueSource.INFERRED

    @property
    def seconds(self) -> float:
        return self.duration.total_seconds()

    def children_duration(self) -> timedelta:
        return sum_durations(child.duration for child in self.children)

    def iter_nodes(self) -> Iterator["LossTreeNode"]:
        """Depth-first, parent before children."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category_key": self.category_key,
            "description_key": self.description_key,
            "duration_seconds": self.seconds,
            "percentage_of_planned": round(self.percentage_of_planned, 6),
            "percentage_of_parent": (
                round(self.percentage_of_parent, 6) if self.percentage_of_parent is not None else None
            ),
            "source": self.source.value,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True)
class LossTree:
    root: LossTreeNode
    productive_time: timedelta

    def flatten(self) -> List[LossTreeNode]:
        return list(self.root.iter_nodes())

    def find(self, category_key: str) -> Optional[LossTreeNode]:
        for node in self.root.iter_nodes():
            if node.category_key == category_key:
                return node
        return None

    @property
    def total_losses(self) -> timedelta:
        return self.root.children_duration()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root.to_dict(),
            "productive_time_seconds": self.productive_time.total_seconds(),
            "total_loss_seconds": self.total_losses.total_seconds(),
        }


def _ratio(part: timedelta, whole: timedelta) -> float:
    if whole <= ZERO:
        return 0.0
    return min(1.0, max(0.0, part / whole))


def _leaf(key: str, duration: timedelta, parent: timedelta, planned: timedelta,
          source: ValueSource) -> LossTreeNode:
    return LossTreeNode(
        category_key=f"loss_tree.{key}",
        description_key=f"loss_tree.{key}_desc",
        duration=duration,
        percentage_of_planned=_ratio(duration, planned),
        percentage_of_parent=_ratio(duration, parent),
        source=source,
    )


def _family(key: str, leaves: Sequence[Tuple[str, timedelta, ValueSource]],
            planned: timedelta) -> LossTreeNode:
    duration = sum_durations(d for _, d, _ in leaves)
    children = tuple(_leaf(name, d, duration, planned, src) for name, d, src in leaves)
    return LossTreeNode(
        category_key=f"loss_tree.{key}",
        description_key=f"loss_tree.{key}_desc",
        duration=duration,
        percentage_of_planned=_ratio(duration, planned),
        percentage_of_parent=_ratio(duration, planned),
        children=children,
        source=weakest_source(c.source for c in children),
    )


def _cap(amounts: Sequence[timedelta], budget: timedelta) -> List[timedelta]:
    """Spend `budget` on each amount in order."""
    capped = []
    remaining = max(budget, ZERO)
    for amount in amounts:
        take = min(max(amount, ZERO), remaining)
        capped.append(take)
        remaining -= take
    return capped


def build_loss_tree(inp: OeeInput, startup_scrap_units: Optional[int] = None) -> LossTree:
    """
    Decompose planned time into loss families.

    `startup_scrap_units` comes from temporal scrap analysis when scrap events
    are available; without it all scrap counts as production rejects.
    """
    tm = inp.time_model
    planned = max(tm.planned_time, ZERO)
    running = tm.running_time
    ideal = inp.cycle_time.ideal
    thresholds = inp.thresholds

    # Availability
    failures = failure_records(inp.downtimes)
    small_stops = small_stop_records(inp.downtimes, thresholds.small_stop_threshold)
    setup_allocs = [a for a in tm.allocations if a.state == MachineState.SETUP]
    breakdowns, setup, stops = _cap(
        [
            total_downtime(failures),
            sum_durations(a.duration for a in setup_allocs),
            total_downtime(small_stops),
        ],
        planned - running,
    )
    availability = _family("availability_losses", [
        ("breakdowns", breakdowns, weakest_source(r.source for r in failures)),
        ("setup_adjustments", setup, weakest_source(a.source for a in setup_allocs)),
        ("small_stops", stops, weakest_source(r.source for r in small_stops)),
    ], planned)

    # Performance
    speed_loss = max(running - ideal * inp.production.total, ZERO)
    if running > ZERO and speed_loss / running <= thresholds.speed_loss_threshold:
        speed_loss = ZERO
    (speed_loss,) = _cap([speed_loss], planned - availability.duration)
    performance = _family("performance_losses", [
        ("speed_losses", speed_loss, ValueSource.INFERRED),
    ], planned)

    # Quality
    scrap = inp.production.scrap
    startup_units = min(max(startup_scrap_units or 0, 0), scrap)
    startup_loss, production_loss = _cap(
        [ideal * startup_units, ideal * (scrap - startup_units)],
        planned - availability.duration - performance.duration,
    )
    count_source = inp.production.scrap_units.source
    quality = _family("quality_losses", [
        ("startup_rejects", startup_loss,
         ValueSource.INFERRED if startup_scrap_units is not None else count_source),
        ("production_rejects", production_loss, count_source),
    ], planned)

    families = (availability, performance, quality)
    root = LossTreeNode(
        category_key="loss_tree.planned_time",
        description_key="loss_tree.planned_time_desc",
        duration=planned,
        percentage_of_planned=1.0 if planned > ZERO else 0.0,
        children=families,
        source=tm.planned_production_time.source,
    )
    productive = planned - root.children_duration()
    return LossTree(root=root, productive_time=max(productive, ZERO))
