"""
Shared fixtures for the oee_engine test suite.
"""
from datetime import datetime, timedelta, timezone

import pytest

from oee_engine.assumptions import (
    AnalysisWindow,
    CycleTimeModel,
    MachineContext,
    MachineState,
    ProductionSummary,
    ProvenanceValue,
    ThresholdConfiguration,
    TimeAllocation,
    TimeModel,
)
from oee_engine.config import Settings
from oee_engine.models import OeeInput

WINDOW_START = datetime(2024, 1, 15, 6, 0, tzinfo=timezone.utc)


def build_input(
    planned=timedelta(hours=8),
    allocations=None,
    running=timedelta(hours=7),
    stopped=timedelta(hours=1),
    total=1000,
    good=950,
    scrap=50,
    reworked=0,
    ideal=timedelta(seconds=25),
    average=None,
    all_time=None,
    downtimes=(),
    thresholds=None,
    scrap_events=(),
    startup_window=None,
    machine_id="TEST-001",
    production=None,
    window=None,
):
    if allocations is None:
        allocations = [TimeAllocation(MachineState.RUNNING, running)]
        if stopped:
            allocations.append(TimeAllocation(MachineState.STOPPED, stopped))
    return OeeInput(
        machine=MachineContext(machine_id=machine_id, line_id="LINE-A", product_id="PROD-X"),
        window=window or AnalysisWindow.from_duration(WINDOW_START, timedelta(hours=8)),
        time_model=TimeModel(
            planned_production_time=ProvenanceValue.explicit(planned),
            allocations=tuple(allocations),
            all_time=ProvenanceValue.explicit(all_time) if all_time is not None else None,
        ),
        production=production or ProductionSummary.from_counts(total, good, scrap, reworked),
        cycle_time=CycleTimeModel(
            ideal_cycle_time=ProvenanceValue.explicit(ideal),
            average_cycle_time=ProvenanceValue.explicit(average) if average is not None else None,
        ),
        downtimes=tuple(downtimes),
        thresholds=thresholds or ThresholdConfiguration(),
        scrap_events=tuple(scrap_events),
        startup_window=startup_window,
    )


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test starts from default settings."""
    for name in (
        "OEE_THRESHOLD_PROFILE",
        "OEE_SENSITIVITY_VARIATION",
        "OEE_SENSITIVITY_WORKERS",
        "OEE_REWORK_HOURS_PER_UNIT",
        "OEE_ECONOMIC_SPREAD",
        "OEE_BOTTLENECK_FLOOR",
        "OEE_BOTTLENECK_FRACTION",
        "OEE_DYNAMIC_WINDOW_SIZE",
        "OEE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def make_input():
    """Factory for OeeInput; defaults give the 8h / 7h running baseline."""
    return build_input


@pytest.fixture
def basic_input():
    """8h planned, 7h running, 1h stopped, 1000/950/50 units, 25s ideal cycle."""
    return build_input()


@pytest.fixture
def machine_input():
    """Machine with A = 1, Q = 1 and P = total / 10000 (OEE = total / 10000)."""
    def _make(machine_id, total, good=None, running=10000, planned=10000):
        return build_input(
            planned=timedelta(seconds=planned),
            running=timedelta(seconds=running),
            stopped=timedelta(seconds=planned - running),
            total=total,
            good=total if good is None else good,
            scrap=0 if good is None else total - good,
            ideal=timedelta(seconds=1),
            machine_id=machine_id,
        )
    return _make
