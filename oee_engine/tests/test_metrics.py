"""
Tests - core and extended metric formulas.
"""
from dataclasses import replace
from datetime import timedelta

import pytest

from oee_engine.assumptions import DowntimeRecord, ProductionSummary, ProvenanceValue
from oee_engine.domain import Confidence, calculate_core_metrics, calculate_extended_metrics


class TestCoreMetrics:

    def test_availability_scenario(self, make_input):
        core = calculate_core_metrics(make_input(planned=timedelta(hours=8), running=timedelta(hours=7)))
        assert core.availability.value == 0.875

    def test_quality_scenario(self, make_input):
        core = calculate_core_metrics(make_input(total=1000, good=900, scrap=100))
        assert core.quality.value == pytest.approx(0.90)

    def test_performance_scenario(self, make_input):
        inp = make_input(running=timedelta(hours=7), ideal=timedelta(seconds=25), total=800, good=800, scrap=0)
        core = calculate_core_metrics(inp)
        assert inp.cycle_time.theoretical_max_units(inp.running_time) == 1008
        assert core.performance.value == pytest.approx(0.793, abs=1e-3)

    @pytest.mark.parametrize("total,good,scrap,running_h", [
        (1000, 950, 50, 7),
        (800, 700, 100, 6),
        (333, 333, 0, 5),
        (0, 0, 0, 7),
        (17, 3, 14, 1),
    ])
    def test_oee_identity_is_exact(self, make_input, total, good, scrap, running_h):
        inp = make_input(
            running=timedelta(hours=running_h),
            stopped=timedelta(hours=8 - running_h),
            total=total, good=good, scrap=scrap,
        )
        core = calculate_core_metrics(inp)
        assert core.oee.value == core.availability.value * core.performance.value * core.quality.value

    def test_zero_running_gives_zero_oee(self, make_input):
        inp = make_input(running=timedelta(0), stopped=timedelta(hours=8), total=0, good=0, scrap=0)
        core = calculate_core_metrics(inp)
        assert core.availability.value == 0.0
        assert core.performance.value == 0.0
        assert core.oee.value == 0.0

    def test_zero_planned_gives_zero_availability(self, make_input):
        inp = make_input(planned=timedelta(0), allocations=[], total=0, good=0, scrap=0)
        assert calculate_core_metrics(inp).availability.value == 0.0

    def test_no_scrap_is_perfect_quality(self, make_input):
        core = calculate_core_metrics(make_input(total=900, good=900, scrap=0))
        assert core.quality.value == 1.0

    def test_zero_total_quality_is_one(self, make_input):
        core = calculate_core_metrics(make_input(total=0, good=0, scrap=0))
        assert core.quality.value == 1.0

    def test_performance_is_not_clamped(self, make_input):
        # 1200 units at 25s in 7h is faster than ideal
        core = calculate_core_metrics(make_input(total=1200, good=1200, scrap=0))
        assert core.performance.value == pytest.approx(1200 * 25 / 25200)
        assert core.performance.value > 1.0

    def test_formula_params(self, basic_input):
        core = calculate_core_metrics(basic_input)
        assert core.availability.formula_params["downtime_seconds"] == 3600.0
        assert core.performance.formula_params["ideal_production_time"] == 25000.0
        assert core.oee.name_key == "metrics.oee"
        assert core.oee.unit_key == "units.percentage"


class TestMetricConfidence:

    def test_explicit_inputs_are_high(self, basic_input):
        assert calculate_core_metrics(basic_input).oee.confidence == Confidence.HIGH

    def test_default_planned_time_lowers_availability_only(self, basic_input):
        tm = replace(
            basic_input.time_model,
            planned_production_time=ProvenanceValue.default(timedelta(hours=8)),
        )
        core = calculate_core_metrics(replace(basic_input, time_model=tm))
        assert core.availability.confidence == Confidence.LOW
        assert core.quality.confidence == Confidence.HIGH
        assert core.oee.confidence == Confidence.LOW

    def test_inferred_counts_are_medium(self, make_input):
        production = ProductionSummary(
            total_units=ProvenanceValue.inferred(1000),
            good_units=ProvenanceValue.inferred(950),
            scrap_units=ProvenanceValue.explicit(50),
            reworked_units=ProvenanceValue.explicit(0),
        )
        core = calculate_core_metrics(make_input(production=production))
        assert core.quality.confidence == Confidence.MEDIUM
        assert core.oee.confidence == Confidence.MEDIUM


class TestExtendedMetrics:

    def test_teep_scenario(self, make_input):
        inp = make_input(
            running=timedelta(hours=8), stopped=None, total=1100, good=1000, scrap=100,
            all_time=timedelta(hours=24),
        )
        core = calculate_core_metrics(inp)
        ext = calculate_extended_metrics(inp, core)
        p, q = core.performance.value, core.quality.value
        assert ext.loading_factor.value == pytest.approx(8 / 24)
        assert ext.teep.value == pytest.approx((8 / 24) * p * q)

    def test_teep_omitted_without_all_time(self, basic_input):
        ext = calculate_extended_metrics(basic_input, calculate_core_metrics(basic_input))
        assert ext.teep is None
        assert ext.loading_factor is None

    def test_utilization_matches_availability(self, basic_input):
        core = calculate_core_metrics(basic_input)
        ext = calculate_extended_metrics(basic_input, core)
        assert ext.utilization.value == core.availability.value
        assert ext.utilization.name_key == "metrics.utilization"

    def test_mtbf_omitted_without_failures(self, make_input):
        inp = make_input(downtimes=[DowntimeRecord(timedelta(hours=1), is_failure=False)])
        ext = calculate_extended_metrics(inp, calculate_core_metrics(inp))
        assert ext.mtbf is None
        assert ext.mttr is None
        assert ext.failure_count == 0

    def test_mtbf_and_mttr(self, make_input):
        records = [
            DowntimeRecord(timedelta(minutes=20), is_failure=True),
            DowntimeRecord(timedelta(minutes=30), is_failure=True),
            DowntimeRecord(timedelta(minutes=10), is_failure=False),
        ]
        inp = make_input(downtimes=records)
        ext = calculate_extended_metrics(inp, calculate_core_metrics(inp))
        assert ext.failure_count == 2
        assert ext.mtbf.value == 25200 / 2
        assert ext.mttr.value == 1500.0

    def test_scrap_and_rework_rates(self, make_input):
        inp = make_input(total=1000, good=900, scrap=100, reworked=40)
        ext = calculate_extended_metrics(inp, calculate_core_metrics(inp))
        assert ext.scrap_rate.value == pytest.approx(0.10)
        assert ext.rework_rate.value == pytest.approx(0.04)

    def test_net_operating_time(self, basic_input):
        ext = calculate_extended_metrics(basic_input, calculate_core_metrics(basic_input))
        assert ext.net_operating_time.value == 25000.0
        assert ext.net_operating_time.unit_key == "units.seconds"

    def test_to_dict_skips_missing_optional_metrics(self, basic_input):
        data = calculate_extended_metrics(basic_input, calculate_core_metrics(basic_input)).to_dict()
        assert "teep" not in data
        assert "mtbf" not in data
        assert data["failure_count"] == 0
