"""
Tests - one-at-a-time sensitivity analysis.
"""
from datetime import timedelta

import pytest

from oee_engine.assumptions import MachineState, TimeAllocation
from oee_engine.config import Settings
from oee_engine.domain import calculate_core_metrics
from oee_engine.engine import (
    PERTURBATIONS,
    SensitivityParameter,
    analyze_sensitivity,
    classify_impact,
    perturb,
    quick_sensitivity_analysis,
)
from oee_engine.ledger import ImpactLevel


class TestPerturbations:

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            PERTURBATIONS[SensitivityParameter.DOWNTIME] = None

    def test_baseline_not_mutated(self, basic_input):
        snapshot = basic_input.time_model
        for parameter in SensitivityParameter:
            perturb(basic_input, parameter, 10.0)
        assert basic_input.time_model == snapshot
        assert basic_input.production.total == 1000

    def test_planned_time(self, basic_input):
        varied = perturb(basic_input, SensitivityParameter.PLANNED_TIME, 10.0)
        assert varied.time_model.planned_time == timedelta(hours=8.8)
        assert varied.time_model.allocations == basic_input.time_model.allocations

    @pytest.mark.parametrize("variation", [10.0, 25.0, 50.0, -10.0])
    def test_downtime_reciprocity(self, basic_input, variation):
        varied = perturb(basic_input, SensitivityParameter.DOWNTIME, variation)
        removed = basic_input.time_model.non_running_time - varied.time_model.non_running_time
        assert varied.running_time == basic_input.running_time + removed
        assert varied.time_model.allocated_time == basic_input.time_model.allocated_time

    def test_downtime_scales_counts_within_capacity(self, basic_input):
        varied = perturb(basic_input, SensitivityParameter.DOWNTIME, 10.0)
        assert varied.running_time == timedelta(hours=7, minutes=6)
        assert varied.production.total == 1014
        assert varied.production.total <= varied.cycle_time.theoretical_max_units(varied.running_time)
        assert varied.production.good == 963

    def test_downtime_without_running_allocation(self, make_input):
        inp = make_input(
            allocations=[TimeAllocation(MachineState.STOPPED, timedelta(hours=8))],
            total=0, good=0, scrap=0,
        )
        varied = perturb(inp, SensitivityParameter.DOWNTIME, 10.0)
        assert varied.running_time == timedelta(minutes=48)

    def test_cycle_time_rescales_counts(self, basic_input):
        varied = perturb(basic_input, SensitivityParameter.CYCLE_TIME, 10.0)
        actual = varied.cycle_time.average_cycle_time
        assert actual.value == timedelta(seconds=22.5)
        assert actual.is_inferred
        assert varied.cycle_time.ideal == timedelta(seconds=25)
        assert varied.production.total == 1111
        assert varied.production.total <= varied.running_time // actual.value
        # quality ratio kept
        assert varied.production.good / varied.production.total == pytest.approx(0.95, abs=1e-3)
        # performance is allowed above 1.0
        assert calculate_core_metrics(varied).performance.value > 1.0

    def test_production_count(self, basic_input):
        varied = perturb(basic_input, SensitivityParameter.PRODUCTION_COUNT, 10.0)
        assert varied.production.total == 1100
        assert varied.production.good == 1045
        assert varied.production.scrap == 55

    def test_good_units_moves_from_scrap(self, basic_input):
        varied = perturb(basic_input, SensitivityParameter.GOOD_UNITS, 10.0)
        assert varied.production.total == 1000
        assert varied.production.good == 1000
        assert varied.production.scrap == 0

    def test_scrap_units_moves_to_good(self, basic_input):
        varied = perturb(basic_input, SensitivityParameter.SCRAP_UNITS, 10.0)
        assert varied.production.total == 1000
        assert varied.production.scrap == 45
        assert varied.production.good == 955

    def test_perturbation_keeps_provenance(self, basic_input):
        varied = perturb(basic_input, SensitivityParameter.PRODUCTION_COUNT, 10.0)
        assert varied.production.total_units.is_explicit


class TestSensitivityAnalysis:

    def test_all_parameters_in_order(self, basic_input):
        analysis = analyze_sensitivity(basic_input, 10.0)
        assert [r.parameter for r in analysis.results] == list(SensitivityParameter)

    def test_directions(self, basic_input):
        analysis = analyze_sensitivity(basic_input, 10.0)
        assert analysis.get(SensitivityParameter.PLANNED_TIME).oee_delta < 0
        assert analysis.get(SensitivityParameter.DOWNTIME).oee_delta > 0
        assert analysis.get(SensitivityParameter.CYCLE_TIME).oee_delta > 0
        assert analysis.get(SensitivityParameter.SCRAP_UNITS).metric_changes["quality_delta"] > 0

    def test_result_fields(self, basic_input):
        baseline = calculate_core_metrics(basic_input)
        result = analyze_sensitivity(basic_input, 10.0).get(SensitivityParameter.GOOD_UNITS)
        assert result.parameter_key == "sensitivity.good_units"
        assert result.baseline_value == 950.0
        assert result.varied_value == 1000.0
        assert result.baseline_oee == pytest.approx(baseline.oee.value * 100)
        assert result.oee_delta == pytest.approx(result.varied_oee - result.baseline_oee)
        assert result.metric_changes["availability_delta"] == 0.0
        assert result.impact_level == ImpactLevel.HIGH

    def test_most_and_least_sensitive(self, basic_input):
        analysis = analyze_sensitivity(basic_input, 10.0)
        deltas = {r.parameter_key: abs(r.oee_delta) for r in analysis.results}
        assert analysis.most_sensitive_parameter == max(deltas, key=deltas.get)
        assert analysis.least_sensitive_parameter == "sensitivity.scrap_units"

    def test_threaded_matches_sequential(self, basic_input):
        sequential = analyze_sensitivity(basic_input, 10.0, max_workers=0)
        threaded = analyze_sensitivity(basic_input, 10.0, max_workers=4)
        assert sequential == threaded

    def test_quick_analysis_uses_settings(self, basic_input):
        Settings.override(sensitivity_variation_percent=5.0)
        assert quick_sensitivity_analysis(basic_input).variation_percent == 5.0

    def test_subset(self, basic_input):
        analysis = analyze_sensitivity(
            basic_input, 10.0, parameters=[SensitivityParameter.SCRAP_UNITS]
        )
        assert len(analysis.results) == 1
        assert analysis.most_sensitive_parameter == analysis.least_sensitive_parameter

    def test_invalid_variation(self, basic_input):
        with pytest.raises(ValueError):
            analyze_sensitivity(basic_input, 100.0)

    def test_dataframe(self, basic_input):
        df = analyze_sensitivity(basic_input, 10.0).to_dataframe()
        assert len(df) == 6
        assert {"parameter_key", "oee_delta", "availability_delta"} <= set(df.columns)


class TestImpactClassification:

    @pytest.mark.parametrize("delta,level", [
        (6.0, ImpactLevel.CRITICAL),
        (-5.5, ImpactLevel.CRITICAL),
        (5.0, ImpactLevel.HIGH),
        (2.1, ImpactLevel.HIGH),
        (-1.0, ImpactLevel.MEDIUM),
        (0.5, ImpactLevel.LOW),
        (0.0, ImpactLevel.LOW),
    ])
    def test_thresholds(self, delta, level):
        assert classify_impact(delta) == level
