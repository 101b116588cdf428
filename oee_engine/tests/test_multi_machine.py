"""
Tests - multi-machine aggregation and bottleneck detection.
"""
import pytest

from oee_engine import calculate
from oee_engine.domain import Confidence
from oee_engine.engine import (
    AGGREGATION_STRATEGIES,
    AggregationMethod,
    aggregate_system_oee,
    compare_aggregation_methods,
    quick_system_analysis,
)


@pytest.fixture
def line(machine_input):
    """Three machines at OEE 0.95, 0.60 and 0.92."""
    return [
        calculate(machine_input("M1", 9500)),
        calculate(machine_input("M2", 6000)),
        calculate(machine_input("M3", 9200)),
    ]


class TestAggregation:

    def test_every_method_registered(self):
        assert set(AGGREGATION_STRATEGIES) == set(AggregationMethod)

    def test_multiplicative_scenario(self, machine_input):
        # A = P = Q = 0.9 on both machines
        results = [
            calculate(machine_input(f"M{i}", 8100, good=7290, running=9000))
            for i in range(2)
        ]
        assert results[0].oee == pytest.approx(0.729)
        analysis = aggregate_system_oee(results, AggregationMethod.MULTIPLICATIVE)
        assert analysis.system_oee == pytest.approx(0.531, abs=1e-3)

    def test_minimum_scenario(self, line):
        analysis = aggregate_system_oee(line, AggregationMethod.MINIMUM)
        assert analysis.system_oee == pytest.approx(0.60)
        bottlenecks = analysis.bottleneck_analysis.primary_bottlenecks
        assert [b.machine_id for b in bottlenecks] == ["M2"]
        assert bottlenecks[0].throughput_impact == pytest.approx(40.0)
        assert bottlenecks[0].recommended_action_key == "bottleneck.action.improve_speed"
        assert [m.is_bottleneck for m in analysis.machines] == [False, True, False]

    def test_simple_average(self, line):
        analysis = aggregate_system_oee(line, AggregationMethod.SIMPLE_AVERAGE)
        assert analysis.system_oee == pytest.approx((0.95 + 0.60 + 0.92) / 3)

    def test_production_weighted(self, line):
        analysis = aggregate_system_oee(line, AggregationMethod.PRODUCTION_WEIGHTED)
        expected = (0.95 * 9500 + 0.60 * 6000 + 0.92 * 9200) / (9500 + 6000 + 9200)
        assert analysis.system_oee == pytest.approx(expected)

    def test_time_weighted(self, machine_input):
        results = [
            calculate(machine_input("M1", 5000, running=5000, planned=10000)),
            calculate(machine_input("M2", 20000, running=20000, planned=20000)),
        ]
        analysis = aggregate_system_oee(results, AggregationMethod.TIME_WEIGHTED)
        # OEE 0.5 over 10000s, 1.0 over 20000s
        assert analysis.system_oee == pytest.approx((0.5 * 10000 + 1.0 * 20000) / 30000)

    def test_weighted_falls_back_to_mean(self, machine_input):
        results = [
            calculate(machine_input("M1", 0, running=5000)),
            calculate(machine_input("M2", 0, running=10000)),
        ]
        analysis = aggregate_system_oee(results, AggregationMethod.PRODUCTION_WEIGHTED)
        assert analysis.system_oee == 0.0

    def test_compare_methods(self, line):
        comparison = compare_aggregation_methods(line)
        assert set(comparison) == set(AggregationMethod)
        assert comparison[AggregationMethod.MINIMUM] == pytest.approx(0.60)
        assert comparison[AggregationMethod.MULTIPLICATIVE] < comparison[AggregationMethod.MINIMUM]

    def test_quick_analysis_is_time_weighted(self, line):
        assert quick_system_analysis(line).aggregation_method == AggregationMethod.TIME_WEIGHTED


class TestSystemReport:

    def test_system_metrics(self, line):
        metrics = aggregate_system_oee(line).system_metrics
        assert metrics.best_machine_id == "M1"
        assert metrics.worst_machine_id == "M2"
        assert metrics.total_production == 24700
        assert metrics.total_planned_seconds == 30000
        assert metrics.avg_availability == pytest.approx(1.0)

    def test_capacity_and_gain(self, line):
        bottleneck = aggregate_system_oee(line).bottleneck_analysis
        assert bottleneck.system_capacity_limit == pytest.approx(3600.0)
        assert bottleneck.potential_throughput_gain == pytest.approx((0.95 - 0.60) / 0.60 * 100)

    def test_perfect_machines_have_no_bottleneck(self, machine_input):
        results = [calculate(machine_input(f"M{i}", 10000)) for i in range(5)]
        analysis = aggregate_system_oee(results)
        assert analysis.system_oee == pytest.approx(1.0)
        assert analysis.bottleneck_analysis.primary_bottlenecks == ()

    def test_shared_machine_id_flags_only_bottleneck(self, machine_input):
        # Same machine reported for two shifts
        results = [
            calculate(machine_input("M1", 9500)),
            calculate(machine_input("M1", 6000)),
            calculate(machine_input("M3", 9200)),
        ]
        analysis = aggregate_system_oee(results)
        assert [m.is_bottleneck for m in analysis.machines] == [False, True, False]
        assert analysis.bottleneck_analysis.primary_bottlenecks[0].sequence_position == 1

    def test_zero_worst_oee_guarded(self, machine_input):
        results = [calculate(machine_input("M1", 0)), calculate(machine_input("M2", 9000))]
        assert aggregate_system_oee(results).bottleneck_analysis.potential_throughput_gain == 0.0

    def test_empty_input(self):
        analysis = aggregate_system_oee([])
        assert analysis.system_oee == 0.0
        assert analysis.confidence == Confidence.LOW
        assert analysis.machines == ()

    def test_confidence_is_weakest(self, line):
        assert aggregate_system_oee(line).confidence == Confidence.HIGH

    def test_sequence_positions_and_dataframe(self, line):
        analysis = aggregate_system_oee(line)
        assert [m.sequence_position for m in analysis.machines] == [0, 1, 2]
        df = analysis.to_dataframe()
        assert list(df["machine_id"]) == ["M1", "M2", "M3"]
        assert df["is_bottleneck"].sum() == 1
        assert analysis.to_dict()["aggregation_method"] == "time_weighted"
