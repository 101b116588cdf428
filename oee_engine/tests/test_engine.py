"""
Tests - calculation entry points, errors and economics.
"""
from datetime import timedelta

import pytest

from oee_engine import (
    EconomicParameters,
    EngineError,
    InvalidInputError,
    ValidationFailedError,
    calculate,
    calculate_with_economics,
)
from oee_engine.assumptions import ScrapEvent, StartupWindowConfig
from oee_engine.domain import Confidence

from conftest import WINDOW_START


class TestCalculate:

    def test_basic_result(self, basic_input):
        result = calculate(basic_input)
        assert result.core.availability.value == 0.875
        assert result.core.quality.value == pytest.approx(0.95)
        assert result.oee == (
            result.core.availability.value * result.core.performance.value * result.core.quality.value
        )
        assert result.core.oee.confidence == Confidence.HIGH
        assert result.economics is None
        assert result.temporal_scrap is None
        assert result.machine.machine_id == "TEST-001"

    def test_allocation_overflow_raises_without_metrics(self, make_input):
        inp = make_input(running=timedelta(hours=7), stopped=timedelta(hours=2))
        with pytest.raises(ValidationFailedError) as exc_info:
            calculate(inp)
        error = exc_info.value
        assert error.validation.has_fatal_errors()
        assert "TIME_ALLOCATION_EXCEEDS_PLANNED" in error.params["fatal_codes"]
        assert error.to_dict()["code"] == "VALIDATION_FAILED"
        assert isinstance(error, EngineError)

    def test_warnings_do_not_block(self, make_input):
        result = calculate(make_input(total=1000, good=700, scrap=300))
        assert result.validation.has_warnings()
        assert "HIGH_SCRAP_RATE" in [w.code for w in result.ledger.warnings]

    def test_deterministic(self, basic_input):
        first = calculate(basic_input)
        second = calculate(basic_input)
        assert first.core == second.core
        assert first.loss_tree == second.loss_tree

    def test_leverage_sorted(self, make_input):
        result = calculate(make_input(total=800, good=700, scrap=100))
        gains = [op.oee_gain_points for op in result.leverage]
        assert gains == sorted(gains, reverse=True)
        by_key = {op.action_key: op for op in result.leverage}
        assert by_key["leverage.eliminate_scrap"].throughput_gain_units == 100
        assert by_key["leverage.eliminate_downtime"].throughput_gain_units == 144
        assert by_key["leverage.eliminate_speed_loss"].throughput_gain_units == 208

    def test_temporal_scrap_feeds_loss_tree_and_ledger(self, make_input):
        events = [
            ScrapEvent(WINDOW_START + timedelta(minutes=5), 20),
            ScrapEvent(WINDOW_START + timedelta(minutes=20), 10),
            ScrapEvent(WINDOW_START + timedelta(hours=3), 20),
        ]
        result = calculate(make_input(scrap_events=events))
        assert result.temporal_scrap.startup_scrap == 30
        assert result.loss_tree.find("loss_tree.startup_rejects").duration == timedelta(seconds=750)
        assert result.loss_tree.find("loss_tree.production_rejects").duration == timedelta(seconds=500)
        startup = result.ledger.get("assumption.startup_window")
        assert startup.value == timedelta(minutes=30)
        assert startup.source.value == "default"

    def test_explicit_startup_window(self, make_input):
        events = [ScrapEvent(WINDOW_START + timedelta(minutes=5), 50)]
        inp = make_input(scrap_events=events, startup_window=StartupWindowConfig.fixed(timedelta(minutes=2)))
        result = calculate(inp)
        assert result.temporal_scrap.startup_scrap == 0
        assert result.ledger.get("assumption.startup_window").source.value == "explicit"

    def test_to_dict(self, basic_input):
        data = calculate(basic_input).to_dict()
        assert data["core"]["oee"]["name_key"] == "metrics.oee"
        assert data["machine"]["machine_id"] == "TEST-001"
        assert data["economics"] is None
        assert data["validation"]["is_valid"] is True


class TestEconomics:

    @pytest.fixture
    def params(self):
        return EconomicParameters.from_point_estimates(
            unit_price=10.0, marginal_contribution=4.0, material_cost=3.0, labor_cost_per_hour=30.0,
        )

    def test_point_estimates_spread(self, params):
        assert params.marginal_contribution == pytest.approx((3.6, 4.0, 4.4))
        assert params.currency == "USD"

    def test_economic_bands(self, basic_input, params):
        econ = calculate_with_economics(basic_input, params).economics
        # lost units: 1008 − 1000
        assert econ.lost_units == 8
        assert econ.throughput_loss.central == pytest.approx(32.0)
        assert econ.material_waste.central == pytest.approx(150.0)
        assert econ.rework_cost.central == 0.0
        # 1h downtime × 144 units/h × 4.0
        assert econ.opportunity_cost.central == pytest.approx(576.0)
        assert econ.total.central == pytest.approx(758.0)
        assert econ.total.low == pytest.approx(758.0 * 0.9)
        assert econ.total.high == pytest.approx(758.0 * 1.1)
        assert list(econ.assumptions) == sorted(set(econ.assumptions))

    def test_rework_cost(self, make_input, params):
        econ = calculate_with_economics(make_input(reworked=20), params).economics
        # 20 × 3.0 × 0.5 + 20 × 0.1h × 30.0
        assert econ.rework_cost.central == pytest.approx(90.0)
        assert "economics.assumption.rework_time_per_unit" in econ.assumptions

    def test_invalid_band(self, basic_input):
        params = EconomicParameters(
            unit_price=(10.0, 5.0, 12.0),
            marginal_contribution=(1.0, 2.0, 3.0),
            material_cost=(1.0, 1.0, 1.0),
            labor_cost_per_hour=(20.0, 25.0, 30.0),
        )
        with pytest.raises(InvalidInputError) as exc_info:
            calculate_with_economics(basic_input, params)
        assert exc_info.value.params["fields"] == ["unit_price"]

    def test_economics_never_change_metrics(self, basic_input, params):
        assert calculate_with_economics(basic_input, params).core == calculate(basic_input).core
