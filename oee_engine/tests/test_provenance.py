"""
Tests - provenance values, confidence ordering and count inference.
"""
from datetime import timedelta

import pytest

from oee_engine.assumptions import (
    AnalysisWindow,
    CountModelBuilder,
    ProvenanceValue,
    ReasonCode,
    ThresholdConfiguration,
    ThresholdProfile,
    ValueSource,
    format_duration,
    weakest_source,
)
from oee_engine.domain import Confidence

from conftest import WINDOW_START


class TestProvenanceValue:

    @pytest.mark.parametrize("factory,source", [
        (ProvenanceValue.explicit, ValueSource.EXPLICIT),
        (ProvenanceValue.inferred, ValueSource.INFERRED),
        (ProvenanceValue.default, ValueSource.DEFAULT),
    ])
    def test_map_preserves_tag(self, factory, source):
        value = factory(timedelta(hours=2))
        mapped = value.map(lambda d: d.total_seconds())
        assert mapped.value == 7200.0
        assert mapped.source == source

    def test_chained_maps_keep_tag(self):
        value = ProvenanceValue.default(10).map(lambda n: n * 2).map(str)
        assert value.value == "20"
        assert value.is_default

    def test_weakest_source(self):
        assert weakest_source([ValueSource.EXPLICIT, ValueSource.INFERRED]) == ValueSource.INFERRED
        assert weakest_source([ValueSource.INFERRED, ValueSource.DEFAULT]) == ValueSource.DEFAULT
        assert weakest_source([ValueSource.EXPLICIT]) == ValueSource.EXPLICIT
        assert weakest_source([]) == ValueSource.INFERRED


class TestConfidence:

    def test_rank_order(self):
        assert Confidence.HIGH.rank > Confidence.MEDIUM.rank > Confidence.LOW.rank

    def test_weakest(self):
        assert Confidence.weakest(Confidence.HIGH, Confidence.LOW, Confidence.MEDIUM) == Confidence.LOW
        assert Confidence.weakest(Confidence.HIGH, Confidence.MEDIUM) == Confidence.MEDIUM
        assert Confidence.weakest() == Confidence.HIGH

    def test_any_default_is_low(self):
        sources = [ValueSource.EXPLICIT, ValueSource.EXPLICIT, ValueSource.DEFAULT]
        assert Confidence.from_sources(sources) == Confidence.LOW

    def test_more_inferred_than_explicit_is_medium(self):
        sources = [ValueSource.INFERRED, ValueSource.INFERRED, ValueSource.EXPLICIT]
        assert Confidence.from_sources(sources) == Confidence.MEDIUM

    def test_tie_stays_high(self):
        assert Confidence.from_sources([ValueSource.INFERRED, ValueSource.EXPLICIT]) == Confidence.HIGH


class TestCountModelBuilder:

    def test_infers_total(self):
        summary = CountModelBuilder().good(900).scrap(100).build()
        assert summary.total == 1000
        assert summary.total_units.is_inferred
        assert summary.good_units.is_explicit

    def test_rework_is_drawn_from_good(self):
        summary = CountModelBuilder().good(900).scrap(100).rework(50).build()
        assert summary.total == 1000
        assert summary.reworked == 50
        assert summary.quality_ratio == 0.9

    def test_infers_good_ignoring_rework(self):
        summary = CountModelBuilder().total(1000).scrap(100).rework(50).build()
        assert summary.good == 900
        assert summary.good_units.is_inferred

    def test_infers_good_saturating(self):
        summary = CountModelBuilder().total(50).scrap(80).build()
        assert summary.good == 0
        assert summary.good_units.is_inferred

    def test_missing_scrap_and_rework_default_to_zero(self):
        summary = CountModelBuilder().total(100).good(100).build()
        assert summary.scrap == 0
        assert summary.scrap_units.is_default
        assert summary.reworked_units.is_default

    def test_nothing_supplied(self):
        summary = CountModelBuilder().build()
        assert summary.total == 0
        assert summary.total_units.is_default
        assert summary.good_units.is_default


class TestSupportingTypes:

    def test_window_duration_clamped(self):
        window = AnalysisWindow(WINDOW_START, WINDOW_START - timedelta(hours=1))
        assert window.duration == timedelta(0)

    def test_reason_code_parse(self):
        code = ReasonCode.parse("Mechanical > Bearing Failure")
        assert code.path == ("Mechanical", "Bearing Failure")
        assert code.category == "Mechanical"
        assert code.leaf == "Bearing Failure"
        assert str(code) == "Mechanical > Bearing Failure"

    def test_threshold_presets(self):
        strict = ThresholdConfiguration.strict()
        lenient = ThresholdConfiguration.lenient()
        assert strict.small_stop_threshold == timedelta(minutes=3)
        assert strict.high_scrap_rate_threshold == 0.10
        assert lenient.micro_stoppage_threshold == timedelta(seconds=60)
        assert ThresholdConfiguration.for_profile(ThresholdProfile.DEFAULT) == ThresholdConfiguration()

    def test_format_duration(self):
        assert format_duration(timedelta(hours=7, minutes=3, seconds=9)) == "7h 3m 9s"
