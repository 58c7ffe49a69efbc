"""Tests for the BurnoutForecastEngine: end-to-end forecast computation."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from yakap.domains.burnout.connectors.signal_factory import (
    create_calendar_signal,
    create_check_in_signal,
    create_task_signal,
)
from yakap.domains.burnout.domain_logic.forecast_engine import (
    BurnoutForecastEngine,
    analyze_trend,
    calculate_confidence,
    classify_slope,
    determine_risk_level,
    linear_slope,
    next_check_in,
)
from yakap.domains.burnout.domain_logic.forecast_models import (
    DEFAULT_FORECAST_CONFIG,
    ForecastInputError,
    RiskThresholds,
)
from yakap.domains.burnout.domain_logic.scoring_rubric import calculate_signal_score
from yakap.domains.burnout.recommendations.templates import (
    FACTOR_TEMPLATES,
    INSUFFICIENT_DATA_TEMPLATES,
    RISK_LEVEL_TEMPLATES,
)

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)

# (emotionalState, energyLevel, stressLevel) -> check-in score
EXCELLENT = ("excellent", "high", "none")          # 80.0
GOOD = ("good", "high", "low")                     # 66.67
OKAY = ("okay", "moderate", "moderate")            # 43.33
POOR = ("poor", "low", "high")                     # 23.33
TERRIBLE = ("terrible", "exhausted", "overwhelming")  # 3.33


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _engine(**kwargs) -> BurnoutForecastEngine:
    return BurnoutForecastEngine(clock=lambda: NOW, **kwargs)


def _check_in(answers, hours_ago: float = 1):
    return create_check_in_signal(*answers, timestamp=NOW - timedelta(hours=hours_ago))


def _check_ins(answers_list, hours_apart: float = 6):
    return [_check_in(a, hours_ago=1 + i * hours_apart) for i, a in enumerate(answers_list)]


def _bad_task(hours_ago: float = 2):
    return create_task_signal(
        "0-19%", "very-complex", "overdue", timestamp=NOW - timedelta(hours=hours_ago)
    )


# ---------------------------------------------------------------------------
# Full forecasts
# ---------------------------------------------------------------------------

class TestHealthyForecast:
    def test_excellent_check_ins_give_low_risk(self):
        forecast = _run(_engine().compute_forecast("u1", _check_ins([EXCELLENT] * 5)))

        assert forecast.overall_score == pytest.approx(80.0)
        assert forecast.risk_level == "low"
        assert forecast.confidence == pytest.approx(0.5)
        assert forecast.trend == "stable"
        assert forecast.emotional_weather.label == "Sunny"
        assert forecast.factors.positive == ("check-in patterns are healthy",)
        assert forecast.factors.negative == ()
        assert forecast.next_check_in == NOW + timedelta(days=3)

    def test_no_negative_type_defaults_primary_factor_to_check_in(self):
        forecast = _run(_engine().compute_forecast("u1", _check_ins([EXCELLENT] * 5)))
        assert forecast.primary_factor.category == "check-in"
        assert forecast.primary_factor.impact == 0

    def test_template_recommendations_without_llm(self):
        forecast = _run(_engine().compute_forecast("u1", _check_ins([EXCELLENT] * 5)))
        assert list(forecast.recommendations) == [
            RISK_LEVEL_TEMPLATES["low"],
            FACTOR_TEMPLATES["check-in"],
        ]

    def test_metadata(self):
        forecast = _run(_engine().compute_forecast("u1", _check_ins([EXCELLENT] * 5)))
        assert forecast.user_id == "u1"
        assert forecast.timestamp == NOW
        assert forecast.metadata.signal_count == 5
        assert forecast.metadata.time_range_start == NOW - timedelta(days=14)
        assert forecast.metadata.time_range_end == NOW
        assert forecast.metadata.processing_time >= 0
        assert forecast.forecast_id == f"u1_{int(NOW.timestamp() * 1000)}"


class TestWorstCaseCheckIns:
    def test_terrible_check_ins_score_3_33_high_risk(self):
        forecast = _run(_engine().compute_forecast("u1", _check_ins([TERRIBLE] * 5)))
        assert forecast.overall_score == pytest.approx(10 / 3)
        assert forecast.risk_level == "high"
        assert forecast.factors.neutral == ("check-in patterns are mixed",)
        assert forecast.next_check_in == NOW + timedelta(hours=12)


class TestPrimaryFactorAttribution:
    def test_failing_tasks_are_the_primary_factor(self):
        signals = _check_ins([EXCELLENT] * 3) + [_bad_task(h) for h in (2, 8, 14)]
        forecast = _run(_engine().compute_forecast("u1", signals))

        # (3 * 80 * .35 + 3 * -90 * .25) / (3 * .35 + 3 * .25)
        assert forecast.overall_score == pytest.approx(16.5 / 1.8)
        assert forecast.risk_level == "high"
        assert forecast.primary_factor.category == "task"
        assert forecast.primary_factor.impact == pytest.approx(-22.5)
        assert "low completion" in forecast.primary_factor.description
        assert "task patterns indicate stress" in forecast.factors.negative
        assert "Task completion rates are declining" in forecast.factors.negative
        assert list(forecast.recommendations) == [
            RISK_LEVEL_TEMPLATES["high"],
            FACTOR_TEMPLATES["task"],
        ]

    def test_heavy_meetings_insight(self):
        meetings = [
            create_calendar_signal(
                "9+", "standard", "afternoon", "team-sync", timestamp=NOW - timedelta(hours=h)
            )
            for h in (3, 9)
        ]
        forecast = _run(_engine().compute_forecast("u1", _check_ins([GOOD] * 3) + meetings))
        assert "High meeting load detected" in forecast.factors.negative


class TestInsufficientData:
    def test_below_minimum_returns_degraded_forecast(self):
        forecast = _run(_engine().compute_forecast("u1", _check_ins([EXCELLENT] * 4)))

        assert forecast.is_degraded
        assert forecast.overall_score == 0
        assert forecast.risk_level == "low"
        assert forecast.confidence == 0.1
        assert forecast.trend == "stable"
        assert forecast.factors.negative == ("Insufficient data for reliable forecast",)
        assert forecast.primary_factor.category == "data-insufficiency"
        assert forecast.recommendations == INSUFFICIENT_DATA_TEMPLATES
        assert forecast.next_check_in == NOW + timedelta(hours=24)
        assert forecast.metadata.signal_count == 4

    def test_empty_signals_are_degraded_not_an_error(self):
        forecast = _run(_engine().compute_forecast("u1", []))
        assert forecast.is_degraded
        assert forecast.metadata.signal_count == 0

    def test_signals_outside_window_do_not_count(self):
        old = [_check_in(EXCELLENT, hours_ago=24 * 20 + i) for i in range(10)]
        recent = _check_ins([EXCELLENT] * 2)
        forecast = _run(_engine().compute_forecast("u1", old + recent))
        assert forecast.is_degraded
        assert forecast.metadata.signal_count == 2


class TestSignalCount:
    def test_count_is_signals_in_window(self):
        old = [_check_in(EXCELLENT, hours_ago=24 * 15), _check_in(EXCELLENT, hours_ago=24 * 30)]
        forecast = _run(_engine().compute_forecast("u1", old + _check_ins([EXCELLENT] * 5)))
        assert forecast.metadata.signal_count == 5

    def test_window_boundary_is_inclusive(self):
        edge = _check_in(EXCELLENT, hours_ago=24 * 14)
        forecast = _run(_engine().compute_forecast("u1", [edge] + _check_ins([EXCELLENT] * 4)))
        assert forecast.metadata.signal_count == 5
        assert not forecast.is_degraded


class TestTrend:
    def test_improving_in_input_order(self):
        forecast = _run(_engine().compute_forecast(
            "u1", _check_ins([TERRIBLE, POOR, OKAY, GOOD, EXCELLENT])
        ))
        assert forecast.trend == "improving"
        assert forecast.emotional_weather.description.endswith(" - clearing up")

    def test_steep_decline_is_declining_never_critical(self):
        forecast = _run(_engine().compute_forecast(
            "u1", _check_ins([EXCELLENT, GOOD, OKAY, POOR, TERRIBLE])
        ))
        assert forecast.trend == "declining"
        assert forecast.emotional_weather.label == "Partly Cloudy"
        assert forecast.emotional_weather.description.endswith(" - conditions worsening")

    def test_trend_follows_input_order_not_timestamps(self):
        # _check_ins lists newest first, so input order runs backwards in time
        signals = _check_ins([TERRIBLE, POOR, OKAY, GOOD, EXCELLENT])
        assert signals[0].timestamp > signals[-1].timestamp
        forecast = _run(_engine().compute_forecast("u1", signals))
        assert forecast.trend == "improving"

    def test_fewer_than_three_recent_points_is_stable(self):
        old = [_check_in(a, hours_ago=24 * 10 + i) for i, a in enumerate([EXCELLENT, GOOD, OKAY])]
        recent = _check_ins([POOR, TERRIBLE])
        forecast = _run(_engine().compute_forecast("u1", old + recent))
        assert forecast.trend == "stable"


class TestConfigOverride:
    def test_lower_minimum_allows_small_batches(self):
        forecast = _run(_engine().compute_forecast(
            "u1", _check_ins([EXCELLENT] * 2), {"minSignalsRequired": 2}
        ))
        assert not forecast.is_degraded
        assert forecast.metadata.signal_count == 2

    def test_wider_window_includes_older_signals(self):
        old = [_check_in(EXCELLENT, hours_ago=24 * 20 + i) for i in range(5)]
        forecast = _run(_engine().compute_forecast("u1", old, {"analysis_window": 30}))
        assert not forecast.is_degraded
        assert forecast.metadata.time_range_start == NOW - timedelta(days=30)

    def test_override_does_not_mutate_engine_config(self):
        engine = _engine()
        _run(engine.compute_forecast("u1", _check_ins([EXCELLENT] * 5), {"analysisWindow": 3}))
        assert engine.config == DEFAULT_FORECAST_CONFIG

    def test_custom_risk_thresholds(self):
        forecast = _run(_engine().compute_forecast(
            "u1",
            _check_ins([EXCELLENT] * 5),
            {"riskThresholds": {"low": 90, "moderate": 70, "high": 50}},
        ))
        assert forecast.risk_level == "moderate"

    def test_unknown_key_rejected(self):
        with pytest.raises(ForecastInputError):
            _run(_engine().compute_forecast("u1", [], {"windowSize": 3}))


class TestInputValidation:
    @pytest.mark.parametrize("user_id", ["", "   ", None, 42])
    def test_user_id_required(self, user_id):
        with pytest.raises(ForecastInputError):
            _run(_engine().compute_forecast(user_id, []))

    @pytest.mark.parametrize("signals", [None, "check-in", {"type": "check-in"}, 5])
    def test_signals_must_be_a_collection(self, signals):
        with pytest.raises(ForecastInputError):
            _run(_engine().compute_forecast("u1", signals))

    def test_non_signal_items_rejected(self):
        with pytest.raises(ForecastInputError):
            _run(_engine().compute_forecast("u1", [{"type": "check-in", "timestamp": NOW}]))

    def test_input_error_is_a_value_error(self):
        assert issubclass(ForecastInputError, ValueError)


class TestDeterminism:
    def test_same_inputs_same_forecast(self):
        signals = _check_ins([EXCELLENT, POOR, OKAY]) + [_bad_task(4), _bad_task(10)]
        engine = _engine()
        first = _run(engine.compute_forecast("u1", signals)).to_dict()
        second = _run(engine.compute_forecast("u1", signals)).to_dict()
        first["metadata"].pop("processingTime")
        second["metadata"].pop("processingTime")
        assert first == second

    def test_signals_are_not_mutated(self):
        signals = _check_ins([EXCELLENT] * 5)
        before = [(s.type, s.timestamp, s.value, dict(s.metadata)) for s in signals]
        _run(_engine().compute_forecast("u1", signals))
        assert [(s.type, s.timestamp, s.value, dict(s.metadata)) for s in signals] == before

    def test_accepts_any_iterable(self):
        forecast = _run(_engine().compute_forecast("u1", iter(_check_ins([EXCELLENT] * 5))))
        assert forecast.metadata.signal_count == 5


# ---------------------------------------------------------------------------
# Stage functions
# ---------------------------------------------------------------------------

class TestRiskLevel:
    @pytest.mark.parametrize("score,expected", [
        (80.0, "low"),
        (30.0, "low"),
        (29.99, "moderate"),
        (10.0, "moderate"),
        (9.99, "high"),
        (-10.0, "high"),
        (-10.01, "critical"),
        (-80.0, "critical"),
    ])
    def test_boundaries_resolve_to_the_satisfied_threshold(self, score, expected):
        assert determine_risk_level(score, RiskThresholds()) == expected

    def test_check_order_is_low_first(self):
        # Non-descending thresholds: low is checked first and wins
        thresholds = RiskThresholds(low=0, moderate=50, high=100)
        assert determine_risk_level(60, thresholds) == "low"
        assert determine_risk_level(-1, thresholds) == "critical"


class TestSlope:
    def test_linear_slope(self):
        assert linear_slope([0, 10, 20, 30]) == pytest.approx(10)
        assert linear_slope([5, 5, 5]) == 0
        assert linear_slope([7]) == 0

    @pytest.mark.parametrize("slope,expected", [
        (5.01, "improving"),
        (5.0, "stable"),
        (-5.0, "stable"),
        (-5.01, "declining"),
        (-40.0, "declining"),
    ])
    def test_classification(self, slope, expected):
        assert classify_slope(slope) == expected

    def test_critical_trend_is_never_produced(self):
        assert all(classify_slope(s) != "critical" for s in (-15.01, -50, -1000))


class TestConfidence:
    def _scores(self, answers_list, hours_ago):
        return [
            calculate_signal_score(_check_in(a, hours_ago=hours_ago + i))
            for i, a in enumerate(answers_list)
        ]

    def test_full_confidence_with_ten_consistent_recent_signals(self):
        assert calculate_confidence(self._scores([EXCELLENT] * 10, 1), NOW) == pytest.approx(1.0)

    def test_no_recent_signals_means_zero_confidence(self):
        assert calculate_confidence(self._scores([EXCELLENT] * 10, 24 * 9), NOW) == 0

    def test_inconsistency_floor(self):
        scores = self._scores([EXCELLENT, TERRIBLE] * 5, 1)
        assert calculate_confidence(scores, NOW) == pytest.approx(0.3)

    def test_bounded(self):
        for hours in (1, 24 * 6, 24 * 8):
            c = calculate_confidence(self._scores([EXCELLENT, POOR, OKAY] * 4, hours), NOW)
            assert 0 <= c <= 1


def test_trend_window_uses_config():
    scores = [calculate_signal_score(_check_in(a, hours_ago=24 * 5)) for a in (TERRIBLE, OKAY, EXCELLENT)]
    assert analyze_trend(scores, DEFAULT_FORECAST_CONFIG, NOW) == "improving"
    narrow = DEFAULT_FORECAST_CONFIG.merged({"trendAnalysis": {"windowDays": 3}})
    assert analyze_trend(scores, narrow, NOW) == "stable"


@pytest.mark.parametrize("risk,offset", [
    ("low", timedelta(days=3)),
    ("moderate", timedelta(days=1)),
    ("high", timedelta(hours=12)),
    ("critical", timedelta(hours=6)),
])
def test_next_check_in_schedule(risk, offset):
    assert next_check_in(risk, NOW) == NOW + offset
