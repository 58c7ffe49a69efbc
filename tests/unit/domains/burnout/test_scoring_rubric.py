"""Tests for the scoring rubric: per-signal deterministic scores."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from yakap.domains.burnout.domain_logic.scoring_rubric import (
    calculate_signal_score,
    categorize,
    rubric_score,
)
from yakap.domains.burnout.domain_logic.signal_models import (
    CHECKIN_RUBRIC,
    SIGNAL_WEIGHTS,
    WellnessSignal,
)

TS = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _signal(signal_type: str, **metadata) -> WellnessSignal:
    return WellnessSignal(type=signal_type, timestamp=TS, value=50, metadata=metadata)


class TestCheckIn:
    def test_best_answers_average_to_80(self):
        s = calculate_signal_score(_signal(
            "check-in", emotionalState="excellent", energyLevel="high", stressLevel="none",
        ))
        assert s.score == pytest.approx(80.0)
        assert s.weight == 0.35
        assert s.category == "positive"

    def test_worst_answers_are_neutral_not_negative(self):
        s = calculate_signal_score(_signal(
            "check-in", emotionalState="terrible", energyLevel="exhausted", stressLevel="overwhelming",
        ))
        assert s.score == pytest.approx(10 / 3)
        assert s.category == "neutral"

    def test_missing_attribute_still_divides_by_three(self):
        s = calculate_signal_score(_signal("check-in", emotionalState="excellent"))
        assert s.score == pytest.approx(80 / 3)

    def test_stress_is_inverted(self):
        calm = calculate_signal_score(_signal("check-in", stressLevel="none"))
        stressed = calculate_signal_score(_signal("check-in", stressLevel="overwhelming"))
        assert calm.score > stressed.score


class TestOtherTypes:
    def test_task_sums_attributes(self):
        good = calculate_signal_score(_signal(
            "task", completionRate="100%", complexity="simple", deadlinePressure="no-deadline",
        ))
        bad = calculate_signal_score(_signal(
            "task", completionRate="0-19%", complexity="very-complex", deadlinePressure="overdue",
        ))
        assert good.score == 110
        assert bad.score == -90
        assert bad.category == "negative"
        assert bad.weight == 0.25

    def test_calendar_sums_four_attributes(self):
        s = calculate_signal_score(_signal(
            "calendar-event",
            meetingFrequency="0-2",
            meetingDuration="short",
            timeOfDay="morning",
            meetingType="one-on-one",
        ))
        assert s.score == 40
        assert s.weight == 0.20

    def test_sleep_averages_two_attributes(self):
        s = calculate_signal_score(_signal("sleep", sleepDuration="optimal", sleepQuality="excellent"))
        assert s.score == 60
        assert s.weight == 0.15

    def test_activity_averages_two_attributes(self):
        s = calculate_signal_score(_signal("activity", workHours="excessive", breakFrequency="none"))
        assert s.score == pytest.approx(-27.5)
        assert s.category == "negative"
        assert s.weight == 0.05


class TestTotality:
    def test_unknown_type_scores_zero_with_zero_weight(self):
        s = calculate_signal_score(_signal("mood", feeling="great"))
        assert s.score == 0
        assert s.weight == 0
        assert s.category == "neutral"

    def test_unknown_values_contribute_zero(self):
        s = calculate_signal_score(_signal("sleep", sleepDuration="ten hours", sleepQuality="good"))
        assert s.score == 20

    def test_non_string_values_contribute_zero(self):
        assert rubric_score(CHECKIN_RUBRIC["energyLevel"], 5) == 0
        assert rubric_score(CHECKIN_RUBRIC["energyLevel"], None) == 0

    def test_empty_metadata_scores_zero(self):
        assert calculate_signal_score(_signal("task")).score == 0


class TestCategorize:
    @pytest.mark.parametrize("score,expected", [
        (20.0, "neutral"),
        (20.01, "positive"),
        (-20.0, "neutral"),
        (-20.01, "negative"),
        (0.0, "neutral"),
    ])
    def test_thresholds_are_strict(self, score, expected):
        assert categorize(score) == expected


def test_base_weights_sum_to_one():
    assert sum(SIGNAL_WEIGHTS.values()) == pytest.approx(1.0)


def test_signal_metadata_is_read_only():
    s = _signal("check-in", emotionalState="good")
    with pytest.raises(TypeError):
        s.metadata["emotionalState"] = "poor"


def test_naive_timestamp_is_taken_as_utc():
    s = WellnessSignal(type="sleep", timestamp=datetime(2026, 3, 1, 9, 0))
    assert s.timestamp.tzinfo is timezone.utc
