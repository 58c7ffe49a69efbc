"""Tests for primary factor attribution and per-type analyzers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from yakap.domains.burnout.connectors.signal_factory import (
    create_activity_signal,
    create_calendar_signal,
    create_check_in_signal,
    create_sleep_signal,
    create_task_signal,
)
from yakap.domains.burnout.domain_logic.primary_factor import (
    analyze_check_ins,
    identify_primary_factor,
)
from yakap.domains.burnout.domain_logic.scoring_rubric import calculate_signal_score

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def _ts(hours_ago: float = 1) -> datetime:
    return NOW - timedelta(hours=hours_ago)


def _scores(*signals):
    return [calculate_signal_score(s) for s in signals]


class TestIdentifyPrimaryFactor:
    def test_most_negative_mean_impact_wins(self):
        scores = _scores(
            create_check_in_signal("good", "moderate", "low", timestamp=_ts()),
            create_sleep_signal("very-poor", "very-poor", timestamp=_ts()),        # -20 * .15 = -3
            create_activity_signal("excessive", "none", timestamp=_ts()),         # -27.5 * .05
        )
        factor = identify_primary_factor(scores, NOW)
        assert factor.category == "sleep"
        assert factor.impact == pytest.approx(-3.0)
        assert "sleep" in factor.description
        assert factor.specific_recommendation

    def test_ties_keep_the_earlier_type(self):
        scores = _scores(
            # 30 - 20 - 50 = -40; * .25 = -10
            create_task_signal("40-59%", "very-complex", "overdue", timestamp=_ts()),
            # -30 - 15 - 5 + 0 = -50; * .20 = -10
            create_calendar_signal("9+", "long", "evening", "team-sync", timestamp=_ts()),
        )
        factor = identify_primary_factor(scores, NOW)
        assert factor.category == "task"
        assert factor.impact == pytest.approx(-10.0)

    def test_defaults_to_check_in_with_zero_impact(self):
        scores = _scores(create_sleep_signal("optimal", "excellent", timestamp=_ts()))
        factor = identify_primary_factor(scores, NOW)
        assert factor.category == "check-in"
        assert factor.impact == 0

    def test_unknown_types_are_ignored(self):
        from yakap.domains.burnout.domain_logic.signal_models import WellnessSignal

        scores = _scores(WellnessSignal(type="mood", timestamp=_ts(), metadata={"x": "y"}))
        assert identify_primary_factor(scores, NOW).category == "check-in"


class TestAnalyzers:
    def test_no_recent_check_ins(self):
        scores = _scores(create_check_in_signal("poor", "low", "high", timestamp=_ts(24 * 9)))
        description, recommendation = analyze_check_ins(scores, NOW)
        assert "past week" in description
        assert "check-in" in recommendation

    def test_high_stress_proportion(self):
        scores = _scores(
            create_check_in_signal("okay", "moderate", "overwhelming", timestamp=_ts(1)),
            create_check_in_signal("okay", "moderate", "high", timestamp=_ts(2)),
            create_check_in_signal("okay", "moderate", "low", timestamp=_ts(3)),
        )
        description, _ = analyze_check_ins(scores, NOW)
        assert "67%" in description

    def test_calendar_analyzer_reports_heavy_days(self):
        scores = _scores(
            create_calendar_signal("9+", "standard", "afternoon", "team-sync", timestamp=_ts()),
            create_calendar_signal("3-5", "standard", "afternoon", "client-meeting", timestamp=_ts()),
        )
        factor = identify_primary_factor(scores, NOW)
        assert factor.category == "calendar-event"
        assert "50%" in factor.description

    def test_activity_analyzer(self):
        scores = _scores(create_activity_signal("long", "rare", timestamp=_ts()))
        factor = identify_primary_factor(scores, NOW)
        assert factor.category == "activity"
        assert "long hours or few breaks" in factor.description
