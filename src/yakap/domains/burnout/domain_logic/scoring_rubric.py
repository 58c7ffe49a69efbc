"""Deterministic signal scoring: one WellnessSignal -> one SignalScore.

Each per-type scorer looks up categorical metadata values in a rubric table
and combines them. Unknown or missing values contribute 0; unknown signal
types score 0. All functions are pure and never raise.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from yakap.domains.burnout.domain_logic.signal_models import (
    ACTIVITY_RUBRIC,
    CALENDAR_RUBRIC,
    CHECKIN_RUBRIC,
    NEGATIVE_THRESHOLD,
    POSITIVE_THRESHOLD,
    SIGNAL_WEIGHTS,
    SLEEP_RUBRIC,
    TASK_RUBRIC,
    RubricEntry,
    SignalCategory,
    SignalScore,
    WellnessSignal,
)


def rubric_score(table: Mapping[str, RubricEntry], value: Any) -> float:
    """Look up a categorical value, returning 0 for anything unrecognized."""
    if not isinstance(value, str):
        return 0.0
    entry = table.get(value)
    return entry.score if entry is not None else 0.0


def _sum_attributes(
    signal: WellnessSignal, rubric: Mapping[str, Mapping[str, RubricEntry]]
) -> float:
    return sum(rubric_score(table, signal.meta(attr)) for attr, table in rubric.items())


def categorize(score: float) -> SignalCategory:
    """Map a derived score to positive / neutral / negative."""
    if score > POSITIVE_THRESHOLD:
        return "positive"
    if score < NEGATIVE_THRESHOLD:
        return "negative"
    return "neutral"


# ---------------------------------------------------------------------------
# Per-type scorers
# ---------------------------------------------------------------------------

def score_check_in(signal: WellnessSignal) -> float:
    """Average of emotionalState, energyLevel and stressLevel.

    The denominator is always 3: a missing attribute counts as 0, it is not
    excluded from the average.
    """
    return _sum_attributes(signal, CHECKIN_RUBRIC) / 3


def score_task(signal: WellnessSignal) -> float:
    """Sum of completionRate, complexity and deadlinePressure."""
    return _sum_attributes(signal, TASK_RUBRIC)


def score_calendar_event(signal: WellnessSignal) -> float:
    """Sum of meetingFrequency, meetingDuration, timeOfDay and meetingType."""
    return _sum_attributes(signal, CALENDAR_RUBRIC)


def score_sleep(signal: WellnessSignal) -> float:
    """Average of sleepDuration and sleepQuality."""
    return _sum_attributes(signal, SLEEP_RUBRIC) / 2


def score_activity(signal: WellnessSignal) -> float:
    """Average of workHours and breakFrequency."""
    return _sum_attributes(signal, ACTIVITY_RUBRIC) / 2


_SCORERS: dict[str, Callable[[WellnessSignal], float]] = {
    "check-in": score_check_in,
    "task": score_task,
    "calendar-event": score_calendar_event,
    "sleep": score_sleep,
    "activity": score_activity,
}


def calculate_signal_score(signal: WellnessSignal) -> SignalScore:
    """Score a single signal using its type's rubric and base weight."""
    scorer = _SCORERS.get(signal.type)
    score = scorer(signal) if scorer is not None else 0.0
    return SignalScore(
        signal=signal,
        score=score,
        weight=SIGNAL_WEIGHTS.get(signal.type, 0.0),
        category=categorize(score),
    )
