"""Primary factor attribution.

The primary factor is the signal type whose mean weighted impact
(``score * weight``) is most negative. A per-type analyzer then inspects the
relevant sub-signals to produce a specific description and recommendation.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Sequence

from yakap.domains.burnout.domain_logic.forecast_models import PrimaryFactor
from yakap.domains.burnout.domain_logic.signal_models import (
    LOW_COMPLETION_RATES,
    SIGNAL_TYPES,
    SignalScore,
)

RECENT_WINDOW = timedelta(days=7)

_HIGH_STRESS = frozenset({"high", "overwhelming"})
_URGENT_DEADLINES = frozenset({"urgent", "overdue"})
_LONG_MEETINGS = frozenset({"long", "very-long"})
_SHORT_SLEEP = frozenset({"insufficient", "poor", "very-poor"})
_POOR_SLEEP_QUALITY = frozenset({"poor", "very-poor"})
_LONG_HOURS = frozenset({"long", "excessive"})
_FEW_BREAKS = frozenset({"rare", "none"})


def _proportion(scores: Sequence[SignalScore], predicate: Callable[[SignalScore], bool]) -> float:
    if not scores:
        return 0.0
    return sum(1 for s in scores if predicate(s)) / len(scores)


def _mean_score(scores: Sequence[SignalScore]) -> float:
    return sum(s.score for s in scores) / len(scores) if scores else 0.0


# ---------------------------------------------------------------------------
# Per-type analyzers: (scores of that type, now) -> (description, recommendation)
# ---------------------------------------------------------------------------

def analyze_check_ins(scores: Sequence[SignalScore], now: datetime) -> tuple[str, str]:
    recent = [s for s in scores if s.signal.timestamp >= now - RECENT_WINDOW]
    if not recent:
        return (
            "No wellness check-ins in the past week",
            "Complete a wellness check-in today to assess how you are feeling",
        )

    stressed = _proportion(recent, lambda s: s.signal.meta("stressLevel") in _HIGH_STRESS)
    if stressed > 0.5:
        return (
            f"High stress reported in {stressed:.0%} of recent check-ins",
            "Set aside 10 minutes today for a stress-reduction break",
        )

    avg = _mean_score(recent)
    if avg < -10:
        return (
            "Recent check-ins show declining emotional wellbeing",
            "Talk with someone you trust about how the week is going",
        )
    return (
        f"Recent check-ins average {avg:.0f} across {len(recent)} entries",
        "Keep checking in daily so changes are caught early",
    )


def analyze_tasks(scores: Sequence[SignalScore], now: datetime) -> tuple[str, str]:
    low = _proportion(scores, lambda s: s.signal.meta("completionRate") in LOW_COMPLETION_RATES)
    if low > 0.5:
        return (
            f"{low:.0%} of tasks have low completion rates",
            "Break large tasks into smaller steps and set realistic daily goals",
        )

    urgent = _proportion(scores, lambda s: s.signal.meta("deadlinePressure") in _URGENT_DEADLINES)
    if urgent > 0:
        return (
            f"{urgent:.0%} of tasks are urgent or overdue",
            "Renegotiate one deadline this week and protect time for the rest",
        )
    return (
        "Task workload is weighing on overall wellbeing",
        "Review your task list and drop or delegate one low-value item",
    )


def analyze_calendar(scores: Sequence[SignalScore], now: datetime) -> tuple[str, str]:
    heavy = _proportion(
        scores,
        lambda s: s.signal.meta("meetingFrequency") == "9+"
        or s.signal.meta("meetingDuration") in _LONG_MEETINGS,
    )
    if heavy > 0:
        return (
            f"{heavy:.0%} of calendar days have heavy or long meetings",
            "Decline non-essential meetings and block focus time in your calendar",
        )

    late = _proportion(scores, lambda s: s.signal.meta("timeOfDay") == "late-night")
    if late > 0:
        return (
            f"{late:.0%} of meetings run late at night",
            "Move late meetings into working hours where possible",
        )
    return (
        "Meeting schedule is adding pressure",
        "Shorten recurring meetings to leave buffers between them",
    )


def analyze_sleep(scores: Sequence[SignalScore], now: datetime) -> tuple[str, str]:
    short = _proportion(
        scores,
        lambda s: s.signal.meta("sleepDuration") in _SHORT_SLEEP
        or s.signal.meta("sleepQuality") in _POOR_SLEEP_QUALITY,
    )
    if short > 0:
        return (
            f"{short:.0%} of nights show short or poor-quality sleep",
            "Keep a consistent bedtime and aim for 7-8 hours of sleep",
        )
    return (
        "Sleep patterns are dragging down recovery",
        "Wind down without screens for 30 minutes before bed",
    )


def analyze_activity(scores: Sequence[SignalScore], now: datetime) -> tuple[str, str]:
    overworked = _proportion(
        scores,
        lambda s: s.signal.meta("workHours") in _LONG_HOURS
        or s.signal.meta("breakFrequency") in _FEW_BREAKS,
    )
    if overworked > 0:
        return (
            f"{overworked:.0%} of days show long hours or few breaks",
            "Schedule short walking or stretching breaks through the day",
        )
    return (
        "Daily activity balance needs attention",
        "Add a short break between long work blocks",
    )


_ANALYZERS: dict[str, Callable[[Sequence[SignalScore], datetime], tuple[str, str]]] = {
    "check-in": analyze_check_ins,
    "task": analyze_tasks,
    "calendar-event": analyze_calendar,
    "sleep": analyze_sleep,
    "activity": analyze_activity,
}


def identify_primary_factor(scores: Sequence[SignalScore], now: datetime) -> PrimaryFactor:
    """Attribute the most negative signal type.

    Ties keep the first type in ``SIGNAL_TYPES`` order. If no type has a
    negative mean impact the factor defaults to ``check-in`` with impact 0.
    """
    by_type: dict[str, list[SignalScore]] = {t: [] for t in SIGNAL_TYPES}
    for s in scores:
        if s.signal.type in by_type:
            by_type[s.signal.type].append(s)

    primary = "check-in"
    min_impact = 0.0
    for signal_type in SIGNAL_TYPES:
        group = by_type[signal_type]
        if not group:
            continue
        impact = sum(s.weighted_score for s in group) / len(group)
        if impact < min_impact:
            primary = signal_type
            min_impact = impact

    description, recommendation = _ANALYZERS[primary](by_type[primary], now)
    return PrimaryFactor(
        category=primary,
        impact=min_impact,
        description=description,
        specific_recommendation=recommendation,
    )
