"""Wellness signal models and scoring rubric tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Literal, Mapping

# ---------------------------------------------------------------------------
# Signal vocabulary
# ---------------------------------------------------------------------------

SignalType = Literal["check-in", "task", "calendar-event", "sleep", "activity"]
SignalCategory = Literal["positive", "neutral", "negative"]

# Fixed iteration order, also used for primary-factor tie-breaking
SIGNAL_TYPES: tuple[str, ...] = (
    "check-in",
    "task",
    "calendar-event",
    "sleep",
    "activity",
)

# Base weights per signal type:
#   check-in (0.35):       direct user input, most trusted
#   task (0.25):           completion patterns
#   calendar-event (0.20): schedule stress
#   sleep (0.15):          inferred from patterns
#   activity (0.05):       background activity
SIGNAL_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "check-in": 0.35,
    "task": 0.25,
    "calendar-event": 0.20,
    "sleep": 0.15,
    "activity": 0.05,
})

POSITIVE_THRESHOLD = 20.0
NEGATIVE_THRESHOLD = -20.0


# ---------------------------------------------------------------------------
# Rubric tables
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RubricEntry:
    """A scored categorical value. ``weight`` is advisory and not aggregated."""

    score: float
    weight: float


def _table(entries: dict[str, tuple[float, float]]) -> Mapping[str, RubricEntry]:
    return MappingProxyType({k: RubricEntry(score=s, weight=w) for k, (s, w) in entries.items()})


CHECKIN_RUBRIC: Mapping[str, Mapping[str, RubricEntry]] = MappingProxyType({
    "emotionalState": _table({
        "excellent": (80, 1.0),
        "good": (60, 0.8),
        "okay": (40, 0.6),
        "poor": (20, 0.4),
        "terrible": (0, 0.2),
    }),
    "energyLevel": _table({
        "high": (70, 1.0),
        "moderate": (50, 0.8),
        "low": (30, 0.6),
        "exhausted": (10, 0.4),
    }),
    # Inverted: higher stress scores lower
    "stressLevel": _table({
        "none": (90, 1.0),
        "low": (70, 0.9),
        "moderate": (40, 0.7),
        "high": (20, 0.5),
        "overwhelming": (0, 0.3),
    }),
})

TASK_RUBRIC: Mapping[str, Mapping[str, RubricEntry]] = MappingProxyType({
    "completionRate": _table({
        "100%": (80, 1.0),
        "80-99%": (70, 0.9),
        "60-79%": (50, 0.7),
        "40-59%": (30, 0.5),
        "20-39%": (10, 0.3),
        "0-19%": (-20, 0.2),
    }),
    "complexity": _table({
        "simple": (10, 0.3),
        "moderate": (0, 0.5),
        "complex": (-10, 0.7),
        "very-complex": (-20, 0.9),
    }),
    "deadlinePressure": _table({
        "no-deadline": (20, 0.5),
        "distant": (10, 0.6),
        "approaching": (-10, 0.8),
        "urgent": (-30, 1.0),
        "overdue": (-50, 1.0),
    }),
})

CALENDAR_RUBRIC: Mapping[str, Mapping[str, RubricEntry]] = MappingProxyType({
    "meetingFrequency": _table({
        "0-2": (20, 0.5),
        "3-5": (0, 0.7),
        "6-8": (-10, 0.8),
        "9+": (-30, 1.0),
    }),
    "meetingDuration": _table({
        "short": (10, 0.4),
        "standard": (0, 0.6),
        "long": (-15, 0.8),
        "very-long": (-25, 1.0),
    }),
    "timeOfDay": _table({
        "morning": (5, 0.5),
        "afternoon": (0, 0.6),
        "evening": (-5, 0.7),
        "late-night": (-15, 0.9),
    }),
    "meetingType": _table({
        "one-on-one": (5, 0.4),
        "team-sync": (0, 0.6),
        "presentation": (-10, 0.8),
        "client-meeting": (-15, 0.9),
        "performance-review": (-25, 1.0),
    }),
})

SLEEP_RUBRIC: Mapping[str, Mapping[str, RubricEntry]] = MappingProxyType({
    "sleepDuration": _table({
        "optimal": (60, 1.0),
        "adequate": (40, 0.8),
        "insufficient": (20, 0.6),
        "poor": (0, 0.4),
        "very-poor": (-20, 0.2),
    }),
    "sleepQuality": _table({
        "excellent": (60, 1.0),
        "good": (40, 0.8),
        "fair": (20, 0.6),
        "poor": (0, 0.4),
        "very-poor": (-20, 0.2),
    }),
})

ACTIVITY_RUBRIC: Mapping[str, Mapping[str, RubricEntry]] = MappingProxyType({
    "workHours": _table({
        "optimal": (20, 0.5),
        "moderate": (0, 0.6),
        "long": (-10, 0.8),
        "excessive": (-30, 1.0),
    }),
    "breakFrequency": _table({
        "regular": (15, 0.5),
        "occasional": (5, 0.6),
        "rare": (-10, 0.8),
        "none": (-25, 1.0),
    }),
})

# Metadata values treated as "low completion" by the task insights
LOW_COMPLETION_RATES = frozenset({"0-19%", "20-39%"})


# ---------------------------------------------------------------------------
# Signal types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WellnessSignal:
    """One timestamped observation about a subject's wellbeing.

    ``value`` is the raw 0-100 reading and is informational only; scoring
    is driven entirely by ``metadata``.
    """

    type: str
    timestamp: datetime
    value: float = 0.0
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only view so consumers cannot mutate a shared signal
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata or {})))
        # Naive timestamps are taken as UTC
        if isinstance(self.timestamp, datetime) and self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))

    def meta(self, key: str) -> Any:
        """Return a metadata value, or None when absent."""
        return self.metadata.get(key)


@dataclass(frozen=True)
class SignalScore:
    """Derived score for a single signal; never persisted."""

    signal: WellnessSignal
    score: float
    weight: float
    category: SignalCategory

    @property
    def weighted_score(self) -> float:
        return self.score * self.weight
