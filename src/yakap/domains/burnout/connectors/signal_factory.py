"""Signal construction helpers.

Builders for each signal type, the daily check-in form mapping, and the
dict <-> :class:`WellnessSignal` conversion used at the tool boundary.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from yakap.domains.burnout.domain_logic.forecast_models import ForecastInputError
from yakap.domains.burnout.domain_logic.signal_models import WellnessSignal


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def create_check_in_signal(
    emotional_state: str,
    energy_level: str,
    stress_level: str,
    value: float = 50,
    timestamp: datetime | None = None,
) -> WellnessSignal:
    return WellnessSignal(
        type="check-in",
        timestamp=timestamp or _now(),
        value=value,
        metadata={
            "emotionalState": emotional_state,
            "energyLevel": energy_level,
            "stressLevel": stress_level,
        },
    )


def create_task_signal(
    completion_rate: str,
    complexity: str,
    deadline_pressure: str,
    value: float = 50,
    timestamp: datetime | None = None,
) -> WellnessSignal:
    return WellnessSignal(
        type="task",
        timestamp=timestamp or _now(),
        value=value,
        metadata={
            "completionRate": completion_rate,
            "complexity": complexity,
            "deadlinePressure": deadline_pressure,
        },
    )


def create_calendar_signal(
    meeting_frequency: str,
    meeting_duration: str,
    time_of_day: str,
    meeting_type: str,
    value: float = 50,
    timestamp: datetime | None = None,
) -> WellnessSignal:
    return WellnessSignal(
        type="calendar-event",
        timestamp=timestamp or _now(),
        value=value,
        metadata={
            "meetingFrequency": meeting_frequency,
            "meetingDuration": meeting_duration,
            "timeOfDay": time_of_day,
            "meetingType": meeting_type,
        },
    )


def create_sleep_signal(
    sleep_duration: str,
    sleep_quality: str,
    value: float = 50,
    timestamp: datetime | None = None,
    **extra: Any,
) -> WellnessSignal:
    return WellnessSignal(
        type="sleep",
        timestamp=timestamp or _now(),
        value=value,
        metadata={"sleepDuration": sleep_duration, "sleepQuality": sleep_quality, **extra},
    )


def create_activity_signal(
    work_hours: str,
    break_frequency: str,
    value: float = 50,
    timestamp: datetime | None = None,
) -> WellnessSignal:
    return WellnessSignal(
        type="activity",
        timestamp=timestamp or _now(),
        value=value,
        metadata={"workHours": work_hours, "breakFrequency": break_frequency},
    )


# ---------------------------------------------------------------------------
# Daily check-in form
# ---------------------------------------------------------------------------

def sleep_duration_label(hours: float) -> str:
    if hours <= 4:
        return "very-poor"
    if hours <= 6:
        return "insufficient"
    if hours <= 7:
        return "adequate"
    return "optimal"


def daily_check_in_signals(
    energy_rating: int,
    sleep_hours: float,
    timestamp: datetime | None = None,
) -> list[WellnessSignal]:
    """Map the two-question daily form to a check-in and a sleep signal.

    Args:
        energy_rating: Self-rated energy, 1 (drained) to 5 (great).
        sleep_hours: Hours slept last night.

    Raises:
        ForecastInputError: If either answer is out of range.
    """
    if isinstance(energy_rating, bool) or not isinstance(energy_rating, int) or not 1 <= energy_rating <= 5:
        raise ForecastInputError(f"energy_rating must be an integer 1-5, got {energy_rating!r}")
    if isinstance(sleep_hours, bool) or not isinstance(sleep_hours, (int, float)) or not 0 <= sleep_hours <= 24:
        raise ForecastInputError(f"sleep_hours must be between 0 and 24, got {sleep_hours!r}")

    ts = timestamp or _now()
    if energy_rating >= 4:
        emotional_state, energy_level = "excellent", "high"
    elif energy_rating == 3:
        emotional_state, energy_level = "okay", "moderate"
    else:
        emotional_state, energy_level = "poor", "low"

    check_in = create_check_in_signal(
        emotional_state,
        energy_level,
        "low",
        value=_clamp(energy_rating * 20, 10, 90),
        timestamp=ts,
    )
    sleep = create_sleep_signal(
        sleep_duration_label(sleep_hours),
        "good" if sleep_hours >= 7 else "fair",
        value=_clamp(sleep_hours / 12 * 100, 0, 100),
        timestamp=ts,
        hours=sleep_hours,
    )
    return [check_in, sleep]


# ---------------------------------------------------------------------------
# Boundary conversion
# ---------------------------------------------------------------------------

def parse_timestamp(raw: Any) -> datetime:
    """ISO-8601 string (a trailing ``Z`` is accepted) or datetime, as aware UTC."""
    if isinstance(raw, datetime):
        ts = raw
    elif isinstance(raw, str) and raw:
        text = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
        try:
            ts = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ForecastInputError(f"Invalid timestamp: {raw!r}") from exc
    else:
        raise ForecastInputError(f"Invalid timestamp: {raw!r}")
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def signal_from_dict(data: Mapping[str, Any]) -> WellnessSignal:
    """Build a signal from ``{"type", "timestamp", "value"?, "metadata"?}``.

    Raises:
        ForecastInputError: On a missing type, bad timestamp or non-mapping metadata.
    """
    if not isinstance(data, Mapping):
        raise ForecastInputError(f"Signal must be an object, got {type(data).__name__}")
    signal_type = data.get("type")
    if not isinstance(signal_type, str) or not signal_type:
        raise ForecastInputError("Signal is missing a type")
    metadata = data.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        raise ForecastInputError("Signal metadata must be an object")
    value = data.get("value", 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ForecastInputError(f"Signal value must be a number, got {value!r}")

    return WellnessSignal(
        type=signal_type,
        timestamp=parse_timestamp(data.get("timestamp")),
        value=float(value),
        metadata=metadata,
    )


def signal_to_dict(signal: WellnessSignal) -> dict[str, Any]:
    return {
        "type": signal.type,
        "timestamp": signal.timestamp.isoformat(),
        "value": signal.value,
        "metadata": dict(signal.metadata),
    }
