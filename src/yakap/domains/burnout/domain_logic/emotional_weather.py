"""Emotional weather: a presentation label derived from score and trend."""

from __future__ import annotations

from yakap.domains.burnout.domain_logic.forecast_models import EmotionalWeather

# (floor, weather) pairs checked top-down; the last tier has no floor.
_TIERS: tuple[tuple[float, EmotionalWeather], ...] = (
    (50.0, EmotionalWeather(
        label="Sunny",
        description="Energy is high and stress is well managed",
        intensity="calm",
        icon="☀️",
    )),
    (20.0, EmotionalWeather(
        label="Partly Cloudy",
        description="Mostly balanced with a few pressure points",
        intensity="mild",
        icon="⛅",
    )),
    (-10.0, EmotionalWeather(
        label="Cloudy",
        description="Noticeable stress signals; plan recovery time",
        intensity="moderate",
        icon="☁️",
    )),
    (-30.0, EmotionalWeather(
        label="Overcast",
        description="Stress is accumulating across several areas",
        intensity="moderate",
        icon="🌥️",
    )),
    (-50.0, EmotionalWeather(
        label="Stormy",
        description="High strain detected; prioritize recovery today",
        intensity="stormy",
        icon="🌧️",
    )),
)

CRITICAL_WEATHER = EmotionalWeather(
    label="Critical Storm",
    description="Burnout risk is severe; reduce load and seek support",
    intensity="critical",
    icon="⛈️",
)

_TREND_SUFFIX = {
    "improving": " - clearing up",
    "declining": " - conditions worsening",
}


def derive_emotional_weather(overall_score: float, trend: str) -> EmotionalWeather:
    """Map score to one of six tiers; a critical trend forces the critical tier."""
    base = CRITICAL_WEATHER
    if trend != "critical":
        for floor, weather in _TIERS:
            if overall_score >= floor:
                base = weather
                break

    suffix = _TREND_SUFFIX.get(trend, "")
    if not suffix:
        return base
    return EmotionalWeather(
        label=base.label,
        description=base.description + suffix,
        intensity=base.intensity,
        icon=base.icon,
    )
