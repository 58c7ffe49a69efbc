"""Forecast configuration and result types."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Literal, Mapping

RiskLevel = Literal["low", "moderate", "high", "critical"]
Trend = Literal["improving", "stable", "declining", "critical"]
WeatherIntensity = Literal["calm", "mild", "moderate", "stormy", "critical"]
RecommendationCategory = Literal["immediate", "short-term", "long-term"]
RecommendationPriority = Literal["high", "medium", "low"]

RISK_LEVELS: tuple[str, ...] = ("low", "moderate", "high", "critical")
TRENDS: tuple[str, ...] = ("improving", "stable", "declining", "critical")

DATA_INSUFFICIENCY = "data-insufficiency"


class ForecastInputError(ValueError):
    """Raised when a caller violates the forecast input contract."""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfidenceThresholds:
    """Informational only; not used to gate the default pipeline."""

    low: float = 0.3
    moderate: float = 0.6
    high: float = 0.8


@dataclass(frozen=True)
class RiskThresholds:
    """Score cut points, checked in order low -> moderate -> high.

    The check only classifies consistently when ``low > moderate > high``.
    ``critical`` is the conceptual floor and is not consulted.
    """

    low: float = 30.0
    moderate: float = 10.0
    high: float = -10.0
    critical: float = -30.0


@dataclass(frozen=True)
class TrendAnalysis:
    window_days: int = 7
    min_data_points: int = 3


_CAMEL_TO_SNAKE = {
    "analysisWindow": "analysis_window",
    "minSignalsRequired": "min_signals_required",
    "confidenceThresholds": "confidence_thresholds",
    "riskThresholds": "risk_thresholds",
    "trendAnalysis": "trend_analysis",
    "windowDays": "window_days",
    "minDataPoints": "min_data_points",
}

_GROUP_TYPES = {
    "confidence_thresholds": ConfidenceThresholds,
    "risk_thresholds": RiskThresholds,
    "trend_analysis": TrendAnalysis,
}


def _snake(key: str) -> str:
    return _CAMEL_TO_SNAKE.get(key, key)


@dataclass(frozen=True)
class ForecastConfig:
    """Tunable forecast parameters. Immutable; use :meth:`merged` to override."""

    analysis_window: int = 14
    min_signals_required: int = 5
    confidence_thresholds: ConfidenceThresholds = field(default_factory=ConfidenceThresholds)
    risk_thresholds: RiskThresholds = field(default_factory=RiskThresholds)
    trend_analysis: TrendAnalysis = field(default_factory=TrendAnalysis)

    def merged(self, override: ForecastConfig | Mapping[str, Any] | None) -> ForecastConfig:
        """Shallow-merge a partial override onto this config.

        Accepts snake_case or camelCase keys. A nested group supplied in the
        override replaces the whole group (missing group keys fall back to
        the group defaults, not to this config's values).

        Raises:
            ForecastInputError: On unknown keys or non-numeric values.
        """
        if override is None:
            return self
        if isinstance(override, ForecastConfig):
            return override
        if not isinstance(override, Mapping):
            raise ForecastInputError("config override must be a mapping")

        changes: dict[str, Any] = {}
        for raw_key, value in override.items():
            key = _snake(raw_key)
            if key in _GROUP_TYPES:
                changes[key] = _build_group(key, value)
            elif key in ("analysis_window", "min_signals_required"):
                changes[key] = _as_int(key, value)
            else:
                raise ForecastInputError(f"Unknown forecast config key: {raw_key!r}")
        return replace(self, **changes)


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ForecastInputError(f"{key} must be a number, got {value!r}")
    return int(value)


def _build_group(key: str, value: Any) -> Any:
    group_type = _GROUP_TYPES[key]
    if isinstance(value, group_type):
        return value
    if not isinstance(value, Mapping):
        raise ForecastInputError(f"{key} must be a mapping")
    kwargs: dict[str, Any] = {}
    for raw_sub, sub_value in value.items():
        sub = _snake(raw_sub)
        if sub not in group_type.__dataclass_fields__:
            raise ForecastInputError(f"Unknown {key} key: {raw_sub!r}")
        if isinstance(sub_value, bool) or not isinstance(sub_value, (int, float)):
            raise ForecastInputError(f"{key}.{sub} must be a number, got {sub_value!r}")
        kwargs[sub] = sub_value
    return group_type(**kwargs)


DEFAULT_FORECAST_CONFIG = ForecastConfig()


# ---------------------------------------------------------------------------
# Forecast result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Factors:
    positive: tuple[str, ...] = ()
    negative: tuple[str, ...] = ()
    neutral: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "positive": list(self.positive),
            "negative": list(self.negative),
            "neutral": list(self.neutral),
        }


@dataclass(frozen=True)
class EmotionalWeather:
    label: str
    description: str
    intensity: WeatherIntensity
    icon: str


@dataclass(frozen=True)
class PrimaryFactor:
    category: str
    impact: float
    description: str
    specific_recommendation: str


@dataclass(frozen=True)
class Recommendation:
    text: str
    category: RecommendationCategory
    priority: RecommendationPriority
    confidence: float
    reasoning: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "category": self.category,
            "priority": self.priority,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


@dataclass(frozen=True)
class ForecastMetadata:
    signal_count: int
    time_range_start: datetime
    time_range_end: datetime
    processing_time: float  # milliseconds


@dataclass(frozen=True)
class BurnoutForecast:
    """One immutable forecast computation result."""

    user_id: str
    timestamp: datetime
    overall_score: float
    risk_level: RiskLevel
    confidence: float
    trend: Trend
    factors: Factors
    emotional_weather: EmotionalWeather
    primary_factor: PrimaryFactor
    recommendations: tuple[Recommendation, ...]
    next_check_in: datetime
    metadata: ForecastMetadata

    @property
    def forecast_id(self) -> str:
        """Storage key: ``{user_id}_{timestamp in epoch millis}``."""
        return f"{self.user_id}_{int(self.timestamp.timestamp() * 1000)}"

    @property
    def is_degraded(self) -> bool:
        return self.primary_factor.category == DATA_INSUFFICIENCY

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys and ISO-8601 timestamps."""
        return {
            "userId": self.user_id,
            "timestamp": self.timestamp.isoformat(),
            "overallScore": self.overall_score,
            "riskLevel": self.risk_level,
            "confidence": self.confidence,
            "trend": self.trend,
            "factors": self.factors.to_dict(),
            "emotionalWeather": {
                "label": self.emotional_weather.label,
                "description": self.emotional_weather.description,
                "intensity": self.emotional_weather.intensity,
                "icon": self.emotional_weather.icon,
            },
            "primaryFactor": {
                "category": self.primary_factor.category,
                "impact": self.primary_factor.impact,
                "description": self.primary_factor.description,
                "specificRecommendation": self.primary_factor.specific_recommendation,
            },
            "recommendations": [r.to_dict() for r in self.recommendations],
            "nextCheckIn": self.next_check_in.isoformat(),
            "metadata": {
                "signalCount": self.metadata.signal_count,
                "timeRange": {
                    "start": self.metadata.time_range_start.isoformat(),
                    "end": self.metadata.time_range_end.isoformat(),
                },
                "processingTime": self.metadata.processing_time,
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BurnoutForecast:
        """Rebuild a forecast from :meth:`to_dict` output."""
        factors = data.get("factors") or {}
        weather = data["emotionalWeather"]
        primary = data["primaryFactor"]
        meta = data["metadata"]
        return cls(
            user_id=data["userId"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            overall_score=float(data["overallScore"]),
            risk_level=data["riskLevel"],
            confidence=float(data["confidence"]),
            trend=data["trend"],
            factors=Factors(
                positive=tuple(factors.get("positive", ())),
                negative=tuple(factors.get("negative", ())),
                neutral=tuple(factors.get("neutral", ())),
            ),
            emotional_weather=EmotionalWeather(
                label=weather["label"],
                description=weather["description"],
                intensity=weather["intensity"],
                icon=weather["icon"],
            ),
            primary_factor=PrimaryFactor(
                category=primary["category"],
                impact=float(primary["impact"]),
                description=primary["description"],
                specific_recommendation=primary["specificRecommendation"],
            ),
            recommendations=tuple(
                Recommendation(
                    text=r["text"],
                    category=r["category"],
                    priority=r["priority"],
                    confidence=float(r["confidence"]),
                    reasoning=r["reasoning"],
                )
                for r in data.get("recommendations", ())
            ),
            next_check_in=datetime.fromisoformat(data["nextCheckIn"]),
            metadata=ForecastMetadata(
                signal_count=int(meta["signalCount"]),
                time_range_start=datetime.fromisoformat(meta["timeRange"]["start"]),
                time_range_end=datetime.fromisoformat(meta["timeRange"]["end"]),
                processing_time=float(meta["processingTime"]),
            ),
        )
