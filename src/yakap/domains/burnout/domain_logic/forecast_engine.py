"""Burnout forecast engine.

Orchestrates one forecast computation: window filtering, scoring,
aggregation, risk/confidence/trend estimation, factor attribution and
recommendation synthesis. The engine holds only its resolved config and
collaborators, so concurrent calls need no coordination.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Sequence

from yakap.domains.burnout.domain_logic.emotional_weather import derive_emotional_weather
from yakap.domains.burnout.domain_logic.forecast_models import (
    DATA_INSUFFICIENCY,
    DEFAULT_FORECAST_CONFIG,
    BurnoutForecast,
    EmotionalWeather,
    Factors,
    ForecastConfig,
    ForecastInputError,
    ForecastMetadata,
    PrimaryFactor,
    Recommendation,
    RiskLevel,
    RiskThresholds,
    Trend,
)
from yakap.domains.burnout.domain_logic.primary_factor import identify_primary_factor
from yakap.domains.burnout.domain_logic.scoring_rubric import calculate_signal_score
from yakap.domains.burnout.domain_logic.signal_models import (
    LOW_COMPLETION_RATES,
    SignalScore,
    WellnessSignal,
)
from yakap.domains.burnout.recommendations.generator import (
    RecommendationContext,
    RecommendationGenerator,
)
from yakap.domains.burnout.recommendations.templates import (
    INSUFFICIENT_DATA_TEMPLATES,
    risk_level_template,
)

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(days=7)

NEXT_CHECK_IN_OFFSETS: Mapping[str, timedelta] = {
    "low": timedelta(days=3),
    "moderate": timedelta(days=1),
    "high": timedelta(hours=12),
    "critical": timedelta(hours=6),
}
INSUFFICIENT_DATA_CHECK_IN = timedelta(hours=24)

INSUFFICIENT_DATA_FACTOR = "Insufficient data for reliable forecast"

INSUFFICIENT_DATA_WEATHER = EmotionalWeather(
    label="Foggy",
    description="Not enough recent signals to read the conditions yet",
    intensity="mild",
    icon="🌫️",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Pure computation stages
# ---------------------------------------------------------------------------

def compute_overall_score(scores: Sequence[SignalScore]) -> float:
    """Weighted mean of signal scores; 0 when the total weight is 0."""
    total_weight = sum(s.weight for s in scores)
    if total_weight <= 0:
        return 0.0
    return sum(s.weighted_score for s in scores) / total_weight


def determine_risk_level(score: float, thresholds: RiskThresholds) -> RiskLevel:
    """First satisfied threshold in the order low, moderate, high; else critical.

    A score exactly on a threshold resolves to that threshold's band.
    """
    if score >= thresholds.low:
        return "low"
    if score >= thresholds.moderate:
        return "moderate"
    if score >= thresholds.high:
        return "high"
    return "critical"


def population_variance(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


def calculate_confidence(scores: Sequence[SignalScore], now: datetime) -> float:
    """Sample size x consistency x recency, clamped to [0, 1]."""
    base = min(len(scores) / 10, 1.0)
    consistency = max(0.3, 1 - population_variance([s.score for s in scores]) / 200)
    recent = sum(1 for s in scores if s.signal.timestamp >= now - RECENT_WINDOW)
    recency = min(recent / 3, 1.0)
    return max(0.0, min(base * consistency * recency, 1.0))


def linear_slope(values: Sequence[float]) -> float:
    """Ordinary least-squares slope of values against their sequence index."""
    n = len(values)
    if n < 2:
        return 0.0
    sum_x = n * (n - 1) / 2
    sum_y = sum(values)
    sum_xy = sum(i * v for i, v in enumerate(values))
    sum_xx = sum(i * i for i in range(n))
    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def classify_slope(slope: float) -> Trend:
    # The critical branch sits after declining and can never trigger; the
    # check order is kept as-is.
    if slope > 5:
        return "improving"
    if slope < -5:
        return "declining"
    if slope < -15:
        return "critical"
    return "stable"


def analyze_trend(scores: Sequence[SignalScore], config: ForecastConfig, now: datetime) -> Trend:
    """Regression trend over the recent sub-window, in input order (not time-sorted)."""
    cutoff = now - timedelta(days=config.trend_analysis.window_days)
    recent = [s.score for s in scores if s.signal.timestamp >= cutoff]
    if len(recent) < config.trend_analysis.min_data_points:
        return "stable"
    return classify_slope(linear_slope(recent))


def identify_factors(scores: Sequence[SignalScore], now: datetime) -> Factors:
    """Per-type pattern summaries plus rule-based specific insights."""
    positive: list[str] = []
    negative: list[str] = []
    neutral: list[str] = []

    groups: dict[str, list[SignalScore]] = {}
    for s in scores:
        groups.setdefault(s.signal.type, []).append(s)

    for signal_type, group in groups.items():
        avg = sum(s.score for s in group) / len(group)
        if avg > 20:
            positive.append(f"{signal_type} patterns are healthy")
        elif avg < -20:
            negative.append(f"{signal_type} patterns indicate stress")
        else:
            neutral.append(f"{signal_type} patterns are mixed")

    check_ins = groups.get("check-in", [])
    if check_ins:
        recent = [s for s in check_ins if s.signal.timestamp >= now - RECENT_WINDOW]
        if not recent:
            negative.append("No recent wellness check-ins")
        elif sum(s.score for s in recent) / len(recent) < -10:
            negative.append("Recent check-ins show declining wellness")

    tasks = groups.get("task", [])
    if tasks:
        low = [s for s in tasks if s.signal.meta("completionRate") in LOW_COMPLETION_RATES]
        if len(low) > len(tasks) * 0.5:
            negative.append("Task completion rates are declining")

    events = groups.get("calendar-event", [])
    if any(
        s.signal.meta("meetingFrequency") == "9+" or s.signal.meta("meetingDuration") == "very-long"
        for s in events
    ):
        negative.append("High meeting load detected")

    return Factors(positive=tuple(positive), negative=tuple(negative), neutral=tuple(neutral))


def next_check_in(risk_level: str, now: datetime) -> datetime:
    return now + NEXT_CHECK_IN_OFFSETS[risk_level]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class BurnoutForecastEngine:
    """Stateless forecast service holding a resolved :class:`ForecastConfig`.

    Usage::

        engine = BurnoutForecastEngine(recommendation_generator=generator)
        forecast = await engine.compute_forecast("user-1", signals)
    """

    def __init__(
        self,
        config: ForecastConfig | Mapping[str, Any] | None = None,
        recommendation_generator: RecommendationGenerator | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = DEFAULT_FORECAST_CONFIG.merged(config)
        self._generator = recommendation_generator or RecommendationGenerator()
        self.clock = clock

    async def compute_forecast(
        self,
        user_id: str,
        signals: Iterable[WellnessSignal],
        config_override: ForecastConfig | Mapping[str, Any] | None = None,
    ) -> BurnoutForecast:
        """Compute one forecast for ``user_id``.

        Raises:
            ForecastInputError: If ``user_id`` is blank, ``signals`` is not a
                collection of ``WellnessSignal``, or the override is malformed.
        """
        start = time.monotonic()
        signal_list = _validate_inputs(user_id, signals)
        config = self.config.merged(config_override)
        now = self.clock()

        window_start = now - timedelta(days=config.analysis_window)
        relevant = [s for s in signal_list if s.timestamp >= window_start]

        if len(relevant) < config.min_signals_required:
            logger.warning(
                "Insufficient data for user %s: %d signals in window (need %d)",
                user_id,
                len(relevant),
                config.min_signals_required,
            )
            return self._insufficient_data_forecast(user_id, relevant, now, window_start, start)

        scores = [calculate_signal_score(s) for s in relevant]
        overall_score = compute_overall_score(scores)
        risk_level = determine_risk_level(overall_score, config.risk_thresholds)
        confidence = calculate_confidence(scores, now)
        trend = analyze_trend(scores, config, now)
        factors = identify_factors(scores, now)
        primary_factor = identify_primary_factor(scores, now)
        weather = derive_emotional_weather(overall_score, trend)

        context = RecommendationContext(
            risk_level=risk_level,
            primary_factor=primary_factor,
            emotional_weather=weather,
            factors=factors,
            overall_score=overall_score,
            trend=trend,
            signal_count=len(relevant),
        )
        recommendations = await self._recommend(context)

        forecast = BurnoutForecast(
            user_id=user_id,
            timestamp=now,
            overall_score=overall_score,
            risk_level=risk_level,
            confidence=confidence,
            trend=trend,
            factors=factors,
            emotional_weather=weather,
            primary_factor=primary_factor,
            recommendations=tuple(recommendations),
            next_check_in=next_check_in(risk_level, now),
            metadata=ForecastMetadata(
                signal_count=len(relevant),
                time_range_start=window_start,
                time_range_end=now,
                processing_time=(time.monotonic() - start) * 1000,
            ),
        )
        logger.info(
            "Forecast computed for user %s: score=%.1f, risk=%s, trend=%s, signals=%d",
            user_id,
            overall_score,
            risk_level,
            trend,
            len(relevant),
        )
        return forecast

    async def _recommend(self, context: RecommendationContext) -> list[Recommendation]:
        try:
            recommendations = await self._generator.generate(context)
        except Exception:
            logger.exception("Recommendation generation failed; using risk-level template")
            return [risk_level_template(context.risk_level)]
        return recommendations or [risk_level_template(context.risk_level)]

    def _insufficient_data_forecast(
        self,
        user_id: str,
        relevant: Sequence[WellnessSignal],
        now: datetime,
        window_start: datetime,
        start: float,
    ) -> BurnoutForecast:
        return BurnoutForecast(
            user_id=user_id,
            timestamp=now,
            overall_score=0.0,
            risk_level="low",
            confidence=0.1,
            trend="stable",
            factors=Factors(negative=(INSUFFICIENT_DATA_FACTOR,)),
            emotional_weather=INSUFFICIENT_DATA_WEATHER,
            primary_factor=PrimaryFactor(
                category=DATA_INSUFFICIENCY,
                impact=0.0,
                description="Not enough wellness signals in the analysis window",
                specific_recommendation="Complete more wellness check-ins",
            ),
            recommendations=INSUFFICIENT_DATA_TEMPLATES,
            next_check_in=now + INSUFFICIENT_DATA_CHECK_IN,
            metadata=ForecastMetadata(
                signal_count=len(relevant),
                time_range_start=window_start,
                time_range_end=now,
                processing_time=(time.monotonic() - start) * 1000,
            ),
        )


def _validate_inputs(user_id: Any, signals: Any) -> list[WellnessSignal]:
    if not isinstance(user_id, str) or not user_id.strip():
        raise ForecastInputError("user_id is required")
    if signals is None or isinstance(signals, (str, bytes, Mapping)) or not isinstance(signals, Iterable):
        raise ForecastInputError("signals must be a collection of WellnessSignal")

    signal_list = list(signals)
    for i, signal in enumerate(signal_list):
        if not isinstance(signal, WellnessSignal):
            raise ForecastInputError(f"signals[{i}] is not a WellnessSignal")
        if not isinstance(signal.timestamp, datetime):
            raise ForecastInputError(f"signals[{i}] has no valid timestamp")
    return signal_list
