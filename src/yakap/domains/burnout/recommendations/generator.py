"""Recommendation generation with an ordered fallback chain.

Strategies are attempted in order; any exception, timeout or empty result
falls through to the next one. Template recommendations are always the last
link, so :meth:`RecommendationGenerator.generate` never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

from yakap.core.llm.response import split_list_items, split_sentences
from yakap.domains.burnout.domain_logic.forecast_models import (
    EmotionalWeather,
    Factors,
    PrimaryFactor,
    Recommendation,
    RecommendationCategory,
    RecommendationPriority,
)
from yakap.domains.burnout.recommendations.templates import (
    FACTOR_TEMPLATES,
    RISK_LEVEL_DESCRIPTIONS,
    risk_level_template,
)

if TYPE_CHECKING:
    from yakap.core.llm.client import InnerLLMClient

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 5

IMMEDIATE_KEYWORDS = ("immediate", "now", "today", "urgent", "right away", "stop", "take time off")
SHORT_TERM_KEYWORDS = ("this week", "next few days", "short break", "schedule", "plan")
URGENCY_KEYWORDS = ("urgent", "immediate", "critical", "stop", "seek help")

# Synthetic confidences for generated text (chat models are more on-task)
CHAT_CONFIDENCE = 0.9
TEXT_CONFIDENCE = 0.75


class RecommendationError(Exception):
    """Raised inside the chain when a strategy cannot produce output."""


@dataclass(frozen=True)
class RecommendationContext:
    """Everything a strategy may use to tailor its recommendations."""

    risk_level: str
    primary_factor: PrimaryFactor
    emotional_weather: EmotionalWeather
    factors: Factors = field(default_factory=Factors)
    overall_score: float = 0.0
    trend: str = "stable"
    signal_count: int = 0


@runtime_checkable
class RecommendationStrategy(Protocol):
    name: str

    async def generate(self, context: RecommendationContext) -> list[Recommendation]: ...


# ---------------------------------------------------------------------------
# Keyword classification
# ---------------------------------------------------------------------------

def determine_category(text: str) -> RecommendationCategory:
    lower = text.lower()
    if any(k in lower for k in IMMEDIATE_KEYWORDS):
        return "immediate"
    if any(k in lower for k in SHORT_TERM_KEYWORDS):
        return "short-term"
    return "long-term"


def determine_priority(text: str, risk_level: str) -> RecommendationPriority:
    if risk_level in ("high", "critical"):
        return "high"
    if any(k in text.lower() for k in URGENCY_KEYWORDS):
        return "high"
    if risk_level == "moderate":
        return "medium"
    return "low"


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def build_prompt(context: RecommendationContext) -> str:
    """Natural-language summary of the forecast for a generative backend."""
    pf = context.primary_factor
    risk = RISK_LEVEL_DESCRIPTIONS.get(context.risk_level, "Unknown risk level")
    negative = ", ".join(context.factors.negative) or "none"
    positive = ", ".join(context.factors.positive) or "none"
    return (
        "Current Wellness State:\n"
        f"- Risk Level: {risk}\n"
        f"- Emotional Weather: {context.emotional_weather.label}\n"
        f"- Primary Factor: {pf.category} (impact: {pf.impact:.1f}) - {pf.description}\n"
        f"- Overall Score: {context.overall_score:.1f}\n"
        f"- Trend: {context.trend}\n"
        f"- Signal Count: {context.signal_count}\n"
        "\n"
        f"Negative Factors: {negative}\n"
        f"Positive Factors: {positive}\n"
        "\n"
        "Generate 3-5 specific, actionable recommendations that address the primary "
        "factor and current risk level. Focus on practical steps the user can take "
        "immediately or in the next few days."
    )


class LLMRecommendationStrategy:
    """Recommendations from a generative backend, parsed and classified."""

    name = "llm"

    def __init__(self, llm_client: InnerLLMClient) -> None:
        self._llm = llm_client
        self.name = f"llm:{llm_client.provider_name}"

    async def generate(self, context: RecommendationContext) -> list[Recommendation]:
        response = await self._llm.invoke(build_prompt(context))

        if response.output_style == "text":
            items = split_sentences(response.content)
            confidence = TEXT_CONFIDENCE
            reasoning = f"Generated based on {context.primary_factor.category} analysis"
        else:
            items = split_list_items(response.content)
            confidence = CHAT_CONFIDENCE
            reasoning = (
                f"Generated based on {context.primary_factor.category} patterns "
                f"and {context.risk_level} risk level"
            )

        if not items:
            raise RecommendationError(f"{self.name} returned no usable recommendations")

        return [
            Recommendation(
                text=item,
                category=determine_category(item),
                priority=determine_priority(item, context.risk_level),
                confidence=confidence,
                reasoning=reasoning,
            )
            for item in items[:MAX_RECOMMENDATIONS]
        ]


class TemplateRecommendationStrategy:
    """One risk-level template plus an optional primary-factor template."""

    name = "template"

    async def generate(self, context: RecommendationContext) -> list[Recommendation]:
        return template_recommendations(context)


def template_recommendations(context: RecommendationContext) -> list[Recommendation]:
    recommendations = [risk_level_template(context.risk_level)]
    factor_rec = FACTOR_TEMPLATES.get(context.primary_factor.category)
    if factor_rec is not None:
        recommendations.append(factor_rec)
    return recommendations


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

class RecommendationGenerator:
    """Walks the strategy chain; the template strategy always closes it.

    Usage::

        generator = RecommendationGenerator([LLMRecommendationStrategy(client)])
        recs = await generator.generate(context)
    """

    def __init__(self, strategies: Sequence[RecommendationStrategy] = ()) -> None:
        chain = [s for s in strategies if not isinstance(s, TemplateRecommendationStrategy)]
        chain.append(TemplateRecommendationStrategy())
        self._strategies: tuple[RecommendationStrategy, ...] = tuple(chain)

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    @property
    def uses_external_backend(self) -> bool:
        return any(isinstance(s, LLMRecommendationStrategy) for s in self._strategies)

    async def generate(self, context: RecommendationContext) -> list[Recommendation]:
        for strategy in self._strategies:
            try:
                recommendations = await strategy.generate(context)
            except Exception as exc:
                logger.warning(
                    "Recommendation strategy %s failed (%s: %s); trying next",
                    strategy.name,
                    type(exc).__name__,
                    exc,
                )
                continue
            if recommendations:
                logger.debug("Recommendations produced by %s", strategy.name)
                return recommendations[:MAX_RECOMMENDATIONS]
            logger.warning("Recommendation strategy %s returned nothing; trying next", strategy.name)

        return [risk_level_template(context.risk_level)]
