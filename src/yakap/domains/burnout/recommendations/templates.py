"""Fixed recommendation templates, keyed by risk level and primary factor."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from yakap.domains.burnout.domain_logic.forecast_models import Recommendation

RISK_LEVEL_TEMPLATES: Mapping[str, Recommendation] = MappingProxyType({
    "low": Recommendation(
        text="Continue your current wellness practices and maintain regular check-ins",
        category="long-term",
        priority="low",
        confidence=0.9,
        reasoning="Low risk level indicates good current practices",
    ),
    "moderate": Recommendation(
        text="Take short breaks throughout the day and review your workload",
        category="short-term",
        priority="medium",
        confidence=0.8,
        reasoning="Moderate risk requires preventive measures",
    ),
    "high": Recommendation(
        text="Consider taking a day off or reducing your workload if possible",
        category="immediate",
        priority="high",
        confidence=0.9,
        reasoning="High risk requires immediate intervention",
    ),
    "critical": Recommendation(
        text="Immediate action needed - consider taking time off and seek professional support",
        category="immediate",
        priority="high",
        confidence=1.0,
        reasoning="Critical risk requires urgent intervention",
    ),
})

FACTOR_TEMPLATES: Mapping[str, Recommendation] = MappingProxyType({
    "check-in": Recommendation(
        text="Complete a wellness check-in today to assess your current emotional state",
        category="immediate",
        priority="medium",
        confidence=0.8,
        reasoning="No recent check-ins detected",
    ),
    "task": Recommendation(
        text="Break down complex tasks into smaller, manageable steps",
        category="short-term",
        priority="medium",
        confidence=0.8,
        reasoning="Task completion rates are declining",
    ),
    "calendar-event": Recommendation(
        text="Consider declining non-essential meetings and block focus time",
        category="short-term",
        priority="medium",
        confidence=0.8,
        reasoning="High meeting load detected",
    ),
    "sleep": Recommendation(
        text="Establish a consistent bedtime routine and aim for 7-8 hours of quality sleep",
        category="long-term",
        priority="medium",
        confidence=0.8,
        reasoning="Sleep patterns need improvement",
    ),
    "activity": Recommendation(
        text="Start with short walks or gentle stretching breaks throughout the day",
        category="short-term",
        priority="low",
        confidence=0.7,
        reasoning="Activity levels need attention",
    ),
})

# Returned with the degraded forecast when too few signals exist
INSUFFICIENT_DATA_TEMPLATES: tuple[Recommendation, ...] = (
    Recommendation(
        text="Complete more wellness check-ins",
        category="immediate",
        priority="medium",
        confidence=0.5,
        reasoning="More check-ins are needed for a reliable forecast",
    ),
    Recommendation(
        text="Connect your calendar and task apps",
        category="short-term",
        priority="low",
        confidence=0.5,
        reasoning="Calendar and task signals improve forecast accuracy",
    ),
    Recommendation(
        text="Use the app regularly for better insights",
        category="long-term",
        priority="low",
        confidence=0.5,
        reasoning="Regular use builds a reliable wellness baseline",
    ),
)

RISK_LEVEL_DESCRIPTIONS: Mapping[str, str] = MappingProxyType({
    "low": "Low risk - maintaining good wellness practices",
    "moderate": "Moderate risk - some attention needed",
    "high": "High risk - immediate action recommended",
    "critical": "Critical risk - urgent intervention required",
})


def risk_level_template(risk_level: str) -> Recommendation:
    """The single fallback recommendation for a risk level."""
    return RISK_LEVEL_TEMPLATES.get(risk_level, RISK_LEVEL_TEMPLATES["moderate"])
