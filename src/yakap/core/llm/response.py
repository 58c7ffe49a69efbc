"""Response parsing and guardrail enforcement for generated text."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Heuristic detection of guidance a wellness coach must not give. Generated
# text is natural language, so common unsafe phrasings are matched rather
# than parsed.
PROHIBITED_INDICATORS: dict[str, tuple[str, ...]] = {
    "making medical diagnoses": (
        "you have been diagnosed",
        "you are suffering from",
        "you have depression",
        "you have a condition",
    ),
    "prescribing treatments": (
        "take this medication",
        "stop taking your medication",
        "increase your dose",
        "you should take antidepressants",
    ),
}

_LIST_MARKER = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


@dataclass
class GuardrailCheck:
    """Result of checking generated content against guardrails."""

    passed: bool
    flags: list[str] = field(default_factory=list)


def check_guardrails(content: str) -> GuardrailCheck:
    """Flag prohibited phrases in generated content."""
    flags: list[str] = []
    content_lower = content.lower()

    for action, patterns in PROHIBITED_INDICATORS.items():
        for pattern in patterns:
            if pattern in content_lower:
                flags.append(f"prohibited_pattern_detected: {action} ('{pattern}')")

    if flags:
        logger.warning("Guardrail flags on generated content: %s", flags)
    return GuardrailCheck(passed=not flags, flags=flags)


def sanitize_content(content: str, guardrail_check: GuardrailCheck) -> str:
    """Drop sentences containing prohibited phrases.

    Sentences are removed outright rather than replaced with a note, since
    the remaining text is itemized into user-facing recommendations.
    """
    if guardrail_check.passed:
        return content

    phrases: list[str] = []
    for flag in guardrail_check.flags:
        match = re.search(r"\('([^']+)'\)", flag)
        if match:
            phrases.append(match.group(1))

    sanitized = content
    for phrase in phrases:
        pattern = re.compile(
            r"[^.!?\n]*" + re.escape(phrase) + r"[^.!?\n]*[.!?]?",
            re.IGNORECASE,
        )
        sanitized = pattern.sub("", sanitized)
    return sanitized


def split_list_items(content: str) -> list[str]:
    """Split chat-model output into items, stripping list markers."""
    items = []
    for line in content.splitlines():
        cleaned = _LIST_MARKER.sub("", line).strip()
        if cleaned:
            items.append(cleaned)
    return items


def split_sentences(content: str, min_length: int = 10) -> list[str]:
    """Split free text into sentences longer than ``min_length`` characters."""
    flat = " ".join(content.split())
    return [s.strip() for s in _SENTENCE_END.split(flat) if len(s.strip()) > min_length]
