"""Inner LLM client: bounded, best-effort calls to a generative backend."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from yakap.core.llm.provider import LLMProvider, OutputStyle, ProviderResponse
from yakap.core.llm.response import check_guardrails, sanitize_content
from yakap.core.llm.system_prompt import build_full_system_prompt

logger = logging.getLogger(__name__)


class LLMTimeoutError(Exception):
    """Raised when the provider does not answer within the timeout."""


@dataclass
class LLMResponse:
    """Sanitized response from the generative backend."""

    content: str
    model: str
    output_style: OutputStyle
    guardrail_flags: list[str] = field(default_factory=list)
    usage: dict[str, int] = field(default_factory=dict)


class InnerLLMClient:
    """Invokes an LLM provider with the coach system prompt and a timeout.

    There is no retry here: a failed or slow call is the caller's cue to
    fall back to deterministic output.
    """

    def __init__(
        self,
        provider: LLMProvider,
        provider_name: str = "",
        timeout_seconds: float = 8.0,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> None:
        self.provider = provider
        self.provider_name = provider_name or getattr(provider, "name", type(provider).__name__)
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.temperature = temperature

    @property
    def discloses_data(self) -> bool:
        """True when calls leave the process (any provider except mock)."""
        return self.provider_name != "mock"

    async def invoke(self, user_message: str, instructions: str = "") -> LLMResponse:
        """Call the provider and return guardrail-sanitized content.

        Raises:
            LLMTimeoutError: If the provider exceeds ``timeout_seconds``.
            Exception: Any provider error propagates unchanged.
        """
        try:
            provider_response: ProviderResponse = await asyncio.wait_for(
                self.provider.generate(
                    system_message=build_full_system_prompt(instructions),
                    user_message=user_message,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise LLMTimeoutError(
                f"{self.provider_name} did not respond within {self.timeout_seconds}s"
            ) from exc

        logger.info(
            "LLM call: provider=%s, model=%s, tokens=%d+%d, latency=%.0fms",
            self.provider_name,
            provider_response.model,
            provider_response.input_tokens,
            provider_response.output_tokens,
            provider_response.latency_ms,
        )

        guardrail_check = check_guardrails(provider_response.content)
        content = sanitize_content(provider_response.content, guardrail_check)

        return LLMResponse(
            content=content,
            model=provider_response.model,
            output_style=getattr(self.provider, "output_style", "chat"),
            guardrail_flags=guardrail_check.flags,
            usage={
                "input_tokens": provider_response.input_tokens,
                "output_tokens": provider_response.output_tokens,
            },
        )
