"""Mock LLM providers for testing."""

from __future__ import annotations

import asyncio

from yakap.core.llm.provider import ProviderResponse

DEFAULT_MOCK_RESPONSE = """\
1. Take a short break today and step away from your desk.
2. Schedule two focus blocks this week and protect them from meetings.
3. Build a consistent evening routine to improve sleep over the coming month."""


class MockProvider:
    """Mock provider for testing; returns a canned response."""

    name = "mock"
    output_style = "chat"

    def __init__(self, response_content: str = DEFAULT_MOCK_RESPONSE, output_style: str = "chat") -> None:
        self.response_content = response_content
        self.output_style = output_style
        self.last_system_message: str = ""
        self.last_user_message: str = ""
        self.call_count: int = 0

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> ProviderResponse:
        self.last_system_message = system_message
        self.last_user_message = user_message
        self.call_count += 1
        return ProviderResponse(
            content=self.response_content,
            input_tokens=len(system_message.split()) + len(user_message.split()),
            output_tokens=len(self.response_content.split()),
            model="mock",
            latency_ms=0.0,
        )


class FailingProvider:
    """Provider that always fails, or stalls for ``delay_seconds`` first."""

    name = "mock"
    output_style = "chat"

    def __init__(self, error: Exception | None = None, delay_seconds: float = 0.0) -> None:
        self.error = error or RuntimeError("backend unavailable")
        self.delay_seconds = delay_seconds
        self.call_count: int = 0

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> ProviderResponse:
        self.call_count += 1
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        raise self.error
