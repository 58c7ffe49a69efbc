"""LLM provider protocol: abstract interface for generative backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, runtime_checkable

# "chat" models answer with itemized lines; "text" models continue the prompt
# and are parsed sentence by sentence.
OutputStyle = Literal["chat", "text"]


@dataclass
class ProviderResponse:
    """Response from an LLM provider."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    latency_ms: float


@runtime_checkable
class LLMProvider(Protocol):
    """Abstract interface for generative text backends."""

    name: str
    output_style: OutputStyle

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> ProviderResponse: ...


def create_provider(
    provider_name: str,
    api_key: str = "",
    model: str = "",
    base_url: str = "",
) -> LLMProvider:
    """Factory function to create an LLM provider by name.

    Args:
        provider_name: "openai", "anthropic", "huggingface", or "mock"
        api_key: API key for the provider.
        model: Model identifier override.
        base_url: Endpoint override (huggingface only).

    Returns:
        An LLMProvider instance.
    """
    if provider_name == "openai":
        from yakap.core.llm.providers.openai import OpenAIProvider

        return OpenAIProvider(api_key=api_key, model=model or "gpt-3.5-turbo")
    elif provider_name == "anthropic":
        from yakap.core.llm.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=api_key, model=model or "claude-sonnet-4-20250514")
    elif provider_name == "huggingface":
        from yakap.core.llm.providers.huggingface import HuggingFaceProvider

        if base_url:
            return HuggingFaceProvider(api_key=api_key, model=model or "gpt2", base_url=base_url)
        return HuggingFaceProvider(api_key=api_key, model=model or "gpt2")
    elif provider_name == "mock":
        from yakap.core.llm.providers.mock import MockProvider

        return MockProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {provider_name}")
