"""LLM provider implementations."""

from yakap.core.llm.providers.anthropic import AnthropicProvider
from yakap.core.llm.providers.huggingface import HuggingFaceProvider
from yakap.core.llm.providers.mock import FailingProvider, MockProvider
from yakap.core.llm.providers.openai import OpenAIProvider

__all__ = [
    "AnthropicProvider",
    "FailingProvider",
    "HuggingFaceProvider",
    "MockProvider",
    "OpenAIProvider",
]
