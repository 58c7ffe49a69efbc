"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Yakap burnout forecast server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default; there is no auth layer in front of the tools.
    yakap_host: str = "127.0.0.1"
    yakap_port: int = 8001
    yakap_log_level: str = "info"
    # Must be set true to bind a non-loopback host.
    yakap_allow_insecure_bind: bool = False

    # Recommendation backend. "none" means templates only.
    llm_provider: Literal["none", "openai", "anthropic", "huggingface", "mock"] = "none"
    openai_api_key: str = ""
    openai_model: str = "gpt-3.5-turbo"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    huggingface_api_key: str = ""
    huggingface_model: str = "gpt2"
    # Legacy serverless endpoint; point at an Inference Providers route to override.
    huggingface_base_url: str = "https://api-inference.huggingface.co/models"
    llm_max_tokens: int = 500
    llm_temperature: float = 0.7
    llm_timeout_seconds: float = 8.0

    # Storage
    db_path: str = "~/.yakap/wellness.db"
    encryption_key: str = ""
    forecast_retention_days: int = 30

    def llm_credentials(self) -> tuple[str, str]:
        """Return ``(api_key, model)`` for the configured provider."""
        if self.llm_provider == "openai":
            return self.openai_api_key, self.openai_model
        if self.llm_provider == "anthropic":
            return self.anthropic_api_key, self.anthropic_model
        if self.llm_provider == "huggingface":
            return self.huggingface_api_key, self.huggingface_model
        return "", ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
