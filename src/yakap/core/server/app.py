"""Yakap burnout forecast MCP server: application factory.

- create_app() builds a fresh server (integration tests call it directly)
- module-level ``mcp`` is created lazily for FastMCP discovery
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from fastmcp import FastMCP

from yakap.core.audit.logger import AuditLogger
from yakap.core.config.settings import Settings, get_settings
from yakap.core.llm.client import InnerLLMClient
from yakap.core.llm.provider import LLMProvider, create_provider
from yakap.core.storage.database import WellnessDatabase
from yakap.core.storage.encryption import EncryptionError, FieldEncryptor
from yakap.core.storage.repository import WellnessRepository
from yakap.domains.burnout.domain_logic.forecast_engine import BurnoutForecastEngine
from yakap.domains.burnout.prompts.forecast_prompts import register_forecast_prompts
from yakap.domains.burnout.recommendations.generator import (
    LLMRecommendationStrategy,
    RecommendationGenerator,
)
from yakap.domains.burnout.tools.forecast_tools import register_forecast_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "Yakap Burnout Forecast"
SERVER_VERSION = "0.1.0"


def build_llm_client(
    settings: Settings,
    provider_override: LLMProvider | None = None,
) -> InnerLLMClient | None:
    """Create the inner LLM client for the configured provider.

    Returns None when recommendations should come from templates only:
    ``llm_provider`` is "none", or a remote provider has no API key.
    """
    if provider_override is not None:
        provider = provider_override
        provider_name = getattr(provider, "name", settings.llm_provider)
    elif settings.llm_provider == "none":
        logger.info("No LLM provider configured; recommendations use templates only")
        return None
    else:
        api_key, model = settings.llm_credentials()
        if settings.llm_provider != "mock" and not api_key:
            logger.warning(
                "No API key configured for provider '%s'; recommendations use templates only",
                settings.llm_provider,
            )
            return None
        provider_name = settings.llm_provider
        base_url = settings.huggingface_base_url if provider_name == "huggingface" else ""
        provider = create_provider(provider_name, api_key=api_key, model=model, base_url=base_url)

    return InnerLLMClient(
        provider=provider,
        provider_name=provider_name,
        timeout_seconds=settings.llm_timeout_seconds,
        max_tokens=settings.llm_max_tokens,
        temperature=settings.llm_temperature,
    )


def build_repository(settings: Settings) -> WellnessRepository | None:
    """Open the encrypted wellness store, or None when no key is configured."""
    if not settings.encryption_key:
        logger.info(
            "No ENCRYPTION_KEY configured; running without persistence. "
            "Set ENCRYPTION_KEY to store signals and forecasts."
        )
        return None
    try:
        encryptor = FieldEncryptor(settings.encryption_key)
    except EncryptionError as exc:
        logger.error("Failed to initialize storage: %s", exc)
        logger.warning("Continuing without persistence; data will not be stored")
        return None

    database = WellnessDatabase(settings.db_path)
    database.initialize()
    logger.info(
        "Wellness store initialized: %s (schema v%d)",
        settings.db_path,
        database.get_schema_version(),
    )
    return WellnessRepository(database, encryptor)


def create_app(
    *,
    repository_override: WellnessRepository | None = None,
    llm_provider_override: LLMProvider | None = None,
    clock_override: Callable[[], datetime] | None = None,
    settings: Settings | None = None,
) -> FastMCP:
    """Create and configure the burnout forecast MCP server.

    1. Creates the FastMCP server instance
    2. Builds the recommendation chain (LLM strategy if configured, templates last)
    3. Creates the forecast engine
    4. Opens the encrypted store and audit log, when available
    5. Registers tools and prompts
    """
    settings = settings or get_settings()

    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "Burnout forecasting from wellness signals (check-ins, tasks, "
            "calendar, sleep, activity). Produces a risk level, trend, "
            "emotional weather, primary factor and recommendations. "
            "Forecasts are a self-check aid, not a diagnosis."
        ),
    )

    llm_client = build_llm_client(settings, llm_provider_override)
    strategies = [LLMRecommendationStrategy(llm_client)] if llm_client is not None else []
    generator = RecommendationGenerator(strategies)

    engine_kwargs = {"recommendation_generator": generator}
    if clock_override is not None:
        engine_kwargs["clock"] = clock_override
    engine = BurnoutForecastEngine(**engine_kwargs)
    logger.info("Forecast engine ready (recommendations: %s)", ", ".join(generator.strategy_names))

    repository = repository_override if repository_override is not None else build_repository(settings)
    audit_logger = AuditLogger(repository.database) if repository is not None else None

    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "llm_provider": llm_client.provider_name if llm_client is not None else "none",
            "recommendation_strategies": generator.strategy_names,
            "storage_enabled": repository is not None,
        }

    register_forecast_tools(
        server,
        engine,
        repository=repository,
        audit_logger=audit_logger,
        llm_client=llm_client,
        retention_days=settings.forecast_retention_days,
    )

    if repository is not None:
        from yakap.domains.burnout.tools.audit_tools import register_audit_tools
        from yakap.domains.burnout.tools.data_tools import register_data_tools

        register_data_tools(server, repository, audit_logger)
        register_audit_tools(server, audit_logger)
        logger.info("Storage-backed tools registered")

    register_forecast_prompts(server)

    return server


# Module-level instance for FastMCP discovery, created on first access only.
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
