"""MCP tools for burnout forecasting.

``generate_burnout_forecast`` is always available. When storage is
configured the forecast is persisted, and the daily check-in and forecast
history tools are registered as well.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from yakap.core.storage.repository import RepositoryError
from yakap.domains.burnout.connectors.signal_factory import (
    daily_check_in_signals,
    signal_from_dict,
)
from yakap.domains.burnout.domain_logic.forecast_models import (
    BurnoutForecast,
    ForecastInputError,
)

if TYPE_CHECKING:
    from yakap.core.audit.logger import AuditLogger
    from yakap.core.llm.client import InnerLLMClient
    from yakap.core.storage.repository import WellnessRepository
    from yakap.domains.burnout.domain_logic.forecast_engine import BurnoutForecastEngine

logger = logging.getLogger(__name__)


def _error(message: str) -> str:
    return json.dumps({"status": "error", "message": message})


def register_forecast_tools(
    mcp: FastMCP,
    engine: BurnoutForecastEngine,
    repository: WellnessRepository | None = None,
    audit_logger: AuditLogger | None = None,
    llm_client: InnerLLMClient | None = None,
    retention_days: int = 30,
) -> None:
    """Register forecast tools on the MCP server."""

    def _audit(
        tool_name: str,
        tool_input: Any,
        start_time: float,
        forecast: BurnoutForecast | None = None,
        error: Exception | None = None,
    ) -> None:
        if audit_logger is None:
            return
        disclosed = (
            forecast is not None
            and not forecast.is_degraded
            and llm_client is not None
            and llm_client.discloses_data
        )
        audit_logger.log_tool_call(
            tool_name,
            tool_input,
            llm_provider=llm_client.provider_name if llm_client is not None else None,
            llm_disclosed=disclosed,
            forecast_id=forecast.forecast_id if forecast is not None else None,
            duration_ms=(time.monotonic() - start_time) * 1000,
            status="failure" if error is not None else "success",
            error_type=type(error).__name__ if error is not None else None,
        )

    async def _forecast_and_store(
        user_id: str,
        signals: list,
        config: dict | None,
        new_signals: list | None = None,
        source: str = "manual",
    ) -> tuple[BurnoutForecast, bool]:
        """Compute, then persist when storage is configured.

        Returns the forecast and whether it was stored. A storage failure is
        logged and never discards the computed forecast.
        """
        forecast = await engine.compute_forecast(user_id, signals, config)
        if repository is None:
            return forecast, False
        try:
            if new_signals:
                repository.save_signals(user_id, new_signals, source=source)
            repository.save_forecast(forecast)
            repository.cleanup_old_forecasts(
                user_id, days_to_keep=retention_days, now=forecast.timestamp
            )
        except Exception:
            logger.exception("Failed to persist forecast %s; returning it unstored", forecast.forecast_id)
            return forecast, False
        return forecast, True

    @mcp.tool
    async def generate_burnout_forecast(
        ctx: Context,
        user_id: str,
        signals: list[dict] | None = None,
        config: dict | None = None,
    ) -> str:
        """Compute a burnout forecast from wellness signals.

        Each signal is ``{"type", "timestamp", "value", "metadata"}`` where
        type is one of check-in, task, calendar-event, sleep or activity and
        timestamp is ISO 8601. When storage is enabled the supplied signals
        and the forecast are saved; omit ``signals`` to forecast from the
        stored history instead.

        Args:
            user_id: Subject identifier.
            signals: Wellness signals to analyze.
            config: Optional partial override, e.g. ``{"analysisWindow": 7}``.
        """
        start_time = time.monotonic()
        tool_input = {"user_id": user_id, "signals": signals, "config": config}
        try:
            if signals is None:
                if repository is None:
                    raise ForecastInputError("signals array is required")
                window = engine.config.merged(config).analysis_window
                since = engine.clock() - timedelta(days=window)
                history = repository.get_signals(user_id, start=since, oldest_first=True)
                forecast, stored = await _forecast_and_store(user_id, history, config)
            else:
                if not isinstance(signals, list):
                    raise ForecastInputError("signals array is required")
                parsed = [signal_from_dict(s) for s in signals]
                forecast, stored = await _forecast_and_store(
                    user_id, parsed, config, new_signals=parsed
                )
        except (ForecastInputError, RepositoryError) as exc:
            _audit("generate_burnout_forecast", tool_input, start_time, error=exc)
            logger.warning("Forecast request rejected: %s", exc)
            return _error(str(exc))

        _audit("generate_burnout_forecast", tool_input, start_time, forecast=forecast)
        return json.dumps({
            "status": "ok",
            "forecast_id": forecast.forecast_id,
            "stored": stored,
            "forecast": forecast.to_dict(),
        })

    if repository is None:
        return

    @mcp.tool
    async def record_daily_check_in(
        ctx: Context,
        user_id: str,
        energy_rating: int,
        sleep_hours: float,
    ) -> str:
        """Record today's check-in and refresh the forecast.

        Saves a check-in signal and a sleep signal, then forecasts from all
        stored signals in the analysis window.

        Args:
            user_id: Subject identifier.
            energy_rating: Energy today, 1 (drained) to 5 (great).
            sleep_hours: Hours slept last night.
        """
        start_time = time.monotonic()
        tool_input = {"user_id": user_id, "energy_rating": energy_rating, "sleep_hours": sleep_hours}
        try:
            if not user_id or not user_id.strip():
                raise ForecastInputError("user_id is required")
            now = engine.clock()
            new_signals = daily_check_in_signals(energy_rating, sleep_hours, timestamp=now)
            history = repository.get_signals(
                user_id,
                start=now - timedelta(days=engine.config.analysis_window),
                oldest_first=True,
            )
            forecast, stored = await _forecast_and_store(
                user_id, history + new_signals, None, new_signals=new_signals, source="daily_check_in"
            )
        except (ForecastInputError, RepositoryError) as exc:
            _audit("record_daily_check_in", tool_input, start_time, error=exc)
            return _error(str(exc))

        _audit("record_daily_check_in", tool_input, start_time, forecast=forecast)
        return json.dumps({
            "status": "saved" if stored else "ok",
            "stored": stored,
            "signals_saved": len(new_signals) if stored else 0,
            "check_in": {
                "energyLabel": new_signals[0].meta("emotionalState"),
                "energyValue": new_signals[0].value,
                "sleepHours": sleep_hours,
                "sleepDuration": new_signals[1].meta("sleepDuration"),
            },
            "forecast_id": forecast.forecast_id,
            "forecast": forecast.to_dict(),
        })

    @mcp.tool
    async def get_latest_forecast(ctx: Context, user_id: str) -> str:
        """Return the most recent stored forecast for a user, or null.

        Args:
            user_id: Subject identifier.
        """
        forecast = repository.get_latest_forecast(user_id)
        if audit_logger is not None:
            audit_logger.log_data_access(tool_name="get_latest_forecast", count=int(forecast is not None))
        return json.dumps({
            "status": "ok",
            "forecast": forecast.to_dict() if forecast is not None else None,
        })

    @mcp.tool
    async def get_forecast_history(ctx: Context, user_id: str, limit: int = 10) -> str:
        """Return stored forecasts for a user, newest first.

        Args:
            user_id: Subject identifier.
            limit: Maximum number of forecasts (default 10).
        """
        try:
            forecasts = repository.get_forecast_history(user_id, limit=limit)
        except RepositoryError as exc:
            return _error(str(exc))
        if audit_logger is not None:
            audit_logger.log_data_access(tool_name="get_forecast_history", count=len(forecasts))
        return json.dumps({
            "status": "ok",
            "count": len(forecasts),
            "forecasts": [f.to_dict() for f in forecasts],
        })
