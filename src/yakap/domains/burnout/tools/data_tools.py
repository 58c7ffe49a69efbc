"""MCP tools for stored wellness data: signals, user profiles, erasure.

Registered only when storage is configured. Reads and deletions are
audit-logged.
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from yakap.core.storage.repository import RepositoryError
from yakap.domains.burnout.connectors.signal_factory import (
    parse_timestamp,
    signal_from_dict,
    signal_to_dict,
)
from yakap.domains.burnout.domain_logic.forecast_models import ForecastInputError

if TYPE_CHECKING:
    from yakap.core.audit.logger import AuditLogger
    from yakap.core.storage.repository import WellnessRepository

logger = logging.getLogger(__name__)


def _error(message: str) -> str:
    return json.dumps({"status": "error", "message": message})


def register_data_tools(
    mcp: FastMCP,
    repository: WellnessRepository,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register signal, profile and deletion tools on the MCP server."""

    @mcp.tool
    async def save_wellness_signals(
        ctx: Context,
        user_id: str,
        signals: list[dict],
        source: str = "manual",
    ) -> str:
        """Store wellness signals without computing a forecast.

        Args:
            user_id: Subject identifier.
            signals: Signals as ``{"type", "timestamp", "value", "metadata"}``.
            source: Where the signals came from (e.g. 'manual', 'calendar').
        """
        try:
            parsed = [signal_from_dict(s) for s in signals]
            ids = repository.save_signals(user_id, parsed, source=source)
        except (ForecastInputError, RepositoryError) as exc:
            return _error(str(exc))

        if audit_logger is not None:
            audit_logger.log_tool_call("save_wellness_signals", {"user_id": user_id, "count": len(ids)})
        return json.dumps({
            "status": "saved",
            "message": f"Saved {len(ids)} signals for user {user_id}",
            "count": len(ids),
        })

    @mcp.tool
    async def get_user_signals(
        ctx: Context,
        user_id: str,
        start_date: str = "",
        end_date: str = "",
    ) -> str:
        """List stored signals for a user, newest first.

        Args:
            user_id: Subject identifier.
            start_date: Optional ISO 8601 lower bound (inclusive).
            end_date: Optional ISO 8601 upper bound (inclusive).
        """
        try:
            start = parse_timestamp(start_date) if start_date else None
            end = parse_timestamp(end_date) if end_date else None
        except ForecastInputError as exc:
            return _error(str(exc))

        signals = repository.get_signals(user_id, start=start, end=end)
        if audit_logger is not None:
            audit_logger.log_data_access(tool_name="get_user_signals", count=len(signals))
        return json.dumps({
            "status": "ok",
            "count": len(signals),
            "signals": [signal_to_dict(s) for s in signals],
        })

    @mcp.tool
    async def save_user_profile(
        ctx: Context,
        user_id: str,
        email: str | None = None,
        preferences: dict | None = None,
        profile: dict | None = None,
    ) -> str:
        """Create or update a user profile. Fields given are merged into the stored profile.

        Args:
            user_id: Subject identifier.
            email: Contact email.
            preferences: Any of checkInReminders, forecastNotifications, dataSharing.
            profile: Any of workArrangement (Onsite/Hybrid/Remote),
                focusHours ({"start", "end"}), stressSignals, recoveryStrategies.
        """
        update: dict = {"userId": user_id}
        if email is not None:
            update["email"] = email
        if preferences is not None:
            update["preferences"] = preferences
        if profile is not None:
            update["profile"] = profile
        try:
            saved = repository.save_user(update)
        except RepositoryError as exc:
            return _error(str(exc))

        if audit_logger is not None:
            audit_logger.log_tool_call("save_user_profile", {"user_id": user_id})
        return json.dumps({"status": "saved", "user": saved.to_dict()})

    @mcp.tool
    async def get_user_profile(ctx: Context, user_id: str) -> str:
        """Return the stored profile for a user, or null.

        Args:
            user_id: Subject identifier.
        """
        user = repository.get_user(user_id)
        if audit_logger is not None:
            audit_logger.log_data_access(tool_name="get_user_profile", count=int(user is not None))
        return json.dumps({"status": "ok", "user": user.to_dict() if user is not None else None})

    @mcp.tool
    async def delete_my_data(ctx: Context, user_id: str, confirm: str = "") -> str:
        """Permanently delete every signal, forecast and profile for a user.

        Args:
            user_id: Subject identifier.
            confirm: Must be exactly 'DELETE_MY_DATA' to proceed.
        """
        if confirm != "DELETE_MY_DATA":
            return json.dumps({
                "status": "cancelled",
                "message": (
                    "To delete all of your wellness data, call this tool with "
                    "confirm='DELETE_MY_DATA'. This action cannot be undone."
                ),
            })

        start_time = time.monotonic()
        counts = repository.delete_user_data(user_id)
        elapsed_ms = (time.monotonic() - start_time) * 1000
        if audit_logger is not None:
            audit_logger.log_data_delete(tool_name="delete_my_data", counts=counts)
        return json.dumps({
            "status": "deleted",
            "records_deleted": counts,
            "duration_ms": round(elapsed_ms, 1),
        })
