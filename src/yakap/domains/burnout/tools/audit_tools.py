"""MCP tool for reviewing the audit trail.

The audit log holds no wellness data, only hashed input references, so the
summary is safe to show as-is.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from yakap.core.audit.logger import AuditLogger


def register_audit_tools(mcp: FastMCP, audit_logger: AuditLogger) -> None:
    """Register audit trail tools on the MCP server."""

    @mcp.tool
    async def audit_summary(ctx: Context, days: int = 30) -> str:
        """View recent tool usage and how often forecast context reached an external LLM.

        Args:
            days: Number of days to look back (default: 30).
        """
        since = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
        events = audit_logger.get_events(since=since, limit=20)

        return json.dumps({
            "status": "ok",
            "period_days": days,
            "total_events": audit_logger.count_events(since=since),
            "llm_disclosures": audit_logger.count_disclosures(since=since),
            "recent_events": [
                {
                    "timestamp": e.get("timestamp"),
                    "action": e.get("action"),
                    "tool_name": e.get("tool_name"),
                    "llm_provider": e.get("llm_provider"),
                    "llm_disclosed": bool(e.get("llm_disclosed")),
                    "forecast_id": e.get("forecast_id"),
                    "status": e.get("status"),
                }
                for e in events
            ],
        }, indent=2)
