"""Audit logger: PHI-free access logging and LLM disclosure tracking.

Every tool invocation, data access and deletion is recorded without raw
wellness data:

* ``tool_input_hash`` is a SHA-256 of the canonical JSON input.
* ``llm_disclosed`` records whether forecast context was sent to an
  external generative backend.
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from yakap.core.storage.database import WellnessDatabase

logger = logging.getLogger(__name__)


def _hash_input(data: Any) -> str:
    """SHA-256 of canonical JSON, or ``""`` when not serializable."""
    try:
        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return ""
    return hashlib.sha256(canonical.encode()).hexdigest()


@dataclass
class AuditEvent:
    """A single audit log entry."""

    action: str                          # 'tool_invocation' | 'data_access' | 'data_delete'
    tool_name: str = ""
    tool_input_hash: str = ""
    llm_provider: str | None = None
    llm_disclosed: bool = False
    forecast_id: str | None = None
    duration_ms: float | None = None
    status: str = "success"              # 'success' | 'failure'
    error_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class AuditLogger:
    """Records audit events to the ``audit_log`` table.

    Writes are committed immediately. A failed write is logged and
    reported as an empty event id; it never fails the calling tool.

    Usage::

        audit = AuditLogger(wellness_db)
        audit.log_tool_call(
            "generate_burnout_forecast",
            {"user_id": "u1"},
            llm_provider="openai",
            llm_disclosed=True,
        )
    """

    def __init__(self, database: WellnessDatabase) -> None:
        self._db = database

    # ---------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------

    def log_event(self, event: AuditEvent) -> str:
        event_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc).isoformat()
        metadata_json = json.dumps(event.metadata, separators=(",", ":")) if event.metadata else None

        try:
            conn = self._db.connection
            conn.execute(
                """INSERT INTO audit_log
                   (id, timestamp, action, tool_name, tool_input_hash,
                    llm_provider, llm_disclosed, forecast_id,
                    duration_ms, status, error_type, metadata_json)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    event_id,
                    now,
                    event.action,
                    event.tool_name or None,
                    event.tool_input_hash or None,
                    event.llm_provider,
                    1 if event.llm_disclosed else 0,
                    event.forecast_id,
                    event.duration_ms,
                    event.status,
                    event.error_type,
                    metadata_json,
                ),
            )
            conn.commit()
        except Exception:
            logger.exception("Failed to write audit event; event lost")
            return ""

        return event_id

    def log_tool_call(
        self,
        tool_name: str,
        tool_input: Any = None,
        *,
        llm_provider: str | None = None,
        llm_disclosed: bool = False,
        forecast_id: str | None = None,
        duration_ms: float | None = None,
        status: str = "success",
        error_type: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Log a tool invocation. ``tool_input`` is hashed, never stored."""
        return self.log_event(AuditEvent(
            action="tool_invocation",
            tool_name=tool_name,
            tool_input_hash=_hash_input(tool_input) if tool_input else "",
            llm_provider=llm_provider,
            llm_disclosed=llm_disclosed,
            forecast_id=forecast_id,
            duration_ms=duration_ms,
            status=status,
            error_type=error_type,
            metadata=metadata or {},
        ))

    def log_data_access(self, *, tool_name: str, count: int = 0) -> str:
        return self.log_event(AuditEvent(
            action="data_access",
            tool_name=tool_name,
            metadata={"records_read": count},
        ))

    def log_data_delete(self, *, tool_name: str = "", counts: dict[str, int] | None = None) -> str:
        return self.log_event(AuditEvent(
            action="data_delete",
            tool_name=tool_name,
            metadata={"records_deleted": counts or {}},
        ))

    # ---------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------

    def get_events(
        self,
        *,
        action: str | None = None,
        tool_name: str | None = None,
        since: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Query audit events, newest first."""
        conditions: list[str] = []
        params: list[Any] = []

        if action:
            conditions.append("action = ?")
            params.append(action)
        if tool_name:
            conditions.append("tool_name = ?")
            params.append(tool_name)
        if since:
            conditions.append("timestamp >= ?")
            params.append(since)

        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""
        query = f"SELECT * FROM audit_log{where} ORDER BY timestamp DESC LIMIT ?"
        params.append(limit)

        rows = self._db.connection.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    def count_events(self, *, since: str | None = None) -> int:
        if since:
            row = self._db.connection.execute(
                "SELECT COUNT(*) FROM audit_log WHERE timestamp >= ?", (since,)
            ).fetchone()
        else:
            row = self._db.connection.execute("SELECT COUNT(*) FROM audit_log").fetchone()
        return row[0]

    def count_disclosures(self, *, since: str | None = None) -> int:
        """How many times forecast context went to an external LLM."""
        query = "SELECT COUNT(*) FROM audit_log WHERE llm_disclosed = 1"
        params: list[Any] = []
        if since:
            query += " AND timestamp >= ?"
            params.append(since)
        return self._db.connection.execute(query, params).fetchone()[0]
