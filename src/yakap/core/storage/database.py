"""SQLite database management for the wellness data store.

Handles connection lifecycle, schema creation, and migrations.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# ---------------------------------------------------------------------------
# Schema DDL
# ---------------------------------------------------------------------------

_SCHEMA_V1 = """
-- One row per wellness signal; metadata is encrypted
CREATE TABLE IF NOT EXISTS wellness_signals (
    id            TEXT PRIMARY KEY,
    user_id       TEXT NOT NULL,
    signal_type   TEXT NOT NULL,
    timestamp     TEXT NOT NULL,
    value         REAL NOT NULL DEFAULT 0,
    metadata_enc  TEXT,
    source        TEXT NOT NULL DEFAULT 'manual',
    created_at    TEXT NOT NULL DEFAULT (datetime('now'))
);

-- Forecasts keyed by {user_id}_{epoch millis}; full payload is encrypted,
-- headline values stay queryable
CREATE TABLE IF NOT EXISTS burnout_forecasts (
    id             TEXT PRIMARY KEY,
    user_id        TEXT NOT NULL,
    timestamp      TEXT NOT NULL,
    overall_score  REAL NOT NULL,
    risk_level     TEXT NOT NULL,
    trend          TEXT NOT NULL,
    payload_enc    TEXT NOT NULL,
    created_at     TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS user_profiles (
    user_id      TEXT PRIMARY KEY,
    profile_enc  TEXT NOT NULL,
    created_at   TEXT NOT NULL,
    last_active  TEXT NOT NULL
);

-- PHI-free audit trail
CREATE TABLE IF NOT EXISTS audit_log (
    id              TEXT PRIMARY KEY,
    timestamp       TEXT NOT NULL DEFAULT (datetime('now')),
    action          TEXT NOT NULL,
    tool_name       TEXT,
    tool_input_hash TEXT,
    llm_provider    TEXT,
    llm_disclosed   INTEGER DEFAULT 0,
    forecast_id     TEXT,
    duration_ms     REAL,
    status          TEXT NOT NULL DEFAULT 'success',
    error_type      TEXT,
    metadata_json   TEXT
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_signals_user_ts   ON wellness_signals(user_id, timestamp);
CREATE INDEX IF NOT EXISTS idx_forecasts_user_ts ON burnout_forecasts(user_id, timestamp);
CREATE INDEX IF NOT EXISTS idx_audit_timestamp   ON audit_log(timestamp);
CREATE INDEX IF NOT EXISTS idx_audit_action      ON audit_log(action);
CREATE INDEX IF NOT EXISTS idx_audit_tool        ON audit_log(tool_name);
"""


class DatabaseError(Exception):
    """Raised when database operations fail."""


class WellnessDatabase:
    """SQLite database manager for the wellness data store.

    Supports both file-based and in-memory (`:memory:`) databases.
    In-memory mode is used for testing.

    Usage::

        db = WellnessDatabase(":memory:")
        db.initialize()
        conn = db.connection
        db.close()
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the active database connection.

        Raises:
            DatabaseError: If the database has not been initialized.
        """
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Open the connection and ensure the schema exists. Idempotent."""
        if self._conn is not None:
            return

        if self._db_path != ":memory:":
            db_file = Path(self._db_path).expanduser()
            db_file.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(db_file), check_same_thread=False)
        else:
            self._conn = sqlite3.connect(":memory:", check_same_thread=False)

        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")

        self._ensure_schema()
        logger.info("Wellness database initialized: %s", self._db_path)

    def _ensure_schema(self) -> None:
        conn = self.connection
        conn.executescript(_SCHEMA_V1)

        current_version = self.get_schema_version()
        if current_version < SCHEMA_VERSION:
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            conn.commit()
            logger.info(
                "Schema updated from version %d to %d", current_version, SCHEMA_VERSION
            )

    def get_schema_version(self) -> int:
        """Return the current schema version."""
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row[0] is not None else 0

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Wellness database closed")

    def __enter__(self) -> WellnessDatabase:
        self.initialize()
        return self

    def __exit__(self, *args) -> None:
        self.close()
