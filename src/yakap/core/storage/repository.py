"""Wellness repository: persistence for signals, forecasts and user profiles.

Mediates between domain objects and SQLite, using FieldEncryptor for the
sensitive payloads (signal metadata, full forecasts, profiles).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping

from yakap.core.storage.database import WellnessDatabase
from yakap.core.storage.encryption import FieldEncryptor
from yakap.core.storage.models import StoredSignal, UserProfile
from yakap.domains.burnout.domain_logic.forecast_models import BurnoutForecast
from yakap.domains.burnout.domain_logic.signal_models import WellnessSignal

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when repository operations fail."""


def _iso(ts: datetime) -> str:
    """UTC ISO-8601 so that string order matches time order."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat()


def _millis(ts: datetime) -> int:
    return int(ts.timestamp() * 1000)


class WellnessRepository:
    """CRUD repository for encrypted wellness data.

    Usage::

        db = WellnessDatabase(":memory:")
        db.initialize()
        repo = WellnessRepository(db, FieldEncryptor(key="..."))

        repo.save_signals("user-1", signals, source="manual")
        repo.save_forecast(forecast)
        latest = repo.get_latest_forecast("user-1")
    """

    def __init__(self, database: WellnessDatabase, encryptor: FieldEncryptor) -> None:
        self._db = database
        self._enc = encryptor

    @property
    def database(self) -> WellnessDatabase:
        return self._db

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    def save_signals(
        self,
        user_id: str,
        signals: Iterable[WellnessSignal],
        source: str = "manual",
    ) -> list[str]:
        """Persist signals in one transaction.

        Row ids are ``{user_id}_{timestamp millis}_{index}``; saving the same
        batch twice overwrites rather than duplicates.

        Returns:
            The row ids written.
        """
        if not user_id:
            raise RepositoryError("user_id is required")

        conn = self._db.connection
        ids: list[str] = []
        now = self._now_iso()
        with conn:
            for index, signal in enumerate(signals):
                row_id = f"{user_id}_{_millis(signal.timestamp)}_{index}"
                conn.execute(
                    """INSERT OR REPLACE INTO wellness_signals
                       (id, user_id, signal_type, timestamp, value, metadata_enc, source, created_at)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        row_id,
                        user_id,
                        signal.type,
                        _iso(signal.timestamp),
                        float(signal.value),
                        self._enc.encrypt(dict(signal.metadata)),
                        source,
                        now,
                    ),
                )
                ids.append(row_id)
        logger.info("Saved %d signals for user %s (source=%s)", len(ids), user_id, source)
        return ids

    def get_signals(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        *,
        oldest_first: bool = False,
    ) -> list[WellnessSignal]:
        """Signals with ``start <= timestamp <= end``, newest first unless ``oldest_first``.

        Forecasts need ``oldest_first=True``: the trend regression reads
        signals in the order given.
        """
        stored = self.get_stored_signals(user_id, start=start, end=end, oldest_first=oldest_first)
        return [s.signal for s in stored]

    def get_all_signals(self, user_id: str) -> list[WellnessSignal]:
        """Every stored signal for the user, newest first."""
        return self.get_signals(user_id)

    def get_stored_signals(
        self,
        user_id: str,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        oldest_first: bool = False,
    ) -> list[StoredSignal]:
        conditions = ["user_id = ?"]
        params: list[Any] = [user_id]
        if start is not None:
            conditions.append("timestamp >= ?")
            params.append(_iso(start))
        if end is not None:
            conditions.append("timestamp <= ?")
            params.append(_iso(end))

        query = (
            "SELECT * FROM wellness_signals WHERE "
            + " AND ".join(conditions)
            + (" ORDER BY timestamp ASC, id ASC" if oldest_first else " ORDER BY timestamp DESC, id DESC")
        )
        rows = self._db.connection.execute(query, params).fetchall()
        return [self._row_to_stored_signal(row) for row in rows]

    def count_signals(self, user_id: str) -> int:
        row = self._db.connection.execute(
            "SELECT COUNT(*) FROM wellness_signals WHERE user_id = ?", (user_id,)
        ).fetchone()
        return row[0]

    # ------------------------------------------------------------------
    # Forecasts
    # ------------------------------------------------------------------

    def save_forecast(self, forecast: BurnoutForecast) -> str:
        """Persist a forecast under its ``forecast_id`` and return the id."""
        forecast_id = forecast.forecast_id
        conn = self._db.connection
        with conn:
            conn.execute(
                """INSERT OR REPLACE INTO burnout_forecasts
                   (id, user_id, timestamp, overall_score, risk_level, trend, payload_enc, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    forecast_id,
                    forecast.user_id,
                    _iso(forecast.timestamp),
                    forecast.overall_score,
                    forecast.risk_level,
                    forecast.trend,
                    self._enc.encrypt(forecast.to_dict()),
                    self._now_iso(),
                ),
            )
        logger.info("Saved forecast %s (risk=%s)", forecast_id, forecast.risk_level)
        return forecast_id

    def get_latest_forecast(self, user_id: str) -> BurnoutForecast | None:
        history = self.get_forecast_history(user_id, limit=1)
        return history[0] if history else None

    def get_forecast_history(self, user_id: str, limit: int = 10) -> list[BurnoutForecast]:
        """Most recent forecasts first."""
        if limit < 1:
            raise RepositoryError(f"limit must be positive, got {limit}")
        rows = self._db.connection.execute(
            """SELECT payload_enc FROM burnout_forecasts
               WHERE user_id = ? ORDER BY timestamp DESC LIMIT ?""",
            (user_id, limit),
        ).fetchall()
        return [BurnoutForecast.from_dict(self._enc.decrypt(row["payload_enc"])) for row in rows]

    def cleanup_old_forecasts(
        self,
        user_id: str,
        days_to_keep: int = 30,
        now: datetime | None = None,
    ) -> int:
        """Delete the user's forecasts older than ``days_to_keep`` days before ``now``.

        Returns:
            Number of forecasts deleted.
        """
        cutoff = _iso((now or datetime.now(timezone.utc)) - timedelta(days=days_to_keep))
        conn = self._db.connection
        with conn:
            cursor = conn.execute(
                "DELETE FROM burnout_forecasts WHERE user_id = ? AND timestamp < ?",
                (user_id, cutoff),
            )
        logger.info("Cleaned up %d old forecasts for user %s", cursor.rowcount, user_id)
        return cursor.rowcount

    # ------------------------------------------------------------------
    # User profiles
    # ------------------------------------------------------------------

    def save_user(self, data: UserProfile | Mapping[str, Any]) -> UserProfile:
        """Create or merge a user profile.

        Top-level fields in ``data`` replace stored ones; ``preferences`` and
        ``profile`` are merged key by key. ``lastActive`` is refreshed.

        Raises:
            RepositoryError: If ``userId`` is missing.
        """
        payload = data.to_dict() if isinstance(data, UserProfile) else dict(data)
        user_id = payload.get("userId")
        if not user_id:
            raise RepositoryError("userId is required")

        existing = self.get_user(user_id)
        now = self._now_iso()
        merged = existing.to_dict() if existing else UserProfile(user_id=user_id, created_at=now).to_dict()
        for key, value in payload.items():
            if key in ("preferences", "profile") and isinstance(value, Mapping):
                merged[key] = {**merged.get(key, {}), **value}
            elif key == "email" and value is not None:
                merged[key] = value
        merged["lastActive"] = now
        profile = UserProfile.from_dict(merged)

        conn = self._db.connection
        with conn:
            conn.execute(
                """INSERT INTO user_profiles (user_id, profile_enc, created_at, last_active)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(user_id) DO UPDATE SET
                       profile_enc = excluded.profile_enc,
                       last_active = excluded.last_active""",
                (user_id, self._enc.encrypt(profile.to_dict()), profile.created_at, profile.last_active),
            )
        logger.info("User profile saved for %s", user_id)
        return profile

    def get_user(self, user_id: str) -> UserProfile | None:
        row = self._db.connection.execute(
            "SELECT profile_enc FROM user_profiles WHERE user_id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return None
        return UserProfile.from_dict(self._enc.decrypt(row["profile_enc"]))

    # ------------------------------------------------------------------
    # Deletion (right to erasure)
    # ------------------------------------------------------------------

    def delete_user_data(self, user_id: str) -> dict[str, int]:
        """Remove every signal, forecast and profile row for the user.

        Returns:
            Rows deleted per table.
        """
        conn = self._db.connection
        with conn:
            signals = conn.execute("DELETE FROM wellness_signals WHERE user_id = ?", (user_id,)).rowcount
            forecasts = conn.execute("DELETE FROM burnout_forecasts WHERE user_id = ?", (user_id,)).rowcount
            profiles = conn.execute("DELETE FROM user_profiles WHERE user_id = ?", (user_id,)).rowcount
        logger.warning(
            "Deleted data for user %s: %d signals, %d forecasts, %d profiles",
            user_id,
            signals,
            forecasts,
            profiles,
        )
        return {"signals": signals, "forecasts": forecasts, "profiles": profiles}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _row_to_stored_signal(self, row: Any) -> StoredSignal:
        return StoredSignal(
            id=row["id"],
            user_id=row["user_id"],
            signal=WellnessSignal(
                type=row["signal_type"],
                timestamp=datetime.fromisoformat(row["timestamp"]),
                value=row["value"],
                metadata=self._enc.decrypt(row["metadata_enc"] or "") or {},
            ),
            source=row["source"],
            created_at=row["created_at"],
        )
