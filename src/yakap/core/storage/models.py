"""Data models for the wellness persistence layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from yakap.domains.burnout.domain_logic.signal_models import WellnessSignal

DEFAULT_PREFERENCES: dict[str, bool] = {
    "checkInReminders": True,
    "forecastNotifications": True,
    "dataSharing": False,
}

PROFILE_KEYS = ("workArrangement", "focusHours", "stressSignals", "recoveryStrategies")
WORK_ARRANGEMENTS = ("Onsite", "Hybrid", "Remote")


@dataclass
class StoredSignal:
    """A persisted wellness signal with its storage envelope."""

    id: str
    user_id: str
    signal: WellnessSignal
    source: str = "manual"  # 'manual', 'daily_check_in', 'calendar', ...
    created_at: str = ""


@dataclass
class UserProfile:
    """Subject preferences and self-described work context.

    ``profile`` holds the optional keys ``workArrangement`` (one of
    ``WORK_ARRANGEMENTS``), ``focusHours`` (``{"start", "end"}``),
    ``stressSignals`` and ``recoveryStrategies`` (lists of strings).
    """

    user_id: str
    email: str = ""
    preferences: dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_PREFERENCES))
    profile: dict[str, Any] = field(default_factory=dict)
    created_at: str = ""
    last_active: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "email": self.email,
            "preferences": dict(self.preferences),
            "profile": dict(self.profile),
            "createdAt": self.created_at,
            "lastActive": self.last_active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserProfile:
        return cls(
            user_id=data["userId"],
            email=data.get("email", ""),
            preferences={**DEFAULT_PREFERENCES, **(data.get("preferences") or {})},
            profile=dict(data.get("profile") or {}),
            created_at=data.get("createdAt", ""),
            last_active=data.get("lastActive", ""),
        )
