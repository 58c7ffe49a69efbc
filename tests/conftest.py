"""Shared test fixtures for Yakap burnout forecast tests."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "none")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("HUGGINGFACE_API_KEY", "")
    monkeypatch.setenv("ENCRYPTION_KEY", "")
    monkeypatch.setenv("DB_PATH", ":memory:")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))


FIXED_NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def fixed_clock():
    """A clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def wellness_db():
    """Create an in-memory WellnessDatabase for testing."""
    from yakap.core.storage.database import WellnessDatabase

    db = WellnessDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def field_encryptor():
    """Create a FieldEncryptor with a fresh key."""
    from cryptography.fernet import Fernet

    from yakap.core.storage.encryption import FieldEncryptor

    return FieldEncryptor(Fernet.generate_key().decode())


@pytest.fixture
def wellness_repository(wellness_db, field_encryptor):
    """Create a WellnessRepository backed by in-memory SQLite."""
    from yakap.core.storage.repository import WellnessRepository

    return WellnessRepository(wellness_db, field_encryptor)


@pytest.fixture
def audit_logger(wellness_db):
    """Create an AuditLogger backed by in-memory SQLite."""
    from yakap.core.audit.logger import AuditLogger

    return AuditLogger(wellness_db)
