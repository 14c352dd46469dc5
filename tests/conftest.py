"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import os
from typing import Any

import pytest

# Keep tests independent of any developer .env and of real servers
os.environ.setdefault("REALTIME_SERVER_URL", "http://realtime.test")
os.environ.setdefault("REALTIME_API_BASE", "http://api.test")
os.environ.setdefault("CONNECTION_TIMEOUT_SECONDS", "5")
os.environ.setdefault("REQUEST_TIMEOUT_SECONDS", "5")
os.environ.setdefault("RECONNECTION_INITIAL_DELAY_SECONDS", "1")
os.environ.setdefault("RECONNECTION_MAX_DELAY_SECONDS", "30")
os.environ.setdefault("RECONNECTION_BACKOFF_MULTIPLIER", "2.0")
os.environ.setdefault("RECONNECTION_JITTER_SECONDS", "1")
os.environ.setdefault("MAX_RECONNECT_ATTEMPTS", "10")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")


class FakeRedis:
    """In-memory Redis mock for testing."""

    def __init__(self):
        self._data: dict[str, Any] = {}
        self.closed = False

    async def set(self, key: str, value: str | bytes) -> bool:
        """Set a string value."""
        self._data[key] = value if isinstance(value, str) else value.decode()
        return True

    async def get(self, key: str) -> str | None:
        """Get a string value."""
        return self._data.get(key)

    async def delete(self, *keys: str) -> int:
        """Delete keys."""
        removed = 0
        for key in keys:
            if self._data.pop(key, None) is not None:
                removed += 1
        return removed

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Provide a fresh FakeRedis instance."""
    return FakeRedis()


@pytest.fixture(autouse=True)
def _deterministic_jitter(monkeypatch):
    """Backoff jitter is zero unless a test patches it."""
    monkeypatch.setattr("realtime_client.backoff.random.uniform", lambda a, b: 0.0)
