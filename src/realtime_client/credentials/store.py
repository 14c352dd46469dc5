"""Persisted session storage."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import redis.asyncio
from redis.exceptions import RedisError

from ..exceptions import CredentialError
from .models import Credentials

logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY = "auth_session"


class CredentialStore(Protocol):
    """Key-value session storage the connection manager reads and refreshes."""

    async def load(self) -> Optional[Credentials]: ...

    async def save(self, credentials: Credentials) -> None: ...


class RedisCredentialStore:
    """Session stored as a JSON document under a single Redis key."""

    def __init__(self, redis_client: "redis.asyncio.Redis", session_key: str = DEFAULT_SESSION_KEY):
        self._redis = redis_client
        self.session_key = session_key

    @classmethod
    def from_url(cls, url: str, session_key: str = DEFAULT_SESSION_KEY) -> "RedisCredentialStore":
        return cls(redis.asyncio.from_url(url), session_key)

    async def load(self) -> Optional[Credentials]:
        """Return the stored credentials, or None when absent or unreadable."""
        try:
            raw = await self._redis.get(self.session_key)
        except RedisError as exc:
            raise CredentialError(f"Failed to read session {self.session_key!r}") from exc
        if raw is None:
            return None
        try:
            return Credentials.from_json(raw)
        except CredentialError as exc:
            logger.warning(f"Ignoring malformed session under {self.session_key!r}: {exc}")
            return None

    async def save(self, credentials: Credentials) -> None:
        try:
            await self._redis.set(self.session_key, credentials.to_json())
        except RedisError as exc:
            raise CredentialError(f"Failed to persist session {self.session_key!r}") from exc
        logger.debug(f"Persisted refreshed session under {self.session_key!r}")

    async def aclose(self) -> None:
        await self._redis.aclose()


__all__ = ["CredentialStore", "DEFAULT_SESSION_KEY", "RedisCredentialStore"]
