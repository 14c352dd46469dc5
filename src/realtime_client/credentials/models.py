"""Stored session credentials."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

import orjson

from ..exceptions import CredentialError


@dataclass(frozen=True)
class Credentials:
    """Access token, refresh token and expiry (epoch seconds)."""

    access_token: str
    refresh_token: str
    expires_at: float

    def is_expired(self, now: Optional[float] = None, skew: float = 0.0) -> bool:
        current = time.time() if now is None else now
        return self.expires_at <= current + skew

    def can_refresh(self) -> bool:
        return bool(self.refresh_token)

    @classmethod
    def from_session(cls, session: Mapping[str, Any], fallback_refresh_token: str = "") -> "Credentials":
        """Build from a session payload (``access_token``, ``refresh_token``, ``expires_at``)."""
        access_token = session.get("access_token")
        if not access_token:
            raise CredentialError("Session has no access_token")
        refresh_token = session.get("refresh_token") or fallback_refresh_token
        raw_expiry = session.get("expires_at")
        # a missing expiry is treated as already expired
        try:
            expires_at = float(raw_expiry) if raw_expiry is not None else 0.0
        except (TypeError, ValueError) as exc:
            raise CredentialError(f"Session expires_at is not numeric: {raw_expiry!r}") from exc
        return cls(access_token=str(access_token), refresh_token=str(refresh_token), expires_at=expires_at)

    def to_session(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> "Credentials":
        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            raise CredentialError("Stored session is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise CredentialError("Stored session must be a JSON object")
        return cls.from_session(payload)

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_session())

    def __repr__(self) -> str:
        return f"Credentials(access_token=<redacted>, refresh_token=<redacted>, expires_at={self.expires_at})"
