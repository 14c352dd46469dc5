"""Exchange a refresh token for a new session over HTTP."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from ..exceptions import CredentialRefreshError
from ..network_errors import is_network_unreachable_error
from .models import Credentials

logger = logging.getLogger(__name__)

REFRESH_PATH = "/api/auth/refresh"
HTTP_OK = 200


class CredentialRefresher:
    """
    Calls ``POST {api_base}/api/auth/refresh``.

    Concurrent callers share one in-flight request.
    """

    def __init__(self, api_base: str, request_timeout: float = 15.0):
        self.api_base = api_base.rstrip("/")
        self.request_timeout = request_timeout
        self._inflight: Optional[asyncio.Task] = None

    @property
    def refresh_url(self) -> str:
        return f"{self.api_base}{REFRESH_PATH}"

    async def refresh(self, refresh_token: str) -> Credentials:
        """
        Refresh the session.

        Raises:
            CredentialRefreshError: The server rejected the token or could not be reached
        """
        if self._inflight is not None:
            logger.debug("Joining in-flight credential refresh")
            return await asyncio.shield(self._inflight)

        task = asyncio.ensure_future(self._do_refresh(refresh_token))
        self._inflight = task
        try:
            return await asyncio.shield(task)
        finally:
            if self._inflight is task:
                self._inflight = None

    async def _do_refresh(self, refresh_token: str) -> Credentials:
        if not refresh_token:
            raise CredentialRefreshError("No refresh token available")

        logger.info("Refreshing access token")
        timeout = aiohttp.ClientTimeout(total=self.request_timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self.refresh_url,
                    json={"refresh_token": refresh_token},
                    headers={"Content-Type": "application/json"},
                ) as response:
                    if response.status != HTTP_OK:
                        text = await response.text()
                        raise CredentialRefreshError(
                            f"Refresh rejected: {response.status} - {text}",
                            status=response.status,
                        )
                    payload = await response.json()
        except asyncio.TimeoutError as exc:
            raise CredentialRefreshError("Credential refresh timed out", network=True) from exc
        except aiohttp.ClientError as exc:
            raise CredentialRefreshError(
                "HTTP error during credential refresh",
                network=is_network_unreachable_error(exc),
            ) from exc
        except ValueError as exc:
            raise CredentialRefreshError("Refresh response was not valid JSON") from exc

        return _parse_refresh_payload(payload, refresh_token)


def _parse_refresh_payload(payload: Any, refresh_token: str) -> Credentials:
    if not isinstance(payload, dict) or not payload.get("success") or not payload.get("session"):
        raise CredentialRefreshError("Refresh response did not include a session")
    session = payload["session"]
    if not isinstance(session, dict):
        raise CredentialRefreshError("Refresh response session must be an object")
    credentials = Credentials.from_session(session, fallback_refresh_token=refresh_token)
    logger.info("Access token refreshed")
    return credentials


__all__ = ["CredentialRefresher", "REFRESH_PATH"]
