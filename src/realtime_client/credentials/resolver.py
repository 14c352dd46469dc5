"""Bounded credential resolution: read, refresh when expired, retry."""

from __future__ import annotations

import asyncio
import logging
import time as _time
from typing import Optional

from ..backoff import DelayCalculator, RetryPolicy
from ..exceptions import CredentialError
from .models import Credentials
from .refresher import CredentialRefresher
from .store import CredentialStore

logger = logging.getLogger(__name__)
time = _time  # Exposed for test monkeypatching of time.time


class CredentialResolver:
    """Produces a usable credential or gives up after ``policy.max_attempts`` rounds."""

    def __init__(
        self,
        store: CredentialStore,
        refresher: CredentialRefresher,
        policy: RetryPolicy,
        refresh_skew: float = 0.0,
    ):
        self.store = store
        self.refresher = refresher
        self.policy = policy
        self.refresh_skew = refresh_skew
        self.time_provider = lambda: time.time()

    async def resolve(self) -> Optional[Credentials]:
        """
        Return a non-expired credential, refreshing at most once per round.

        Returns:
            Credentials, or None when every round failed
        """
        rounds = max(1, self.policy.max_attempts)
        for attempt in range(rounds):
            credentials = await self._resolve_once()
            if credentials is not None:
                return credentials
            if attempt < rounds - 1:
                await asyncio.sleep(DelayCalculator.calculate_full_delay(self.policy, attempt, "credentials"))

        logger.error(f"No usable credential after {rounds} attempts")
        return None

    async def _resolve_once(self) -> Optional[Credentials]:
        try:
            stored = await self.store.load()
        except CredentialError as exc:
            logger.warning(f"Failed to read stored session: {exc}")
            return None

        if stored is None:
            logger.warning("No stored session")
            return None

        if not stored.is_expired(self.time_provider(), self.refresh_skew):
            return stored

        if not stored.can_refresh():
            logger.warning("Access token expired and no refresh token is stored")
            return None

        logger.info(f"Access token expired at {stored.expires_at:.0f}, refreshing")
        try:
            refreshed = await self.refresher.refresh(stored.refresh_token)
            await self.store.save(refreshed)
        except CredentialError as exc:
            logger.warning(f"Credential refresh failed: {exc}")
            return None
        return refreshed


__all__ = ["CredentialResolver"]
