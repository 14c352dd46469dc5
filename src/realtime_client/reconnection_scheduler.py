"""Reconnection timer with exponential backoff and jitter."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from .backoff import DelayCalculator, RetryPolicy

RetryCallback = Callable[[], Awaitable[Any]]


class ReconnectionScheduler:
    """
    Arms at most one delayed retry at a time.

    ``attempt`` counts scheduled retries since the last ``reset()``; once it
    reaches ``policy.max_attempts`` no further retry is armed.
    """

    def __init__(self, policy: RetryPolicy, name: str = "realtime"):
        self.policy = policy
        self.name = name
        self.attempt = 0
        self.last_delay: Optional[float] = None
        self._task: Optional[asyncio.Task] = None
        self.logger = logging.getLogger(f"{__name__}.{name}")

    @property
    def is_armed(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.policy.max_attempts

    def next_delay(self) -> float:
        """Delay the next scheduled retry would use."""
        return DelayCalculator.calculate_full_delay(self.policy, self.attempt, self.name)

    def schedule_retry(self, callback: RetryCallback, delay: Optional[float] = None) -> bool:
        """
        Arm a retry, replacing any armed one.

        Args:
            callback: Coroutine function invoked when the timer fires
            delay: Fixed delay overriding the backoff calculation

        Returns:
            False when retries are exhausted and nothing was armed
        """
        self.cancel()
        if self.exhausted:
            self.logger.error(f"Maximum reconnection attempts ({self.policy.max_attempts}) reached; giving up")
            return False

        retry_delay = self.next_delay() if delay is None else delay
        self.attempt += 1
        self.last_delay = retry_delay
        self._task = asyncio.get_running_loop().create_task(self._fire(retry_delay, callback))
        self.logger.info(
            f"Reconnection attempt {self.attempt}/{self.policy.max_attempts} scheduled in {retry_delay:.2f}s"
        )
        return True

    def cancel(self) -> None:
        """Cancel the armed retry, if any."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            self.logger.debug("Cancelled armed reconnection timer")

    def reset(self) -> None:
        """Cancel the armed retry and start counting attempts from zero."""
        self.cancel()
        self.attempt = 0
        self.last_delay = None

    async def _fire(self, delay: float, callback: RetryCallback) -> None:
        await asyncio.sleep(delay)
        # The timer has fired; the callback may arm the next retry.
        self._task = None
        try:
            await callback()
        except asyncio.CancelledError:
            raise
        except Exception:
            self.logger.exception("Reconnection callback failed")


__all__ = ["ReconnectionScheduler", "RetryCallback"]
