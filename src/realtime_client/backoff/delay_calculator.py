"""Delay calculation helpers for retry policies."""

import logging

from . import random as backoff_random
from .types import RetryPolicy

logger = logging.getLogger(__name__)


class DelayCalculator:
    """Calculates backoff delays with jitter."""

    @staticmethod
    def calculate_base_delay(policy: RetryPolicy, attempt: int) -> float:
        """
        Calculate the exponential part of the delay.

        Args:
            policy: Retry policy
            attempt: Zero-based attempt number

        Returns:
            Base delay in seconds, before jitter and ceiling
        """
        return policy.base_delay * (policy.multiplier**attempt)

    @staticmethod
    def apply_jitter(base_delay: float, jitter: float) -> float:
        """Add a random amount in ``[0, jitter)`` so clients do not retry in lockstep."""
        if jitter <= 0:
            return base_delay
        return base_delay + backoff_random.uniform(0.0, jitter)

    @classmethod
    def calculate_full_delay(cls, policy: RetryPolicy, attempt: int, label: str = "") -> float:
        """
        Calculate ``min(base * multiplier**attempt + jitter, max_delay)``.

        Args:
            policy: Retry policy
            attempt: Zero-based attempt number
            label: Name used in debug logging

        Returns:
            Final delay in seconds
        """
        base_delay = cls.calculate_base_delay(policy, attempt)
        final_delay = min(cls.apply_jitter(base_delay, policy.jitter), policy.max_delay)

        logger.debug(
            f"[Backoff] Calculated delay for {label or 'retry'}: "
            f"attempt={attempt}, base_delay={base_delay:.2f}s, final_delay={final_delay:.2f}s"
        )

        return final_delay
