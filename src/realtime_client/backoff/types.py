"""Retry policy definition shared by reconnection and credential resolution."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential retry policy.

    Attributes:
        base_delay: Delay in seconds for attempt 0
        max_delay: Ceiling applied after jitter
        max_attempts: Number of retries allowed before giving up
        multiplier: Growth factor per attempt (1.0 gives a fixed interval)
        jitter: Upper bound in seconds of the random amount added to each delay
    """

    base_delay: float = 1.0
    max_delay: float = 30.0
    max_attempts: int = 10
    multiplier: float = 2.0
    jitter: float = 1.0

    def __post_init__(self) -> None:
        if self.base_delay < 0 or self.max_delay < 0 or self.jitter < 0:
            raise ValueError("RetryPolicy delays must be non-negative")
        if self.max_attempts < 0:
            raise ValueError("RetryPolicy.max_attempts must be non-negative")
        if self.multiplier < 1.0:
            raise ValueError("RetryPolicy.multiplier must be at least 1.0")
