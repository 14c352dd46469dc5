"""Exponential backoff policy and delay calculation with jitter."""

from .delay_calculator import DelayCalculator
from .types import RetryPolicy

__all__ = ["DelayCalculator", "RetryPolicy"]
