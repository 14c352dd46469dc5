"""Exception hierarchy for the realtime client.

All errors raised by this package inherit from ``RealtimeError``. Exception
classes support two patterns:
1. No-argument raise: raise TransportConnectError()
2. Contextual attributes: err = TransportConnectError(reason="timeout"); raise err
"""

from typing import Any


class RealtimeError(Exception):
    """Base exception for all realtime client errors.

    Supports keyword arguments that are stored as attributes for debugging.
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "Realtime client error occurred"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


class CredentialError(RealtimeError):
    """No usable credential could be obtained."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "No usable credential could be obtained"
        super().__init__(message, **kwargs)


class CredentialRefreshError(CredentialError):
    """Exchanging the refresh token for a new session failed."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Exchanging the refresh token for a new session failed"
        super().__init__(message, **kwargs)


class TransportConnectError(RealtimeError):
    """Opening the realtime transport failed."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Opening the realtime transport failed"
        super().__init__(message, **kwargs)


__all__ = [
    "CredentialError",
    "CredentialRefreshError",
    "RealtimeError",
    "TransportConnectError",
]
