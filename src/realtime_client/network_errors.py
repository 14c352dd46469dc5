"""
Network error detection and classification.

Canonical detection of network-level failures versus application-level
errors for the credential refresh call.
"""

import asyncio
import socket

import aiohttp

NETWORK_ERROR_TYPES = (
    aiohttp.ClientConnectorError,
    aiohttp.ClientProxyConnectionError,
    aiohttp.ServerTimeoutError,
    aiohttp.ClientHttpProxyError,
    asyncio.TimeoutError,
    socket.gaierror,
    OSError,
)


def is_network_unreachable_error(exception: BaseException) -> bool:
    """
    Determine if an exception represents a network connectivity failure.

    Args:
        exception: Exception to check

    Returns:
        True if this is a network-level error that indicates connectivity issues
    """
    if isinstance(exception, NETWORK_ERROR_TYPES):
        return True

    os_error = getattr(exception, "os_error", None)
    if isinstance(os_error, OSError):
        return True

    cause = exception.__cause__
    return cause is not None and isinstance(cause, NETWORK_ERROR_TYPES)


__all__ = ["is_network_unreachable_error", "NETWORK_ERROR_TYPES"]
