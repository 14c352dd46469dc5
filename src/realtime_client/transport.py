"""
Duplex transport used by the connection manager.

``Transport`` is the narrow surface the manager needs from a Socket.IO client;
``SocketIOTransport`` implements it on top of ``socketio.AsyncClient``. The
client's built-in reconnection is disabled: the connection manager owns the
reconnection policy and replaces the whole transport on every attempt.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Sequence

import socketio
from socketio import exceptions as socketio_exceptions

from .async_helpers import safely_schedule_coroutine
from .exceptions import TransportConnectError

logger = logging.getLogger(__name__)

IO_SERVER_DISCONNECT = "io server disconnect"
IO_CLIENT_DISCONNECT = "io client disconnect"
TRANSPORT_CLOSE = "transport close"
TRANSPORT_ERROR = "transport error"
PING_TIMEOUT = "ping timeout"

# Reasons after which the manager reconnects on its own.
UNINTENTIONAL_DISCONNECT_REASONS = frozenset({IO_SERVER_DISCONNECT, TRANSPORT_CLOSE, TRANSPORT_ERROR, PING_TIMEOUT})

_REASON_ALIASES = {
    "server disconnect": IO_SERVER_DISCONNECT,
    "client disconnect": IO_CLIENT_DISCONNECT,
    "transport close": TRANSPORT_CLOSE,
    "transport error": TRANSPORT_ERROR,
    "ping timeout": PING_TIMEOUT,
}

TRANSPORT_EMIT_ERRORS = (RuntimeError, OSError, ConnectionError, socketio_exceptions.SocketIOError)

Handler = Callable[..., Any]


class Transport(Protocol):
    """Connection handle shared by all consumers."""

    @property
    def connected(self) -> bool: ...

    async def connect(
        self,
        url: str,
        *,
        auth: Mapping[str, str],
        headers: Mapping[str, str],
        transports: Sequence[str],
        socketio_path: str,
        timeout: float,
    ) -> None: ...

    def on(self, event: str, handler: Handler) -> None: ...

    def off(self, event: str) -> None: ...

    def remove_all_listeners(self) -> None: ...

    def emit(self, event: str, *args: Any) -> None: ...

    async def disconnect(self) -> None: ...


def normalize_disconnect_reason(reason: Any) -> str:
    """Map python-socketio disconnect reasons onto the Socket.IO protocol names."""
    if reason is None:
        return TRANSPORT_CLOSE
    text = str(reason)
    return _REASON_ALIASES.get(text, text)


def _pack_emit_args(args: Sequence[Any]) -> Any:
    """python-socketio sends a tuple as multiple arguments."""
    if not args:
        return None
    if len(args) == 1:
        return args[0]
    return tuple(args)


class SocketIOTransport:
    """``Transport`` backed by ``socketio.AsyncClient``."""

    def __init__(self, client: Optional[socketio.AsyncClient] = None):
        self._client = client or socketio.AsyncClient(
            reconnection=False,
            logger=False,
            engineio_logger=False,
        )
        self._handlers: Dict[str, Handler] = {}

    @property
    def client(self) -> socketio.AsyncClient:
        return self._client

    @property
    def connected(self) -> bool:
        return bool(self._client.connected)

    async def connect(
        self,
        url: str,
        *,
        auth: Mapping[str, str],
        headers: Mapping[str, str],
        transports: Sequence[str],
        socketio_path: str,
        timeout: float,
    ) -> None:
        logger.info(f"Opening Socket.IO connection to {url}")
        try:
            await self._client.connect(
                url,
                headers=dict(headers),
                auth=dict(auth),
                transports=list(transports),
                socketio_path=socketio_path,
                wait_timeout=timeout,
            )
        except socketio_exceptions.ConnectionError as exc:
            raise TransportConnectError(str(exc) or "Socket.IO connection refused", url=url) from exc

    def on(self, event: str, handler: Handler) -> None:
        self._handlers[event] = handler
        if event == "disconnect":
            self._client.on(event, self._wrap_disconnect(handler))
        else:
            self._client.on(event, handler)

    def off(self, event: str) -> None:
        self._handlers.pop(event, None)
        self._client.handlers.get("/", {}).pop(event, None)

    def remove_all_listeners(self) -> None:
        for event in list(self._handlers):
            self.off(event)

    def emit(self, event: str, *args: Any) -> None:
        data = _pack_emit_args(args)
        safely_schedule_coroutine(lambda: self._client.emit(event, data))

    async def disconnect(self) -> None:
        await self._client.disconnect()

    @staticmethod
    def _wrap_disconnect(handler: Handler) -> Handler:
        async def on_disconnect(reason: Any = None) -> None:
            result = handler(normalize_disconnect_reason(reason))
            if inspect.isawaitable(result):
                await result

        return on_disconnect


async def close_transport(transport: Transport, timeout: float = 5.0) -> None:
    """Detach every handler then close the transport, logging close failures."""
    transport.remove_all_listeners()
    try:
        await asyncio.wait_for(transport.disconnect(), timeout=timeout)
    except (asyncio.TimeoutError, OSError, RuntimeError, ConnectionError, socketio_exceptions.SocketIOError):
        logger.warning("Error closing realtime transport", exc_info=True)


__all__ = [
    "IO_CLIENT_DISCONNECT",
    "IO_SERVER_DISCONNECT",
    "PING_TIMEOUT",
    "SocketIOTransport",
    "TRANSPORT_CLOSE",
    "TRANSPORT_EMIT_ERRORS",
    "TRANSPORT_ERROR",
    "Transport",
    "UNINTENTIONAL_DISCONNECT_REASONS",
    "close_transport",
    "normalize_disconnect_reason",
]
