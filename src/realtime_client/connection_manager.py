"""
Realtime connection manager.

Owns the single authenticated Socket.IO connection shared by every consumer in
the process: chat views, presence widgets and notification toasts all go
through one manager instead of opening their own sockets. The manager resolves
credentials, opens the transport, replays event subscriptions and joins rooms
after every (re)connection, and reconnects with backoff after unintentional
drops.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Callable, Dict, Optional

from .connection_config import RealtimeConfig, get_realtime_config
from .connection_manager_helpers import (
    ConnectionStateManager,
    FanOutNotifier,
    MetricsTracker,
    build_status,
)
from .connection_manager_helpers.notification_manager import (
    ConnectCallback,
    DisconnectCallback,
)
from .connection_state import ConnectionState
from .credentials import (
    CredentialRefresher,
    CredentialResolver,
    Credentials,
    RedisCredentialStore,
)
from .event_registry import Callback, EventRegistry
from .exceptions import TransportConnectError
from .identity import Identity
from .reconnection_scheduler import ReconnectionScheduler
from .room_joiner import RoomJoiner
from .transport import (
    IO_CLIENT_DISCONNECT,
    TRANSPORT_CLOSE,
    TRANSPORT_ERROR,
    TRANSPORT_EMIT_ERRORS,
    UNINTENTIONAL_DISCONNECT_REASONS,
    SocketIOTransport,
    Transport,
    close_transport,
)


LIFECYCLE_EVENTS = frozenset({"connect", "connect_error", "disconnect", "reconnect", "reconnect_attempt", "auth_error"})

# Connect errors mentioning these are retried after the fixed auth delay.
_AUTH_ERROR_MARKERS = ("token", "auth")

TransportFactory = Callable[[], Transport]


def _error_message(data: Any) -> str:
    if data is None:
        return "connect_error"
    if isinstance(data, dict):
        return str(data.get("message") or data)
    return str(data)


def _is_auth_error(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _AUTH_ERROR_MARKERS)


class RealtimeConnectionManager:
    """Single shared realtime connection with credential refresh and reconnection."""

    def __init__(
        self,
        credential_resolver: CredentialResolver,
        *,
        config: Optional[RealtimeConfig] = None,
        transport_factory: Optional[TransportFactory] = None,
        scheduler: Optional[ReconnectionScheduler] = None,
        registry: Optional[EventRegistry] = None,
        room_joiner: Optional[RoomJoiner] = None,
        name: str = "realtime",
    ):
        self.name = name
        self.config = config or get_realtime_config()
        self.credential_resolver = credential_resolver
        self._transport_factory: TransportFactory = transport_factory or SocketIOTransport
        self.scheduler = scheduler or ReconnectionScheduler(self.config.reconnect_policy(), name)
        self.registry = registry or EventRegistry(reserved_events=LIFECYCLE_EVENTS)
        self.room_joiner = room_joiner or RoomJoiner()
        self.notifier = FanOutNotifier(name)
        self.state_manager = ConnectionStateManager(name)
        self.metrics_tracker = MetricsTracker()

        self._transport: Optional[Transport] = None
        self._pending_transport: Optional[Transport] = None
        self._pending: Optional[asyncio.Task] = None
        self._pending_identity: Optional[Identity] = None
        self._identity: Optional[Identity] = None
        self._authenticated = False
        self._last_connect_error: Optional[str] = None

        self.logger = logging.getLogger(f"{__name__}.{name}")

    @classmethod
    def from_config(cls, config: Optional[RealtimeConfig] = None, **kwargs: Any) -> "RealtimeConnectionManager":
        """Wire the Redis credential store and HTTP refresher described by ``config``."""
        config = config or get_realtime_config()
        resolver = CredentialResolver(
            RedisCredentialStore.from_url(config.redis_url, config.session_key),
            CredentialRefresher(config.api_base, config.request_timeout_seconds),
            config.credential_policy(),
            refresh_skew=config.refresh_skew_seconds,
        )
        return cls(resolver, config=config, **kwargs)

    # ------------------------------------------------------------------ state

    @property
    def state(self) -> ConnectionState:
        return self.state_manager.state

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    def get_socket(self) -> Optional[Transport]:
        """The live transport, or None."""
        return self._transport

    def is_connected(self) -> bool:
        """True only when the transport is open and the server acknowledged the handshake."""
        return self._transport is not None and self._transport.connected and self._authenticated

    def get_status(self) -> Dict[str, Any]:
        return build_status(self)

    # ------------------------------------------------------------- connecting

    async def connect(self, user_id: str, organization_id: str) -> Optional[Transport]:
        """
        Connect as ``user_id`` within ``organization_id``.

        Idempotent for an identical identity; concurrent callers share one
        attempt. A different identity tears the current connection down first.

        Returns:
            The live transport, or None when no valid credential could be obtained

        Raises:
            TransportConnectError: The transport could not be opened; a retry has been scheduled
        """
        identity = Identity(str(user_id), str(organization_id))
        while True:
            if self.is_connected() and self._identity == identity:
                return self._transport
            if self._pending is not None and self._pending_identity == identity:
                self.logger.debug(f"Joining in-flight connection attempt for {identity}")
                return await self._await_attempt(self._pending)
            if self._pending is None and self._transport is None:
                break
            await self.disconnect()

        # An explicit connect starts a fresh retry budget.
        self.scheduler.reset()
        return await self._await_attempt(self._start_attempt(identity))

    def _start_attempt(self, identity: Identity) -> asyncio.Task:
        self._identity = identity
        self._pending_identity = identity
        self._pending = asyncio.get_running_loop().create_task(self._establish(identity))
        return self._pending

    async def _await_attempt(self, task: asyncio.Task) -> Optional[Transport]:
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            # the shared attempt was torn down by disconnect() or an identity change
            if task.cancelled():
                return None
            raise

    def _release_pending(self) -> None:
        if self._pending is asyncio.current_task():
            self._pending = None
            self._pending_identity = None

    async def _establish(self, identity: Identity) -> Optional[Transport]:
        transport: Optional[Transport] = None
        try:
            self.state_manager.transition_state(ConnectionState.CONNECTING)
            self.metrics_tracker.increment_total_connections()

            credentials = await self.credential_resolver.resolve()
            if credentials is None:
                self.logger.error(f"Connection aborted for {identity}: no valid credential")
                self.metrics_tracker.record_failure()
                self.state_manager.transition_state(ConnectionState.FAILED, "credentials unavailable")
                return None

            transport = self._transport_factory()
            self._pending_transport = transport
            self._last_connect_error = None
            self._bind_lifecycle_handlers(transport)
            await asyncio.wait_for(
                transport.connect(
                    self.config.server_url,
                    auth=self._auth_payload(credentials, identity),
                    headers=self._auth_headers(credentials, identity),
                    transports=self.config.transports,
                    socketio_path=self.config.socketio_path,
                    timeout=self.config.connection_timeout_seconds,
                ),
                timeout=self.config.connection_timeout_seconds,
            )
            if not transport.connected:
                raise TransportConnectError("Transport closed during handshake")
        except asyncio.CancelledError:
            if transport is not None:
                await close_transport(transport)
            raise
        except (TransportConnectError, asyncio.TimeoutError, OSError) as exc:
            if transport is not None:
                await close_transport(transport)
            message = self._last_connect_error or str(exc) or "Timed out waiting for handshake"
            self._handle_attempt_failure(message)
            if isinstance(exc, TransportConnectError):
                raise
            raise TransportConnectError(message, identity=identity) from exc
        except Exception as exc:
            self.logger.exception(f"Unexpected error while connecting as {identity}")
            if transport is not None:
                await close_transport(transport)
            self._authenticated = False
            self.metrics_tracker.record_failure()
            self.state_manager.transition_state(ConnectionState.FAILED, f"unexpected error: {exc}")
            return None
        finally:
            if self._pending_transport is transport:
                self._pending_transport = None
            self._release_pending()

        return await self._complete_connection(transport, identity)

    async def _complete_connection(self, transport: Transport, identity: Identity) -> Transport:
        # No await until the fan-out: replay and room join happen before any subscriber hears about it.
        self._transport = transport
        self._authenticated = True
        self.scheduler.reset()
        self.metrics_tracker.record_success()
        self.state_manager.transition_state(ConnectionState.CONNECTED)
        self.registry.attach(transport)
        self.room_joiner.join(transport, identity)
        self.logger.info(f"Connected as {identity}")
        await self.registry.dispatch("connect")
        await self.notifier.notify_connect()
        return transport

    def _handle_attempt_failure(self, message: str) -> None:
        self._authenticated = False
        self.metrics_tracker.record_failure()
        self.logger.error(f"Connection attempt failed: {message}")
        self.state_manager.transition_state(ConnectionState.FAILED, message)
        delay = self.config.auth_error_retry_delay_seconds if _is_auth_error(message) else None
        self._schedule_reconnect(message, delay)

    def _schedule_reconnect(self, reason: str, delay: Optional[float] = None) -> bool:
        if self._identity is None:
            return False
        if not self.scheduler.schedule_retry(self._reconnect, delay):
            self.logger.error(f"Giving up on realtime connection for {self._identity} after {self.scheduler.attempt} attempts")
            self.state_manager.transition_state(ConnectionState.FAILED, "reconnection attempts exhausted")
            return False
        self.metrics_tracker.increment_reconnection_attempts()
        self.metrics_tracker.set_backoff_delay(self.scheduler.last_delay or 0.0)
        self.state_manager.transition_state(ConnectionState.RECONNECTING, reason)
        return True

    async def _reconnect(self) -> None:
        identity = self._identity
        if identity is None or self.is_connected() or self._pending is not None:
            return
        try:
            await self._await_attempt(self._start_attempt(identity))
        except TransportConnectError as exc:
            self.logger.warning(f"Reconnection attempt {self.scheduler.attempt} failed: {exc}")

    @staticmethod
    def _auth_payload(credentials: Credentials, identity: Identity) -> Dict[str, str]:
        return {
            "token": credentials.access_token,
            "userId": identity.user_id,
            "organizationId": identity.organization_id,
        }

    @staticmethod
    def _auth_headers(credentials: Credentials, identity: Identity) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {credentials.access_token}",
            "x-user-id": identity.user_id,
            "x-organization-id": identity.organization_id,
        }

    # -------------------------------------------------------- disconnecting

    async def disconnect(self) -> None:
        """Close the connection, cancel pending work and forget the identity. Idempotent."""
        pending = self._pending
        if pending is not None and pending is not asyncio.current_task():
            pending.cancel()
            with contextlib.suppress(asyncio.CancelledError, TransportConnectError):
                await pending
        self._pending = None
        self._pending_identity = None
        # A failing attempt may have armed a retry before it was cancelled.
        self.scheduler.reset()

        was_connected = self.is_connected()
        transport, self._transport = self._transport, None
        self._authenticated = False
        self._identity = None
        if transport is not None:
            self.registry.detach()
            await close_transport(transport)

        self.state_manager.transition_state(ConnectionState.IDLE)
        if was_connected:
            self.metrics_tracker.record_disconnect(IO_CLIENT_DISCONNECT)
            self.logger.info("Disconnected")
            await self.notifier.notify_disconnect(IO_CLIENT_DISCONNECT)

    async def _drop_transport(self, transport: Transport, reason: str, delay: Optional[float] = None) -> None:
        """Discard a transport that went away on its own and reconnect when appropriate."""
        if transport is self._transport:
            self.registry.detach()
            self._transport = None
        self._authenticated = False
        self.metrics_tracker.record_disconnect(reason)
        transport.remove_all_listeners()
        if transport.connected:
            await close_transport(transport)

        await self.notifier.notify_disconnect(reason)
        if reason in UNINTENTIONAL_DISCONNECT_REASONS or delay is not None or reason == "auth_error":
            self._schedule_reconnect(reason, delay)
        else:
            self.state_manager.transition_state(ConnectionState.IDLE, reason)

    # ---------------------------------------------------- lifecycle handlers

    def _bind_lifecycle_handlers(self, transport: Transport) -> None:
        async def on_connect(*_: Any) -> None:
            await self._handle_connect(transport)

        async def on_connect_error(data: Any = None) -> None:
            await self._handle_connect_error(transport, data)

        async def on_disconnect(reason: Any = None) -> None:
            await self._handle_disconnect(transport, reason)

        async def on_reconnect(attempt_number: Any = None) -> None:
            await self._handle_reconnect(transport, attempt_number)

        async def on_reconnect_attempt(attempt_number: Any = None) -> None:
            await self._handle_reconnect_attempt(transport, attempt_number)

        async def on_auth_error(data: Any = None) -> None:
            await self._handle_auth_error(transport, data)

        transport.on("connect", on_connect)
        transport.on("connect_error", on_connect_error)
        transport.on("disconnect", on_disconnect)
        transport.on("reconnect", on_reconnect)
        transport.on("reconnect_attempt", on_reconnect_attempt)
        transport.on("auth_error", on_auth_error)

    def _owns(self, transport: Transport) -> bool:
        return transport is self._transport or transport is self._pending_transport

    async def _handle_connect(self, transport: Transport) -> None:
        if not self._owns(transport):
            return
        # subscribers hear "connect" from _complete_connection, after the room join
        self._authenticated = True

    async def _handle_connect_error(self, transport: Transport, data: Any = None) -> None:
        if not self._owns(transport):
            return
        message = _error_message(data)
        self._last_connect_error = message
        self._authenticated = False
        self.logger.error(f"Connection error: {message}")
        await self.registry.dispatch("connect_error", data)
        if transport is self._transport:
            delay = self.config.auth_error_retry_delay_seconds if _is_auth_error(message) else None
            await self._drop_transport(transport, TRANSPORT_ERROR, delay)

    async def _handle_disconnect(self, transport: Transport, reason: Any = None) -> None:
        if transport is not self._transport:
            # the in-flight attempt reports its own failure
            return
        reason_text = str(reason) if reason else TRANSPORT_CLOSE
        self.logger.warning(f"Disconnected: {reason_text}")
        await self._drop_transport(transport, reason_text)
        await self.registry.dispatch("disconnect", reason_text)

    async def _handle_reconnect(self, transport: Transport, attempt_number: Any = None) -> None:
        if transport is not self._transport or self._identity is None:
            return
        self.logger.info(f"Transport reconnected after {attempt_number} attempts")
        self._authenticated = True
        self.scheduler.reset()
        self.room_joiner.join(transport, self._identity)
        await self.registry.dispatch("reconnect", attempt_number)

    async def _handle_reconnect_attempt(self, transport: Transport, attempt_number: Any = None) -> None:
        if not self._owns(transport):
            return
        self.logger.debug(f"Transport reconnect attempt {attempt_number}")
        self.metrics_tracker.increment_reconnection_attempts()
        await self.registry.dispatch("reconnect_attempt", attempt_number)

    async def _handle_auth_error(self, transport: Transport, data: Any = None) -> None:
        if not self._owns(transport):
            return
        message = _error_message(data)
        self.logger.error(f"Authentication error: {message}")
        self._authenticated = False
        await self.registry.dispatch("auth_error", data)
        if transport is self._transport:
            await self._drop_transport(transport, "auth_error")
        else:
            self._last_connect_error = message

    # ------------------------------------------------------------ consumers

    def on(self, event: str, callback: Callback) -> None:
        """Subscribe to ``event``; survives reconnections."""
        self.registry.add(event, callback)

    def off(self, event: str, callback: Optional[Callback] = None) -> None:
        """Unsubscribe one callback, or every callback for ``event``."""
        self.registry.remove(event, callback)

    def emit(self, event: str, *args: Any) -> bool:
        """Send an event; returns False (nothing queued) when not connected."""
        if not self.is_connected():
            self.logger.warning(f"Cannot emit {event!r}: not connected")
            return False
        try:
            self._transport.emit(event, *args)
        except TRANSPORT_EMIT_ERRORS:
            self.logger.exception(f"Failed to emit {event!r}")
            return False
        return True

    def on_connect(self, callback: ConnectCallback) -> None:
        """Register a connect callback; runs immediately when already connected."""
        self.notifier.add_connect_callback(callback)
        if self.is_connected():
            self.notifier.invoke_now(callback)

    def off_connect(self, callback: ConnectCallback) -> None:
        self.notifier.remove_connect_callback(callback)

    def on_disconnect(self, callback: DisconnectCallback) -> None:
        self.notifier.add_disconnect_callback(callback)

    def off_disconnect(self, callback: DisconnectCallback) -> None:
        self.notifier.remove_disconnect_callback(callback)


_default_manager: Optional[RealtimeConnectionManager] = None


def get_connection_manager() -> RealtimeConnectionManager:
    """Process-wide default manager, created from the environment on first use."""
    global _default_manager
    if _default_manager is None:
        _default_manager = RealtimeConnectionManager.from_config()
    return _default_manager


def set_connection_manager(manager: Optional[RealtimeConnectionManager]) -> None:
    """Install (or clear, with None) the process-wide default manager."""
    global _default_manager
    _default_manager = manager


__all__ = [
    "LIFECYCLE_EVENTS",
    "RealtimeConnectionManager",
    "TransportFactory",
    "get_connection_manager",
    "set_connection_manager",
]
