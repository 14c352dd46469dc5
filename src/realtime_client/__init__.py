"""Shared realtime (Socket.IO) connection lifecycle for user- and organization-scoped events."""

from .connection_config import RealtimeConfig, get_realtime_config
from .connection_manager import (
    LIFECYCLE_EVENTS,
    RealtimeConnectionManager,
    get_connection_manager,
    set_connection_manager,
)
from .connection_state import ConnectionState
from .credentials import CredentialRefresher, CredentialResolver, Credentials, RedisCredentialStore
from .event_registry import EventRegistry
from .exceptions import CredentialError, CredentialRefreshError, RealtimeError, TransportConnectError
from .identity import Identity
from .logging_config import setup_logging
from .reconnection_scheduler import ReconnectionScheduler
from .room_joiner import RoomJoiner
from .transport import SocketIOTransport, Transport

__all__ = [
    "ConnectionState",
    "CredentialError",
    "CredentialRefreshError",
    "CredentialRefresher",
    "CredentialResolver",
    "Credentials",
    "EventRegistry",
    "Identity",
    "LIFECYCLE_EVENTS",
    "RealtimeConfig",
    "RealtimeConnectionManager",
    "RealtimeError",
    "ReconnectionScheduler",
    "RedisCredentialStore",
    "RoomJoiner",
    "SocketIOTransport",
    "Transport",
    "TransportConnectError",
    "get_connection_manager",
    "get_realtime_config",
    "set_connection_manager",
    "setup_logging",
]
