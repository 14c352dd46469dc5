"""
Canonical connection state definitions for the realtime connection manager.
"""

from enum import Enum


class ConnectionState(Enum):
    """
    Lifecycle states of the shared realtime connection.

    IDLE -> CONNECTING -> CONNECTED is the happy path. A failed attempt moves
    to FAILED and, while retries remain, on to RECONNECTING which loops back
    into CONNECTING. FAILED with no retries left is terminal until the next
    explicit connect.
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


ALLOWED_TRANSITIONS = {
    ConnectionState.IDLE: frozenset({ConnectionState.CONNECTING}),
    ConnectionState.CONNECTING: frozenset({ConnectionState.CONNECTED, ConnectionState.FAILED, ConnectionState.IDLE}),
    ConnectionState.CONNECTED: frozenset({ConnectionState.RECONNECTING, ConnectionState.IDLE, ConnectionState.FAILED}),
    ConnectionState.RECONNECTING: frozenset({ConnectionState.CONNECTING, ConnectionState.IDLE}),
    ConnectionState.FAILED: frozenset({ConnectionState.RECONNECTING, ConnectionState.CONNECTING, ConnectionState.IDLE}),
}


def is_allowed_transition(previous: ConnectionState, new: ConnectionState) -> bool:
    return new in ALLOWED_TRANSITIONS[previous]


__all__ = ["ALLOWED_TRANSITIONS", "ConnectionState", "is_allowed_transition"]
