"""Connection state management."""

import logging
import time
from typing import Optional

from ..connection_state import ConnectionState, is_allowed_transition


class ConnectionStateManager:
    """Holds the single connection state and logs every transition."""

    def __init__(self, name: str = "realtime"):
        self.name = name
        self.state = ConnectionState.IDLE
        self.state_change_time = time.time()
        self.last_error_context: Optional[str] = None
        self.logger = logging.getLogger(f"{__name__}.{name}")

    def transition_state(self, new_state: ConnectionState, error_context: Optional[str] = None) -> None:
        """Transition to a new connection state."""
        if self.state == new_state:
            if error_context:
                self.last_error_context = error_context
            return
        previous_state = self.state
        if not is_allowed_transition(previous_state, new_state):
            self.logger.warning(f"Unexpected state transition: {previous_state.value} -> {new_state.value}")
        self.state = new_state
        self.state_change_time = time.time()
        self.last_error_context = error_context
        if error_context:
            self.logger.info(f"State transition: {previous_state.value} -> {new_state.value} ({error_context})")
        else:
            self.logger.info(f"State transition: {previous_state.value} -> {new_state.value}")

    def get_state(self) -> ConnectionState:
        return self.state

    def get_state_duration(self) -> float:
        """Get time in current state."""
        return time.time() - self.state_change_time
