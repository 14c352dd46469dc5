"""
Configuration for the realtime connection manager.

Centralizes timeouts, retry intervals and backoff parameters so no magic
numbers live in the connection code. Values come from environment variables
(or a .env file) with fallbacks matching production behavior.
"""

from dataclasses import dataclass, field
from functools import partial

from .backoff import RetryPolicy
from .config.errors import ConfigurationError
from .connectionconfig_helpers.config_loader import (
    require_env_float,
    require_env_int,
    require_env_list,
    require_env_str,
    resolve_api_base,
)


@dataclass
class RealtimeConfig:
    """
    Centralized configuration for the realtime connection.

    All durations are in seconds.

    Attributes:
        server_url: Socket.IO server base URL
        api_base: REST base used for the credential refresh endpoint
        socketio_path: Socket.IO endpoint path on the server
        transports: Engine.IO transports, in preference order
        connection_timeout_seconds: Maximum wait for the server to acknowledge the handshake
        request_timeout_seconds: Maximum wait for the credential refresh call
        reconnection_initial_delay_seconds: Delay before the first reconnection attempt
        reconnection_max_delay_seconds: Ceiling on any reconnection delay
        reconnection_backoff_multiplier: Growth factor between reconnection delays
        reconnection_jitter_seconds: Upper bound of the random delay added to each retry
        max_reconnect_attempts: Retries scheduled before giving up
        auth_error_retry_delay_seconds: Fixed delay used after authentication-flavored connect errors
        credential_max_attempts: Read/refresh rounds before credential resolution gives up
        credential_retry_delay_seconds: Pause between credential rounds
        refresh_skew_seconds: Refresh tokens this many seconds before they expire
        session_key: Key holding the stored session
        redis_url: Redis URL of the credential store
    """

    server_url: str = field(default_factory=partial(require_env_str, "REALTIME_SERVER_URL"))
    api_base: str = field(default_factory=resolve_api_base)
    socketio_path: str = field(default_factory=partial(require_env_str, "REALTIME_SOCKETIO_PATH"))
    transports: tuple[str, ...] = field(default_factory=partial(require_env_list, "REALTIME_TRANSPORTS"))

    connection_timeout_seconds: float = field(default_factory=partial(require_env_float, "CONNECTION_TIMEOUT_SECONDS"))
    request_timeout_seconds: float = field(default_factory=partial(require_env_float, "REQUEST_TIMEOUT_SECONDS"))

    # Reconnection backoff
    reconnection_initial_delay_seconds: float = field(
        default_factory=partial(require_env_float, "RECONNECTION_INITIAL_DELAY_SECONDS")
    )
    reconnection_max_delay_seconds: float = field(
        default_factory=partial(require_env_float, "RECONNECTION_MAX_DELAY_SECONDS")
    )
    reconnection_backoff_multiplier: float = field(
        default_factory=partial(require_env_float, "RECONNECTION_BACKOFF_MULTIPLIER")
    )
    reconnection_jitter_seconds: float = field(default_factory=partial(require_env_float, "RECONNECTION_JITTER_SECONDS"))
    max_reconnect_attempts: int = field(default_factory=partial(require_env_int, "MAX_RECONNECT_ATTEMPTS"))
    auth_error_retry_delay_seconds: float = field(
        default_factory=partial(require_env_float, "AUTH_ERROR_RETRY_DELAY_SECONDS")
    )

    # Credential resolution
    credential_max_attempts: int = field(default_factory=partial(require_env_int, "CREDENTIAL_MAX_ATTEMPTS"))
    credential_retry_delay_seconds: float = field(
        default_factory=partial(require_env_float, "CREDENTIAL_RETRY_DELAY_SECONDS")
    )
    refresh_skew_seconds: float = field(default_factory=partial(require_env_float, "CREDENTIAL_REFRESH_SKEW_SECONDS"))
    session_key: str = field(default_factory=partial(require_env_str, "CREDENTIAL_SESSION_KEY"))
    redis_url: str = field(default_factory=partial(require_env_str, "REDIS_URL"))

    def __post_init__(self) -> None:
        if self.reconnection_max_delay_seconds < self.reconnection_initial_delay_seconds:
            raise ConfigurationError.invalid_value(
                "RECONNECTION_MAX_DELAY_SECONDS",
                self.reconnection_max_delay_seconds,
                "Must not be lower than RECONNECTION_INITIAL_DELAY_SECONDS",
            )
        if self.credential_max_attempts < 1:
            raise ConfigurationError.invalid_value("CREDENTIAL_MAX_ATTEMPTS", self.credential_max_attempts, "Must be at least 1")

    def reconnect_policy(self) -> RetryPolicy:
        """Backoff policy for transport reconnection."""
        return RetryPolicy(
            base_delay=self.reconnection_initial_delay_seconds,
            max_delay=self.reconnection_max_delay_seconds,
            max_attempts=self.max_reconnect_attempts,
            multiplier=self.reconnection_backoff_multiplier,
            jitter=self.reconnection_jitter_seconds,
        )

    def credential_policy(self) -> RetryPolicy:
        """Fixed-interval policy for credential read/refresh rounds."""
        return RetryPolicy(
            base_delay=self.credential_retry_delay_seconds,
            max_delay=self.credential_retry_delay_seconds,
            max_attempts=self.credential_max_attempts,
            multiplier=1.0,
            jitter=0.0,
        )


def get_realtime_config() -> RealtimeConfig:
    """Build a configuration snapshot from the current environment."""
    return RealtimeConfig()


__all__ = ["RealtimeConfig", "get_realtime_config"]
