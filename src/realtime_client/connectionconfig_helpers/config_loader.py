"""Environment lookups with documented fallbacks for RealtimeConfig."""

import logging

from realtime_client.config import env_float, env_int, env_list, env_str
from realtime_client.config.errors import ConfigurationError

logger = logging.getLogger(__name__)

_DEFAULT_INT_VALUES = {
    "MAX_RECONNECT_ATTEMPTS": 10,
    "CREDENTIAL_MAX_ATTEMPTS": 3,
}

_DEFAULT_FLOAT_VALUES = {
    "CONNECTION_TIMEOUT_SECONDS": 60.0,
    "REQUEST_TIMEOUT_SECONDS": 15.0,
    "RECONNECTION_INITIAL_DELAY_SECONDS": 1.0,
    "RECONNECTION_MAX_DELAY_SECONDS": 30.0,
    "RECONNECTION_BACKOFF_MULTIPLIER": 2.0,
    "RECONNECTION_JITTER_SECONDS": 1.0,
    "AUTH_ERROR_RETRY_DELAY_SECONDS": 3.0,
    "CREDENTIAL_RETRY_DELAY_SECONDS": 0.5,
    "CREDENTIAL_REFRESH_SKEW_SECONDS": 0.0,
}

_DEFAULT_STR_VALUES = {
    "REALTIME_SERVER_URL": "http://localhost:3001",
    "REALTIME_SOCKETIO_PATH": "socket.io",
    "CREDENTIAL_SESSION_KEY": "auth_session",
    "REDIS_URL": "redis://localhost:6379/0",
}

_DEFAULT_LIST_VALUES = {
    "REALTIME_TRANSPORTS": ("websocket", "polling"),
}


def require_env_int(name: str) -> int:
    """Get an environment variable as a non-negative integer, using default if available."""
    value = env_int(name, or_value=None, required=False)
    if value is None:
        if name not in _DEFAULT_INT_VALUES:
            raise ConfigurationError(f"Environment variable {name} must be defined")
        value = _DEFAULT_INT_VALUES[name]
    if value < 0:
        raise ConfigurationError.invalid_value(name, value, "Must be non-negative")
    return value


def require_env_float(name: str) -> float:
    """Get an environment variable as a non-negative float, using default if available."""
    value = env_float(name, or_value=None, required=False)
    if value is None:
        if name not in _DEFAULT_FLOAT_VALUES:
            raise ConfigurationError(f"Environment variable {name} must be defined")
        value = _DEFAULT_FLOAT_VALUES[name]
    if value < 0:
        raise ConfigurationError.invalid_value(name, value, "Must be non-negative")
    return value


def require_env_str(name: str) -> str:
    """Get an environment variable as a string, using default if available."""
    value = env_str(name, or_value=None, required=False)
    if value is not None:
        return value
    if name in _DEFAULT_STR_VALUES:
        return _DEFAULT_STR_VALUES[name]
    raise ConfigurationError(f"Environment variable {name} must be defined")


def require_env_list(name: str) -> tuple[str, ...]:
    """Get a comma separated environment variable, using default if available."""
    value = env_list(name, or_value=_DEFAULT_LIST_VALUES.get(name))
    if not value:
        raise ConfigurationError.missing_value(name)
    return value


def resolve_api_base() -> str:
    """REST base for the refresh endpoint; falls back to the realtime server URL."""
    api_base = env_str("REALTIME_API_BASE", or_value=None)
    if api_base:
        return api_base.rstrip("/")
    logger.debug("REALTIME_API_BASE not set, using REALTIME_SERVER_URL for refresh calls")
    return require_env_str("REALTIME_SERVER_URL").rstrip("/")
