"""Credential storage, refresh and resolution for the realtime handshake."""

from .models import Credentials
from .refresher import REFRESH_PATH, CredentialRefresher
from .resolver import CredentialResolver
from .store import DEFAULT_SESSION_KEY, CredentialStore, RedisCredentialStore

__all__ = [
    "CredentialRefresher",
    "CredentialResolver",
    "CredentialStore",
    "Credentials",
    "DEFAULT_SESSION_KEY",
    "REFRESH_PATH",
    "RedisCredentialStore",
]
