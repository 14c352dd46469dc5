"""Environment lookups with `.env` fallbacks.

Lookup order for every helper: the process environment, then the first
`.env`-style file in ``_DOTENV_CANDIDATES`` that defines the key, then the
caller's ``or_value``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional, Sequence, TypeVar

from .errors import ConfigurationError

T = TypeVar("T")

_TRUE_VALUES = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "f", "no", "n", "off"})

_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".realtime_client.env")

_DEFAULT_VALUES: Optional[dict[str, str]] = None


def _dotenv_defaults() -> dict[str, str]:
    from .runtime_helpers import DotenvLoader

    global _DEFAULT_VALUES
    if _DEFAULT_VALUES is None:
        merged: dict[str, str] = {}
        for path in _DOTENV_CANDIDATES:
            for key, value in DotenvLoader.load_from_file(path).items():
                merged.setdefault(key, value)
        _DEFAULT_VALUES = merged
    return _DEFAULT_VALUES


def reset_default_values() -> None:
    """Forget cached .env defaults so the next lookup re-reads the files."""
    global _DEFAULT_VALUES
    _DEFAULT_VALUES = None


def _missing(name: str) -> ConfigurationError:
    return ConfigurationError(f"Required environment variable {name!r} is not set")


def env_str(
    name: str,
    or_value: str | None = None,
    *,
    required: bool = False,
    strip: bool = True,
    allow_blank: bool = False,
) -> str | None:
    """Fetch an environment variable as a string."""
    for candidate in (os.getenv(name), _dotenv_defaults().get(name)):
        if candidate is None:
            continue
        value = candidate.strip() if strip else candidate
        if value or allow_blank:
            return value

    if required:
        raise _missing(name)
    return or_value


def _env_converted(
    name: str,
    or_value: Optional[T],
    required: bool,
    convert: Callable[[str], T],
    kind: str,
) -> Optional[T]:
    raw = env_str(name)
    if raw is None:
        if required and or_value is None:
            raise _missing(name)
        return or_value
    try:
        return convert(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Environment variable {name!r} must be {kind} (got {raw!r})") from exc


def _parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(raw)


def env_int(name: str, or_value: int | None = None, *, required: bool = False) -> int | None:
    return _env_converted(name, or_value, required, int, "an integer")


def env_float(name: str, or_value: float | None = None, *, required: bool = False) -> float | None:
    return _env_converted(name, or_value, required, float, "a float")


def env_bool(name: str, or_value: bool | None = None, *, required: bool = False) -> bool | None:
    return _env_converted(name, or_value, required, _parse_bool, "a boolean")


def env_list(
    name: str,
    *,
    or_value: Sequence[str] | None = None,
    separator: str = ",",
    strip_items: bool = True,
    unique: bool = True,
    required: bool = False,
) -> tuple[str, ...] | None:
    """Fetch a delimited list, e.g. ``REALTIME_TRANSPORTS=websocket,polling``."""
    from .runtime_helpers import ListNormalizer

    raw = env_str(name)
    if raw is None:
        if required and not or_value:
            raise _missing(name)
        return None if or_value is None else tuple(or_value)

    items = ListNormalizer.split_and_normalize(raw, separator, strip_items)
    if not items and required:
        raise ConfigurationError(f"Environment variable {name!r} must contain at least one value")
    return ListNormalizer.deduplicate_preserving_order(items) if unique else tuple(items)
