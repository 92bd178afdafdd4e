"""Environment variable loaders for configuration."""

from __future__ import annotations

import os

from .errors import InvalidEnvironmentValueError

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def env_flag(name: str, *, default: bool) -> bool:
    """Read a boolean flag; blank or unset values fall back to ``default``."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise InvalidEnvironmentValueError(name, value, "boolean")


def env_positive_int(name: str) -> int | None:
    """Read an optional positive integer; blank or unset values yield ``None``."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise InvalidEnvironmentValueError(name, value, "integer") from exc
    if parsed <= 0:
        raise InvalidEnvironmentValueError(name, value, "positive integer")
    return parsed
