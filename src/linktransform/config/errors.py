"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when the transformer cannot be configured."""


class InvalidEnvironmentValueError(ConfigurationError):
    """Raised when an environment variable holds a value of the wrong kind."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(f"Invalid {expected} for {name}: {value!r}")
        self.name = name
        self.value = value
