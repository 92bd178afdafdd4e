"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_positive_int
from .errors import ConfigurationError, InvalidEnvironmentValueError
from .transform import TransformConfig, get_transform_config

__all__ = [
    "ConfigurationError",
    "InvalidEnvironmentValueError",
    "TransformConfig",
    "env_flag",
    "env_positive_int",
    "get_transform_config",
]
