"""Shared configuration helpers."""

from .dotenv_loader import DotenvLoader
from .errors import ConfigurationError
from .runtime import env_bool, env_float, env_int, env_str, reset_default_values

__all__ = [
    "ConfigurationError",
    "DotenvLoader",
    "env_bool",
    "env_float",
    "env_int",
    "env_str",
    "reset_default_values",
]
