from __future__ import annotations

"""Runtime helpers for working with environment-backed configuration."""


import os
from pathlib import Path
from typing import Callable, Optional, TypeVar

from .dotenv_loader import DotenvLoader
from .errors import ConfigurationError

T = TypeVar("T")

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "f", "no", "n", "off"}

_DOTENV_CANDIDATES = (Path(".env"),)

_DEFAULT_VALUES: dict[str, str] | None = None


def _load_default_values() -> dict[str, str]:
    """Load configuration values from .env-style files."""
    global _DEFAULT_VALUES
    if _DEFAULT_VALUES is not None:
        return _DEFAULT_VALUES

    defaults: dict[str, str] = {}
    for path in _DOTENV_CANDIDATES:
        for key, value in DotenvLoader.load_from_file(path).items():
            defaults.setdefault(key, value)

    _DEFAULT_VALUES = defaults
    return defaults


def reset_default_values() -> None:
    """Forget cached .env values so the next lookup re-reads them."""
    global _DEFAULT_VALUES
    _DEFAULT_VALUES = None


def _coerce(name: str, raw_value: str, *, cast: Callable[[str], T], kind: str) -> T:
    try:
        return cast(raw_value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError.env_wrong_type(name, raw_value, kind) from exc


def env_str(
    name: str,
    or_value: str | None = None,
    *,
    required: bool = False,
    strip: bool = True,
) -> str | None:
    """Fetch an environment variable as a string, falling back to .env defaults."""

    value: Optional[str] = os.getenv(name)
    if value is None or value.strip() == "":
        value = _load_default_values().get(name)

    if value is not None and strip:
        value = value.strip()

    if value is None or value == "":
        if required:
            raise ConfigurationError.env_not_set(name)
        return or_value
    return value


def env_int(name: str, or_value: int | None = None, *, required: bool = False) -> int | None:
    """Fetch an environment variable and coerce it to ``int``."""

    raw = env_str(name, required=required and or_value is None)
    if raw is None:
        return or_value
    return _coerce(name, raw, cast=int, kind="an integer")


def env_float(name: str, or_value: float | None = None, *, required: bool = False) -> float | None:
    """Fetch an environment variable and coerce it to ``float``."""

    raw = env_str(name, required=required and or_value is None)
    if raw is None:
        return or_value
    return _coerce(name, raw, cast=float, kind="a float")


def env_bool(name: str, or_value: bool | None = None, *, required: bool = False) -> bool | None:
    """Fetch an environment variable and coerce it to ``bool``."""

    raw = env_str(name, required=required and or_value is None)
    if raw is None:
        return or_value

    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError.env_wrong_type(name, raw, "a boolean")
