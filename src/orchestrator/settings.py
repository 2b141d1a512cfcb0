"""
Runtime settings for an orchestration run.

Values default from environment variables (or a local ``.env``) so operators
can tune pacing without code changes. Every field carries a documented
fallback through ``_DEFAULT_VALUES``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Optional

from .config import ConfigurationError, env_float, env_int, env_str

_DEFAULT_VALUES = {
    "ORCHESTRATOR_PROXY_FILE": "proxies.txt",
    "ORCHESTRATOR_BATCH_SIZE": 100,
    "ORCHESTRATOR_BATCH_DELAY_SECONDS": 30.0,
    "ORCHESTRATOR_MAX_ATTEMPTS": 5,
    "ORCHESTRATOR_RETRY_DELAY_MIN_SECONDS": 4.0,
    "ORCHESTRATOR_RETRY_DELAY_MAX_SECONDS": 8.0,
    "ORCHESTRATOR_KEEPALIVE_MIN_SECONDS": 11.0,
    "ORCHESTRATOR_KEEPALIVE_MAX_SECONDS": 18.0,
    "ORCHESTRATOR_DIAL_TIMEOUT_SECONDS": 30.0,
    "ORCHESTRATOR_REQUEST_TIMEOUT_SECONDS": 30.0,
    "ORCHESTRATOR_DASHBOARD_INTERVAL_SECONDS": 1.0,
    "ORCHESTRATOR_RESOLVE_URL": "http://localhost:8080/api/targets/{name}",
    "ORCHESTRATOR_TOKEN_URL": "http://localhost:8080/api/token",
    "ORCHESTRATOR_WEBSOCKET_URL": "ws://localhost:8080/connect",
}


def require_env_int(name: str) -> int:
    """Get an environment variable as integer, using the default table if unset."""
    value = env_int(name)
    if value is not None:
        return value
    if name in _DEFAULT_VALUES:
        return int(_DEFAULT_VALUES[name])
    raise ConfigurationError.missing_value(name)


def require_env_float(name: str) -> float:
    """Get an environment variable as float, using the default table if unset."""
    value = env_float(name)
    if value is not None:
        return value
    if name in _DEFAULT_VALUES:
        return float(_DEFAULT_VALUES[name])
    raise ConfigurationError.missing_value(name)


def require_env_str(name: str) -> str:
    """Get an environment variable as string, using the default table if unset."""
    value = env_str(name)
    if value is not None:
        return value
    if name in _DEFAULT_VALUES:
        return str(_DEFAULT_VALUES[name])
    raise ConfigurationError.missing_value(name)


def _validate_delay_bounds(prefix: str, low: float, high: float) -> None:
    if low < 0:
        raise ConfigurationError.invalid_value(f"{prefix}_min_seconds", low, "Must be non-negative")
    if high < low:
        raise ConfigurationError.invalid_value(
            f"{prefix}_max_seconds", high, f"Must be at least {prefix}_min_seconds ({low})"
        )


@dataclass
class OrchestratorSettings:
    """
    Centralized configuration for a run.

    Attributes:
        proxy_file: Path of the routing path list (``host:port[:user:pass]`` per line)
        batch_size: Sessions started per batch in slow mode
        batch_delay_seconds: Pause between batches in slow mode
        max_attempts: Dial attempts per session before it is marked failed
        retry_delay_min_seconds / retry_delay_max_seconds: Retry backoff bounds
        keepalive_min_seconds / keepalive_max_seconds: Keepalive interval bounds
        dial_timeout_seconds: Handshake timeout for the transport
        request_timeout_seconds: Total timeout for provider HTTP requests
        dashboard_interval_seconds: Dashboard refresh period
        resolve_url: Target lookup endpoint, ``{name}`` is substituted
        token_url: Credential endpoint
        websocket_url: Duplex endpoint dialed by every session
    """

    proxy_file: str = field(default_factory=partial(require_env_str, "ORCHESTRATOR_PROXY_FILE"))
    batch_size: int = field(default_factory=partial(require_env_int, "ORCHESTRATOR_BATCH_SIZE"))
    batch_delay_seconds: float = field(default_factory=partial(require_env_float, "ORCHESTRATOR_BATCH_DELAY_SECONDS"))

    max_attempts: int = field(default_factory=partial(require_env_int, "ORCHESTRATOR_MAX_ATTEMPTS"))
    retry_delay_min_seconds: float = field(default_factory=partial(require_env_float, "ORCHESTRATOR_RETRY_DELAY_MIN_SECONDS"))
    retry_delay_max_seconds: float = field(default_factory=partial(require_env_float, "ORCHESTRATOR_RETRY_DELAY_MAX_SECONDS"))
    keepalive_min_seconds: float = field(default_factory=partial(require_env_float, "ORCHESTRATOR_KEEPALIVE_MIN_SECONDS"))
    keepalive_max_seconds: float = field(default_factory=partial(require_env_float, "ORCHESTRATOR_KEEPALIVE_MAX_SECONDS"))

    dial_timeout_seconds: float = field(default_factory=partial(require_env_float, "ORCHESTRATOR_DIAL_TIMEOUT_SECONDS"))
    request_timeout_seconds: float = field(default_factory=partial(require_env_float, "ORCHESTRATOR_REQUEST_TIMEOUT_SECONDS"))
    dashboard_interval_seconds: float = field(
        default_factory=partial(require_env_float, "ORCHESTRATOR_DASHBOARD_INTERVAL_SECONDS")
    )

    resolve_url: str = field(default_factory=partial(require_env_str, "ORCHESTRATOR_RESOLVE_URL"))
    token_url: str = field(default_factory=partial(require_env_str, "ORCHESTRATOR_TOKEN_URL"))
    websocket_url: str = field(default_factory=partial(require_env_str, "ORCHESTRATOR_WEBSOCKET_URL"))

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            raise ConfigurationError.invalid_value("batch_size", self.batch_size, "Must be greater than 0")
        if self.batch_delay_seconds < 0:
            raise ConfigurationError.invalid_value("batch_delay_seconds", self.batch_delay_seconds, "Must be non-negative")
        if self.max_attempts <= 0:
            raise ConfigurationError.invalid_value("max_attempts", self.max_attempts, "Must be greater than 0")
        _validate_delay_bounds("retry_delay", self.retry_delay_min_seconds, self.retry_delay_max_seconds)
        _validate_delay_bounds("keepalive", self.keepalive_min_seconds, self.keepalive_max_seconds)
        if self.dashboard_interval_seconds <= 0:
            raise ConfigurationError.invalid_value(
                "dashboard_interval_seconds", self.dashboard_interval_seconds, "Must be greater than 0"
            )


def load_settings(**overrides: Optional[object]) -> OrchestratorSettings:
    """Build settings from the environment, applying non-``None`` overrides."""
    explicit = {key: value for key, value in overrides.items() if value is not None}
    return OrchestratorSettings(**explicit)


__all__ = ["OrchestratorSettings", "load_settings", "require_env_float", "require_env_int", "require_env_str"]
