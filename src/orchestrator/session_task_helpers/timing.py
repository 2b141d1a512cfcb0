"""Retry budget and delay ranges for a session."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..jitter import DelayRange

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_DELAY = DelayRange(4.0, 8.0)
DEFAULT_KEEPALIVE_DELAY = DelayRange(11.0, 18.0)


@dataclass(frozen=True)
class SessionTiming:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_delay: DelayRange = field(default=DEFAULT_RETRY_DELAY)
    keepalive_delay: DelayRange = field(default=DEFAULT_KEEPALIVE_DELAY)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1 (got {self.max_attempts})")

    @classmethod
    def from_settings(cls, settings) -> "SessionTiming":
        return cls(
            max_attempts=settings.max_attempts,
            retry_delay=DelayRange(settings.retry_delay_min_seconds, settings.retry_delay_max_seconds),
            keepalive_delay=DelayRange(settings.keepalive_min_seconds, settings.keepalive_max_seconds),
        )
