"""
Canonical session state definitions for the orchestrator.

A ``SessionState`` is owned by exactly one session task. Other components only
ever see the copies that task reports, so the mutators below do not lock.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SessionStatus(Enum):
    """Lifecycle states a single session moves through."""

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RETRYING = "retrying"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.FAILED, SessionStatus.CANCELLED)

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def icon(self) -> str:
        return _STATUS_ICONS.get(self, "⚪")


_STATUS_ICONS = {
    SessionStatus.CONNECTING: "🟡",
    SessionStatus.CONNECTED: "🟢",
    SessionStatus.RETRYING: "🔄",
    SessionStatus.FAILED: "🔴",
    SessionStatus.CANCELLED: "⚫",
}


@dataclass
class SessionState:
    """Per-session record mutated only by the task that owns it."""

    index: int
    status: SessionStatus = SessionStatus.IDLE
    attempts: int = 0
    last_error: str = ""
    connected_at: Optional[float] = None

    def mark_connecting(self, attempt: int) -> None:
        """Enter ``Connecting`` for the given 1-based dial attempt."""
        if attempt < self.attempts:
            raise ValueError(f"attempts may not decrease (had {self.attempts}, got {attempt})")
        self.status = SessionStatus.CONNECTING
        self.attempts = attempt

    def mark_connected(self, now: float) -> None:
        self.status = SessionStatus.CONNECTED
        self.last_error = ""
        if self.connected_at is None:
            self.connected_at = now

    def mark_retrying(self, error: str) -> None:
        self.status = SessionStatus.RETRYING
        self.last_error = error

    def mark_failed(self, error: str) -> None:
        self.status = SessionStatus.FAILED
        self.last_error = error

    def mark_cancelled(self) -> None:
        self.status = SessionStatus.CANCELLED


__all__ = ["SessionState", "SessionStatus"]
