"""Immutable data models published by the aggregator."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from ..session_state import SessionStatus


@dataclass(frozen=True)
class SessionInfo:
    """Latest known state of one session, as last reported by its task."""

    index: int
    status: SessionStatus
    attempts: int
    last_error: str = ""
    connected_at: Optional[float] = None
    updated_at: float = 0.0


@dataclass(frozen=True)
class StatsSnapshot:
    """Point-in-time copy of the aggregate statistics."""

    total: int
    counts: Mapping[SessionStatus, int]
    total_attempts: int
    success_rate: float
    start_time: float
    last_update: Optional[float]
    sessions: Mapping[int, SessionInfo]
    target_name: str = ""
    target_id: Optional[str] = None

    def count(self, status: SessionStatus) -> int:
        return self.counts.get(status, 0)

    @property
    def connecting(self) -> int:
        return self.count(SessionStatus.CONNECTING)

    @property
    def connected(self) -> int:
        return self.count(SessionStatus.CONNECTED)

    @property
    def retrying(self) -> int:
        return self.count(SessionStatus.RETRYING)

    @property
    def failed(self) -> int:
        return self.count(SessionStatus.FAILED)

    @property
    def cancelled(self) -> int:
        return self.count(SessionStatus.CANCELLED)

    @property
    def reported(self) -> int:
        """Number of sessions that have reported at least once."""
        return len(self.sessions)

    def runtime_seconds(self, now: float) -> float:
        return max(0.0, now - self.start_time)


def freeze_mapping(values: dict) -> Mapping:
    return MappingProxyType(dict(values))
