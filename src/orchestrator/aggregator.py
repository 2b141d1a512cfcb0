"""
Shared statistics store fed by every session task.

All mutation goes through ``report`` and all reads through ``snapshot``. Both
hold a single ``threading.Lock`` for the time it takes to update or copy
plain data, never across an await or an external call, so the dashboard can
poll from the event loop or from another thread.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from .aggregator_helpers import SessionInfo, StatsCalculator, StatsSnapshot
from .aggregator_helpers.models import freeze_mapping
from .session_state import SessionStatus

logger = logging.getLogger(__name__)

DEFAULT_RECENT_ACTIVITY_LIMIT = 3
DEFAULT_RECENT_ACTIVITY_WINDOW_SECONDS = 30.0


class SessionAggregator:
    """Last-write-wins map of session states plus derived counters."""

    def __init__(
        self,
        total: int,
        *,
        target_name: str = "",
        target_id: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if total < 1:
            raise ValueError(f"total must be at least 1 (got {total})")
        self._total = total
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: Dict[int, SessionInfo] = {}
        self._totals = StatsCalculator.recalculate((), total)
        self._start_time = clock()
        self._last_update: Optional[float] = None
        self.target_name = target_name
        self.target_id = target_id

    @property
    def total(self) -> int:
        return self._total

    def report(self, index: int, status: SessionStatus, attempts: int, last_error: str = "") -> None:
        """Record the latest state for ``index`` and recompute all statistics."""
        with self._lock:
            now = self._clock()
            previous = self._sessions.get(index)
            connected_at = previous.connected_at if previous is not None else None
            if status is SessionStatus.CONNECTED and connected_at is None:
                connected_at = now

            self._sessions[index] = SessionInfo(
                index=index,
                status=status,
                attempts=attempts,
                last_error=last_error,
                connected_at=connected_at,
                updated_at=now,
            )
            self._totals = StatsCalculator.recalculate(self._sessions.values(), self._total)
            self._last_update = now

    def snapshot(self) -> StatsSnapshot:
        """Return an immutable copy of the current statistics."""
        with self._lock:
            sessions = dict(self._sessions)
            totals = self._totals
            last_update = self._last_update

        return StatsSnapshot(
            total=self._total,
            counts=freeze_mapping(totals.counts),
            total_attempts=totals.total_attempts,
            success_rate=totals.success_rate,
            start_time=self._start_time,
            last_update=last_update,
            sessions=freeze_mapping(sessions),
            target_name=self.target_name,
            target_id=self.target_id,
        )

    def recent_activity(
        self,
        limit: int = DEFAULT_RECENT_ACTIVITY_LIMIT,
        window_seconds: float = DEFAULT_RECENT_ACTIVITY_WINDOW_SECONDS,
    ) -> List[SessionInfo]:
        """Sessions updated within ``window_seconds``, newest first."""
        return recent_activity(self.snapshot(), self._clock(), limit=limit, window_seconds=window_seconds)


def recent_activity(
    snapshot: StatsSnapshot,
    now: float,
    *,
    limit: int = DEFAULT_RECENT_ACTIVITY_LIMIT,
    window_seconds: float = DEFAULT_RECENT_ACTIVITY_WINDOW_SECONDS,
) -> List[SessionInfo]:
    recent = [info for info in snapshot.sessions.values() if now - info.updated_at < window_seconds]
    recent.sort(key=lambda info: (info.updated_at, info.index), reverse=True)
    return recent[:limit]


__all__ = ["SessionAggregator", "recent_activity"]
