"""Derived statistics computed from the full session map."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable

from ..session_state import SessionStatus
from .models import SessionInfo


@dataclass(frozen=True)
class StatusTotals:
    counts: Dict[SessionStatus, int]
    total_attempts: int
    success_rate: float


class StatsCalculator:
    """Recomputes every derived counter from scratch on each call."""

    @staticmethod
    def recalculate(sessions: Iterable[SessionInfo], total: int) -> StatusTotals:
        """
        Count sessions per status and sum their attempts.

        Args:
            sessions: Latest info for every session reported so far
            total: Fixed target session count

        Returns:
            Fresh totals; success rate stays 0 until an attempt was recorded
        """
        counts = {status: 0 for status in SessionStatus}
        total_attempts = 0
        for info in sessions:
            counts[info.status] += 1
            total_attempts += info.attempts

        success_rate = 0.0
        if total_attempts > 0 and total > 0:
            success_rate = counts[SessionStatus.CONNECTED] / total * 100
        return StatusTotals(counts=counts, total_attempts=total_attempts, success_rate=success_rate)
