"""Text rendering of aggregate statistics."""

from __future__ import annotations

from typing import List, Optional

from ..aggregator import recent_activity
from ..aggregator_helpers import StatsSnapshot
from .time_formatter import format_clock, format_duration

BOX_WIDTH = 78
RECENT_ACTIVITY_ROWS = 3
_BYTES_PER_MB = 1024 * 1024


def _rule(left: str, right: str) -> str:
    return f"{left}{'═' * BOX_WIDTH}{right}"


def _row(text: str) -> str:
    clipped = text[: BOX_WIDTH - 1]
    return f"║ {clipped.ljust(BOX_WIDTH - 1)}║"


class DashboardRenderer:
    """Pure function of a snapshot and the current time."""

    def __init__(self, title: str = "SESSION ORCHESTRATOR DASHBOARD") -> None:
        self.title = title

    def render(self, snapshot: StatsSnapshot, now: float, *, rss_bytes: Optional[int] = None) -> str:
        lines: List[str] = [
            _rule("╔", "╗"),
            f"║{self.title.center(BOX_WIDTH)}║",
            _rule("╠", "╣"),
            _row(
                f"Target: {snapshot.target_name:<20} │ Target ID: {str(snapshot.target_id or '-'):<10} │ "
                f"Runtime: {format_duration(snapshot.runtime_seconds(now))}"
            ),
            _rule("╠", "╣"),
            _row(
                f"Total Connections: {snapshot.total:<8} │ Success Rate: {snapshot.success_rate:6.1f}% │ "
                f"Total Attempts: {snapshot.total_attempts}"
            ),
            _rule("╠", "╣"),
            _row(
                f"🟢 Connected: {snapshot.connected:<10} │ 🟡 Connecting: {snapshot.connecting:<9} │ "
                f"🔄 Retrying: {snapshot.retrying}"
            ),
            _row(
                f"🔴 Failed: {snapshot.failed:<13} │ ⚫ Cancelled: {snapshot.cancelled:<10} │ "
                f"Last Update: {format_clock(snapshot.last_update)}"
            ),
        ]
        if rss_bytes is not None:
            lines.append(_row(f"Process memory: {rss_bytes / _BYTES_PER_MB:.1f} MB"))

        lines.append(_rule("╠", "╣"))
        lines.append(_row("Recent Activity:"))
        recent = recent_activity(snapshot, now, limit=RECENT_ACTIVITY_ROWS)
        for info in recent:
            lines.append(_row(f"{info.status.icon} Connection #{info.index:<5} - {info.status.label:<12} (Attempt {info.attempts})"))
        for _ in range(RECENT_ACTIVITY_ROWS - len(recent)):
            lines.append(_row(""))
        lines.append(_rule("╚", "╝"))
        lines.append("Press Ctrl+C to stop")
        return "\n".join(lines)


def format_final_summary(snapshot: StatsSnapshot, now: float) -> str:
    return "\n".join(
        [
            "",
            "Final Summary:",
            f"Total Connections: {snapshot.total}",
            f"Successfully Connected: {snapshot.connected}",
            f"Failed: {snapshot.failed}",
            f"Cancelled: {snapshot.cancelled}",
            f"Success Rate: {snapshot.success_rate:.1f}%",
            f"Runtime: {format_duration(snapshot.runtime_seconds(now))}",
        ]
    )
