"""
Periodic terminal dashboard.

Reads aggregator snapshots on a fixed interval and redraws the screen. It
never writes back into the aggregator.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from contextlib import suppress
from typing import Callable, Optional, TextIO

import psutil

from .aggregator import SessionAggregator
from .dashboard_helpers import DashboardRenderer

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\033[2J\033[H"
DEFAULT_REFRESH_INTERVAL_SECONDS = 1.0


def current_rss_bytes() -> Optional[int]:
    try:
        return psutil.Process().memory_info().rss
    except (psutil.Error, OSError) as exc:
        logger.debug("Unable to read process memory: %s", exc)
        return None


class Dashboard:
    def __init__(
        self,
        aggregator: SessionAggregator,
        *,
        stream: Optional[TextIO] = None,
        interval: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
        renderer: Optional[DashboardRenderer] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive (got {interval})")
        self.aggregator = aggregator
        self.stream = stream or sys.stdout
        self.interval = interval
        self.renderer = renderer or DashboardRenderer()
        self.clock = clock
        self.frames_rendered = 0
        self._task: Optional[asyncio.Task[None]] = None

    def render_once(self) -> None:
        frame = self.renderer.render(self.aggregator.snapshot(), self.clock(), rss_bytes=current_rss_bytes())
        self.stream.write(CLEAR_SCREEN + frame + "\n")
        self.stream.flush()
        self.frames_rendered += 1

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.render_once()

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._loop(), name="dashboard")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None


__all__ = ["CLEAR_SCREEN", "Dashboard", "current_rss_bytes"]
