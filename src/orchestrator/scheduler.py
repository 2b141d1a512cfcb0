"""
Ramp-up scheduling of session tasks.

The scheduler only decides *when* each index is launched. It never waits on
the sessions it starts; completion is observed through the join barrier.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Tuple

from .cancellation import ShutdownSignal

logger = logging.getLogger(__name__)

Launcher = Callable[[int], object]


@dataclass(frozen=True)
class BatchPlan:
    """Immutable batching configuration derived from operator input."""

    batch_size: int
    batch_delay: float
    total_count: int

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be greater than 0 (got {self.batch_size})")
        if self.batch_delay < 0:
            raise ValueError(f"batch_delay must be non-negative (got {self.batch_delay})")
        if self.total_count < 1:
            raise ValueError(f"total_count must be at least 1 (got {self.total_count})")

    @property
    def batch_count(self) -> int:
        return math.ceil(self.total_count / self.batch_size)

    def bounds(self) -> Iterator[Tuple[int, int]]:
        """Yield ``(start, end)`` index ranges, end exclusive, for every batch in order."""
        for batch in range(self.batch_count):
            start = batch * self.batch_size
            yield start, min(start + self.batch_size, self.total_count)


@dataclass(frozen=True)
class ScheduleResult:
    launched: int
    batches_started: int
    aborted: bool


class RampUpScheduler:
    """Launches sessions immediately or in delayed batches, honouring shutdown."""

    def __init__(self, shutdown: ShutdownSignal) -> None:
        self.shutdown = shutdown

    async def schedule(self, total: int, plan: Optional[BatchPlan], launcher: Launcher) -> ScheduleResult:
        if plan is None:
            return self._launch_all(total, launcher)
        if plan.total_count != total:
            raise ValueError(f"batch plan covers {plan.total_count} sessions but {total} were requested")
        return await self._launch_batches(plan, launcher)

    def _launch_all(self, total: int, launcher: Launcher) -> ScheduleResult:
        if self.shutdown.is_set:
            logger.info("Shutdown requested before launch; no sessions started")
            return ScheduleResult(launched=0, batches_started=0, aborted=True)

        logger.info("Starting %d connections...", total)
        for index in range(total):
            launcher(index)
        return ScheduleResult(launched=total, batches_started=1, aborted=False)

    async def _launch_batches(self, plan: BatchPlan, launcher: Launcher) -> ScheduleResult:
        launched = 0
        batches_started = 0
        batch_count = plan.batch_count

        for batch_number, (start, end) in enumerate(plan.bounds(), start=1):
            if self.shutdown.is_set:
                logger.info("Shutdown requested; skipping remaining %d batch(es)", batch_count - batches_started)
                return ScheduleResult(launched=launched, batches_started=batches_started, aborted=True)

            logger.info("Starting batch %d/%d (connections %d-%d)...", batch_number, batch_count, start + 1, end)
            for index in range(start, end):
                launcher(index)
            launched += end - start
            batches_started += 1

            if end < plan.total_count:
                logger.info("Waiting %.1f seconds before next batch...", plan.batch_delay)
                if await self.shutdown.wait_or_cancelled(plan.batch_delay):
                    logger.info("Shutdown requested during batch delay; skipping remaining %d batch(es)", batch_count - batches_started)
                    return ScheduleResult(launched=launched, batches_started=batches_started, aborted=True)

        return ScheduleResult(launched=launched, batches_started=batches_started, aborted=False)


__all__ = ["BatchPlan", "Launcher", "RampUpScheduler", "ScheduleResult"]
