"""
Top-level ``run`` contract: resolve the target, ramp sessions up, join them.

The run completes only when the join barrier resolves, which in steady state
means after the shutdown signal has stopped every keepalive loop.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Mapping, Optional

from .aggregator import SessionAggregator
from .aggregator_helpers import StatsSnapshot
from .cancellation import JoinBarrier, ShutdownSignal
from .collaborators.interfaces import RoutingPathSource, SessionProvider, Transport
from .errors import RETRYABLE_ERRORS, TargetResolutionFailed
from .jitter import JitterSource
from .reporters import AggregatorReporter, CompositeReporter, SessionReporter
from .scheduler import BatchPlan, RampUpScheduler, ScheduleResult
from .session_state import SessionStatus
from .session_task import SessionTask
from .session_task_helpers import SessionTiming

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunSummary:
    """Outcome of one orchestration run."""

    target_name: str
    target_id: str
    snapshot: StatsSnapshot
    terminal: Mapping[int, SessionStatus]
    schedule: ScheduleResult
    elapsed_seconds: float

    def terminal_count(self, status: SessionStatus) -> int:
        return Counter(self.terminal.values())[status]


def extract_target_name(raw: str) -> str:
    """Reduce a link such as ``https://host/name`` to ``name``; plain names pass through."""
    cleaned = raw.strip().rstrip("/")
    if "/" in cleaned:
        cleaned = cleaned.rsplit("/", 1)[-1]
    return cleaned.split("?", 1)[0]


class Orchestrator:
    """Wires collaborators, scheduler, sessions and aggregator for a run."""

    def __init__(
        self,
        provider: SessionProvider,
        transport: Transport,
        routing: RoutingPathSource,
        *,
        timing: Optional[SessionTiming] = None,
        jitter: Optional[JitterSource] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.provider = provider
        self.transport = transport
        self.routing = routing
        self.timing = timing or SessionTiming()
        self.jitter = jitter or JitterSource()
        self.clock = clock

    async def resolve(self, target_name: str) -> str:
        try:
            target_id = await self.provider.resolve_target(target_name)
        except TargetResolutionFailed:
            raise
        except RETRYABLE_ERRORS as exc:
            raise TargetResolutionFailed(target_name, str(exc)) from exc
        logger.info("Resolved target %r to %s", target_name, target_id)
        return target_id

    async def run(
        self,
        total: int,
        plan: Optional[BatchPlan],
        target_name: str,
        *,
        shutdown: Optional[ShutdownSignal] = None,
        aggregator: Optional[SessionAggregator] = None,
        reporters: Iterable[SessionReporter] = (),
    ) -> RunSummary:
        """
        Run ``total`` sessions against ``target_name`` and block until all have exited.

        Raises:
            ValueError: If ``total`` is below 1
            TargetResolutionFailed: If the target cannot be resolved; no session is started
        """
        if total < 1:
            raise ValueError(f"total must be at least 1 (got {total})")
        shutdown = shutdown or ShutdownSignal()
        started = self.clock()

        target_id = await self.resolve(target_name)
        if aggregator is None:
            aggregator = SessionAggregator(total, target_name=target_name, target_id=target_id, clock=self.clock)
        else:
            aggregator.target_name = target_name
            aggregator.target_id = target_id

        reporter = CompositeReporter([AggregatorReporter(aggregator), *reporters])
        barrier = JoinBarrier()
        terminal: Dict[int, SessionStatus] = {}

        async def _run_session(task: SessionTask) -> None:
            terminal[task.index] = await task.run()

        def launch(index: int) -> None:
            task = SessionTask(
                index,
                target_id,
                provider=self.provider,
                transport=self.transport,
                routing=self.routing,
                reporter=reporter,
                shutdown=shutdown,
                timing=self.timing,
                jitter=self.jitter.spawn(),
                clock=self.clock,
            )
            barrier.spawn(_run_session(task), name=f"session-{index}")

        try:
            schedule = await RampUpScheduler(shutdown).schedule(total, plan, launch)
            logger.info("Scheduled %d/%d sessions; waiting for them to exit", schedule.launched, total)
            await barrier.wait()
        except asyncio.CancelledError:
            logger.info("Run cancelled; stopping %d session(s)", barrier.pending)
            await barrier.cancel_all()
            raise

        elapsed = self.clock() - started
        logger.info("All %d sessions exited after %.1fs", barrier.launched, elapsed)
        return RunSummary(
            target_name=target_name,
            target_id=target_id,
            snapshot=aggregator.snapshot(),
            terminal=dict(terminal),
            schedule=schedule,
            elapsed_seconds=elapsed,
        )


__all__ = ["Orchestrator", "RunSummary", "extract_target_name"]
