"""
Cooperative shutdown primitives.

``ShutdownSignal`` is a broadcast latch: any number of coroutines may wait on
it, triggering it never consumes it, and it never resets. ``JoinBarrier``
tracks every launched session task so a run completes only once all of them
have exited.
"""

from __future__ import annotations

import asyncio
import logging
import signal as _signal
from contextlib import suppress
from typing import Any, Coroutine, Optional, Set

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (_signal.SIGINT, _signal.SIGTERM)


class ShutdownSignal:
    """One-way cancellation latch shared by the scheduler and all sessions."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    @property
    def is_set(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def trigger(self, reason: str = "shutdown requested") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        logger.info("Shutdown signal triggered: %s", reason)
        self._event.set()

    async def wait_or_cancelled(self, delay: float) -> bool:
        """
        Sleep for ``delay`` seconds unless the signal fires first.

        Returns:
            True when the signal is set at the end of the wait, so cancellation
            wins whenever both outcomes are ready at once.
        """
        if self._event.is_set():
            return True
        with suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._event.wait(), timeout=max(0.0, delay))
        return self._event.is_set()


class JoinBarrier:
    """Tracks launched tasks and resolves once every one of them has exited."""

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task[Any]] = set()
        self._launched = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def launched(self) -> int:
        return self._launched

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: Optional[str] = None) -> asyncio.Task[Any]:
        """Schedule ``coro`` without waiting for it and track its completion."""
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        self._launched += 1
        self._idle.clear()
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if not task.cancelled():
            exc = task.exception()
            if exc is not None:
                logger.error("Task %s exited with an unhandled error", task.get_name(), exc_info=exc)
        if not self._tasks:
            self._idle.set()

    async def wait(self) -> None:
        """Resolve once no tracked task remains, including ones spawned while waiting."""
        while self._tasks:
            await self._idle.wait()

    async def cancel_all(self) -> None:
        """Hard-cancel every tracked task and wait for them to unwind."""
        for task in list(self._tasks):
            task.cancel()
        await self.wait()


def install_signal_handlers(shutdown: ShutdownSignal, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
    """Route SIGINT/SIGTERM into ``shutdown``."""
    loop = loop or asyncio.get_running_loop()
    for signum in SHUTDOWN_SIGNALS:
        reason = f"received {_signal.Signals(signum).name}"
        try:
            loop.add_signal_handler(signum, shutdown.trigger, reason)
        except (NotImplementedError, RuntimeError):
            # add_signal_handler is unavailable on Windows event loops
            _signal.signal(signum, lambda *_args, _reason=reason: loop.call_soon_threadsafe(shutdown.trigger, _reason))


def remove_signal_handlers(loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
    loop = loop or asyncio.get_running_loop()
    for signum in SHUTDOWN_SIGNALS:
        with suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signum)


__all__ = ["JoinBarrier", "ShutdownSignal", "install_signal_handlers", "remove_signal_handlers"]
