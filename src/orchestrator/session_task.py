"""
State machine driving one session from acquisition to shutdown.

Connecting -> Connected -> (keepalive loop) is the happy path. Dial-side
failures move the session to Retrying and back to Connecting until the
attempt budget is spent, at which point it is Failed. Every wait races the
shutdown signal; cancellation ends the session as Cancelled, never Failed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import AsyncExitStack
from typing import Callable, Optional

from .cancellation import ShutdownSignal
from .collaborators.interfaces import Connection, RoutingPathSource, SessionProvider, Transport
from .errors import RETRYABLE_ERRORS, SendFailed
from .jitter import JitterSource
from .reporters import SessionReporter
from .session_state import SessionState, SessionStatus
from .session_task_helpers import KeepaliveMessages, SessionTiming

logger = logging.getLogger(__name__)

_UNEXPECTED_ERRORS = (OSError, RuntimeError, ValueError, TypeError, KeyError, AttributeError)


class SessionTask:
    """Owns one ``SessionState`` and the connection it acquires."""

    def __init__(
        self,
        index: int,
        target_id: str,
        *,
        provider: SessionProvider,
        transport: Transport,
        routing: RoutingPathSource,
        reporter: SessionReporter,
        shutdown: ShutdownSignal,
        timing: Optional[SessionTiming] = None,
        jitter: Optional[JitterSource] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.state = SessionState(index=index)
        self.target_id = target_id
        self.provider = provider
        self.transport = transport
        self.routing = routing
        self.reporter = reporter
        self.shutdown = shutdown
        self.timing = timing or SessionTiming()
        self.jitter = jitter or JitterSource()
        self.clock = clock
        self.messages = KeepaliveMessages(target_id)
        self.messages_sent = 0

    @property
    def index(self) -> int:
        return self.state.index

    async def run(self) -> SessionStatus:
        """Drive the session to a terminal status and return it."""
        try:
            async with AsyncExitStack() as stack:
                connection = await self._acquire()
                if connection is None:
                    return self._finish_without_connection()
                stack.push_async_callback(self._release, connection)
                return await self._keepalive(connection)
        except asyncio.CancelledError:
            self._cancel()
            raise
        except _UNEXPECTED_ERRORS as exc:
            logger.exception("[%d] Unexpected session error", self.index)
            self._fail(f"unexpected error: {exc}")
            return SessionStatus.FAILED

    async def _acquire(self) -> Optional[Connection]:
        """Dial with retries; ``None`` means the session failed or was cancelled."""
        max_attempts = self.timing.max_attempts
        for attempt in range(1, max_attempts + 1):
            if self.shutdown.is_set:
                return None

            self.state.mark_connecting(attempt)
            self._report()
            try:
                connection = await self._dial_once()
            except RETRYABLE_ERRORS as exc:
                error = str(exc)
                logger.debug("[%d] Connection attempt %d/%d failed: %s", self.index, attempt, max_attempts, error)
                if attempt >= max_attempts:
                    self._fail(f"failed to establish connection after {max_attempts} attempts: {error}")
                    return None

                self.state.mark_retrying(error)
                self._report()
                delay = self.timing.retry_delay.sample(self.jitter)
                logger.debug("[%d] Retrying in %.1fs", self.index, delay)
                if await self.shutdown.wait_or_cancelled(delay):
                    return None
                continue

            if connection is None:
                return None
            if self.shutdown.is_set:
                await self._release(connection)
                return None

            self.state.mark_connected(self.clock())
            self._report()
            return connection
        return None

    async def _dial_once(self) -> Optional[Connection]:
        """Select a path, fetch a token and dial; ``None`` when shutdown lands before the dial."""
        path = self.routing.select()
        token = await self.provider.acquire_credential(path)
        if self.shutdown.is_set:
            return None
        logger.debug("[%d] Dialing via %s", self.index, path.display)
        return await self.transport.dial(token, path)

    async def _keepalive(self, connection: Connection) -> SessionStatus:
        iteration = 0
        while True:
            if self.shutdown.is_set:
                return self._cancel()

            iteration += 1
            message = self.messages.for_iteration(iteration)
            try:
                await connection.send_structured(message)
            except (SendFailed, OSError) as exc:
                logger.debug("[%d] Send failed on iteration %d: %s", self.index, iteration, exc)
                self._fail(f"message send failed: {exc}")
                return SessionStatus.FAILED
            self.messages_sent += 1

            delay = self.timing.keepalive_delay.sample(self.jitter)
            if await self.shutdown.wait_or_cancelled(delay):
                return self._cancel()

    def _finish_without_connection(self) -> SessionStatus:
        if self.state.status is SessionStatus.FAILED:
            return SessionStatus.FAILED
        return self._cancel()

    def _fail(self, error: str) -> None:
        self.state.mark_failed(error)
        self._report()

    def _cancel(self) -> SessionStatus:
        # A session stopped from keepalive stays Connected in the aggregate view.
        was_connected = self.state.status is SessionStatus.CONNECTED
        self.state.mark_cancelled()
        if not was_connected:
            self._report()
        logger.debug("[%d] Session stopped due to shutdown", self.index)
        return SessionStatus.CANCELLED

    def _report(self) -> None:
        self.reporter.session_changed(self.state)

    async def _release(self, connection: Connection) -> None:
        try:
            await connection.close()
        except (OSError, RuntimeError) as exc:  # connection already torn down
            logger.debug("[%d] Error closing connection: %s", self.index, exc)


__all__ = ["SessionTask"]
