"""
Pluggable sinks for session status changes.

The session state machine exists once; whether its transitions drive the
dashboard, verbose logs, or both is decided by the reporter it is given.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Protocol

from .aggregator import SessionAggregator
from .session_state import SessionState, SessionStatus

logger = logging.getLogger(__name__)


class SessionReporter(Protocol):
    """Receives a copy-safe view of a session after every transition."""

    def session_changed(self, state: SessionState) -> None: ...


class AggregatorReporter:
    """Forwards transitions into the shared statistics store."""

    def __init__(self, aggregator: SessionAggregator) -> None:
        self.aggregator = aggregator

    def session_changed(self, state: SessionState) -> None:
        self.aggregator.report(state.index, state.status, state.attempts, state.last_error)


class LoggingReporter:
    """Verbose mode: one log line per transition."""

    def __init__(self, max_attempts: int, log: logging.Logger = logger) -> None:
        self.max_attempts = max_attempts
        self.log = log

    def session_changed(self, state: SessionState) -> None:
        status = state.status
        if status is SessionStatus.CONNECTING:
            self.log.info("[%d] Starting connection attempt %d/%d", state.index, state.attempts, self.max_attempts)
        elif status is SessionStatus.CONNECTED:
            self.log.info("[%d] Connection established after %d attempt(s)", state.index, state.attempts)
        elif status is SessionStatus.RETRYING:
            self.log.info("[%d] Attempt %d failed: %s; retrying", state.index, state.attempts, state.last_error)
        elif status is SessionStatus.FAILED:
            self.log.warning("[%d] Connection failed: %s", state.index, state.last_error)
        elif status is SessionStatus.CANCELLED:
            self.log.info("[%d] Connection stopped due to shutdown", state.index)


class CompositeReporter:
    """Fans one transition out to several reporters, in order."""

    def __init__(self, reporters: Iterable[SessionReporter]) -> None:
        self.reporters: List[SessionReporter] = list(reporters)

    def session_changed(self, state: SessionState) -> None:
        for reporter in self.reporters:
            reporter.session_changed(state)


__all__ = ["AggregatorReporter", "CompositeReporter", "LoggingReporter", "SessionReporter"]
