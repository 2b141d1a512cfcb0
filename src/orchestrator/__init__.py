"""Ramp up, retry and hold many concurrent client sessions with live aggregate statistics."""

from .aggregator import SessionAggregator
from .aggregator_helpers import SessionInfo, StatsSnapshot
from .cancellation import JoinBarrier, ShutdownSignal
from .jitter import DelayRange, JitterSource
from .reporters import AggregatorReporter, CompositeReporter, LoggingReporter, SessionReporter
from .runner import Orchestrator, RunSummary
from .scheduler import BatchPlan, RampUpScheduler, ScheduleResult
from .session_state import SessionState, SessionStatus
from .session_task import SessionTask
from .session_task_helpers import SessionTiming

__all__ = [
    "AggregatorReporter",
    "BatchPlan",
    "CompositeReporter",
    "DelayRange",
    "JitterSource",
    "JoinBarrier",
    "LoggingReporter",
    "Orchestrator",
    "RampUpScheduler",
    "RunSummary",
    "ScheduleResult",
    "SessionAggregator",
    "SessionInfo",
    "SessionReporter",
    "SessionState",
    "SessionStatus",
    "SessionTask",
    "SessionTiming",
    "ShutdownSignal",
    "StatsSnapshot",
]
