import logging

from orchestrator.aggregator import SessionAggregator
from orchestrator.reporters import AggregatorReporter, CompositeReporter, LoggingReporter
from orchestrator.session_state import SessionState, SessionStatus
from tests.helpers.fakes import RecordingReporter


def test_aggregator_reporter_forwards_state():
    aggregator = SessionAggregator(2)
    state = SessionState(index=1)
    state.mark_connecting(1)

    AggregatorReporter(aggregator).session_changed(state)

    snapshot = aggregator.snapshot()
    assert snapshot.connecting == 1
    assert snapshot.sessions[1].attempts == 1


def test_logging_reporter_logs_each_transition(caplog):
    reporter = LoggingReporter(max_attempts=5, log=logging.getLogger("test.reporter"))
    state = SessionState(index=3)

    with caplog.at_level(logging.INFO, logger="test.reporter"):
        state.mark_connecting(1)
        reporter.session_changed(state)
        state.mark_retrying("dial refused")
        reporter.session_changed(state)
        state.mark_connecting(2)
        state.mark_connected(100.0)
        reporter.session_changed(state)

    messages = [record.getMessage() for record in caplog.records]
    assert messages == [
        "[3] Starting connection attempt 1/5",
        "[3] Attempt 1 failed: dial refused; retrying",
        "[3] Connection established after 2 attempt(s)",
    ]


def test_logging_reporter_warns_on_failure(caplog):
    reporter = LoggingReporter(max_attempts=5, log=logging.getLogger("test.reporter"))
    state = SessionState(index=0)
    state.mark_connecting(1)
    state.mark_failed("gave up")

    with caplog.at_level(logging.INFO, logger="test.reporter"):
        reporter.session_changed(state)

    assert caplog.records[0].levelno == logging.WARNING
    assert "gave up" in caplog.text


def test_composite_reporter_fans_out_in_order():
    first, second = RecordingReporter(), RecordingReporter()
    state = SessionState(index=0)
    state.mark_connecting(1)

    CompositeReporter([first, second]).session_changed(state)

    assert first.events == second.events == [(0, SessionStatus.CONNECTING, 1, "")]
