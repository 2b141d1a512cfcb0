import asyncio

import pytest

from orchestrator.aggregator import SessionAggregator
from orchestrator.cancellation import ShutdownSignal
from orchestrator.jitter import DelayRange, JitterSource
from orchestrator.reporters import AggregatorReporter, CompositeReporter
from orchestrator.session_state import SessionStatus
from orchestrator.session_task import SessionTask
from orchestrator.session_task_helpers import SessionTiming
from tests.helpers.fakes import FakeProvider, FakeRouting, FakeTransport, wait_until


def _task(transport, reporter, timing, *, provider=None, routing=None, shutdown=None, index=0):
    return SessionTask(
        index,
        "4242",
        provider=provider or FakeProvider(),
        transport=transport,
        routing=routing or FakeRouting(),
        reporter=reporter,
        shutdown=shutdown or ShutdownSignal(),
        timing=timing,
        jitter=JitterSource(7),
    )


@pytest.mark.asyncio
async def test_every_dial_failing_ends_failed_after_exactly_five_attempts(fast_timing, recording_reporter):
    transport = FakeTransport(always_fail=True)
    task = _task(transport, recording_reporter, fast_timing)

    status = await task.run()

    assert status is SessionStatus.FAILED
    assert transport.dial_count == 5
    assert task.state.attempts == 5
    assert recording_reporter.statuses.count(SessionStatus.CONNECTING) == 5
    assert recording_reporter.statuses.count(SessionStatus.RETRYING) == 4
    assert recording_reporter.statuses[-1] is SessionStatus.FAILED
    assert recording_reporter.statuses.count(SessionStatus.FAILED) == 1
    assert "after 5 attempts" in task.state.last_error


@pytest.mark.asyncio
async def test_credential_and_routing_failures_consume_budget(fast_timing, recording_reporter):
    transport = FakeTransport()
    status = await _task(
        transport,
        recording_reporter,
        fast_timing,
        provider=FakeProvider(fail_credentials=True),
    ).run()
    assert status is SessionStatus.FAILED
    assert transport.dial_count == 0

    routing = FakeRouting(paths=[])
    status = await _task(transport, recording_reporter, fast_timing, routing=routing).run()
    assert status is SessionStatus.FAILED
    assert routing.selections == 5


@pytest.mark.asyncio
async def test_transient_failures_then_connect_and_keepalive(fast_timing, recording_reporter):
    transport = FakeTransport(fail_dials=2)
    shutdown = ShutdownSignal()
    task = _task(transport, recording_reporter, fast_timing, shutdown=shutdown)

    running = asyncio.create_task(task.run())
    await wait_until(lambda: task.messages_sent >= 4)
    shutdown.trigger()
    status = await asyncio.wait_for(running, timeout=1)

    assert status is SessionStatus.CANCELLED
    assert transport.dial_count == 3
    assert recording_reporter.statuses[:6] == [
        SessionStatus.CONNECTING,
        SessionStatus.RETRYING,
        SessionStatus.CONNECTING,
        SessionStatus.RETRYING,
        SessionStatus.CONNECTING,
        SessionStatus.CONNECTED,
    ]
    connection = transport.connections[0]
    assert connection.close_count == 1
    assert connection.sent[0] == {"type": "handshake", "data": {"target_id": "4242"}}
    assert connection.sent[1] == {"type": "ping"}
    assert connection.sent[2]["type"] == "handshake"


@pytest.mark.asyncio
async def test_keepalive_cancellation_keeps_aggregate_connected(fast_timing):
    aggregator = SessionAggregator(1)
    shutdown = ShutdownSignal()
    transport = FakeTransport()
    task = _task(transport, AggregatorReporter(aggregator), fast_timing, shutdown=shutdown)

    running = asyncio.create_task(task.run())
    await wait_until(lambda: task.messages_sent >= 1)
    shutdown.trigger()

    assert await running is SessionStatus.CANCELLED
    snapshot = aggregator.snapshot()
    assert snapshot.connected == 1
    assert snapshot.failed == 0


@pytest.mark.asyncio
async def test_send_failure_is_terminal_failure(fast_timing, recording_reporter):
    transport = FakeTransport(send_fail_after=3)
    task = _task(transport, recording_reporter, fast_timing)

    status = await asyncio.wait_for(task.run(), timeout=1)

    assert status is SessionStatus.FAILED
    assert "message send failed" in task.state.last_error
    assert transport.dial_count == 1
    assert transport.connections[0].close_count == 1
    assert len(transport.connections[0].sent) == 3


@pytest.mark.asyncio
async def test_cancellation_during_retry_delay_is_reported_as_cancelled(recording_reporter):
    timing = SessionTiming(max_attempts=5, retry_delay=DelayRange(30, 30), keepalive_delay=DelayRange(30, 30))
    aggregator = SessionAggregator(1)
    shutdown = ShutdownSignal()
    reporter = CompositeReporter([recording_reporter, AggregatorReporter(aggregator)])
    task = _task(FakeTransport(always_fail=True), reporter, timing, shutdown=shutdown)

    running = asyncio.create_task(task.run())
    await wait_until(lambda: task.state.status is SessionStatus.RETRYING)
    shutdown.trigger()
    status = await asyncio.wait_for(running, timeout=1)

    assert status is SessionStatus.CANCELLED
    assert recording_reporter.statuses[-1] is SessionStatus.CANCELLED
    assert SessionStatus.FAILED not in recording_reporter.statuses
    snapshot = aggregator.snapshot()
    assert snapshot.cancelled == 1
    assert snapshot.failed == 0


@pytest.mark.asyncio
async def test_shutdown_before_start_never_dials(fast_timing, recording_reporter):
    shutdown = ShutdownSignal()
    shutdown.trigger()
    transport = FakeTransport()

    status = await _task(transport, recording_reporter, fast_timing, shutdown=shutdown).run()

    assert status is SessionStatus.CANCELLED
    assert transport.dial_count == 0


@pytest.mark.asyncio
async def test_connection_released_when_shutdown_lands_mid_dial(fast_timing, recording_reporter):
    shutdown = ShutdownSignal()
    transport = FakeTransport(dial_delay=0.05)
    task = _task(transport, recording_reporter, fast_timing, shutdown=shutdown)

    running = asyncio.create_task(task.run())
    await wait_until(lambda: transport.dial_count == 1)
    shutdown.trigger()
    status = await asyncio.wait_for(running, timeout=1)

    assert status is SessionStatus.CANCELLED
    assert transport.connections[0].close_count == 1
    assert transport.connections[0].sent == []
    assert SessionStatus.CONNECTED not in recording_reporter.statuses


@pytest.mark.asyncio
async def test_hard_cancel_releases_connection_and_reraises(fast_timing, recording_reporter):
    transport = FakeTransport()
    task = _task(transport, recording_reporter, fast_timing)

    running = asyncio.create_task(task.run())
    await wait_until(lambda: task.messages_sent >= 1)
    running.cancel()
    with pytest.raises(asyncio.CancelledError):
        await running

    assert transport.connections[0].close_count == 1
    assert task.state.status is SessionStatus.CANCELLED


@pytest.mark.asyncio
async def test_shutdown_during_token_request_skips_the_dial(fast_timing, recording_reporter):
    shutdown = ShutdownSignal()

    class _ShutdownOnCredential(FakeProvider):
        async def acquire_credential(self, path):
            token = await super().acquire_credential(path)
            shutdown.trigger("operator stop")
            return token

    transport = FakeTransport()
    task = _task(
        transport,
        recording_reporter,
        fast_timing,
        provider=_ShutdownOnCredential(),
        shutdown=shutdown,
    )

    status = await task.run()

    assert status is SessionStatus.CANCELLED
    assert transport.dial_count == 0
    assert recording_reporter.statuses == [SessionStatus.CONNECTING, SessionStatus.CANCELLED]
