"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import os
from typing import Any, Dict

import pytest

from orchestrator.jitter import DelayRange
from orchestrator.session_task_helpers import SessionTiming
from tests.helpers.fakes import FakeProvider, FakeRouting, FakeTransport, RecordingReporter

# Keep settings independent of the developer's shell
os.environ.setdefault("ORCHESTRATOR_PROXY_FILE", "proxies.txt")
os.environ.setdefault("ORCHESTRATOR_BATCH_SIZE", "100")
os.environ.setdefault("ORCHESTRATOR_BATCH_DELAY_SECONDS", "30")


@pytest.fixture
def fast_timing() -> SessionTiming:
    return SessionTiming(max_attempts=5, retry_delay=DelayRange(0.0, 0.0), keepalive_delay=DelayRange(0.01, 0.01))


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def fake_routing() -> FakeRouting:
    return FakeRouting()


@pytest.fixture
def recording_reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def fake_clock() -> Dict[str, Any]:
    state: Dict[str, Any] = {"now": 1_000.0}
    state["clock"] = lambda: state["now"]
    return state
