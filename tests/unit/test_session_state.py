import pytest

from orchestrator.session_state import SessionState, SessionStatus


def test_new_state_is_idle_with_no_attempts():
    state = SessionState(index=3)
    assert state.status is SessionStatus.IDLE
    assert state.attempts == 0
    assert state.connected_at is None


def test_connected_at_is_set_only_once():
    state = SessionState(index=0)
    state.mark_connecting(1)
    state.mark_connected(100.0)
    state.mark_retrying("reset")
    state.mark_connecting(2)
    state.mark_connected(250.0)

    assert state.connected_at == 100.0


def test_success_clears_last_error():
    state = SessionState(index=0)
    state.mark_connecting(1)
    state.mark_retrying("dial failed")
    state.mark_connecting(2)
    state.mark_connected(5.0)

    assert state.last_error == ""
    assert state.attempts == 2


def test_attempts_never_decrease():
    state = SessionState(index=0)
    state.mark_connecting(3)
    with pytest.raises(ValueError):
        state.mark_connecting(2)


@pytest.mark.parametrize(
    "status, terminal",
    [
        (SessionStatus.IDLE, False),
        (SessionStatus.CONNECTING, False),
        (SessionStatus.CONNECTED, False),
        (SessionStatus.RETRYING, False),
        (SessionStatus.FAILED, True),
        (SessionStatus.CANCELLED, True),
    ],
)
def test_terminal_statuses(status, terminal):
    assert status.is_terminal is terminal


def test_status_labels_and_icons():
    assert SessionStatus.CONNECTED.label == "Connected"
    assert SessionStatus.CONNECTED.icon == "🟢"
    assert SessionStatus.IDLE.icon == "⚪"
