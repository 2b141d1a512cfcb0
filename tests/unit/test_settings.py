import pytest

from orchestrator.config import ConfigurationError, reset_default_values
from orchestrator.config import runtime
from orchestrator.session_task_helpers import SessionTiming
from orchestrator.settings import OrchestratorSettings, load_settings, require_env_int


@pytest.fixture(autouse=True)
def _isolated_dotenv(tmp_path, monkeypatch):
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", (tmp_path / ".env",))
    for name in ("ORCHESTRATOR_BATCH_SIZE", "ORCHESTRATOR_BATCH_DELAY_SECONDS", "ORCHESTRATOR_MAX_ATTEMPTS"):
        monkeypatch.delenv(name, raising=False)
    reset_default_values()
    yield
    reset_default_values()


def test_defaults_match_documented_values():
    settings = OrchestratorSettings()

    assert settings.batch_size == 100
    assert settings.batch_delay_seconds == 30.0
    assert settings.max_attempts == 5
    assert (settings.retry_delay_min_seconds, settings.retry_delay_max_seconds) == (4.0, 8.0)
    assert (settings.keepalive_min_seconds, settings.keepalive_max_seconds) == (11.0, 18.0)
    assert "{name}" in settings.resolve_url


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("ORCHESTRATOR_BATCH_SIZE", "25")
    monkeypatch.setenv("ORCHESTRATOR_MAX_ATTEMPTS", "3")

    settings = OrchestratorSettings()

    assert settings.batch_size == 25
    assert SessionTiming.from_settings(settings).max_attempts == 3


def test_load_settings_ignores_none_overrides(monkeypatch):
    monkeypatch.setenv("ORCHESTRATOR_BATCH_SIZE", "25")

    settings = load_settings(batch_size=None, batch_delay_seconds=5.0)

    assert settings.batch_size == 25
    assert settings.batch_delay_seconds == 5.0


@pytest.mark.parametrize(
    "overrides",
    [{"batch_size": 0}, {"batch_delay_seconds": -1.0}, {"max_attempts": 0}, {"dashboard_interval_seconds": 0.0}],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ConfigurationError):
        load_settings(**overrides)


def test_require_env_unknown_name_raises(monkeypatch):
    monkeypatch.delenv("ORCHESTRATOR_UNKNOWN", raising=False)

    with pytest.raises(ConfigurationError):
        require_env_int("ORCHESTRATOR_UNKNOWN")


def test_retry_range_feeds_session_timing():
    timing = SessionTiming.from_settings(load_settings(retry_delay_min_seconds=1.0, retry_delay_max_seconds=2.0))

    assert (timing.retry_delay.low, timing.retry_delay.high) == (1.0, 2.0)


@pytest.mark.parametrize(
    "overrides",
    [
        {"retry_delay_min_seconds": 9.0, "retry_delay_max_seconds": 8.0},
        {"retry_delay_min_seconds": -1.0},
        {"keepalive_min_seconds": 20.0, "keepalive_max_seconds": 18.0},
        {"keepalive_min_seconds": -0.5},
    ],
)
def test_inverted_or_negative_delay_bounds_rejected(overrides):
    with pytest.raises(ConfigurationError, match="seconds"):
        load_settings(**overrides)


def test_inverted_retry_bounds_from_environment(monkeypatch):
    monkeypatch.setenv("ORCHESTRATOR_RETRY_DELAY_MIN_SECONDS", "9")

    with pytest.raises(ConfigurationError, match="retry_delay_max_seconds"):
        OrchestratorSettings()
