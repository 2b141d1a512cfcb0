"""Tests for environment-backed configuration helpers."""

from pathlib import Path

import pytest

from orchestrator.config import ConfigurationError, DotenvLoader, env_bool, env_float, env_int, env_str, reset_default_values
from orchestrator.config import runtime


@pytest.fixture
def dotenv(tmp_path, monkeypatch):
    """Point the .env lookup at a temp file and clear the cache around the test."""
    path = tmp_path / ".env"
    path.write_text("")
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", (path,))
    reset_default_values()
    yield path
    reset_default_values()


class TestDotenvLoader:
    """Parsing of .env-style files."""

    def test_missing_file_yields_nothing(self, tmp_path):
        assert DotenvLoader.load_from_file(tmp_path / "absent.env") == {}

    def test_parses_pairs_exports_and_quotes(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("# comment\nA=1\nexport B = two\nC='three'\nD=\"four\"\nnot a pair\n=empty\n")

        assert DotenvLoader.load_from_file(path) == {"A": "1", "B": "two", "C": "three", "D": "four"}


class TestEnvHelpers:
    """Environment lookups with .env fallback."""

    def test_environment_wins_over_dotenv(self, dotenv, monkeypatch):
        dotenv.write_text("ORCH_TEST_VALUE=from-file\n")
        monkeypatch.setenv("ORCH_TEST_VALUE", " from-env ")

        assert env_str("ORCH_TEST_VALUE") == "from-env"

    def test_dotenv_used_when_environment_blank(self, dotenv, monkeypatch):
        dotenv.write_text("ORCH_TEST_VALUE=from-file\n")
        monkeypatch.setenv("ORCH_TEST_VALUE", "   ")

        assert env_str("ORCH_TEST_VALUE") == "from-file"

    def test_missing_value_falls_back(self, dotenv, monkeypatch):
        monkeypatch.delenv("ORCH_TEST_MISSING", raising=False)

        assert env_str("ORCH_TEST_MISSING", "fallback") == "fallback"
        assert env_int("ORCH_TEST_MISSING") is None

    def test_required_missing_value_raises(self, dotenv, monkeypatch):
        monkeypatch.delenv("ORCH_TEST_MISSING", raising=False)

        with pytest.raises(ConfigurationError, match="ORCH_TEST_MISSING"):
            env_str("ORCH_TEST_MISSING", required=True)

    def test_numeric_coercion(self, dotenv, monkeypatch):
        monkeypatch.setenv("ORCH_TEST_INT", "42")
        monkeypatch.setenv("ORCH_TEST_FLOAT", "2.5")

        assert env_int("ORCH_TEST_INT") == 42
        assert env_float("ORCH_TEST_FLOAT") == 2.5

    def test_bad_integer_raises(self, dotenv, monkeypatch):
        monkeypatch.setenv("ORCH_TEST_INT", "forty")

        with pytest.raises(ConfigurationError, match="integer"):
            env_int("ORCH_TEST_INT")

    @pytest.mark.parametrize("raw,expected", [("yes", True), ("ON", True), ("0", False), ("off", False)])
    def test_bool_coercion(self, dotenv, monkeypatch, raw, expected):
        monkeypatch.setenv("ORCH_TEST_BOOL", raw)

        assert env_bool("ORCH_TEST_BOOL") is expected

    def test_bad_bool_raises(self, dotenv, monkeypatch):
        monkeypatch.setenv("ORCH_TEST_BOOL", "maybe")

        with pytest.raises(ConfigurationError):
            env_bool("ORCH_TEST_BOOL")


class TestConfigurationError:
    """Message builders."""

    def test_messages(self):
        assert str(ConfigurationError.missing_value("x", "ctx")) == "x is missing or empty: ctx"
        assert str(ConfigurationError.invalid_value("x", 0, "Must be positive")) == "Invalid value for x: 0. Must be positive"
        assert "Expected a number" in str(ConfigurationError.invalid_format("x", "abc", "a number"))
        assert str(ConfigurationError.load_failed("proxy file", "p.txt")) == "Failed to load proxy file from p.txt"

    def test_domain_builders(self):
        assert "no valid proxies found in p.txt" in str(ConfigurationError.no_routing_paths("p.txt"))
        assert "session count" in str(ConfigurationError.invalid_session_count("-1"))
        assert str(ConfigurationError.env_wrong_type("X", "y", "a float")) == "Environment variable 'X' must be a float (got 'y')"


def test_dotenv_candidates_default_to_working_directory():
    assert runtime._DOTENV_CANDIDATES == (Path(".env"),)
