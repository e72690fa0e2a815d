"""Tests for loading configuration from the environment."""

import logging
from pathlib import Path

import pytest

from mcrcon_bridge.config import configure_logging, load_config_from_env

_ENV_VARS = [
    "MC_RCON_HOST",
    "MC_RCON_PORT",
    "MC_RCON_PASSWORD",
    "MC_RCON_TIMEOUT_MS",
    "MC_DEFAULT_OP",
    "LOGGING_LEVEL",
    "ROOT_PATH",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every variable the loader reads, including ones a .env file sets."""
    for name in _ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults_with_only_password(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that everything but the password has a default."""
    monkeypatch.setenv("MC_RCON_PASSWORD", "secret")

    config = load_config_from_env(None)

    assert config.rcon_host == "127.0.0.1"
    assert config.rcon_port == 25575
    assert config.rcon_password == "secret"  # noqa: S105
    assert config.default_op is None
    assert config.session_config.timeout == 5.0
    assert config.session_config.port == 25575


def test_missing_password_is_fatal() -> None:
    """Test that the password is required."""
    with pytest.raises(ValueError, match="MC_RCON_PASSWORD"):
        load_config_from_env(None)


def test_empty_password_is_fatal(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that an empty password is rejected."""
    monkeypatch.setenv("MC_RCON_PASSWORD", "")

    with pytest.raises(ValueError, match="MC_RCON_PASSWORD"):
        load_config_from_env(None)


def test_invalid_port_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test port range validation."""
    monkeypatch.setenv("MC_RCON_PASSWORD", "secret")
    monkeypatch.setenv("MC_RCON_PORT", "70000")

    with pytest.raises(ValueError, match="MC_RCON_PORT"):
        load_config_from_env(None)


def test_non_numeric_timeout_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test integer validation."""
    monkeypatch.setenv("MC_RCON_PASSWORD", "secret")
    monkeypatch.setenv("MC_RCON_TIMEOUT_MS", "soon")

    with pytest.raises(ValueError, match="must be an integer"):
        load_config_from_env(None)


def test_values_from_env_file(tmp_path: Path) -> None:
    """Test loading variables from a .env file."""
    env_file = tmp_path / ".env"
    env_file.write_text(
        "MC_RCON_HOST=mc.example.internal\n"
        "MC_RCON_PORT=25580\n"
        "MC_RCON_PASSWORD=from-file\n"
        "MC_RCON_TIMEOUT_MS=1500\n"
        "MC_DEFAULT_OP=Alice\n",
    )

    config = load_config_from_env(env_file)

    assert config.rcon_host == "mc.example.internal"
    assert config.rcon_port == 25580
    assert config.default_op == "Alice"
    assert config.session_config.timeout == 1.5
    assert config.session_config.password == "from-file"  # noqa: S105


def test_configure_logging_invalid_level_falls_back(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that an unknown log level uses INFO."""
    monkeypatch.setenv("MC_RCON_PASSWORD", "secret")
    monkeypatch.setenv("LOGGING_LEVEL", "LOUD")

    configure_logging(load_config_from_env(None))

    assert logging.getLogger().level == logging.INFO
