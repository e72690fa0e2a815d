"""Configuration management for the RCON bridge.

This module provides utilities for loading and validating configuration
from environment variables, optionally seeded from a .env file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from mcrcon_bridge.rconclient import RCONSessionConfig

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

LOGGER = logging.getLogger(__name__)

_PORT_UPPER_BOUND = 65536
_DEFAULT_RCON_HOST = "127.0.0.1"
_DEFAULT_RCON_PORT = 25575
_DEFAULT_RCON_TIMEOUT_MS = 5000
_MILLISECONDS_PER_SECOND = 1000


def configure_logging(app_config: AppConfig) -> None:
    """Configure logging based on the application configuration.

    :param app_config: The application configuration instance
    """
    if not app_config.logging_level:
        logging.basicConfig(level=logging.INFO, force=True)
        return

    numeric_level = getattr(logging, app_config.logging_level.upper(), None)
    if not isinstance(numeric_level, int):
        LOGGER.warning("Invalid log level: %s, using INFO", app_config.logging_level)
        numeric_level = logging.INFO
    logging.basicConfig(level=numeric_level, force=True)


@dataclass
class AppConfig:
    """Holds application configuration loaded from environment variables."""

    logging_level: str | None
    root_path: str

    rcon_host: str
    rcon_port: int
    rcon_password: str
    rcon_timeout_ms: int
    default_op: str | None

    def __post_init__(self) -> None:
        """Initialize derived configuration attributes."""
        self.session_config = RCONSessionConfig(
            password=self.rcon_password,
            host=self.rcon_host,
            port=self.rcon_port,
            timeout=self.rcon_timeout_ms / _MILLISECONDS_PER_SECOND,
        )


def get_env_str(
    var_name: str,
    default: str | None,
    value_checker: Callable[[str], bool] | None = None,
) -> str:
    """Get an environment variable as a string with optional constraints.

    :param var_name: Name of the environment variable
    :param default: Default value if the variable is not set, None if required
    :param value_checker: Optional function to validate the value
    :return: The environment variable value
    :raises ValueError: If the value is missing or does not meet the constraints
    """
    value = os.getenv(var_name, default)
    if value is None:
        msg = f"Environment variable {var_name} is required"
        raise ValueError(msg)

    if value_checker and not value_checker(value):
        msg = f"Environment variable {var_name} has invalid value: {value}"
        raise ValueError(msg)

    return value


def get_env_optional_str(var_name: str) -> str | None:
    """Get an environment variable as a string, treating empty as unset.

    :param var_name: Name of the environment variable
    :return: The value, or None if unset or empty
    """
    value = os.getenv(var_name)
    return value or None


def get_env_int(
    var_name: str,
    default: int,
    value_checker: Callable[[int], bool] | None = None,
) -> int:
    """Get an environment variable as an integer with optional constraints.

    :param var_name: Name of the environment variable
    :param default: Default value if the variable is not set
    :param value_checker: Optional function to validate the value
    :return: The environment variable value as an integer
    :raises ValueError: If the value does not meet the constraints or is not an integer
    """
    value_str = os.getenv(var_name)
    if value_str is None or value_str == "":
        return default

    if not value_str.isnumeric():
        msg = f"Environment variable {var_name} must be an integer, got: {value_str}"
        raise ValueError(msg)

    value = int(value_str)

    if value_checker and not value_checker(value):
        msg = f"Environment variable {var_name} has invalid value: {value}"
        raise ValueError(msg)

    return value


def load_config_from_env(env_file: str | Path | None = None) -> AppConfig:
    """Load application configuration from environment variables.

    :param env_file: Optional .env file loaded first; set variables win
    :return: An AppConfig instance populated with environment variable values
    :raises ValueError: If a variable is missing or invalid
    """
    if env_file:
        load_dotenv(dotenv_path=env_file)

    return AppConfig(
        logging_level=get_env_str("LOGGING_LEVEL", "INFO"),
        root_path=get_env_str("ROOT_PATH", ""),
        rcon_host=get_env_str(
            "MC_RCON_HOST",
            _DEFAULT_RCON_HOST,
            lambda host: bool(host.strip()),
        ),
        rcon_port=get_env_int(
            "MC_RCON_PORT",
            _DEFAULT_RCON_PORT,
            lambda port: 0 < port < _PORT_UPPER_BOUND,
        ),
        rcon_password=get_env_str(
            "MC_RCON_PASSWORD",
            None,
            lambda password: password != "",
        ),
        rcon_timeout_ms=get_env_int(
            "MC_RCON_TIMEOUT_MS",
            _DEFAULT_RCON_TIMEOUT_MS,
            lambda timeout: timeout > 0,
        ),
        default_op=get_env_optional_str("MC_DEFAULT_OP"),
    )
