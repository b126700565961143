"""Configuration management for the RCON client.

This module provides utilities for loading and validating configuration
from environment variables, optionally read from a ``.env`` file first.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from dotenv import load_dotenv

if TYPE_CHECKING:
    from pathlib import Path

LOGGER = logging.getLogger(__name__)

_PORT_UPPER_BOUND = 65536
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def configure_logging(config: RCONConfig) -> None:
    """Configure logging based on the client configuration.

    :param config: The client configuration instance
    """
    if not config.logging_level:
        logging.basicConfig(level=logging.INFO, force=True)
        return

    numeric_level = getattr(logging, config.logging_level.upper(), None)
    if not isinstance(numeric_level, int):
        LOGGER.warning("Invalid log level: %s, using INFO", config.logging_level)
        numeric_level = logging.INFO
    logging.basicConfig(level=numeric_level, force=True)


@dataclass
class RCONConfig:
    """Client configuration loaded from environment variables.

    All fields are initialized from environment variables using field
    creators, so explicit keyword arguments win over the environment.

    **Usage:**

    .. code-block:: python

        from dotenv import load_dotenv
        load_dotenv(".env")  # User's responsibility
        config = RCONConfig()
    """

    DEFAULT_HOST: ClassVar[str] = "localhost"
    DEFAULT_PORT: ClassVar[int] = 27015

    host: str = field(
        default_factory=lambda: os.getenv("RCON_HOST", RCONConfig.DEFAULT_HOST),
    )
    port: int = field(
        default_factory=lambda: RCONConfig._getenv_int_required(
            "RCON_PORT",
            RCONConfig.DEFAULT_PORT,
        ),
    )
    password: str | None = field(
        default_factory=lambda: os.getenv("RCON_PASSWORD"),
        repr=False,
    )
    timeout: float | None = field(
        default_factory=lambda: RCONConfig._getenv_float("RCON_TIMEOUT"),
    )
    multi_packet: bool = field(
        default_factory=lambda: RCONConfig._getenv_bool("RCON_MULTI_PACKET", True),
    )
    logging_level: str | None = field(
        default_factory=lambda: os.getenv("LOGGING_LEVEL"),
    )

    def __post_init__(self) -> None:
        """Post-initialization validation."""
        if not 0 < self.port < _PORT_UPPER_BOUND:
            msg = f"RCON_PORT must be between 1 and 65535, got: {self.port}"
            raise ValueError(msg)
        if self.timeout is not None and self.timeout < 0:
            msg = f"RCON_TIMEOUT must not be negative, got: {self.timeout}"
            raise ValueError(msg)

    @staticmethod
    def _getenv_int_required(key: str, default: int) -> int:
        """Get an integer environment variable with a default.

        :param key: Environment variable name
        :param default: Default value if not set
        :return: The environment variable value as integer or default
        :raises ValueError: If value cannot be converted to int
        """
        value_str = os.getenv(key)

        if value_str is None or value_str == "":
            return default

        try:
            return int(value_str)
        except ValueError as e:
            msg = f"Environment variable {key} must be an integer, got: {value_str}"
            raise ValueError(msg) from e

    @staticmethod
    def _getenv_float(key: str, default: float | None = None) -> float | None:
        """Get a float environment variable.

        An empty string means no value, e.g. no timeout.

        :param key: Environment variable name
        :param default: Default value if not set
        :raises ValueError: If value cannot be converted to float
        """
        value_str = os.getenv(key)

        if value_str is None:
            return default

        if value_str == "":
            return None

        try:
            return float(value_str)
        except ValueError as e:
            msg = f"Environment variable {key} must be a number, got: {value_str}"
            raise ValueError(msg) from e

    @staticmethod
    def _getenv_bool(key: str, default: bool) -> bool:
        """Get a boolean environment variable.

        :param key: Environment variable name
        :param default: Default value if not set
        :raises ValueError: If value is not a recognised boolean
        """
        value_str = os.getenv(key)

        if value_str is None or value_str == "":
            return default

        value = value_str.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False

        msg = f"Environment variable {key} must be a boolean, got: {value_str}"
        raise ValueError(msg)


def load_config_from_env(env_file: str | Path | None = None) -> RCONConfig:
    """Load client configuration from environment variables.

    :param env_file: Optional ``.env`` file to load first; variables already
        set in the environment take precedence
    :return: An RCONConfig instance populated with environment variable values
    """
    if env_file:
        load_dotenv(dotenv_path=env_file)

    return RCONConfig()
