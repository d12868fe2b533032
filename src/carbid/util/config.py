from __future__ import annotations

import logging
import tomllib

from dataclasses import dataclass, field
from typing import Any

from marshmallow import validate
import marshmallow_dataclass

from carbid.constant import Role, DEFAULT_MAX_RETRIES

DEFAULT_CONFIG_PATH: str = "./config/config.dev.toml"


def load_config(path: str = DEFAULT_CONFIG_PATH) -> dict[str, Any]:
    """Loads the configuration from the config file.

    Args:
        path (str, optional): The path to the config file. Defaults to "./config/config.dev.toml".

    Returns:
        dict: The configuration as a dictionary.
    """
    with open(path, "rb") as f:
        config = tomllib.load(f)

    return config


@dataclass
class LoggerConfig:
    """Logger configuration.

    Fields:
        path: (str) Directory the log files are written to.
        format: (str) Format string of the log records.
        level: (str) Name of the logging level.
    """

    path: str = field(default="log/", metadata={"validate": validate.Length(min=1)})
    format: str = field(
        default="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        metadata={"validate": validate.Length(min=1)},
    )
    level: str = field(
        default="INFO",
        metadata={
            "validate": validate.OneOf(
                ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
            )
        },
    )

    def get_level(self) -> int:
        """Returns the numeric logging level."""
        match self.level:
            case "DEBUG":
                return logging.DEBUG
            case "INFO":
                return logging.INFO
            case "WARNING":
                return logging.WARNING
            case "ERROR":
                return logging.ERROR
            case "CRITICAL":
                return logging.CRITICAL
            case _:
                return logging.INFO


@dataclass
class BiddingConfig:
    """Bidding engine configuration.

    Fields:
        max_retries: (int) Attempts of a conflict-guarded commit before a conflict is reported.
    """

    max_retries: int = field(
        default=DEFAULT_MAX_RETRIES, metadata={"validate": validate.Range(min=1)}
    )


@dataclass
class StoreConfig:
    """Auction store configuration.

    Fields:
        backend: (str) Either "memory" (shared through the store manager) or "sql".
        url: (str) SQLAlchemy database url, used by the sql backend.
        echo: (bool) Whether SQLAlchemy logs the emitted statements.
    """

    backend: str = field(
        default="memory", metadata={"validate": validate.OneOf(["memory", "sql"])}
    )
    url: str = field(default="sqlite:///carbid.db")
    echo: bool = field(default=False)


@dataclass
class ManagerConfig:
    """Shared store manager configuration."""

    address: str = field(default="127.0.0.1")
    port: int = field(default=50050, metadata={"validate": validate.Range(min=0, max=65535)})
    authkey: str = field(default="carbid", metadata={"validate": validate.Length(min=1)})


@dataclass
class AccountConfig:
    """An account known to the static authenticator."""

    id: str = field(metadata={"validate": validate.Length(min=1)})
    name: str = field(metadata={"validate": validate.Length(min=1)})
    role: str = field(
        default=Role.USER.value,
        metadata={"validate": validate.OneOf([role.value for role in Role])},
    )

    def get_role(self) -> Role:
        """Returns the role of the account."""
        return Role(self.role)


@dataclass
class Config:
    """Application configuration, constructed once at startup and handed to the components."""

    logger: LoggerConfig = field(default_factory=LoggerConfig)
    bidding: BiddingConfig = field(default_factory=BiddingConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    manager: ManagerConfig = field(default_factory=ManagerConfig)
    accounts: list[AccountConfig] = field(default_factory=list)

    @staticmethod
    def load(path: str = DEFAULT_CONFIG_PATH) -> Config:
        """Loads and validates the configuration file.

        Args:
            path (str, optional): The path to the config file.

        Returns:
            Config: The validated configuration.

        Raises:
            marshmallow.ValidationError: If the file content is invalid.
        """
        return CONFIG_SCHEMA().load(load_config(path))  # type: ignore


CONFIG_SCHEMA = marshmallow_dataclass.class_schema(Config)
