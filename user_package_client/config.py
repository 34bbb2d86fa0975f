"""Configuration management for the user package client."""

import logging
import os
from typing import Any, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, model_validator

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    """Immutable connection settings shared by every call."""

    model_config = ConfigDict(frozen=True)

    user: str
    password: SecretStr
    connect_string: str
    wallet_location: Optional[str] = None
    wallet_password: Optional[SecretStr] = None
    mle_module: Optional[str] = None
    log_level: str = "info"
    connect_timeout: float = Field(15.0, gt=0)
    pool_enabled: bool = False
    pool_min_size: int = Field(1, ge=0)
    pool_max_size: int = Field(4, ge=1)
    pool_increment: int = Field(1, ge=1)

    @model_validator(mode="before")
    @classmethod
    def drop_orphan_wallet_password(cls, data: Any) -> Any:
        """Wallet materials exist only when a wallet location is configured."""
        if isinstance(data, dict) and not data.get("wallet_location"):
            data = {**data, "wallet_location": None, "wallet_password": None}
        return data

    @model_validator(mode="after")
    def check_pool_bounds(self) -> "DatabaseConfig":
        if self.pool_min_size > self.pool_max_size:
            raise ValueError("pool_min_size must not exceed pool_max_size")
        return self

    @property
    def endpoint(self) -> str:
        """Connect string suitable for logging (never carries credentials)."""
        return self.connect_string.split("@")[-1]

    @property
    def uses_wallet(self) -> bool:
        return self.wallet_location is not None

    def connect_params(self) -> dict[str, Any]:
        """Keyword arguments for ``oracledb.connect_async`` and ``create_pool_async``."""
        params: dict[str, Any] = {
            "user": self.user,
            "password": self.password.get_secret_value(),
            "dsn": self.connect_string,
        }
        if self.wallet_location:
            params["config_dir"] = self.wallet_location
            params["wallet_location"] = self.wallet_location
            if self.wallet_password is not None:
                params["wallet_password"] = self.wallet_password.get_secret_value()
        return params


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _env_flag(name: str) -> bool:
    return _env(name).lower() in _TRUE_VALUES


def load_database_config() -> DatabaseConfig:
    """
    Load configuration from the environment.

    A ``.env`` file in the current working directory is loaded first; values
    already set in the environment take precedence. ``WALLET_PATH`` is
    resolved relative to the current working directory; when it is empty no
    wallet materials are passed to the driver.

    Raises:
        ConfigurationError: If a value fails validation (for example a
            non-numeric pool size or a non-positive timeout).
    """
    load_dotenv(find_dotenv(usecwd=True), override=False)

    wallet_path = _env("WALLET_PATH")
    wallet_location = os.path.abspath(os.path.normpath(wallet_path)) if wallet_path else None
    if wallet_location:
        logger.info(f"Using wallet directory: {wallet_location}")

    values: dict[str, Any] = {
        "user": _env("DB_USER"),
        "password": _env("DB_PASSWORD"),
        "connect_string": _env("CONNECT_STRING"),
        "wallet_location": wallet_location,
        "wallet_password": _env("WALLET_PASSWORD") or None,
        "mle_module": _env("MLE_MODULE") or None,
        "log_level": _env("LOG_LEVEL", "info").lower() or "info",
        "pool_enabled": _env_flag("DB_POOL_ENABLED"),
    }
    # Numeric settings keep their model defaults when unset
    for field_name, env_name in (
        ("connect_timeout", "DB_CONNECT_TIMEOUT"),
        ("pool_min_size", "DB_POOL_MIN_SIZE"),
        ("pool_max_size", "DB_POOL_MAX_SIZE"),
        ("pool_increment", "DB_POOL_INCREMENT"),
    ):
        raw = _env(env_name)
        if raw:
            values[field_name] = raw

    if not values["user"] or not values["connect_string"]:
        logger.warning("DB_USER or CONNECT_STRING is not set")

    try:
        return DatabaseConfig(**values)
    except ValidationError as e:
        logger.error(f"Invalid database configuration: {e}")
        raise ConfigurationError(f"Invalid database configuration: {e}") from e


def configure_logging(log_level: str = "info") -> None:
    """Configure root logging and apply the configured level name."""
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    level = _LOG_LEVELS.get(log_level.lower())
    if level is None:
        logger.warning(f"Unknown log level '{log_level}', keeping INFO")
        level = logging.INFO
    logging.getLogger().setLevel(level)
