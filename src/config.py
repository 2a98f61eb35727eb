"""Application settings loaded from environment and an optional JSON config file.

Uses pydantic-settings for validation. Values in the config file may refer to
environment variables as ``${NAME}`` or ``${NAME:default}``; secrets are kept
out of the file that way.
"""

import json
import os
import re
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from po_sync.errors import ConfigError

CONFIG_FILE_ENV = "PO_SYNC_CONFIG"
DEFAULT_CONFIG_FILE = "config.json"

_PLACEHOLDER = re.compile(r"^\$\{(.+)\}$")


class DatabaseSettings(BaseModel):
    """Connection parameters of the database holding the purchase orders."""

    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    user: str = Field(default="postgres")
    password: str = Field(default="")
    name: str = Field(default="postgres")
    sslmode: str = Field(default="disable")

    @property
    def dsn(self) -> str:
        auth = quote(self.user, safe="")
        if self.password:
            auth += ":" + quote(self.password, safe="")
        return f"postgresql://{auth}@{self.host}:{self.port}/{self.name}?sslmode={self.sslmode}"


class QueueSettings(BaseModel):
    """PGMQ broker and queue options."""

    dsn: str | None = Field(default=None, description="Broker DSN, defaults to the database DSN")
    name: str = Field(default="purchase_orders")
    poll_interval_seconds: float = Field(default=1.0, gt=0)


class ErpSettings(BaseModel):
    api_url: str = Field(default="")
    timeout_seconds: float = Field(default=30.0, gt=0)


class ErrorReporterSettings(BaseModel):
    api_url: str | None = Field(default=None)
    title: str = Field(default="Purchase Order Sync Failed")
    timeout_seconds: float = Field(default=10.0, gt=0)


class ProducerSettings(BaseModel):
    interval_seconds: float = Field(default=30.0, gt=0)


class Settings(BaseSettings):
    """Runtime settings for the purchase order sync pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="PO_SYNC_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = Field(default="Purchase Order Sync")
    app_version: str = Field(default="0.1.0")
    environment: str = Field(default="development")
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    erp: ErpSettings = Field(default_factory=ErpSettings)
    error_reporter: ErrorReporterSettings = Field(default_factory=ErrorReporterSettings)
    producer: ProducerSettings = Field(default_factory=ProducerSettings)

    @property
    def queue_dsn(self) -> str:
        return self.queue.dsn or self.database.dsn


def resolve_placeholder(value: str) -> str:
    """Replace a ``${NAME}`` or ``${NAME:default}`` value with the environment value.

    Raises:
        ConfigError: The variable is unset or empty and no default is given.
    """
    match = _PLACEHOLDER.match(value)
    if not match:
        return value
    name, _, default = match.group(1).partition(":")
    resolved = os.getenv(name) or default
    if not resolved:
        raise ConfigError(f"Mandatory env variable not found: {match.group(1)}")
    return resolved


def expand_placeholders(data: Any) -> Any:
    """Resolve placeholders in every string of a nested dict/list structure."""
    if isinstance(data, dict):
        return {key: expand_placeholders(value) for key, value in data.items()}
    if isinstance(data, list):
        return [expand_placeholders(value) for value in data]
    if isinstance(data, str):
        return resolve_placeholder(data)
    return data


def load_config_file(path: str) -> dict:
    """Read a JSON config file and resolve its placeholders."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must hold a JSON object")
    return expand_placeholders(data)


def get_settings(config_file: str | None = None) -> Settings:
    """Return the loaded settings instance.

    The config file is the explicit argument, else $PO_SYNC_CONFIG, else
    ./config.json when it exists. File values win over environment variables.
    """
    path = config_file or os.getenv(CONFIG_FILE_ENV)
    if not path and os.path.exists(DEFAULT_CONFIG_FILE):
        path = DEFAULT_CONFIG_FILE
    data = load_config_file(path) if path else {}
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
