"""Configuration loading for the psql-versioning tooling."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from ..utils.logging import ConfigurationError, LogLevel

ENV_PREFIX = "PSQL_VERSIONING_"


class VersioningConfig(BaseModel):
    """Configuration model for psql-versioning."""

    # Database
    database_url: str | None = Field(
        default=None, description="SQLAlchemy URL of the target database"
    )
    echo_sql: bool = Field(default=False, description="Echo SQL statements")
    pool_timeout: int = Field(
        default=30, description="Seconds to wait for a pooled connection"
    )

    # Logging
    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Logging level")
    log_file: str | None = Field(default=None, description="Log file path")
    structured_logs: bool = Field(
        default=False, description="Emit logs as JSON lines"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    def masked_database_url(self) -> str | None:
        """Database URL with the password hidden."""
        if self.database_url is None:
            return None
        try:
            return make_url(self.database_url).render_as_string(hide_password=True)
        except ArgumentError:
            return self.database_url


def find_config_file(custom_path: str | None = None) -> Path | None:
    """Find configuration file in standard locations."""
    if custom_path:
        path = Path(custom_path).expanduser()
        if path.exists():
            return path
        raise ConfigurationError(f"Config file not found: {custom_path}")

    search_paths = [
        Path.cwd() / "psql-versioning.yaml",
        Path.cwd() / "psql-versioning.yml",
        Path.home() / ".config" / "psql-versioning" / "config.yaml",
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in config file {config_path}: {e}"
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read config file {config_path}: {e}"
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {config_path} must contain a mapping",
            context={"path": str(config_path)},
        )
    return data


def load_env_vars() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    env_mappings = {
        f"{ENV_PREFIX}DATABASE_URL": "database_url",
        f"{ENV_PREFIX}ECHO_SQL": "echo_sql",
        f"{ENV_PREFIX}POOL_TIMEOUT": "pool_timeout",
        f"{ENV_PREFIX}LOG_LEVEL": "log_level",
        f"{ENV_PREFIX}LOG_FILE": "log_file",
        f"{ENV_PREFIX}STRUCTURED_LOGS": "structured_logs",
    }

    for env_var, config_key in env_mappings.items():
        if env_var not in os.environ:
            continue
        env_value = os.environ[env_var]
        if config_key in ("echo_sql", "structured_logs"):
            config[config_key] = env_value.lower() in ("true", "1", "yes", "on")
        elif config_key == "pool_timeout":
            try:
                config[config_key] = int(env_value)
            except ValueError:
                continue
        else:
            config[config_key] = env_value

    return config


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> VersioningConfig:
    """Load configuration from file and environment variables.

    Precedence order (highest to lowest):
    1. CLI flag overrides
    2. Environment variables
    3. Configuration file
    4. Default values
    """
    config_data: dict[str, Any] = {}

    config_file = find_config_file(config_path)
    if config_file:
        config_data.update(load_config_file(config_file))

    config_data.update(load_env_vars())

    if cli_overrides:
        config_data.update({k: v for k, v in cli_overrides.items() if v is not None})

    try:
        return VersioningConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
