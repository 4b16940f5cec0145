"""Configuration loading and validation utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator


class ConfigurationError(RuntimeError):
    """Raised when configuration cannot be loaded or is invalid."""


class LoggingConfig(BaseModel):
    level: str = Field(default="info")
    json_format: bool = Field(default=True)
    log_file: str | None = None


class RetryConfig(BaseModel):
    attempts: int = Field(default=3, ge=1)
    backoff_seconds: int = Field(default=1, ge=1)
    backoff_max_seconds: int = Field(default=8, ge=1)


class ListenerConfig(BaseModel):
    delete_metrics_on_job_finish: bool = False


class ContextStoreConfig(BaseModel):
    url: str = "sqlite:///batch_metrics.db"
    connection_timeout: int = Field(default=30, ge=1)


class InfluxdbConfig(BaseModel):
    enabled: bool = False
    server: str = "localhost"
    port: int = Field(default=8086, gt=0, le=65535)
    database: str = "batch"
    user: str | None = None
    password: str | None = None
    environment: str = "default"
    timeout_seconds: float = Field(default=5.0, gt=0)
    export_interval_seconds: float = Field(default=60.0, gt=0)
    use_https: bool = False

    @field_validator("environment")
    @classmethod
    def _environment_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("environment label must not be blank")
        return value


class AppConfig(BaseModel):
    listener: ListenerConfig = Field(default_factory=ListenerConfig)
    influxdb: InfluxdbConfig = Field(default_factory=InfluxdbConfig)
    context_store: ContextStoreConfig = Field(default_factory=ContextStoreConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML configuration file."""

    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        raw: Dict[str, Any] = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    try:
        return AppConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {exc}") from exc


__all__ = [
    "AppConfig",
    "ConfigurationError",
    "ContextStoreConfig",
    "InfluxdbConfig",
    "ListenerConfig",
    "LoggingConfig",
    "RetryConfig",
    "load_config",
]
