"""
Configuration for Shipyard processes.

Settings come from, in increasing priority: field defaults, an optional YAML
file and ``SHIPYARD_`` environment variables. Values are passed explicitly to
the controller and the CLI commands; nothing reads module-level state.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class LogFormat(Enum):
    """Log output formats."""

    JSON = "json"
    TEXT = "text"


class ShipyardSettings(BaseSettings):
    """Settings for the reconcile driver and the CLI."""

    model_config = SettingsConfigDict(
        env_prefix="SHIPYARD_", case_sensitive=False, extra="ignore"
    )

    service_name: str = Field(default="shipyard", description="Name used in log records")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: LogFormat = Field(default=LogFormat.JSON, description="Log output format")

    workers: int = Field(default=4, ge=1, description="Concurrent reconcile workers")
    max_retries: int = Field(
        default=5, ge=0, description="Retries for conflicts and missing objects"
    )
    retry_backoff_seconds: float = Field(
        default=0.1, ge=0, description="Initial retry delay, doubled on each retry"
    )
    event_buffer_size: int = Field(default=1000, ge=1, description="Recorded events to keep")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"unknown log level {value!r}")
        return level


class DecommissionConfig(BaseModel):
    """Explicit inputs of a decommissioned-clusters cleanup run."""

    clusters: list[str] = Field(..., min_length=1, description="Decommissioned clusters")
    dry_run: bool = Field(default=False, description="Only report the planned changes")

    @field_validator("clusters")
    @classmethod
    def _strip_clusters(cls, value: list[str]) -> list[str]:
        clusters = [cluster.strip() for cluster in value if cluster.strip()]
        if not clusters:
            raise ValueError("at least one decommissioned cluster is required")
        return clusters


def load_settings(config_file: Path | str | None = None, **overrides: Any) -> ShipyardSettings:
    """Build settings from an optional YAML file.

    Environment variables still take precedence over file values, and
    ``overrides`` over both.
    """
    file_values: dict[str, Any] = {}
    if config_file is not None:
        path = Path(config_file)
        with open(path) as f:
            file_values = yaml.safe_load(f) or {}
        if not isinstance(file_values, dict):
            raise ValueError(f"configuration file {path} must contain a mapping")

    env_values = ShipyardSettings().model_dump(exclude_unset=True)
    merged = {**file_values, **env_values, **overrides}

    try:
        return ShipyardSettings(**merged)
    except ValidationError as e:
        logger.error(f"Configuration validation failed: {e}")
        raise
