"""Configuration models using Pydantic."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BotSettings(BaseModel):
    """Runtime bot settings read from the settings document."""

    model_config = ConfigDict(extra="allow", frozen=True)

    token: str = Field(
        min_length=1,
        description="Slack verification token every event request must carry"
    )


class ServiceSettings(BaseSettings):
    """Global service configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="ALPHATRON_",
        case_sensitive=False,
        validate_assignment=True,
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log format (json, plain)"
    )

    # HTTP server configuration
    host: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP server binds to"
    )
    port: int = Field(
        default=8080,
        ge=1024,
        le=65535,
        description="Port for the events, health and metrics endpoints"
    )
    events_path: str = Field(
        default="/events",
        description="Path Slack posts event callbacks to"
    )

    # Feature execution configuration
    handler_deadline_seconds: float = Field(
        default=2.5,
        gt=0,
        le=30,
        description="Time features get to signal ready before a partial response is sent"
    )
    enabled_features: Optional[List[str]] = Field(
        default=None,
        description="Names of features to serve (None for all registered)"
    )

    # Document store configuration
    data_dir: str = Field(
        default="./data",
        description="Root directory of the JSON document store"
    )
    settings_document: str = Field(
        default="bot",
        min_length=1,
        description="Document id of the bot settings in the 'settings' collection"
    )
    settings_poll_interval: int = Field(
        default=5,
        ge=1,
        le=3600,
        description="Seconds between checks for settings changes"
    )

    # Metrics configuration
    metrics_enabled: bool = Field(
        default=True,
        description="Expose Prometheus metrics on /metrics"
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        if value not in {"json", "plain"}:
            raise ValueError(f"Unknown log format: {value}")
        return value

    @field_validator("events_path")
    @classmethod
    def _check_events_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("events_path must start with '/'")
        return value
