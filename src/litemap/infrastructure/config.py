"""Configuration management for the mapper."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    """Database file configuration."""

    path: Path = Field(default=Path("data/litemap.db"), description="Database file path")
    create: bool = Field(
        default=False, description="Create (overwriting any existing file) instead of open"
    )
    trace: bool = Field(default=False, description="Log every executed statement")
    timeout_seconds: float = Field(
        default=5.0, ge=0.0, description="Seconds to wait on a locked database"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="console", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="litemap", description="Service name for tracing")
    metrics_enabled: bool = Field(default=False, description="Record Prometheus metrics")


class Config(BaseSettings):
    """Main configuration for the mapper."""

    model_config = SettingsConfigDict(
        env_prefix="LITEMAP_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
