"""
Configuration management for the Customers API service.

Uses Pydantic Settings for type-safe configuration with multiple sources:
- Environment variables (highest priority)
- .env file
- Defaults (lowest priority)
"""

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceConfig(BaseSettings):
    """FastAPI service configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVICE_", env_file=".env", extra="ignore")

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=2019, ge=1, le=65535)
    reload: bool = Field(default=False)


class StorageConfig(BaseSettings):
    """Customer table storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_", env_file=".env", extra="ignore")

    customer_db_path: str = Field(
        default="./data/customers.db", description="Path to SQLite database file"
    )

    @field_validator("customer_db_path")
    @classmethod
    def validate_db_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("customer_db_path cannot be empty")
        return v


class LoggingConfig(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", env_file=".env", extra="ignore")

    # Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Minimum log level"
    )

    json_output: bool = Field(
        default=True, description="Use JSON output (True for production, False for development)"
    )
    colorized: bool = Field(
        default=False, description="Colorize console output (only for development)"
    )

    # Slow request logging thresholds
    slow_request_warning_ms: float = Field(
        default=100.0, ge=0.0, description="Log warning if request exceeds this latency (ms)"
    )
    slow_request_error_ms: float = Field(
        default=500.0, ge=0.0, description="Log error if request exceeds this latency (ms)"
    )

    # Service metadata (injected into all logs)
    service_name: str = Field(default="customers-api", description="Service name for log aggregation")
    service_version: str = Field(default="0.1.0", description="Service version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Deployment environment"
    )

    @field_validator("slow_request_error_ms")
    @classmethod
    def validate_error_threshold(cls, v: float, info) -> float:
        warning = info.data.get("slow_request_warning_ms", 100.0)
        if v < warning:
            raise ValueError(
                f"slow_request_error_ms ({v}) must be >= slow_request_warning_ms ({warning})"
            )
        return v


class APIConfig(BaseSettings):
    """
    Error-reporting behaviour of the customer endpoints.

    Both flags default to the historical contract of the service:
    a missing customer is reported as a server error, and a failed
    delete is answered with a server error instead of stopping the process.
    """

    model_config = SettingsConfigDict(env_prefix="API_", env_file=".env", extra="ignore")

    not_found_as_404: bool = Field(
        default=False,
        description="Report missing customers as 404 instead of 500",
    )
    fatal_on_delete_failure: bool = Field(
        default=False,
        description="Terminate the process when a delete statement fails",
    )


class Settings(BaseSettings):
    """Root configuration for the Customers API service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: APIConfig = Field(default_factory=APIConfig)

    def validate_configuration(self) -> None:
        """
        Validate cross-field constraints and log warnings.
        Called at application startup.
        """
        if self.storage.customer_db_path == ":memory:":
            logging.warning(
                "customer_db_path is ':memory:' - customer records will not survive a restart"
            )

        if self.api.fatal_on_delete_failure:
            logging.warning(
                "fatal_on_delete_failure is enabled - a failed delete will terminate the process"
            )


# Global settings instance (lazy-loaded)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get global settings instance (singleton pattern).

    Returns:
        Settings: Application configuration
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.validate_configuration()
    return _settings
