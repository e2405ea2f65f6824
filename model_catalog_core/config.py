"""
Centralized configuration management for the model catalog framework.

This module provides a unified configuration system with support for:
- Environment variables
- Feature flags
- Provider endpoint overrides
- Validation using Pydantic
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import EnvironmentVariable, LogLevel, ProviderName, QueueName, Timeouts


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class QueueConfig(BaseModel):
    """Queue configuration for Azure Storage Queues (structured log shipping)."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AZURE_STORAGE_CONNECTION.value, ""),
        description="Azure Storage connection string",
    )
    logs_queue_name: str = Field(default=QueueName.LOGS.value, description="Logs queue name")
    batch_size: int = Field(default=10, description="Log entries buffered before sending")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class FeatureFlags(BaseModel):
    """Feature flags for controlling framework behavior."""

    enable_logs_queue: bool = Field(
        default_factory=lambda: _env_flag(EnvironmentVariable.ENABLE_LOGS_QUEUE.value),
        description="Ship structured logs to an Azure Storage Queue",
    )
    enable_audit_logging: bool = Field(
        default=True, description="Log credential create/update/delete/reveal events"
    )


class SecurityConfig(BaseModel):
    """Security-related configuration."""

    encryption_key: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.ENCRYPTION_KEY.value),
        description="Fernet key (url-safe base64, 32 bytes) protecting stored API keys",
    )

    def __repr__(self) -> str:
        """String representation with masked key for security."""
        return f"SecurityConfig(encryption_key={'***' if self.encryption_key else None})"


class SyncConfig(BaseModel):
    """Configuration for catalog refresh behavior."""

    fetch_timeout_seconds: float = Field(
        default_factory=lambda: float(
            os.getenv(EnvironmentVariable.FETCH_TIMEOUT.value, Timeouts.PROVIDER_FETCH)
        ),
        gt=0,
        description="HTTP timeout for a single provider request",
    )
    refresh_deadline_seconds: float = Field(
        default_factory=lambda: float(
            os.getenv(EnvironmentVariable.REFRESH_DEADLINE.value, Timeouts.REFRESH_ALL_DEADLINE)
        ),
        gt=0,
        description="Overall wait for parallel fetches in refresh-all",
    )
    max_workers: int = Field(
        default_factory=lambda: int(os.getenv(EnvironmentVariable.MAX_WORKERS.value, "8")),
        ge=1,
        description="Upper bound on parallel provider fetches",
    )


class ProviderEndpointsConfig(BaseModel):
    """Base URLs of each provider's API. Override for proxies or test servers."""

    openai: str = "https://api.openai.com/v1"
    anthropic: str = "https://api.anthropic.com/v1"
    google: str = "https://generativelanguage.googleapis.com/v1beta"
    deepseek: str = "https://api.deepseek.com"
    xai: str = "https://api.x.ai/v1"
    openrouter: str = "https://openrouter.ai/api/v1"

    def base_url(self, provider: ProviderName) -> str:
        return getattr(self, provider.value).rstrip("/")


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: _env_flag(EnvironmentVariable.DEBUG.value),
        description="Debug mode",
    )

    # Sub-configurations
    queue: QueueConfig = Field(default_factory=QueueConfig, description="Queue configuration")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    features: FeatureFlags = Field(default_factory=FeatureFlags, description="Feature flags")
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )
    sync: SyncConfig = Field(default_factory=SyncConfig, description="Refresh configuration")
    providers: ProviderEndpointsConfig = Field(
        default_factory=ProviderEndpointsConfig, description="Provider API endpoints"
    )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
