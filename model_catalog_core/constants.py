"""
Constants and enums for the model catalog framework.

This module centralizes all magic strings and constants used throughout
the framework to ensure consistency and maintainability.
"""

from enum import Enum
from typing import Optional


class ProviderName(str, Enum):
    """Recognized model provider identifiers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    DEEPSEEK = "deepseek"
    XAI = "xai"
    OPENROUTER = "openrouter"
    CUSTOM = "custom"

    @classmethod
    def from_value(cls, value: str) -> Optional["ProviderName"]:
        """Return the matching member (case-insensitive) or None for custom names."""
        lowered = value.strip().lower()
        for member in cls:
            if member.value == lowered:
                return member
        return None


class FetchErrorKind(str, Enum):
    """Classification of provider catalog fetch failures."""

    AUTH_REJECTED = "auth_rejected"
    RATE_LIMITED = "rate_limited"
    UNREACHABLE = "unreachable"
    UNEXPECTED_RESPONSE_SHAPE = "unexpected_response_shape"
    REFRESH_IN_PROGRESS = "refresh_in_progress"
    DECRYPTION_FAILED = "decryption_failed"


class CredentialSaveState(str, Enum):
    """Stages of the add-or-update credential operation."""

    VALIDATING = "validating"
    ENCRYPTING = "encrypting"
    PERSISTING = "persisting"
    REFRESHING = "refreshing"
    DONE = "done"


class QueueName(str, Enum):
    """Standard queue names used in the framework."""

    LOGS = "logs-queue"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    ENCRYPTION_KEY = "CATALOG_ENCRYPTION_KEY"
    FETCH_TIMEOUT = "CATALOG_FETCH_TIMEOUT"
    REFRESH_DEADLINE = "CATALOG_REFRESH_DEADLINE"
    MAX_WORKERS = "CATALOG_MAX_WORKERS"
    ENABLE_LOGS_QUEUE = "CATALOG_ENABLE_LOGS_QUEUE"
    DATABASE_URL = "CATALOG_DATABASE_URL"
    DATABASE_ECHO = "CATALOG_DATABASE_ECHO"
    DEBUG = "DEBUG"


# Numeric constants
class Limits:
    """Input limits and thresholds."""

    MAX_PROVIDER_LENGTH = 100
    MAX_SECRET_LENGTH = 500
    MAX_MODEL_ID_LENGTH = 255
    MAX_FETCH_PAGES = 50


# Time-related constants (in seconds)
class Timeouts:
    """Timeout values in seconds."""

    PROVIDER_FETCH = 30
    REFRESH_ALL_DEADLINE = 60


# Starter models suggested after a provider key is saved
DEFAULT_STARTER_MODELS = {
    ProviderName.OPENAI.value: "gpt-4o-mini",
    ProviderName.ANTHROPIC.value: "claude-3-5-sonnet",
    ProviderName.GOOGLE.value: "gemini-1.5-flash",
    ProviderName.DEEPSEEK.value: "deepseek-chat",
    ProviderName.XAI.value: "grok-3-fast",
    ProviderName.OPENROUTER.value: "openai/gpt-3.5-turbo",
}
