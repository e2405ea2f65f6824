"""
Consolidated exception system with error codes, context, and correlation support.

This module provides a unified exception hierarchy for the model catalog
subsystem, with automatic logging, user-facing messages, and correlation ID
tracking.
"""

import threading
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import FetchErrorKind

# Logger import is deferred to avoid a circular dependency with utils.logger

_thread_local = threading.local()


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONFIGURATION_ERROR = "1003"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    MISSING_REQUIRED = "2002"
    CONSTRAINT_VIOLATION = "2004"

    # Resource errors (3xxx)
    NOT_FOUND = "3000"
    DUPLICATE = "3001"
    LOCKED = "3003"

    # Security errors (4xxx)
    UNAUTHENTICATED = "4001"
    DECRYPTION_FAILED = "4005"

    # External service errors (5xxx)
    EXTERNAL_API_ERROR = "5002"
    PROVIDER_AUTH_REJECTED = "5101"
    PROVIDER_RATE_LIMITED = "5102"
    PROVIDER_UNREACHABLE = "5103"
    PROVIDER_UNEXPECTED_RESPONSE = "5104"


class BaseError(Exception):
    """Base exception with context, error codes, logging, and error chaining."""

    user_message = "Something went wrong. Please try again."

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        """
        Initialize base error with rich context.

        Args:
            message: Human-readable error message
            error_code: Standardized error code from ErrorCode enum
            status_code: HTTP status code for API responses
            cause: Original exception that caused this error
            **context: Additional context information
        """
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_id = str(uuid.uuid4())
        self.context = context

        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id

        self.context["error_id"] = self.error_id

        if cause:
            self.context["cause"] = {
                "type": type(cause).__name__,
                "message": str(cause),
                "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
            }

        self._log_error()

        super().__init__(message)

    def _log_error(self) -> None:
        """Log error with appropriate level based on status code."""
        from .utils.logger import get_logger

        logger = get_logger()

        log_data = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "timestamp": self.timestamp,
            "context": {k: v for k, v in self.context.items() if k not in ["cause", "traceback"]},
        }

        if "correlation_id" in self.context:
            log_data["correlation_id"] = self.context["correlation_id"]

        if self.status_code >= 500:
            logger.error(
                f"Error {self.error_code}: {self.message}", extra=log_data, exc_info=self.cause
            )
        elif self.status_code >= 400:
            logger.warning(f"Client error {self.error_code}: {self.message}", extra=log_data)
        else:
            logger.info(f"Error {self.error_code}: {self.message}", extra=log_data)

    def to_dict(
        self, include_cause: bool = False, include_traceback: bool = False
    ) -> Dict[str, Any]:
        """
        Convert to dict for API responses.

        Args:
            include_cause: Include cause information (useful for debugging)
            include_traceback: Include full traceback (only in debug mode)

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        result: Dict[str, Any] = {
            "error": {
                "id": self.error_id,
                "code": self.error_code.value,
                "message": self.message,
                "user_message": self.user_message,
                "timestamp": self.timestamp,
                "context": {
                    k: v
                    for k, v in self.context.items()
                    if k not in ["cause", "error_id", "correlation_id"]
                },
            }
        }

        if "correlation_id" in self.context:
            result["error"]["correlation_id"] = self.context["correlation_id"]

        if include_cause and "cause" in self.context:
            result["error"]["cause"] = {
                "type": self.context["cause"]["type"],
                "message": self.context["cause"]["message"],
            }
            if include_traceback:
                result["error"]["cause"]["traceback"] = self.context["cause"]["traceback"]

        return result

    def add_context(self, **kwargs: Any) -> "BaseError":
        """
        Add additional context to the error (fluent interface).

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    @property
    def error_chain(self) -> List[Exception]:
        """Get the full chain of errors."""
        chain: List[Exception] = [self]
        current = self.cause
        while current:
            chain.append(current)
            current = getattr(current, "cause", None)
        return chain


# Layer-specific base exceptions
class RepositoryError(BaseError):
    """Repository layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize repository error with database context."""
        super().__init__(message, error_code, status_code, cause, **context)


class ServiceError(BaseError):
    """Service layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize service error with operation context."""
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code, 500, cause, **context)


class ValidationError(BaseError):
    """Malformed caller input. The message is safe to show to the user."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize validation error with field context."""
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return self.message


class AuthError(BaseError):
    """Caller is not authenticated or its owner id cannot be resolved."""

    user_message = "Session expired. Please sign in again."

    def __init__(self, message: str = "Unauthorized", **kwargs):
        super().__init__(
            message=message, error_code=ErrorCode.UNAUTHENTICATED, status_code=401, **kwargs
        )


class NotFoundError(BaseError):
    """Resource is absent or not owned by the caller."""

    user_message = "Not found."

    def __init__(self, message: str = "Resource not found", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.NOT_FOUND, status_code=404, **kwargs)


class DecryptionError(BaseError):
    """Stored ciphertext cannot be read with the configured key."""

    user_message = "Please re-enter your API key."

    def __init__(self, message: str = "Stored credential could not be decrypted", **kwargs):
        super().__init__(
            message=message, error_code=ErrorCode.DECRYPTION_FAILED, status_code=422, **kwargs
        )


class NoCredentialsError(BaseError):
    """Refresh-all was requested for an owner with no stored credentials."""

    user_message = "No API keys found. Please add API keys first."

    def __init__(self, message: str = "No API keys found", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.NOT_FOUND, status_code=404, **kwargs)


class RefreshInProgressError(BaseError):
    """A catalog refresh for the same provider is already running."""

    user_message = "A model refresh for this provider is already running. Please try again shortly."
    kind = FetchErrorKind.REFRESH_IN_PROGRESS

    def __init__(self, provider: str, **kwargs):
        super().__init__(
            message=f"Catalog refresh already in progress for provider '{provider}'",
            error_code=ErrorCode.LOCKED,
            status_code=409,
            provider=provider,
            **kwargs,
        )
        self.provider = provider


class ExternalServiceError(BaseError):
    """External service integration errors."""

    def __init__(
        self,
        message: str,
        service_name: str,
        error_code: ErrorCode = ErrorCode.EXTERNAL_API_ERROR,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize external service error with service context."""
        context["service_name"] = service_name
        super().__init__(message, error_code, 502, cause, **context)


# ==================== PROVIDER FETCH EXCEPTIONS ====================


class ProviderFetchError(ExternalServiceError):
    """Base exception for classified provider catalog fetch failures."""

    kind: FetchErrorKind = FetchErrorKind.UNEXPECTED_RESPONSE_SHAPE
    default_error_code: ErrorCode = ErrorCode.PROVIDER_UNEXPECTED_RESPONSE
    user_message = "The provider returned an unexpected response."

    def __init__(self, message: str, provider: str, cause: Optional[Exception] = None, **context):
        super().__init__(
            message,
            service_name=provider,
            error_code=self.default_error_code,
            cause=cause,
            provider=provider,
            error_kind=self.kind.value,
            **context,
        )
        self.provider = provider


class AuthRejectedError(ProviderFetchError):
    """The provider rejected the API key."""

    kind = FetchErrorKind.AUTH_REJECTED
    default_error_code = ErrorCode.PROVIDER_AUTH_REJECTED
    user_message = "The provider rejected your API key."


class RateLimitedError(ProviderFetchError):
    """The provider throttled the request."""

    kind = FetchErrorKind.RATE_LIMITED
    default_error_code = ErrorCode.PROVIDER_RATE_LIMITED
    user_message = "The provider is rate limiting requests. Please try again later."


class UnreachableError(ProviderFetchError):
    """The provider could not be reached in time."""

    kind = FetchErrorKind.UNREACHABLE
    default_error_code = ErrorCode.PROVIDER_UNREACHABLE
    user_message = "The provider could not be reached."


class UnexpectedResponseShapeError(ProviderFetchError):
    """The provider answered with something we cannot interpret."""


# Factory functions for common error patterns
def not_found(resource_type: str, cause: Optional[Exception] = None, **identifiers) -> NotFoundError:
    """
    Factory for not found errors.

    Args:
        resource_type: Type of resource (e.g., 'Credential')
        cause: Original exception if any
        **identifiers: Resource identifiers (e.g., credential_id='123')

    Returns:
        Configured NotFoundError instance
    """
    id_parts = [f"{k}={v}" for k, v in identifiers.items()]
    message = f"{resource_type} not found"
    if id_parts:
        message += f": {', '.join(id_parts)}"

    return NotFoundError(message, cause=cause, resource_type=resource_type, **identifiers)


# Correlation ID management
def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current thread."""
    _thread_local.correlation_id = correlation_id


def get_correlation_id() -> Optional[str]:
    """Get the current thread's correlation ID."""
    return getattr(_thread_local, "correlation_id", None)


def clear_correlation_id() -> None:
    """Clear the current thread's correlation ID."""
    if hasattr(_thread_local, "correlation_id"):
        delattr(_thread_local, "correlation_id")
