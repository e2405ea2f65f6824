"""
Tests for the error hierarchy.
"""

import pytest

from model_catalog_core.constants import FetchErrorKind
from model_catalog_core.exceptions import (
    AuthError,
    AuthRejectedError,
    BaseError,
    DecryptionError,
    ErrorCode,
    ExternalServiceError,
    NoCredentialsError,
    NotFoundError,
    ProviderFetchError,
    RateLimitedError,
    RefreshInProgressError,
    UnexpectedResponseShapeError,
    UnreachableError,
    ValidationError,
    clear_correlation_id,
    get_correlation_id,
    not_found,
    set_correlation_id,
)


class TestUserMessages:
    @pytest.mark.parametrize(
        "error,expected",
        [
            (AuthError(), "Session expired. Please sign in again."),
            (NotFoundError(), "Not found."),
            (DecryptionError(), "Please re-enter your API key."),
            (NoCredentialsError(), "No API keys found. Please add API keys first."),
        ],
    )
    def test_user_message(self, error, expected):
        assert error.user_message == expected

    def test_validation_message_is_surfaced_verbatim(self):
        error = ValidationError("provider cannot be empty", field="provider")

        assert error.user_message == "provider cannot be empty"
        assert error.status_code == 400
        assert error.context["field"] == "provider"


class TestProviderFetchErrors:
    @pytest.mark.parametrize(
        "error_class,kind,code",
        [
            (AuthRejectedError, FetchErrorKind.AUTH_REJECTED, ErrorCode.PROVIDER_AUTH_REJECTED),
            (RateLimitedError, FetchErrorKind.RATE_LIMITED, ErrorCode.PROVIDER_RATE_LIMITED),
            (UnreachableError, FetchErrorKind.UNREACHABLE, ErrorCode.PROVIDER_UNREACHABLE),
            (
                UnexpectedResponseShapeError,
                FetchErrorKind.UNEXPECTED_RESPONSE_SHAPE,
                ErrorCode.PROVIDER_UNEXPECTED_RESPONSE,
            ),
        ],
    )
    def test_kinds(self, error_class, kind, code):
        error = error_class("boom", provider="openai")

        assert isinstance(error, ProviderFetchError)
        assert isinstance(error, ExternalServiceError)
        assert error.kind == kind
        assert error.error_code == code
        assert error.status_code == 502
        assert error.provider == "openai"
        assert error.context["error_kind"] == kind.value

    def test_refresh_in_progress(self):
        error = RefreshInProgressError("openai")

        assert error.kind == FetchErrorKind.REFRESH_IN_PROGRESS
        assert error.status_code == 409
        assert error.provider == "openai"
        assert "openai" in error.message


class TestBaseError:
    def test_to_dict(self):
        error = NotFoundError("Credential not found", credential_id="abc")
        data = error.to_dict()

        assert data["error"]["code"] == ErrorCode.NOT_FOUND.value
        assert data["error"]["message"] == "Credential not found"
        assert data["error"]["user_message"] == "Not found."
        assert data["error"]["context"] == {"credential_id": "abc"}

    def test_cause_is_recorded(self):
        cause = ValueError("root cause")
        error = BaseError("wrapped", cause=cause)

        assert error.error_chain == [error, cause]
        data = error.to_dict(include_cause=True)
        assert data["error"]["cause"] == {"type": "ValueError", "message": "root cause"}

    def test_correlation_id_is_attached(self):
        set_correlation_id("corr-1")
        try:
            error = BaseError("with correlation")
            assert get_correlation_id() == "corr-1"
            assert error.to_dict()["error"]["correlation_id"] == "corr-1"
        finally:
            clear_correlation_id()

        assert get_correlation_id() is None

    def test_add_context_is_fluent(self):
        error = BaseError("x").add_context(provider="openai")
        assert error.context["provider"] == "openai"


class TestFactories:
    def test_not_found(self):
        error = not_found("Credential", credential_id="abc")

        assert isinstance(error, NotFoundError)
        assert error.message == "Credential not found: credential_id=abc"
