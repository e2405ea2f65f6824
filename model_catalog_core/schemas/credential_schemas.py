"""
Pydantic schemas for provider credentials.

The plaintext key only ever lives in ``CredentialCreate.api_key`` (a
``SecretStr``). Read schemas carry neither plaintext nor ciphertext.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from ..constants import Limits, ProviderName


def normalize_provider(value: str) -> str:
    """
    Canonicalize a provider identifier.

    Recognized providers are matched case-insensitively and stored lower-case;
    custom provider names are kept as typed, minus surrounding whitespace.
    """
    known = ProviderName.from_value(value)
    return known.value if known else value.strip()


def _is_encodable(value: str) -> bool:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class CredentialCreate(BaseModel):
    """Validated input for saving a provider API key."""

    model_config = ConfigDict(extra="forbid")

    provider: str = Field(..., description="Provider identifier or custom provider name")
    api_key: SecretStr = Field(..., description="Plaintext API key")

    @field_validator("provider", mode="before")
    @classmethod
    def validate_provider(cls, v):
        """Provider must be a non-empty string of at most 100 characters."""
        if not isinstance(v, str):
            raise ValueError("provider must be a string")
        v = v.strip()
        if not v:
            raise ValueError("provider cannot be empty")
        if not _is_encodable(v):
            raise ValueError("provider contains characters that cannot be stored")
        if len(v) > Limits.MAX_PROVIDER_LENGTH:
            raise ValueError(
                f"provider cannot be longer than {Limits.MAX_PROVIDER_LENGTH} characters"
            )
        return normalize_provider(v)

    @field_validator("api_key", mode="before")
    @classmethod
    def validate_api_key(cls, v):
        """API key is trimmed, then must be 1-500 characters."""
        if isinstance(v, SecretStr):
            v = v.get_secret_value()
        if not isinstance(v, str):
            raise ValueError("API key must be a string")
        v = v.strip()
        if not v:
            raise ValueError("API key cannot be empty")
        if not _is_encodable(v):
            raise ValueError("API key contains characters that cannot be stored")
        if len(v) > Limits.MAX_SECRET_LENGTH:
            raise ValueError(
                f"API key cannot be longer than {Limits.MAX_SECRET_LENGTH} characters"
            )
        return v


class CredentialRead(BaseModel):
    """Credential metadata safe to hand to the UI."""

    id: str = Field(..., description="Credential ID")
    owner_id: str = Field(..., description="Owning user")
    provider: str = Field(..., description="Provider identifier")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)
