"""Pydantic schemas."""

from .catalog_schemas import ModelDescriptor
from .credential_schemas import CredentialCreate, CredentialRead, normalize_provider
from .sync_schemas import (
    CredentialSaveResult,
    ProviderRefreshError,
    RefreshOutcome,
    RefreshReport,
)

__all__ = [
    "CredentialCreate",
    "CredentialRead",
    "CredentialSaveResult",
    "ModelDescriptor",
    "ProviderRefreshError",
    "RefreshOutcome",
    "RefreshReport",
    "normalize_provider",
]
