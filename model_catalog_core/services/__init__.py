"""Service layer."""

from .base_service import SessionManagedService
from .catalog_service import CatalogService
from .credential_service import CredentialService
from .sync_service import RefreshGuard, SyncService

__all__ = [
    "CatalogService",
    "CredentialService",
    "RefreshGuard",
    "SessionManagedService",
    "SyncService",
]
