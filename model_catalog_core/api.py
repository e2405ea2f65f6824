"""
Public entry points for the surrounding application.

Each call runs on a session from the global DatabaseManager and returns
plain dicts (or ModelDescriptors for catalog listings). Errors propagate as
BaseError subclasses; use ``to_dict()`` / ``user_message`` to present them.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from .db.db_config import get_db_manager
from .providers.registry import FetcherRegistry, build_default_registry
from .schemas.catalog_schemas import ModelDescriptor
from .services.catalog_service import CatalogService
from .services.sync_service import SyncService

_registry: Optional[FetcherRegistry] = None


def get_registry() -> FetcherRegistry:
    global _registry
    if _registry is None:
        _registry = build_default_registry()
    return _registry


def set_registry(registry: Optional[FetcherRegistry]) -> None:
    """Replace the process-wide fetcher registry (primarily for tests)."""
    global _registry
    _registry = registry


@contextmanager
def _sync_service() -> Iterator[SyncService]:
    manager = get_db_manager()
    session = manager.get_session()
    try:
        yield SyncService(session=session, registry=get_registry())
    finally:
        manager.close_session()


def add_or_update_credential(owner_id: Optional[str], provider: str, secret: str) -> Dict[str, Any]:
    """
    Save a provider API key and refresh that provider's catalog.

    Returns:
        ``{"credential_id", "catalog_refreshed", "refresh_error", ...}``
    """
    with _sync_service() as service:
        return service.add_or_update_credential(owner_id, provider, secret).model_dump(mode="json")


def delete_credential(owner_id: Optional[str], credential_id: str) -> None:
    with _sync_service() as service:
        service.credentials.delete(owner_id, credential_id)


def refresh_all_catalogs(owner_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Refresh every provider the owner has a key for.

    Returns:
        ``{"total_providers", "success_count", "error_count", "errors": [{"provider", "message"}], ...}``
    """
    with _sync_service() as service:
        return service.refresh_all(owner_id).model_dump(mode="json")


def list_available_models() -> List[ModelDescriptor]:
    manager = get_db_manager()
    try:
        return CatalogService(session=manager.get_session()).list_all()
    finally:
        manager.close_session()


def list_credentials(owner_id: Optional[str] = None) -> List[Dict[str, Any]]:
    with _sync_service() as service:
        return [c.model_dump(mode="json") for c in service.credentials.list_for_owner(owner_id)]


def list_models_for_owner(owner_id: Optional[str] = None) -> List[ModelDescriptor]:
    with _sync_service() as service:
        return service.list_models_for_owner(owner_id)
