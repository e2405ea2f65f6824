"""
Unit test conftest.py - Component-specific fixtures.

Services run against the per-test SQLite session. Provider HTTP is never
touched: the registry is filled with StubFetchers.
"""

import pytest

from model_catalog_core.providers.registry import FetcherRegistry
from model_catalog_core.services.catalog_service import CatalogService
from model_catalog_core.services.credential_service import CredentialService
from model_catalog_core.services.sync_service import RefreshGuard, SyncService
from tests.fixtures.stubs import StubFetcher

# ==================== SERVICE FIXTURES ====================


@pytest.fixture(scope="function")
def credential_service(db_session, cipher):
    """Credential service with test session."""
    return CredentialService(session=db_session, cipher=cipher)


@pytest.fixture(scope="function")
def catalog_service(db_session):
    """Catalog service with test session."""
    return CatalogService(session=db_session)


# ==================== FETCHER FIXTURES ====================


@pytest.fixture
def openai_fetcher():
    return StubFetcher("openai", models=["gpt-4o", "gpt-4o-mini", "gpt-3.5-turbo"])


@pytest.fixture
def anthropic_fetcher():
    return StubFetcher("anthropic", models=["claude-3-5-sonnet-20241022", "claude-3-haiku"])


@pytest.fixture
def registry(openai_fetcher, anthropic_fetcher):
    """Registry with stub fetchers for openai and anthropic only."""
    stub_registry = FetcherRegistry()
    stub_registry.register("openai", openai_fetcher)
    stub_registry.register("anthropic", anthropic_fetcher)
    return stub_registry


@pytest.fixture
def guard():
    """A private guard so tests never contend with each other."""
    return RefreshGuard()


@pytest.fixture(scope="function")
def sync_service(db_session, credential_service, catalog_service, registry, guard, app_config):
    """Sync service wired to the stub registry."""
    return SyncService(
        session=db_session,
        credential_service=credential_service,
        catalog_service=catalog_service,
        registry=registry,
        config=app_config,
        guard=guard,
    )
