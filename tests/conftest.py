"""
Shared test fixtures.

Provides an in-memory SQLite database, a per-test session, a fresh
encryption key and configuration, and standard owner ids.
"""

import pytest
from sqlalchemy.orm import Session

from model_catalog_core.config import (
    AppConfig,
    FeatureFlags,
    SecurityConfig,
    SyncConfig,
    reset_config,
    set_config,
)
from model_catalog_core.context.owner_context import OwnerContext
from model_catalog_core.db import DatabaseConfig, DatabaseManager, import_all_models
from model_catalog_core.db.db_config import Base, initialize_db
from model_catalog_core.exceptions import clear_correlation_id
from model_catalog_core.utils.encryption_utils import Cipher, set_cipher
from tests.fixtures.factories import configure_factories


@pytest.fixture(scope="session")
def db_config() -> DatabaseConfig:
    """Create SQLite in-memory database configuration for testing."""
    return DatabaseConfig(url="sqlite://", echo=False)


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    """Create and initialize database manager with all models."""
    import_all_models()
    return initialize_db(db_config)


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Create a database session for each test.

    Tables are created before and dropped after every test, so each test
    starts from an empty database.
    """
    session = db_manager.get_session()
    Base.metadata.create_all(db_manager.engine)
    configure_factories(session)

    yield session

    session.rollback()
    db_manager.close_session()
    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture
def encryption_key() -> str:
    return Cipher.generate_key()


@pytest.fixture(autouse=True)
def app_config(encryption_key) -> AppConfig:
    """Deterministic configuration with short timeouts and no queue logging."""
    config = AppConfig(
        security=SecurityConfig(encryption_key=encryption_key),
        sync=SyncConfig(fetch_timeout_seconds=2, refresh_deadline_seconds=5, max_workers=4),
        features=FeatureFlags(enable_logs_queue=False, enable_audit_logging=True),
    )
    set_config(config)
    yield config
    reset_config()


@pytest.fixture(autouse=True)
def cipher(encryption_key) -> Cipher:
    """Process-wide cipher built from this test's key."""
    test_cipher = Cipher(encryption_key)
    set_cipher(test_cipher)
    yield test_cipher
    set_cipher(None)


@pytest.fixture(autouse=True)
def clean_context():
    """Ensure no owner or correlation id leaks between tests."""
    yield
    OwnerContext.clear_current_owner()
    clear_correlation_id()


@pytest.fixture
def owner_id() -> str:
    """Standard owner id for testing."""
    return "user-alice"


@pytest.fixture
def other_owner_id() -> str:
    """A second owner, for isolation tests."""
    return "user-bob"
