"""
Database engine and session management.

The store is addressed by a single SQLAlchemy URL. In-memory SQLite gets one
shared connection so that refresh worker threads and the caller see the same
tables; file SQLite and server databases use SQLAlchemy's default pooling.
"""

import os
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import Session, declarative_base, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..constants import EnvironmentVariable
from ..exceptions import ErrorCode, ServiceError, ValidationError
from ..utils.logger import get_logger

# Base class for all SQLAlchemy models
Base: Any = declarative_base()

DEFAULT_DATABASE_URL = "sqlite:///model_catalog.db"


class DatabaseConfig(BaseModel):
    """Where the credential and catalog tables live."""

    url: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.DATABASE_URL.value, DEFAULT_DATABASE_URL
        ),
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.DATABASE_ECHO.value, "false").lower()
        == "true",
        description="Log emitted SQL",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        try:
            make_url(v)
        except ArgumentError:
            # The URL may embed a password, so it is not echoed back
            raise ValueError("url is not a valid SQLAlchemy database URL") from None
        return v

    @property
    def sqlalchemy_url(self) -> URL:
        return make_url(self.url)

    @property
    def is_sqlite(self) -> bool:
        return self.sqlalchemy_url.get_backend_name() == "sqlite"

    @property
    def is_memory(self) -> bool:
        return self.is_sqlite and self.sqlalchemy_url.database in (None, "", ":memory:")

    def safe_url(self) -> str:
        return self.sqlalchemy_url.render_as_string(hide_password=True)

    def __repr__(self) -> str:
        return f"DatabaseConfig(url='{self.safe_url()}', echo={self.echo})"


class DatabaseManager:
    """Owns the engine and a thread-local session registry."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.engine = self._create_engine()
        self.session_factory = sessionmaker(bind=self.engine)
        self.scoped_session = scoped_session(self.session_factory)

    def _create_engine(self):
        if not self.config.is_sqlite:
            return create_engine(self.config.url, echo=self.config.echo, pool_pre_ping=True)

        connect_args = {"check_same_thread": False}
        if self.config.is_memory:
            return create_engine(
                self.config.url,
                echo=self.config.echo,
                connect_args=connect_args,
                poolclass=StaticPool,
            )
        return create_engine(self.config.url, echo=self.config.echo, connect_args=connect_args)

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        return self.scoped_session()

    def close_session(self, session: Optional[Session] = None) -> None:
        if session:
            session.close()
        else:
            self.scoped_session.remove()

    def close(self) -> None:
        self.scoped_session.remove()
        self.engine.dispose()


def import_all_models():
    """Register every model with ``Base.metadata``."""
    from sqlalchemy.orm import configure_mappers

    from .db_catalog_models import CatalogModel  # noqa
    from .db_credential_models import ProviderCredential  # noqa

    configure_mappers()


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """
    Raises:
        ServiceError: If initialize_db() has not been called
    """
    if _db_manager is None:
        raise ServiceError(
            "Database manager not initialized. Call initialize_db() first.",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="get_db_manager",
        )
    return _db_manager


def set_db_manager(manager: Optional[DatabaseManager]) -> None:
    global _db_manager
    _db_manager = manager


def initialize_db(config: Optional[DatabaseConfig] = None) -> DatabaseManager:
    """
    Create the global manager and any missing tables.

    Args:
        config: Database settings; read from the environment when omitted

    Raises:
        ValidationError: If the configured URL is malformed
    """
    global _db_manager

    if config is None:
        try:
            config = DatabaseConfig()
        except ValueError:
            raise ValidationError(
                f"{EnvironmentVariable.DATABASE_URL.value} is not a valid database URL",
                error_code=ErrorCode.INVALID_FORMAT,
                field="url",
            ) from None

    get_logger().info("Initializing DB", extra={"url": config.safe_url()})
    _db_manager = DatabaseManager(config)

    import_all_models()
    _db_manager.create_tables()

    return _db_manager


def close_db() -> None:
    """Dispose of the global manager's engine."""
    global _db_manager
    if _db_manager:
        _db_manager.close()
        _db_manager = None
