"""
Base service implementation with common functionality for all services.

Each service works against one SQLAlchemy session: either one handed in by
the caller (tests, or several services coordinating on one unit of work) or
one taken from the global DatabaseManager.
"""

import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.orm import Session

from ..db.db_config import get_db_manager
from ..utils.logger import get_logger


class SessionManagedService:
    """
    Service that owns or borrows a database session.

    A borrowed session is never closed by the service.
    """

    def __init__(self, session: Optional[Session] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize service with a session.

        Args:
            session: Optional existing session (for testing or coordination)
            logger: Optional logger instance
        """
        if session is not None:
            self.session = session
            self._owns_session = False
        else:
            self.session = get_db_manager().get_session()
            self._owns_session = True

        self.logger = logger or get_logger()

    @contextmanager
    def transaction(self):
        """
        Context manager for a single unit of work.

        Usage:
            with service.transaction():
                service.session.query(...).delete()
                service.session.add_all(rows)
                # Commits on success, rolls back on exception
        """
        try:
            yield self.session
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def close(self):
        """Close the session if we own it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.session.rollback()
        self.close()
