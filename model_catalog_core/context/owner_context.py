"""
Owner context management for the model catalog subsystem.

Authentication happens outside this package. The surrounding application
resolves the signed-in user and either passes the owner id explicitly or
activates it for the current thread with ``owner_context``. Every
credential operation resolves its owner through ``resolve_owner_id`` and
fails with ``AuthError`` when nothing can be resolved.
"""

import threading
from contextlib import contextmanager
from typing import Generator, Optional

from ..exceptions import AuthError, ErrorCode, ValidationError
from ..utils.logger import get_logger


class OwnerContext:
    """
    Manages the current owner id using thread-local storage.
    """

    _thread_local = threading.local()
    _logger = get_logger()

    @classmethod
    def set_current_owner(cls, owner_id: str) -> None:
        """
        Set the current owner id for the execution context.

        Args:
            owner_id: ID of the authenticated user

        Raises:
            ValidationError: If owner_id is empty or invalid
        """
        if not owner_id or not isinstance(owner_id, str) or not owner_id.strip():
            raise ValidationError(
                "owner_id must be a non-empty string",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="owner_id",
            )

        cls._thread_local.owner_id = owner_id.strip()
        cls._logger.debug(f"Current owner set to: {owner_id}")

    @classmethod
    def get_current_owner_id(cls) -> Optional[str]:
        """
        Get the current owner id from the execution context.

        Returns:
            Current owner id or None if not set
        """
        return getattr(cls._thread_local, "owner_id", None)

    @classmethod
    def clear_current_owner(cls) -> None:
        """Clear the current owner id from the execution context."""
        if hasattr(cls._thread_local, "owner_id"):
            delattr(cls._thread_local, "owner_id")
        cls._logger.debug("Current owner cleared")


@contextmanager
def owner_context(owner_id: str) -> Generator[None, None, None]:
    """
    Context manager that activates an owner for the duration of the block.

    Args:
        owner_id: ID of the authenticated user

    Yields:
        None
    """
    previous_owner = OwnerContext.get_current_owner_id()
    OwnerContext.set_current_owner(owner_id)
    try:
        yield
    finally:
        if previous_owner:
            OwnerContext.set_current_owner(previous_owner)
        else:
            OwnerContext.clear_current_owner()


def resolve_owner_id(owner_id: Optional[str] = None) -> str:
    """
    Resolve the owner for an operation.

    An explicit argument wins; otherwise the owner active in the current
    context is used.

    Raises:
        AuthError: If no owner can be resolved
    """
    effective = owner_id if owner_id is not None else OwnerContext.get_current_owner_id()
    if not effective or not isinstance(effective, str) or not effective.strip():
        raise AuthError("No authenticated owner available for this operation")
    return effective.strip()
