"""
Generic CRUD helpers shared by the services.

Each helper works with any SQLAlchemy model. When an ``owner_id`` is given
and the model has an ``owner_id`` column, every lookup is scoped to that
owner, so a record belonging to someone else is indistinguishable from a
missing one.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import ErrorCode, RepositoryError, not_found
from ..utils.logger import get_logger

T = TypeVar("T")


def _scoped_query(session: Session, model_class: Type[T], owner_id: Optional[str]):
    query = session.query(model_class)
    if owner_id and hasattr(model_class, "owner_id"):
        query = query.filter(model_class.owner_id == owner_id)  # type: ignore[attr-defined]
    return query


def create_record(
    session: Session, model_class: Type[T], data: Dict[str, Any], owner_id: Optional[str] = None
) -> T:
    """
    Generic create operation for any model.

    Args:
        session: Database session
        model_class: SQLAlchemy model class
        data: Data dictionary
        owner_id: Optional owner ID to add

    Returns:
        Created record instance

    Raises:
        RepositoryError: DUPLICATE on a unique-constraint violation,
            CONSTRAINT_VIOLATION on any other integrity error,
            DATABASE_ERROR on any other failure
    """
    logger = get_logger()

    if owner_id and hasattr(model_class, "owner_id") and "owner_id" not in data:
        data["owner_id"] = owner_id

    try:
        record = model_class(**data)
        session.add(record)
        session.commit()

    except IntegrityError as e:
        session.rollback()
        reason = str(e.orig).lower()
        duplicate = "unique" in reason or "duplicate" in reason
        logger.warning(
            f"{model_class.__name__} rejected by constraint",
            extra={"model": model_class.__name__, "owner_id": owner_id, "duplicate": duplicate},
        )
        raise RepositoryError(
            f"Duplicate {model_class.__name__}"
            if duplicate
            else f"Failed to create {model_class.__name__}: constraint violated",
            error_code=ErrorCode.DUPLICATE if duplicate else ErrorCode.CONSTRAINT_VIOLATION,
            status_code=409 if duplicate else 400,
            cause=e,
            model=model_class.__name__,
        ) from e

    except SQLAlchemyError as e:
        session.rollback()
        logger.error(
            f"Failed to create {model_class.__name__}: {str(e)}",
            extra={"model": model_class.__name__, "error": str(e), "owner_id": owner_id},
        )
        raise RepositoryError(
            f"Failed to create {model_class.__name__}: {str(e)}",
            error_code=ErrorCode.DATABASE_ERROR,
            cause=e,
        ) from e

    logger.info(
        f"Created {model_class.__name__}",
        extra={
            "model": model_class.__name__,
            "record_id": getattr(record, "id", None),
            "owner_id": owner_id,
        },
    )
    return record


def get_record(
    session: Session, model_class: Type[T], filters: Dict[str, Any], owner_id: Optional[str] = None
) -> Optional[T]:
    """
    Generic get operation for any model.

    Args:
        session: Database session
        model_class: SQLAlchemy model class
        filters: Filter conditions
        owner_id: Optional owner ID filter

    Returns:
        Record instance or None
    """
    query = _scoped_query(session, model_class, owner_id)

    for key, value in filters.items():
        if hasattr(model_class, key) and value is not None:
            query = query.filter(getattr(model_class, key) == value)

    return query.first()


def get_record_by_id(
    session: Session, model_class: Type[T], record_id: str, owner_id: Optional[str] = None
) -> Optional[T]:
    """
    Generic get by ID operation.

    Args:
        session: Database session
        model_class: SQLAlchemy model class
        record_id: Record ID
        owner_id: Optional owner ID filter

    Returns:
        Record instance or None
    """
    return get_record(session, model_class, {"id": record_id}, owner_id)


def update_record(
    session: Session,
    model_class: Type[T],
    record_id: str,
    data: Dict[str, Any],
    owner_id: Optional[str] = None,
) -> T:
    """
    Generic update operation for any model.

    Args:
        session: Database session
        model_class: SQLAlchemy model class
        record_id: Record ID to update
        data: Update data dictionary
        owner_id: Optional owner ID filter

    Returns:
        Updated record instance

    Raises:
        NotFoundError: If the record does not exist for this owner
        RepositoryError: If update fails
    """
    logger = get_logger()

    record = get_record_by_id(session, model_class, record_id, owner_id)
    if not record:
        raise not_found(model_class.__name__, record_id=record_id)

    try:
        for key, value in data.items():
            if hasattr(record, key) and value is not None:
                setattr(record, key, value)

        if hasattr(record, "updated_at"):
            record.updated_at = datetime.now(timezone.utc)

        session.commit()

    except SQLAlchemyError as e:
        session.rollback()
        logger.error(
            f"Failed to update {model_class.__name__}: {str(e)}",
            extra={
                "model": model_class.__name__,
                "record_id": record_id,
                "error": str(e),
                "owner_id": owner_id,
            },
        )
        raise RepositoryError(
            f"Failed to update {model_class.__name__}: {str(e)}",
            error_code=ErrorCode.DATABASE_ERROR,
            cause=e,
        ) from e

    logger.info(
        f"Updated {model_class.__name__}",
        extra={"model": model_class.__name__, "record_id": record_id, "owner_id": owner_id},
    )
    return record


def delete_record(
    session: Session, model_class: Type[T], record_id: str, owner_id: Optional[str] = None
) -> bool:
    """
    Generic delete operation for any model.

    The lookup is owner-scoped and happens before the delete.

    Args:
        session: Database session
        model_class: SQLAlchemy model class
        record_id: Record ID to delete
        owner_id: Optional owner ID filter

    Returns:
        True if deleted, False if not found

    Raises:
        RepositoryError: If delete fails
    """
    logger = get_logger()

    record = get_record_by_id(session, model_class, record_id, owner_id)
    if not record:
        return False

    try:
        session.delete(record)
        session.commit()

    except SQLAlchemyError as e:
        session.rollback()
        logger.error(
            f"Failed to delete {model_class.__name__}: {str(e)}",
            extra={
                "model": model_class.__name__,
                "record_id": record_id,
                "error": str(e),
                "owner_id": owner_id,
            },
        )
        raise RepositoryError(
            f"Failed to delete {model_class.__name__}: {str(e)}",
            error_code=ErrorCode.DATABASE_ERROR,
            cause=e,
        ) from e

    logger.info(
        f"Deleted {model_class.__name__}",
        extra={"model": model_class.__name__, "record_id": record_id, "owner_id": owner_id},
    )
    return True


def list_records(
    session: Session,
    model_class: Type[T],
    filters: Optional[Dict[str, Any]] = None,
    owner_id: Optional[str] = None,
    order_by: Optional[str] = None,
) -> List[T]:
    """
    Generic list operation for any model.

    Args:
        session: Database session
        model_class: SQLAlchemy model class
        filters: Optional filter conditions
        owner_id: Optional owner ID filter
        order_by: Optional order by field

    Returns:
        List of record instances
    """
    query = _scoped_query(session, model_class, owner_id)

    if filters:
        for key, value in filters.items():
            if hasattr(model_class, key) and value is not None:
                query = query.filter(getattr(model_class, key) == value)

    if order_by and hasattr(model_class, order_by):
        query = query.order_by(getattr(model_class, order_by))
    elif hasattr(model_class, "created_at"):
        query = query.order_by(model_class.created_at)  # type: ignore[attr-defined]

    return query.all()
