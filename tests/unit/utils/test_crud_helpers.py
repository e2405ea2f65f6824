"""
Unit tests for CRUD helper functions.

Tests the generic owner-scoped CRUD operations the services build on.
"""

import pytest
from sqlalchemy.orm import Session

from model_catalog_core.db import CatalogModel, ProviderCredential
from model_catalog_core.exceptions import ErrorCode, NotFoundError, RepositoryError
from model_catalog_core.utils.crud_helpers import (
    create_record,
    delete_record,
    get_record,
    get_record_by_id,
    list_records,
    update_record,
)


def credential_data(provider="openai"):
    return {"provider": provider, "encrypted_key": "ciphertext"}


class TestCreateRecord:
    """Test create_record function."""

    def test_create_with_owner(self, db_session: Session, owner_id: str):
        """Test that the owner id is stamped onto owner-scoped models."""
        record = create_record(db_session, ProviderCredential, credential_data(), owner_id=owner_id)

        assert record.id
        assert record.owner_id == owner_id
        assert record.created_at is not None
        assert record.updated_at is not None

    def test_create_model_without_owner_column(self, db_session: Session, owner_id: str):
        """Test that models without owner_id ignore the owner."""
        record = create_record(
            db_session,
            CatalogModel,
            {"provider": "openai", "model_id": "gpt-4o", "display_name": "GPT-4o"},
            owner_id=owner_id,
        )

        assert not hasattr(record, "owner_id")

    def test_duplicate_is_reported(self, db_session: Session, owner_id: str):
        """Test that a unique-constraint violation becomes a DUPLICATE error."""
        create_record(db_session, ProviderCredential, credential_data(), owner_id=owner_id)

        with pytest.raises(RepositoryError) as exc_info:
            create_record(db_session, ProviderCredential, credential_data(), owner_id=owner_id)

        assert exc_info.value.error_code == ErrorCode.DUPLICATE
        assert exc_info.value.status_code == 409

    def test_missing_required_field(self, db_session: Session, owner_id: str):
        """Test handling of database errors during creation."""
        with pytest.raises(RepositoryError) as exc_info:
            create_record(db_session, ProviderCredential, {"provider": "openai"}, owner_id=owner_id)

        assert exc_info.value.error_code == ErrorCode.CONSTRAINT_VIOLATION
        assert "ProviderCredential" in str(exc_info.value)


class TestGetRecord:
    """Test get_record and get_record_by_id."""

    def test_scoped_to_owner(self, db_session: Session, owner_id: str, other_owner_id: str):
        record = create_record(db_session, ProviderCredential, credential_data(), owner_id=owner_id)

        assert get_record_by_id(db_session, ProviderCredential, record.id, owner_id).id == record.id
        assert get_record_by_id(db_session, ProviderCredential, record.id, other_owner_id) is None

    def test_filters(self, db_session: Session, owner_id: str):
        create_record(db_session, ProviderCredential, credential_data("openai"), owner_id=owner_id)
        create_record(db_session, ProviderCredential, credential_data("google"), owner_id=owner_id)

        found = get_record(db_session, ProviderCredential, {"provider": "google"}, owner_id)

        assert found.provider == "google"


class TestUpdateRecord:
    """Test update_record function."""

    def test_update(self, db_session: Session, owner_id: str):
        record = create_record(db_session, ProviderCredential, credential_data(), owner_id=owner_id)
        before = record.updated_at

        updated = update_record(
            db_session, ProviderCredential, record.id, {"encrypted_key": "rotated"}, owner_id
        )

        assert updated.encrypted_key == "rotated"
        assert updated.updated_at >= before

    def test_update_other_owners_record(self, db_session: Session, owner_id: str, other_owner_id: str):
        record = create_record(db_session, ProviderCredential, credential_data(), owner_id=owner_id)

        with pytest.raises(NotFoundError):
            update_record(db_session, ProviderCredential, record.id, {"encrypted_key": "x"}, other_owner_id)


class TestDeleteAndList:
    """Test delete_record and list_records."""

    def test_delete_is_owner_scoped(self, db_session: Session, owner_id: str, other_owner_id: str):
        record = create_record(db_session, ProviderCredential, credential_data(), owner_id=owner_id)

        assert delete_record(db_session, ProviderCredential, record.id, other_owner_id) is False
        assert delete_record(db_session, ProviderCredential, record.id, owner_id) is True
        assert list_records(db_session, ProviderCredential, owner_id=owner_id) == []

    def test_list_ordering_and_scope(self, db_session: Session, owner_id: str, other_owner_id: str):
        create_record(db_session, ProviderCredential, credential_data("openai"), owner_id=owner_id)
        create_record(db_session, ProviderCredential, credential_data("anthropic"), owner_id=owner_id)
        create_record(db_session, ProviderCredential, credential_data("xai"), owner_id=other_owner_id)

        records = list_records(db_session, ProviderCredential, owner_id=owner_id, order_by="provider")

        assert [r.provider for r in records] == ["anthropic", "openai"]
