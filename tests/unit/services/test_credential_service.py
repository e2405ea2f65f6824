"""
Tests for CredentialService.
"""

import pytest

from model_catalog_core.context import owner_context
from model_catalog_core.db import ProviderCredential
from model_catalog_core.exceptions import (
    AuthError,
    DecryptionError,
    NotFoundError,
    RepositoryError,
    ValidationError,
)
from model_catalog_core.utils.encryption_utils import Cipher
from tests.fixtures.factories import ProviderCredentialFactory


class TestUpsert:
    def test_creates_encrypted_row(self, credential_service, db_session, owner_id):
        credential_id = credential_service.upsert(owner_id, "openai", "sk-live-123")

        row = db_session.query(ProviderCredential).filter_by(id=credential_id).one()
        assert row.owner_id == owner_id
        assert row.provider == "openai"
        assert "sk-live-123" not in row.encrypted_key
        assert credential_service.reveal(owner_id, credential_id) == "sk-live-123"

    def test_second_save_updates_in_place(self, credential_service, db_session, owner_id):
        first_id = credential_service.upsert(owner_id, "openai", "sk-old")
        second_id = credential_service.upsert(owner_id, "OpenAI", "sk-new")

        assert first_id == second_id
        assert db_session.query(ProviderCredential).count() == 1
        assert credential_service.reveal(owner_id, first_id) == "sk-new"

    def test_owners_are_independent(self, credential_service, db_session, owner_id, other_owner_id):
        alice_id = credential_service.upsert(owner_id, "openai", "sk-a")
        bob_id = credential_service.upsert(other_owner_id, "openai", "sk-b")

        assert alice_id != bob_id
        assert db_session.query(ProviderCredential).count() == 2

    def test_secret_is_trimmed(self, credential_service, owner_id):
        credential_id = credential_service.upsert(owner_id, "anthropic", "  sk-ant  ")
        assert credential_service.reveal(owner_id, credential_id) == "sk-ant"

    def test_custom_provider_kept_as_typed(self, credential_service, owner_id):
        credential_service.upsert(owner_id, "  My Proxy ", "key")

        assert [c.provider for c in credential_service.list_for_owner(owner_id)] == ["My Proxy"]

    @pytest.mark.parametrize(
        "provider,secret,field",
        [
            ("", "sk", "provider"),
            ("x" * 101, "sk", "provider"),
            ("openai", "", "api_key"),
            ("openai", "   ", "api_key"),
            ("openai", "k" * 501, "api_key"),
        ],
    )
    def test_invalid_input_rejected_before_storage(
        self, credential_service, db_session, owner_id, provider, secret, field
    ):
        with pytest.raises(ValidationError) as exc_info:
            credential_service.upsert(owner_id, provider, secret)

        assert exc_info.value.context["field"] == field
        assert db_session.query(ProviderCredential).count() == 0

    def test_validation_error_does_not_leak_secret(self, credential_service, owner_id):
        secret = "sk-" + "s" * 600

        with pytest.raises(ValidationError) as exc_info:
            credential_service.upsert(owner_id, "openai", secret)

        assert secret not in str(exc_info.value.to_dict(include_cause=True))
        assert exc_info.value.cause is None
        assert exc_info.value.__cause__ is None

    def test_requires_owner(self, credential_service, db_session):
        with pytest.raises(AuthError):
            credential_service.upsert(None, "openai", "sk")

        assert db_session.query(ProviderCredential).count() == 0

    def test_owner_from_context(self, credential_service, owner_id):
        with owner_context(owner_id):
            credential_service.upsert(None, "openai", "sk")

        assert len(credential_service.list_for_owner(owner_id)) == 1

    def test_lost_insert_race_updates_winner(
        self, credential_service, db_session, owner_id, monkeypatch
    ):
        winner = ProviderCredentialFactory(owner_id=owner_id, provider="openai", plaintext="sk-first")
        winner_id = winner.id

        # Simulate the pre-insert lookup missing a row committed concurrently
        import model_catalog_core.services.credential_service as module

        real_get_record = module.get_record
        calls = {"n": 0}

        def racing_get_record(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return real_get_record(*args, **kwargs)

        monkeypatch.setattr(module, "get_record", racing_get_record)

        credential_id = credential_service.upsert(owner_id, "openai", "sk-second")

        assert credential_id == winner_id
        assert db_session.query(ProviderCredential).count() == 1
        assert credential_service.reveal(owner_id, winner_id) == "sk-second"

    def test_database_failure_is_repository_error(self, credential_service, db_session, owner_id, monkeypatch):
        from sqlalchemy.exc import OperationalError

        def failing_commit():
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", failing_commit)

        with pytest.raises(RepositoryError):
            credential_service.upsert(owner_id, "openai", "sk")


class TestDelete:
    def test_delete_own_credential(self, credential_service, db_session, owner_id):
        credential_id = credential_service.upsert(owner_id, "openai", "sk")

        credential_service.delete(owner_id, credential_id)

        assert db_session.query(ProviderCredential).count() == 0

    def test_cannot_delete_other_owners_credential(
        self, credential_service, db_session, owner_id, other_owner_id
    ):
        credential_id = credential_service.upsert(owner_id, "openai", "sk")

        with pytest.raises(NotFoundError):
            credential_service.delete(other_owner_id, credential_id)

        assert db_session.query(ProviderCredential).count() == 1

    @pytest.mark.parametrize("credential_id", ["does-not-exist", "", None])
    def test_missing_credential(self, credential_service, owner_id, credential_id):
        with pytest.raises(NotFoundError):
            credential_service.delete(owner_id, credential_id)


class TestListAndLookup:
    def test_list_contains_no_key_material(self, credential_service, owner_id, other_owner_id):
        credential_service.upsert(owner_id, "openai", "sk-1")
        credential_service.upsert(owner_id, "anthropic", "sk-2")
        credential_service.upsert(other_owner_id, "google", "sk-3")

        credentials = credential_service.list_for_owner(owner_id)

        assert [c.provider for c in credentials] == ["anthropic", "openai"]
        dumped = [c.model_dump() for c in credentials]
        assert all("encrypted_key" not in d and "api_key" not in d for d in dumped)

    def test_get_for_provider(self, credential_service, owner_id, other_owner_id):
        credential_id = credential_service.upsert(owner_id, "openai", "sk")

        assert credential_service.get_for_provider(owner_id, "OPENAI").id == credential_id
        assert credential_service.get_for_provider(other_owner_id, "openai") is None
        assert credential_service.get_for_provider(owner_id, "google") is None


class TestReveal:
    def test_other_owner_cannot_reveal(self, credential_service, owner_id, other_owner_id):
        credential_id = credential_service.upsert(owner_id, "openai", "sk")

        with pytest.raises(NotFoundError):
            credential_service.reveal(other_owner_id, credential_id)

    def test_key_rotation_surfaces_decryption_error(self, credential_service, db_session, owner_id):
        credential_id = credential_service.upsert(owner_id, "openai", "sk")
        rotated = type(credential_service)(session=db_session, cipher=Cipher(Cipher.generate_key()))

        with pytest.raises(DecryptionError) as exc_info:
            rotated.reveal(owner_id, credential_id)

        assert exc_info.value.context["provider"] == "openai"
        assert exc_info.value.user_message == "Please re-enter your API key."
