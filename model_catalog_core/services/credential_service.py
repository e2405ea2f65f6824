"""
Credential service for provider API keys.

Stores one encrypted key per (owner, provider). Plaintext exists only in the
caller's input and in the return value of ``reveal``; it is never logged and
never leaves this service in any other shape.
"""

from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ..config import get_config
from ..context.owner_context import resolve_owner_id
from ..db.db_credential_models import ProviderCredential
from ..exceptions import DecryptionError, ErrorCode, RepositoryError, ValidationError, not_found
from ..schemas.credential_schemas import CredentialCreate, CredentialRead, normalize_provider
from ..utils.crud_helpers import (
    create_record,
    delete_record,
    get_record,
    get_record_by_id,
    list_records,
    update_record,
)
from ..utils.encryption_utils import Cipher, get_cipher
from .base_service import SessionManagedService


class CredentialService(SessionManagedService):
    """
    Owner-scoped CRUD for encrypted provider credentials.

    Every method resolves its owner first (explicit argument, else the active
    owner context) and raises AuthError when there is none. Lookups are
    scoped to that owner, so another owner's credential behaves exactly like
    a missing one.
    """

    def __init__(self, session: Optional[Session] = None, cipher: Optional[Cipher] = None, logger=None):
        super().__init__(session=session, logger=logger)
        self._cipher = cipher

    @property
    def cipher(self) -> Cipher:
        return self._cipher or get_cipher()

    def validate(self, provider, plaintext_secret) -> CredentialCreate:
        """
        Raises:
            ValidationError: If provider or secret is malformed (the secret is never echoed)
        """
        try:
            return CredentialCreate(provider=provider, api_key=plaintext_secret)
        except PydanticValidationError as e:
            # Pydantic errors carry the raw input, so the cause is not chained
            first = e.errors()[0]
            field = str(first["loc"][0]) if first.get("loc") else None
            message = first["msg"].removeprefix("Value error, ")
            raise ValidationError(message, field=field) from None

    def _audit(self, action: str, owner_id: str, **extra) -> None:
        if get_config().features.enable_audit_logging:
            self.logger.info(f"Credential {action}", extra={"owner_id": owner_id, **extra})

    def upsert(self, owner_id: Optional[str], provider: str, plaintext_secret: str) -> str:
        """
        Save a provider key for an owner, replacing any key already stored
        for that provider.

        Args:
            owner_id: Owner to save for (None uses the active owner context)
            provider: Provider identifier or custom provider name
            plaintext_secret: The API key

        Returns:
            The credential id (unchanged when an existing row is updated)

        Raises:
            AuthError: If no owner can be resolved
            ValidationError: If provider or secret is malformed
            RepositoryError: If the database write fails
        """
        owner = resolve_owner_id(owner_id)
        data = self.validate(provider, plaintext_secret)
        encrypted_key = self.cipher.encrypt(data.api_key.get_secret_value())
        values = {"provider": data.provider, "encrypted_key": encrypted_key}

        existing = get_record(self.session, ProviderCredential, {"provider": data.provider}, owner)
        if existing:
            record = update_record(self.session, ProviderCredential, existing.id, values, owner)
            self._audit("updated", owner, provider=data.provider, credential_id=record.id)
            return record.id

        try:
            record = create_record(self.session, ProviderCredential, dict(values), owner)
        except RepositoryError as e:
            if e.error_code != ErrorCode.DUPLICATE:
                raise
            # Lost an insert race for the same (owner, provider): update the winner
            winner = get_record(self.session, ProviderCredential, {"provider": data.provider}, owner)
            if winner is None:
                raise
            record = update_record(self.session, ProviderCredential, winner.id, values, owner)
            self._audit("updated", owner, provider=data.provider, credential_id=record.id)
            return record.id

        self._audit("created", owner, provider=data.provider, credential_id=record.id)
        return record.id

    def delete(self, owner_id: Optional[str], credential_id: str) -> None:
        """
        Delete one of the owner's credentials.

        Raises:
            AuthError: If no owner can be resolved
            NotFoundError: If the credential does not exist or belongs to someone else
        """
        owner = resolve_owner_id(owner_id)
        if not credential_id or not delete_record(
            self.session, ProviderCredential, credential_id, owner
        ):
            raise not_found("Credential", credential_id=credential_id)
        self._audit("deleted", owner, credential_id=credential_id)

    def list_for_owner(self, owner_id: Optional[str] = None) -> List[CredentialRead]:
        """List the owner's credentials without any key material."""
        owner = resolve_owner_id(owner_id)
        records = list_records(self.session, ProviderCredential, owner_id=owner, order_by="provider")
        return [CredentialRead.model_validate(r) for r in records]

    def get_for_provider(
        self, owner_id: Optional[str], provider: str
    ) -> Optional[CredentialRead]:
        owner = resolve_owner_id(owner_id)
        if not isinstance(provider, str) or not provider.strip():
            return None
        record = get_record(
            self.session, ProviderCredential, {"provider": normalize_provider(provider)}, owner
        )
        return CredentialRead.model_validate(record) if record else None

    def reveal(self, owner_id: Optional[str], credential_id: str) -> str:
        """
        Decrypt one of the owner's keys.

        Raises:
            AuthError: If no owner can be resolved
            NotFoundError: If the credential does not exist or belongs to someone else
            DecryptionError: If the stored key cannot be decrypted with the current key
        """
        owner = resolve_owner_id(owner_id)
        record = (
            get_record_by_id(self.session, ProviderCredential, credential_id, owner)
            if credential_id
            else None
        )
        if record is None:
            raise not_found("Credential", credential_id=credential_id)

        try:
            plaintext = self.cipher.decrypt(record.encrypted_key)
        except DecryptionError as e:
            e.add_context(credential_id=record.id, provider=record.provider)
            raise

        self._audit("revealed", owner, provider=record.provider, credential_id=record.id)
        return plaintext
