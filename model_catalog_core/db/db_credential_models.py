"""
Provider credential model.

Just the data structure. Encryption and ownership checks live in
CredentialService.
"""

from sqlalchemy import Column, String, Text, UniqueConstraint

from ..constants import Limits
from .db_base import TimestampMixin, UUIDMixin
from .db_config import Base


class ProviderCredential(Base, UUIDMixin, TimestampMixin):
    """One encrypted API key per (owner, provider)."""

    __tablename__ = "provider_credentials"

    owner_id = Column(String(100), nullable=False, index=True)
    provider = Column(String(Limits.MAX_PROVIDER_LENGTH), nullable=False)
    encrypted_key = Column(Text, nullable=False)  # Fernet token

    __table_args__ = (
        UniqueConstraint("owner_id", "provider", name="uq_provider_credentials_owner_provider"),
    )

    def __repr__(self) -> str:
        return f"<ProviderCredential(id={self.id}, provider={self.provider}, owner_id={self.owner_id})>"
