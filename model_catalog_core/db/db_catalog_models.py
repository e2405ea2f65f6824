"""
Model catalog rows.

Catalog data is provider-global: every owner with a key for a provider sees
the same list, so rows are keyed by provider value and never reference a
credential.
"""

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint

from ..constants import Limits
from .db_base import UUIDMixin, utc_now
from .db_config import Base


class CatalogModel(Base, UUIDMixin):
    """A model offered by a provider, as of that provider's last successful refresh."""

    __tablename__ = "catalog_models"

    provider = Column(String(Limits.MAX_PROVIDER_LENGTH), nullable=False, index=True)
    model_id = Column(String(Limits.MAX_MODEL_ID_LENGTH), nullable=False)
    display_name = Column(String(255), nullable=False)
    family = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    context_window = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("provider", "model_id", name="uq_catalog_models_provider_model"),
    )
