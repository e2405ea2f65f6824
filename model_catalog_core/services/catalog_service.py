"""
Catalog service for provider model lists.

A provider's catalog is only ever replaced wholesale. The delete and the
inserts share one transaction, so a failed replacement leaves the previous
list exactly as it was.
"""

from collections import Counter
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..constants import DEFAULT_STARTER_MODELS
from ..db.db_catalog_models import CatalogModel
from ..exceptions import ErrorCode, RepositoryError, ValidationError
from ..schemas.catalog_schemas import ModelDescriptor
from ..schemas.credential_schemas import normalize_provider
from .base_service import SessionManagedService


class CatalogService(SessionManagedService):
    """Read and replace the provider-global model catalog."""

    def replace_all(self, provider: str, descriptors: Sequence[ModelDescriptor]) -> int:
        """
        Replace every stored model for ``provider`` with ``descriptors``.

        An empty sequence empties the provider's catalog.

        Args:
            provider: Canonical provider identifier
            descriptors: The provider's complete current model list

        Returns:
            Number of models stored

        Raises:
            ValidationError: If model ids repeat or a descriptor names another provider
            RepositoryError: If the write fails (the previous catalog is kept)
        """
        if not isinstance(provider, str) or not provider.strip():
            raise ValidationError("provider cannot be empty", field="provider")
        provider = normalize_provider(provider)

        duplicates = sorted(i for i, n in Counter(d.model_id for d in descriptors).items() if n > 1)
        if duplicates:
            raise ValidationError(
                f"Duplicate model ids for provider '{provider}': {', '.join(duplicates)}",
                field="model_id",
                provider=provider,
            )

        foreign = {d.provider for d in descriptors if normalize_provider(d.provider) != provider}
        if foreign:
            raise ValidationError(
                f"Descriptors for {sorted(foreign)} cannot be stored under provider '{provider}'",
                field="provider",
                provider=provider,
            )

        rows = [
            CatalogModel(
                provider=provider,
                model_id=d.model_id,
                display_name=d.display_name,
                family=d.family,
                description=d.description,
                context_window=d.context_window,
            )
            for d in descriptors
        ]

        try:
            with self.transaction():
                removed = (
                    self.session.query(CatalogModel)
                    .filter(CatalogModel.provider == provider)
                    .delete(synchronize_session=False)
                )
                self.session.add_all(rows)
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to replace catalog for provider '{provider}': {str(e)}",
                error_code=ErrorCode.DATABASE_ERROR,
                cause=e,
                provider=provider,
            ) from e

        self.logger.info(
            "Replaced provider catalog",
            extra={"provider": provider, "removed": removed, "stored": len(rows)},
        )
        return len(rows)

    def list_all(self) -> List[ModelDescriptor]:
        """Every stored model, ordered by provider then display name."""
        rows = (
            self.session.query(CatalogModel)
            .order_by(CatalogModel.provider, CatalogModel.display_name, CatalogModel.model_id)
            .all()
        )
        return [ModelDescriptor.model_validate(r) for r in rows]

    def list_for_provider(self, provider: str) -> List[ModelDescriptor]:
        return self.list_for_providers([provider])

    def list_for_providers(self, providers: Iterable[str]) -> List[ModelDescriptor]:
        keys = {normalize_provider(p) for p in providers if isinstance(p, str) and p.strip()}
        if not keys:
            return []
        rows = (
            self.session.query(CatalogModel)
            .filter(CatalogModel.provider.in_(keys))
            .order_by(CatalogModel.provider, CatalogModel.display_name, CatalogModel.model_id)
            .all()
        )
        return [ModelDescriptor.model_validate(r) for r in rows]

    def suggest_default_model(self, provider: str) -> Optional[str]:
        """
        Pick a starter model for a provider from its stored catalog.

        Prefers the provider's basic model (matched as a substring of the id
        or display name), then falls back to the first stored model. Returns
        None when the catalog is empty.
        """
        models = self.list_for_provider(provider)
        if not models:
            return None

        preferred = DEFAULT_STARTER_MODELS.get(normalize_provider(provider))
        if preferred:
            needle = preferred.lower()
            for model in models:
                if needle in model.model_id.lower() or needle in model.display_name.lower():
                    return model.model_id

        return models[0].model_id
