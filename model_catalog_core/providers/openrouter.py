"""
OpenRouter model list fetcher.

The models endpoint is public, so a key is sent when we have one but is
not required.
"""

from typing import List, Optional

from ..constants import ProviderName
from ..schemas.catalog_schemas import ModelDescriptor
from .base import ProviderCatalogFetcher, model_family


class OpenRouterFetcher(ProviderCatalogFetcher):
    provider = ProviderName.OPENROUTER
    requires_api_key = False

    def _fetch_models(self, api_key: Optional[str]) -> List[ModelDescriptor]:
        payload = self._get_json("/models", api_key)
        return [
            ModelDescriptor(
                model_id=item["id"],
                display_name=item.get("name") or item["id"],
                provider=self.provider_name,
                family=model_family(item["id"]),
                description=item.get("description"),
                context_window=item.get("context_length"),
            )
            for item in self._list_field(payload, "data")
        ]
