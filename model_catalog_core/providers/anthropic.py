"""
Anthropic model list fetcher.

``GET /v1/models`` is paginated with ``has_more`` / ``last_id``; the key goes
in the ``x-api-key`` header rather than a bearer token.
"""

from typing import Dict, List, Optional

from ..constants import Limits, ProviderName
from ..exceptions import UnexpectedResponseShapeError
from ..schemas.catalog_schemas import ModelDescriptor
from .base import ProviderCatalogFetcher, model_family

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicFetcher(ProviderCatalogFetcher):
    provider = ProviderName.ANTHROPIC
    page_size = 100

    def _headers(self, api_key: Optional[str]) -> Dict[str, str]:
        headers = {"Accept": "application/json", "anthropic-version": ANTHROPIC_VERSION}
        if api_key:
            headers["x-api-key"] = api_key
        return headers

    def _fetch_models(self, api_key: Optional[str]) -> List[ModelDescriptor]:
        descriptors: List[ModelDescriptor] = []
        params = {"limit": self.page_size}

        for _ in range(Limits.MAX_FETCH_PAGES):
            payload = self._get_json("/models", api_key, params=dict(params))
            for item in self._list_field(payload, "data"):
                model_id = item["id"]
                descriptors.append(
                    ModelDescriptor(
                        model_id=model_id,
                        display_name=item.get("display_name") or model_id,
                        provider=self.provider_name,
                        family=model_family(model_id),
                    )
                )

            last_id = payload.get("last_id")
            if not payload.get("has_more") or not last_id:
                break
            params["after_id"] = last_id
        else:
            raise UnexpectedResponseShapeError(
                f"{self.provider_name} model list has more than {Limits.MAX_FETCH_PAGES} pages",
                provider=self.provider_name,
            )

        return descriptors
