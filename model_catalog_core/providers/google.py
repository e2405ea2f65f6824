"""
Google Gemini model list fetcher.

Only models that support ``generateContent`` are kept; embedding and AQA
models are not selectable for chat.
"""

from typing import Dict, List, Optional

from ..constants import Limits, ProviderName
from ..exceptions import UnexpectedResponseShapeError
from ..schemas.catalog_schemas import ModelDescriptor
from .base import ProviderCatalogFetcher, model_family

GENERATE_CONTENT = "generateContent"


class GoogleFetcher(ProviderCatalogFetcher):
    provider = ProviderName.GOOGLE
    page_size = 1000

    def _headers(self, api_key: Optional[str]) -> Dict[str, str]:
        # Header rather than ?key= so the secret stays out of URLs
        headers = {"Accept": "application/json"}
        if api_key:
            headers["x-goog-api-key"] = api_key
        return headers

    def _is_auth_rejection(self, status: int, detail: str) -> bool:
        # Invalid keys come back as 400 INVALID_ARGUMENT
        return status == 400 and "api key" in detail.lower()

    def _fetch_models(self, api_key: Optional[str]) -> List[ModelDescriptor]:
        descriptors: List[ModelDescriptor] = []
        params: Dict[str, object] = {"pageSize": self.page_size}

        for _ in range(Limits.MAX_FETCH_PAGES):
            payload = self._get_json("/models", api_key, params=dict(params))
            for item in self._list_field(payload, "models"):
                if GENERATE_CONTENT not in (item.get("supportedGenerationMethods") or []):
                    continue
                model_id = item["name"].split("/", 1)[-1]
                descriptors.append(
                    ModelDescriptor(
                        model_id=model_id,
                        display_name=item.get("displayName") or model_id,
                        provider=self.provider_name,
                        family=model_family(model_id),
                        description=item.get("description"),
                        context_window=item.get("inputTokenLimit"),
                    )
                )

            next_token = payload.get("nextPageToken")
            if not next_token:
                break
            params["pageToken"] = next_token
        else:
            raise UnexpectedResponseShapeError(
                f"{self.provider_name} model list has more than {Limits.MAX_FETCH_PAGES} pages",
                provider=self.provider_name,
            )

        return descriptors
