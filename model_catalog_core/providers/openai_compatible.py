"""
Fetchers for providers that expose the OpenAI-style ``GET /models`` endpoint.

OpenAI, DeepSeek and xAI all answer with ``{"data": [{"id": ..., "owned_by": ...}]}``.
"""

from typing import List, Optional, Tuple

from ..constants import ProviderName
from ..schemas.catalog_schemas import ModelDescriptor
from .base import ProviderCatalogFetcher, model_family


class OpenAICompatibleFetcher(ProviderCatalogFetcher):
    """Lists models from an OpenAI-compatible ``/models`` endpoint."""

    models_path = "/models"
    # Model id prefixes that are not chat models
    exclude_prefixes: Tuple[str, ...] = ()

    def _fetch_models(self, api_key: Optional[str]) -> List[ModelDescriptor]:
        payload = self._get_json(self.models_path, api_key)
        descriptors = []
        for item in self._list_field(payload, "data"):
            model_id = item["id"]
            if model_id.startswith(self.exclude_prefixes):
                continue
            descriptors.append(
                ModelDescriptor(
                    model_id=model_id,
                    display_name=item.get("name") or model_id,
                    provider=self.provider_name,
                    family=model_family(model_id),
                    description=item.get("description"),
                    context_window=item.get("context_length") or item.get("context_window"),
                )
            )
        return sorted(descriptors, key=lambda d: d.model_id)


class OpenAIFetcher(OpenAICompatibleFetcher):
    provider = ProviderName.OPENAI
    exclude_prefixes = (
        "babbage",
        "dall-e",
        "davinci",
        "omni-moderation",
        "text-embedding",
        "text-moderation",
        "tts",
        "whisper",
    )


class DeepSeekFetcher(OpenAICompatibleFetcher):
    provider = ProviderName.DEEPSEEK


class XAIFetcher(OpenAICompatibleFetcher):
    provider = ProviderName.XAI
