"""
Provider fetcher registry.

Maps canonical provider identifiers to fetchers. A provider with no
registered fetcher (every custom provider) can hold a credential but has no
refreshable catalog.
"""

from typing import Dict, List, Optional, Type

from ..config import AppConfig, get_config
from ..constants import ProviderName
from ..utils.logger import get_logger
from .anthropic import AnthropicFetcher
from .base import ProviderCatalogFetcher
from .google import GoogleFetcher
from .openai_compatible import DeepSeekFetcher, OpenAIFetcher, XAIFetcher
from .openrouter import OpenRouterFetcher

DEFAULT_FETCHERS: List[Type[ProviderCatalogFetcher]] = [
    OpenAIFetcher,
    AnthropicFetcher,
    GoogleFetcher,
    DeepSeekFetcher,
    XAIFetcher,
    OpenRouterFetcher,
]


class FetcherRegistry:
    """Lookup table from provider identifier to ProviderCatalogFetcher."""

    def __init__(self):
        self._fetchers: Dict[str, ProviderCatalogFetcher] = {}
        self.logger = get_logger()

    def register(self, provider: str, fetcher: ProviderCatalogFetcher) -> None:
        key = provider.strip().lower()
        self._fetchers[key] = fetcher
        self.logger.debug("Registered fetcher", extra={"provider": key})

    def get(self, provider: str) -> Optional[ProviderCatalogFetcher]:
        return self._fetchers.get(provider.strip().lower())

    def has(self, provider: str) -> bool:
        return self.get(provider) is not None

    @property
    def providers(self) -> List[str]:
        return sorted(self._fetchers)


def build_default_registry(config: Optional[AppConfig] = None) -> FetcherRegistry:
    """Register a fetcher for every recognized provider, wired to the configured endpoints."""
    config = config or get_config()
    registry = FetcherRegistry()
    for fetcher_class in DEFAULT_FETCHERS:
        provider: ProviderName = fetcher_class.provider
        registry.register(
            provider.value,
            fetcher_class(
                base_url=config.providers.base_url(provider),
                timeout_seconds=config.sync.fetch_timeout_seconds,
            ),
        )
    return registry
