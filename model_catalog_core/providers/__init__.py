"""Provider catalog fetchers."""

from .anthropic import AnthropicFetcher
from .base import ProviderCatalogFetcher, model_family
from .google import GoogleFetcher
from .openai_compatible import DeepSeekFetcher, OpenAICompatibleFetcher, OpenAIFetcher, XAIFetcher
from .openrouter import OpenRouterFetcher
from .registry import DEFAULT_FETCHERS, FetcherRegistry, build_default_registry

__all__ = [
    "AnthropicFetcher",
    "DEFAULT_FETCHERS",
    "DeepSeekFetcher",
    "FetcherRegistry",
    "GoogleFetcher",
    "OpenAICompatibleFetcher",
    "OpenAIFetcher",
    "OpenRouterFetcher",
    "ProviderCatalogFetcher",
    "XAIFetcher",
    "build_default_registry",
    "model_family",
]
