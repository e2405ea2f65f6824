"""
Base provider catalog fetcher.

Defines the abstract ProviderCatalogFetcher interface that every provider
adapter implements, along with the HTTP plumbing and error classification
they share.
"""

import re
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from ..constants import ProviderName
from ..exceptions import (
    AuthRejectedError,
    ProviderFetchError,
    RateLimitedError,
    UnexpectedResponseShapeError,
    UnreachableError,
)
from ..schemas.catalog_schemas import ModelDescriptor
from ..utils.logger import get_logger

_DATE_SUFFIX = re.compile(r"-(\d{4}-?\d{2}-?\d{2}|\d{4}|latest|preview.*|exp.*)$")


def model_family(model_id: str) -> Optional[str]:
    """
    Derive a grouping label from a model id.

    ``gpt-4o-mini`` -> ``gpt-4o``, ``claude-3-5-sonnet-20241022`` -> ``claude-3``,
    ``openai/gpt-4o`` -> ``openai``.
    """
    if "/" in model_id:
        return model_id.split("/", 1)[0] or None
    base = _DATE_SUFFIX.sub("", model_id.split(":", 1)[0])
    parts = [p for p in base.split("-") if p]
    if not parts:
        return None
    return "-".join(parts[:2])


class ProviderCatalogFetcher(ABC):
    """
    Abstract base class for provider catalog fetchers.

    A fetcher takes a plaintext API key, calls its provider's "list models"
    endpoint, and returns normalized ModelDescriptors. Fetchers are
    read-only against the provider and safe to call repeatedly. Every
    failure leaves ``fetch`` as one of the four ProviderFetchError kinds.
    """

    provider: ProviderName
    requires_api_key: bool = True

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float,
        http_session: Optional[requests.Session] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            base_url: Provider API root, without trailing slash
            timeout_seconds: Timeout applied to every HTTP request
            http_session: Optional requests session (tests inject a mock)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.http = http_session or requests.Session()
        self.logger = get_logger()

    @property
    def provider_name(self) -> str:
        return self.provider.value

    def fetch(self, api_key: Optional[str]) -> List[ModelDescriptor]:
        """
        Fetch and normalize the provider's model list.

        An empty list is a valid result.

        Raises:
            AuthRejectedError, RateLimitedError, UnreachableError,
            UnexpectedResponseShapeError
        """
        if self.requires_api_key and not api_key:
            raise AuthRejectedError(
                f"{self.provider_name} requires an API key", provider=self.provider_name
            )

        start_time = time.time()
        try:
            descriptors = self._fetch_models(api_key)
        except ProviderFetchError:
            raise
        except Exception as e:
            raise UnexpectedResponseShapeError(
                f"Could not interpret {self.provider_name} model list: {type(e).__name__}: {e}",
                provider=self.provider_name,
                cause=e,
            ) from e

        unique: Dict[str, ModelDescriptor] = {}
        for descriptor in descriptors:
            unique.setdefault(descriptor.model_id, descriptor)

        self.logger.info(
            "Fetched provider catalog",
            extra={
                "provider": self.provider_name,
                "models_count": len(unique),
                "duplicates_dropped": len(descriptors) - len(unique),
                "duration_ms": round((time.time() - start_time) * 1000, 1),
            },
        )
        return list(unique.values())

    @abstractmethod
    def _fetch_models(self, api_key: Optional[str]) -> List[ModelDescriptor]:
        """
        Call the provider and build descriptors.

        Implementations may raise ProviderFetchError subclasses directly; any
        other exception is reported as an unexpected response shape.
        """

    def _headers(self, api_key: Optional[str]) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    def _get_json(
        self, path: str, api_key: Optional[str], params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """GET ``base_url + path`` and return the decoded JSON body."""
        url = f"{self.base_url}{path}"
        try:
            response = self.http.get(
                url, headers=self._headers(api_key), params=params, timeout=self.timeout_seconds
            )
        except requests.Timeout as e:
            raise UnreachableError(
                f"{self.provider_name} did not respond within {self.timeout_seconds}s",
                provider=self.provider_name,
                cause=e,
            ) from e
        except requests.RequestException as e:
            raise UnreachableError(
                f"Could not connect to {self.provider_name}: {type(e).__name__}",
                provider=self.provider_name,
                cause=e,
            ) from e

        self._raise_for_status(response)

        try:
            return response.json()
        except ValueError as e:
            raise UnexpectedResponseShapeError(
                f"{self.provider_name} returned a non-JSON body",
                provider=self.provider_name,
                cause=e,
                http_status=response.status_code,
            ) from e

    def _raise_for_status(self, response: requests.Response) -> None:
        """Map a non-2xx response onto one of the fetch error kinds."""
        status = response.status_code
        if 200 <= status < 300:
            return

        detail = self._error_detail(response)
        message = f"{self.provider_name} returned HTTP {status}: {detail}"

        if status in (401, 403) or self._is_auth_rejection(status, detail):
            raise AuthRejectedError(message, provider=self.provider_name, http_status=status)
        if status == 429:
            raise RateLimitedError(
                message,
                provider=self.provider_name,
                http_status=status,
                retry_after=response.headers.get("Retry-After"),
            )
        if status >= 500 or status == 408:
            raise UnreachableError(message, provider=self.provider_name, http_status=status)
        raise UnexpectedResponseShapeError(message, provider=self.provider_name, http_status=status)

    def _is_auth_rejection(self, status: int, detail: str) -> bool:
        """Hook for providers that report bad keys with a non-401 status."""
        return False

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return (response.text or "").strip()[:200] or response.reason or "no detail"

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return str(error.get("message") or error)[:200]
        if error:
            return str(error)[:200]
        return str(body)[:200]

    def _list_field(self, payload: Any, key: str) -> List[Dict[str, Any]]:
        """Return ``payload[key]`` as a list of objects, or fail as an unexpected shape."""
        if not isinstance(payload, dict):
            raise UnexpectedResponseShapeError(
                f"{self.provider_name} response is not a JSON object", provider=self.provider_name
            )
        items = payload.get(key, [])
        if items is None:
            return []
        if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
            raise UnexpectedResponseShapeError(
                f"{self.provider_name} response field '{key}' is not a list of objects",
                provider=self.provider_name,
            )
        return items
