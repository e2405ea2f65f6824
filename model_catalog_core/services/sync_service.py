"""
Sync service: credential saves and catalog refreshes.

Coordinates CredentialService, the fetcher registry and CatalogService.
Provider fetches for refresh-all run in a thread pool; decryption and every
database write stay on the calling thread, so the session is never shared
across threads.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Set

from sqlalchemy.orm import Session

from ..config import AppConfig, get_config
from ..constants import CredentialSaveState, FetchErrorKind
from ..context.owner_context import owner_context, resolve_owner_id
from ..exceptions import (
    BaseError,
    DecryptionError,
    NoCredentialsError,
    ProviderFetchError,
    RefreshInProgressError,
    UnexpectedResponseShapeError,
    UnreachableError,
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from ..providers.base import ProviderCatalogFetcher
from ..providers.registry import FetcherRegistry, build_default_registry
from ..schemas.catalog_schemas import ModelDescriptor
from ..schemas.credential_schemas import CredentialRead
from ..schemas.sync_schemas import CredentialSaveResult, RefreshOutcome, RefreshReport
from ..utils.encryption_utils import Cipher
from .base_service import SessionManagedService
from .catalog_service import CatalogService
from .credential_service import CredentialService

REFRESH_FAILED_PREFIX = "saved but catalog refresh failed"


class RefreshGuard:
    """
    One non-blocking lock per provider.

    The catalog is provider-global, so two refreshes of the same provider
    (from any owner) never overlap; the second is rejected instead of
    queued.
    """

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._mutex = threading.Lock()

    def _lock_for(self, provider: str) -> threading.Lock:
        key = provider.strip().lower()
        with self._mutex:
            return self._locks.setdefault(key, threading.Lock())

    def acquire(self, provider: str) -> None:
        """
        Raises:
            RefreshInProgressError: If a refresh for this provider is in flight
        """
        if not self._lock_for(provider).acquire(blocking=False):
            raise RefreshInProgressError(provider)

    def release(self, provider: str) -> None:
        self._lock_for(provider).release()

    def is_refreshing(self, provider: str) -> bool:
        return self._lock_for(provider).locked()

    @contextmanager
    def hold(self, provider: str) -> Iterator[None]:
        self.acquire(provider)
        try:
            yield
        finally:
            self.release(provider)


_default_guard = RefreshGuard()


class SyncService(SessionManagedService):
    """
    Orchestrates credential saves and catalog refreshes.

    A failed refresh never undoes a saved credential, and one provider's
    failure never affects another's.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        credential_service: Optional[CredentialService] = None,
        catalog_service: Optional[CatalogService] = None,
        registry: Optional[FetcherRegistry] = None,
        config: Optional[AppConfig] = None,
        guard: Optional[RefreshGuard] = None,
        cipher: Optional[Cipher] = None,
        logger=None,
    ):
        super().__init__(session=session, logger=logger)
        self.config = config or get_config()
        self.credentials = credential_service or CredentialService(
            session=self.session, cipher=cipher, logger=self.logger
        )
        self.catalog = catalog_service or CatalogService(session=self.session, logger=self.logger)
        self.registry = registry or build_default_registry(self.config)
        self.guard = guard or _default_guard

    def _advance(self, state: CredentialSaveState, provider: str) -> CredentialSaveState:
        self.logger.debug("Credential save state", extra={"state": state.value, "provider": provider})
        return state

    @staticmethod
    def _fetch(
        fetcher: ProviderCatalogFetcher,
        provider: str,
        api_key: str,
        owner_id: str,
        correlation_id: Optional[str] = None,
    ) -> List[ModelDescriptor]:
        """Run one fetch, reporting anything unclassified as an unexpected response."""
        if correlation_id:
            set_correlation_id(correlation_id)
        try:
            with owner_context(owner_id):
                return fetcher.fetch(api_key)
        except ProviderFetchError:
            raise
        except Exception as e:
            raise UnexpectedResponseShapeError(
                f"{provider} fetcher failed: {type(e).__name__}: {e}", provider=provider, cause=e
            ) from e
        finally:
            if correlation_id:
                clear_correlation_id()

    def add_or_update_credential(
        self, owner_id: Optional[str], provider: str, secret: str
    ) -> CredentialSaveResult:
        """
        Save a provider key, then refresh that provider's catalog with it.

        Validation and auth failures abort before anything is stored. Once
        the credential is saved the call succeeds; a refresh failure is
        reported in ``refresh_error``.

        Raises:
            AuthError: If no owner can be resolved
            ValidationError: If provider or secret is malformed
            RepositoryError: If the credential cannot be stored
        """
        owner = resolve_owner_id(owner_id)
        self._advance(CredentialSaveState.VALIDATING, str(provider))
        canonical = self.credentials.validate(provider, secret).provider
        self._advance(CredentialSaveState.ENCRYPTING, canonical)
        self._advance(CredentialSaveState.PERSISTING, canonical)
        credential_id = self.credentials.upsert(owner, provider, secret)

        fetcher = self.registry.get(canonical)
        if fetcher is None:
            self.logger.info(
                "No catalog fetcher for provider, skipping refresh",
                extra={"provider": canonical, "credential_id": credential_id},
            )
            return CredentialSaveResult(
                credential_id=credential_id, provider=canonical, catalog_refreshed=False
            )

        self._advance(CredentialSaveState.REFRESHING, canonical)
        refresh_error = None
        models_count = 0
        try:
            with self.guard.hold(canonical):
                api_key = self.credentials.reveal(owner, credential_id)
                descriptors = self._fetch(fetcher, canonical, api_key, owner)
                models_count = self.catalog.replace_all(canonical, descriptors)
        except BaseError as e:
            # Fetch, guard or catalog write failure; the credential itself is already stored
            refresh_error = f"{REFRESH_FAILED_PREFIX}: {e.message}"

        self._advance(CredentialSaveState.DONE, canonical)
        return CredentialSaveResult(
            credential_id=credential_id,
            provider=canonical,
            catalog_refreshed=refresh_error is None,
            refresh_error=refresh_error,
            models_count=models_count,
            suggested_model_id=self.catalog.suggest_default_model(canonical),
        )

    def refresh_all(self, owner_id: Optional[str] = None) -> RefreshReport:
        """
        Refresh the catalog of every provider the owner holds a key for.

        Each provider is attempted independently; failures are reported in
        the result, never raised.

        Raises:
            AuthError: If no owner can be resolved
            NoCredentialsError: If the owner has no stored credentials
        """
        owner = resolve_owner_id(owner_id)
        credentials = self.credentials.list_for_owner(owner)
        if not credentials:
            raise NoCredentialsError(owner_id=owner)

        start_time = time.time()
        self.logger.info(
            "Refreshing all catalogs",
            extra={"owner_id": owner, "providers_count": len(credentials)},
        )

        outcomes: Dict[str, RefreshOutcome] = {}
        jobs = []
        held: Set[str] = set()

        try:
            for credential in credentials:
                fetcher = self.registry.get(credential.provider)
                if fetcher is None:
                    outcomes[credential.id] = RefreshOutcome.skipped_outcome(credential.provider)
                    continue
                try:
                    api_key = self.credentials.reveal(owner, credential.id)
                except DecryptionError as e:
                    outcomes[credential.id] = RefreshOutcome.failed(
                        credential.provider, e.user_message, FetchErrorKind.DECRYPTION_FAILED
                    )
                    continue
                except BaseError as e:
                    # e.g. deleted after the credential list was read
                    outcomes[credential.id] = RefreshOutcome.failed(credential.provider, e.message)
                    continue
                try:
                    self.guard.acquire(credential.provider)
                except RefreshInProgressError as e:
                    outcomes[credential.id] = RefreshOutcome.failed(
                        credential.provider, e.message, e.kind
                    )
                    continue
                held.add(credential.provider)
                jobs.append((credential, fetcher, api_key))

            if jobs:
                self._run_fetches(owner, jobs, outcomes, held)
        finally:
            for provider in held:
                self.guard.release(provider)

        report = RefreshReport.from_outcomes([outcomes[c.id] for c in credentials])
        self.logger.info(
            "Refreshed all catalogs",
            extra={
                "owner_id": owner,
                "total_providers": report.total_providers,
                "success_count": report.success_count,
                "error_count": report.error_count,
                "duration_ms": round((time.time() - start_time) * 1000, 1),
            },
        )
        return report

    def _run_fetches(
        self,
        owner: str,
        jobs: list,
        outcomes: Dict[str, RefreshOutcome],
        held: Set[str],
    ) -> None:
        """Fetch in parallel and store each result on this thread as it arrives."""
        deadline = self.config.sync.refresh_deadline_seconds
        correlation_id = get_correlation_id()
        executor = ThreadPoolExecutor(
            max_workers=max(1, min(len(jobs), self.config.sync.max_workers)),
            thread_name_prefix="catalog-refresh",
        )
        try:
            futures = {
                executor.submit(
                    self._fetch, fetcher, credential.provider, api_key, owner, correlation_id
                ): credential
                for credential, fetcher, api_key in jobs
            }
            try:
                for future in as_completed(futures, timeout=deadline):
                    credential = futures[future]
                    try:
                        outcomes[credential.id] = self._store(credential, future.result)
                    finally:
                        held.discard(credential.provider)
                        self.guard.release(credential.provider)
            except FuturesTimeoutError:
                for credential in futures.values():
                    if credential.id in outcomes:
                        continue
                    error = UnreachableError(
                        f"{credential.provider} catalog fetch did not finish within {deadline}s",
                        provider=credential.provider,
                    )
                    outcomes[credential.id] = RefreshOutcome.failed(
                        credential.provider, error.message, error.kind
                    )
        finally:
            # Late fetches finish in the background; their results are discarded
            executor.shutdown(wait=False)

    def _store(self, credential: CredentialRead, result) -> RefreshOutcome:
        provider = credential.provider
        try:
            count = self.catalog.replace_all(provider, result())
        except ProviderFetchError as e:
            return RefreshOutcome.failed(provider, e.message, e.kind)
        except BaseError as e:
            return RefreshOutcome.failed(provider, e.message)
        return RefreshOutcome.succeeded(provider, count)

    def list_models_for_owner(self, owner_id: Optional[str] = None) -> List[ModelDescriptor]:
        """Catalog entries for the providers the owner holds a key for."""
        owner = resolve_owner_id(owner_id)
        providers = [c.provider for c in self.credentials.list_for_owner(owner)]
        return self.catalog.list_for_providers(providers)
