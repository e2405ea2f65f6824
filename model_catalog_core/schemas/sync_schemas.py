"""
Result objects returned by the sync orchestrator.

None of these are persisted. They are built per operation and handed back
to the caller to report to the user.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from ..constants import CredentialSaveState, FetchErrorKind


class RefreshOutcome(BaseModel):
    """Result of one provider's refresh attempt."""

    provider: str = Field(description="Provider that was refreshed")
    success: bool = Field(description="Whether the catalog was replaced (or nothing to do)")
    error_message: Optional[str] = Field(default=None, description="Present iff failure")
    error_kind: Optional[FetchErrorKind] = Field(default=None, description="Failure class")
    models_count: int = Field(default=0, description="Models stored by this refresh")
    skipped: bool = Field(
        default=False, description="No fetcher registered for this provider"
    )

    @classmethod
    def succeeded(cls, provider: str, models_count: int) -> "RefreshOutcome":
        return cls(provider=provider, success=True, models_count=models_count)

    @classmethod
    def skipped_outcome(cls, provider: str) -> "RefreshOutcome":
        return cls(provider=provider, success=True, skipped=True)

    @classmethod
    def failed(
        cls, provider: str, error_message: str, error_kind: Optional[FetchErrorKind] = None
    ) -> "RefreshOutcome":
        return cls(
            provider=provider,
            success=False,
            error_message=error_message,
            error_kind=error_kind,
        )


class ProviderRefreshError(BaseModel):
    """A (provider, message) pair for the aggregate report."""

    provider: str
    message: str


class RefreshReport(BaseModel):
    """Aggregate result of refreshing every provider an owner has a key for."""

    total_providers: int = Field(description="Credentials considered, skipped ones included")
    success_count: int = Field(description="Providers whose catalog was refreshed")
    error_count: int = Field(description="Providers whose refresh failed")
    errors: List[ProviderRefreshError] = Field(default_factory=list)
    outcomes: List[RefreshOutcome] = Field(default_factory=list)
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_outcomes(cls, outcomes: List[RefreshOutcome]) -> "RefreshReport":
        errors = [
            ProviderRefreshError(provider=o.provider, message=o.error_message or "Unknown error")
            for o in outcomes
            if not o.success
        ]
        return cls(
            total_providers=len(outcomes),
            success_count=sum(1 for o in outcomes if o.success and not o.skipped),
            error_count=len(errors),
            errors=errors,
            outcomes=outcomes,
        )

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0


class CredentialSaveResult(BaseModel):
    """Result of add-or-update credential."""

    credential_id: str = Field(description="Saved credential id")
    provider: str = Field(description="Canonical provider identifier")
    catalog_refreshed: bool = Field(description="Whether the provider catalog was replaced")
    refresh_error: Optional[str] = Field(
        default=None, description="Reason the catalog refresh failed, if it did"
    )
    models_count: int = Field(default=0, description="Models stored by the refresh")
    suggested_model_id: Optional[str] = Field(
        default=None, description="Starter model to preselect for this provider"
    )
    state: CredentialSaveState = Field(default=CredentialSaveState.DONE)
