"""
Pydantic schema for normalized model descriptors.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import Limits


class ModelDescriptor(BaseModel):
    """A provider model, normalized across provider APIs."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        frozen=True,
        protected_namespaces=(),
    )

    model_id: str = Field(
        ..., min_length=1, max_length=Limits.MAX_MODEL_ID_LENGTH, description="Provider-scoped id"
    )
    display_name: str = Field(..., min_length=1, max_length=255, description="Human-readable name")
    provider: str = Field(
        ..., min_length=1, max_length=Limits.MAX_PROVIDER_LENGTH, description="Provider identifier"
    )
    family: Optional[str] = Field(default=None, max_length=100, description="Grouping label")
    description: Optional[str] = Field(default=None, description="Provider description")
    context_window: Optional[int] = Field(default=None, ge=0, description="Max context tokens")

    @field_validator("family", "description", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v
