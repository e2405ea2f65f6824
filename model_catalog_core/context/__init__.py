"""Execution context helpers."""

from .owner_context import OwnerContext, owner_context, resolve_owner_id

__all__ = ["OwnerContext", "owner_context", "resolve_owner_id"]
