"""Storage backends for tenant records."""

from __future__ import annotations

from .base import TenantStore, TenantStoreError
from .memory import InMemoryTenantStore

__all__ = [
    "InMemoryTenantStore",
    "TenantStore",
    "TenantStoreError",
    "create_store",
]


def create_store(backend: str = "memory") -> TenantStore:
    """Create a store for the named backend.

    Raises:
        TenantStoreError: If the backend is not available.
    """
    if backend == "memory":
        return InMemoryTenantStore()
    raise TenantStoreError(f"Unsupported storage backend '{backend}'", operation="create")
