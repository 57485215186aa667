"""Base protocol for tenant record stores.

The registry never touches its maps directly; it goes through a
TenantStore so an in-memory store (tests, single instance) can be swapped
for a persistent transactional one without changing registry logic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ..exceptions import TenantStoreError

if TYPE_CHECKING:
    from ..types import EntityKind

__all__ = ["TenantStore", "TenantStoreError"]


@runtime_checkable
class TenantStore(Protocol):
    """Keyed record storage, one table per EntityKind."""

    def get(self, kind: EntityKind, tenant_id: str) -> Any | None:
        """Return the record of ``kind`` for the tenant, or None."""
        ...

    def put(self, kind: EntityKind, tenant_id: str, record: Any) -> None:
        """Insert or replace the record of ``kind`` for the tenant."""
        ...

    def delete(self, kind: EntityKind, tenant_id: str) -> bool:
        """Remove the record of ``kind``. Returns False if it was absent."""
        ...

    def list(self, kind: EntityKind) -> list[Any]:
        """Return a snapshot of every record of ``kind``."""
        ...

    def clear(self) -> None:
        """Remove every record."""
        ...
