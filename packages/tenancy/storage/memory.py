"""In-memory tenant record store."""

from __future__ import annotations

import threading
from typing import Any

from ..types import EntityKind


class InMemoryTenantStore:
    """Thread-safe dict-backed store.

    Suitable for tests and single-process deployments only; state is lost
    when the process exits and is not shared between workers.
    """

    def __init__(self) -> None:
        self._tables: dict[EntityKind, dict[str, Any]] = {kind: {} for kind in EntityKind}
        self._lock = threading.RLock()

    def get(self, kind: EntityKind, tenant_id: str) -> Any | None:
        with self._lock:
            return self._tables[kind].get(tenant_id)

    def put(self, kind: EntityKind, tenant_id: str, record: Any) -> None:
        with self._lock:
            self._tables[kind][tenant_id] = record

    def delete(self, kind: EntityKind, tenant_id: str) -> bool:
        with self._lock:
            return self._tables[kind].pop(tenant_id, None) is not None

    def list(self, kind: EntityKind) -> list[Any]:
        with self._lock:
            return list(self._tables[kind].values())

    def clear(self) -> None:
        with self._lock:
            for table in self._tables.values():
                table.clear()

    def count(self, kind: EntityKind) -> int:
        with self._lock:
            return len(self._tables[kind])
