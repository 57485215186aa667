"""Tests for tenant record stores."""

from __future__ import annotations

import pytest

from ..exceptions import TenantStoreError
from ..storage import InMemoryTenantStore, TenantStore, create_store
from ..types import EntityKind


class TestInMemoryTenantStore:
    """Tests for InMemoryTenantStore."""

    def test_implements_protocol(self, tenant_store: InMemoryTenantStore) -> None:
        assert isinstance(tenant_store, TenantStore)

    def test_put_get(self, tenant_store: InMemoryTenantStore) -> None:
        tenant_store.put(EntityKind.TENANT, "t1", {"name": "Acme"})
        assert tenant_store.get(EntityKind.TENANT, "t1") == {"name": "Acme"}
        assert tenant_store.get(EntityKind.CONFIG, "t1") is None

    def test_put_replaces(self, tenant_store: InMemoryTenantStore) -> None:
        tenant_store.put(EntityKind.QUOTA, "t1", 1)
        tenant_store.put(EntityKind.QUOTA, "t1", 2)
        assert tenant_store.get(EntityKind.QUOTA, "t1") == 2
        assert tenant_store.count(EntityKind.QUOTA) == 1

    def test_delete(self, tenant_store: InMemoryTenantStore) -> None:
        tenant_store.put(EntityKind.ISOLATION, "t1", "record")
        assert tenant_store.delete(EntityKind.ISOLATION, "t1")
        assert not tenant_store.delete(EntityKind.ISOLATION, "t1")
        assert tenant_store.get(EntityKind.ISOLATION, "t1") is None

    def test_list_is_snapshot(self, tenant_store: InMemoryTenantStore) -> None:
        tenant_store.put(EntityKind.TENANT, "t1", "a")
        snapshot = tenant_store.list(EntityKind.TENANT)
        tenant_store.put(EntityKind.TENANT, "t2", "b")
        assert snapshot == ["a"]
        assert tenant_store.list(EntityKind.TENANT) == ["a", "b"]

    def test_clear(self, tenant_store: InMemoryTenantStore) -> None:
        for kind in EntityKind:
            tenant_store.put(kind, "t1", kind.value)
        tenant_store.clear()
        assert all(tenant_store.count(kind) == 0 for kind in EntityKind)


class TestCreateStore:
    """Tests for create_store."""

    def test_memory_backend(self) -> None:
        assert isinstance(create_store("memory"), InMemoryTenantStore)

    def test_unknown_backend(self) -> None:
        with pytest.raises(TenantStoreError) as exc_info:
            create_store("redis")
        assert exc_info.value.operation == "create"
