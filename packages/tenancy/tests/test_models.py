"""Tests for tenant records and value objects."""

from __future__ import annotations

import pytest

from ..exceptions import UnknownPlanError, UnknownResourceError
from ..models import IsolationNamespaces, ResourceQuota, Tenant, TenantSettings
from ..types import (
    UNLIMITED,
    DeletionResult,
    DeletionStatus,
    EntityKind,
    ResourceKind,
    TenantPlan,
    is_unlimited,
)


def make_quota(**limits) -> ResourceQuota:
    table = {kind: 10 for kind in ResourceKind}
    table.update({ResourceKind.parse(k): v for k, v in limits.items()})
    return ResourceQuota.create("t1", table)


class TestEnums:
    """Tests for enum parsing."""

    def test_plan_parse(self) -> None:
        assert TenantPlan.parse(" Enterprise ") == TenantPlan.ENTERPRISE
        assert TenantPlan.parse(TenantPlan.BASIC) is TenantPlan.BASIC
        with pytest.raises(UnknownPlanError):
            TenantPlan.parse("free")

    def test_resource_parse(self) -> None:
        assert ResourceKind.parse("API_CALLS") == ResourceKind.API_CALLS
        with pytest.raises(UnknownResourceError):
            ResourceKind.parse("disk")

    def test_unlimited(self) -> None:
        assert is_unlimited(UNLIMITED)
        assert is_unlimited("unlimited")
        assert not is_unlimited(0)
        assert str(UNLIMITED) == "unlimited"


class TestResourceQuota:
    """Tests for ResourceQuota."""

    def test_remaining_and_utilization(self) -> None:
        quota = make_quota(users=50).with_usage(ResourceKind.USERS, 45)
        assert quota.remaining(ResourceKind.USERS) == 5
        assert quota.utilization(ResourceKind.USERS) == 90.0

    def test_zero_limit(self) -> None:
        quota = make_quota(cpu=0)
        assert quota.utilization(ResourceKind.CPU) == 0.0
        assert quota.with_usage(ResourceKind.CPU, 1).utilization(ResourceKind.CPU) == 100.0

    def test_unlimited_resource(self) -> None:
        quota = make_quota(storage=UNLIMITED).with_usage(ResourceKind.STORAGE, 999)
        assert quota.is_unlimited(ResourceKind.STORAGE)
        assert quota.remaining(ResourceKind.STORAGE) is UNLIMITED
        assert quota.utilization(ResourceKind.STORAGE) == 0.0

    def test_with_usage_is_immutable(self) -> None:
        quota = make_quota()
        updated = quota.with_usage(ResourceKind.USERS, 3)
        assert quota.get_usage(ResourceKind.USERS) == 0
        assert updated.get_usage(ResourceKind.USERS) == 3

    def test_with_limits(self) -> None:
        quota = make_quota().with_usage(ResourceKind.USERS, 7)
        new_limits = {kind: UNLIMITED for kind in ResourceKind}

        preserved = quota.with_limits(new_limits)
        reset = quota.with_limits(new_limits, preserve_usage=False)

        assert preserved.get_usage(ResourceKind.USERS) == 7
        assert reset.get_usage(ResourceKind.USERS) == 0
        assert preserved.resources == preserved.limits

    def test_to_dict(self) -> None:
        data = make_quota(users=UNLIMITED).to_dict()
        assert data["limits"]["users"] == "unlimited"
        assert data["usage"]["cpu"] == 0


class TestTenant:
    """Tests for Tenant and TenantSettings."""

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValueError):
            Tenant(
                tenant_id="",
                name="Acme",
                domain="acme.com",
                subdomain="acme",
                namespaces=IsolationNamespaces.for_tenant("x"),
            )

    def test_touched_keeps_created_at(self) -> None:
        tenant = Tenant(
            tenant_id="t1",
            name="Acme",
            domain="acme.com",
            subdomain="acme",
            namespaces=IsolationNamespaces.for_tenant("t1"),
        )
        renamed = tenant.touched(name="Acme Inc")
        assert renamed.name == "Acme Inc"
        assert renamed.created_at == tenant.created_at
        assert renamed.to_dict()["settings"] == {"branding": {}, "features": {}, "limits": {}}

    def test_resolve_features(self) -> None:
        settings = TenantSettings().with_feature_flags({"sso": True, "analytics": False})
        features = settings.resolve_features(TenantPlan.STANDARD)
        assert "sso" in features
        assert "analytics" not in features
        assert "custom_branding" in features


class TestDeletionResult:
    """Tests for DeletionResult."""

    def test_to_dict(self) -> None:
        result = DeletionResult(
            tenant_id="t1",
            status=DeletionStatus.PARTIALLY_DELETED,
            remaining=frozenset({EntityKind.TENANT, EntityKind.QUOTA}),
        )
        assert not result.is_complete
        assert result.to_dict() == {
            "tenant_id": "t1",
            "status": "partially_deleted",
            "remaining": ["quota", "tenant"],
            "failed_cleanups": [],
        }
