"""Tests for tenant lifecycle hooks."""

from __future__ import annotations

import logging

from ..hooks import (
    AuditTenantHook,
    BaseTenantHook,
    LoggingTenantHook,
    MetricsTenantHook,
    TenantHook,
)
from ..registry import TenantRegistry


class RecordingHook(BaseTenantHook):
    """Hook that records the events it receives."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def on_tenant_created(self, tenant):
        self.events.append(("created", {"tenant_id": tenant.tenant_id}))

    def on_plan_changed(self, tenant, *, previous_plan):
        self.events.append(("plan_changed", {"previous": previous_plan.value}))

    def on_status_changed(self, tenant, *, previous_status):
        self.events.append(("status_changed", {"previous": previous_status.value}))


class ExplodingHook(BaseTenantHook):
    def on_tenant_created(self, tenant):
        raise RuntimeError("hook failure")


class TestHookProtocol:
    """Tests for the hook protocol."""

    def test_builtin_hooks_implement_protocol(self) -> None:
        for hook in (
            BaseTenantHook(),
            LoggingTenantHook(),
            MetricsTenantHook(),
            AuditTenantHook(),
        ):
            assert isinstance(hook, TenantHook)


class TestHookNotification:
    """Tests for hook notification by the registry."""

    def test_events_dispatched(self, tenant_registry: TenantRegistry) -> None:
        hook = RecordingHook()
        tenant_registry.add_hook(hook)

        tenant = tenant_registry.create_tenant("Acme", "acme.com", "acme", plan="basic")
        tenant_registry.update_tenant(tenant.tenant_id, plan="premium")
        tenant_registry.suspend_tenant(tenant.tenant_id)

        assert [name for name, _ in hook.events] == ["created", "plan_changed", "status_changed"]
        assert hook.events[1][1] == {"previous": "basic"}
        assert hook.events[2][1] == {"previous": "active"}

    def test_no_plan_event_without_change(self, tenant_registry: TenantRegistry) -> None:
        hook = RecordingHook()
        tenant_registry.add_hook(hook)
        tenant = tenant_registry.create_tenant("Acme", "acme.com", "acme", plan="basic")

        tenant_registry.update_tenant(tenant.tenant_id, plan="basic", name="Acme Inc")

        assert [name for name, _ in hook.events] == ["created"]

    def test_failing_hook_does_not_abort(self, tenant_registry: TenantRegistry, caplog) -> None:
        """Test hook failures are logged and the operation still succeeds."""
        caplog.set_level(logging.ERROR)
        recorder = RecordingHook()
        tenant_registry.add_hook(ExplodingHook())
        tenant_registry.add_hook(recorder)

        tenant = tenant_registry.create_tenant("Acme", "acme.com", "acme")

        assert tenant_registry.exists(tenant.tenant_id)
        assert [name for name, _ in recorder.events] == ["created"]
        assert any("Tenant hook failed" in r.getMessage() for r in caplog.records)

    def test_remove_hook(self, tenant_registry: TenantRegistry) -> None:
        hook = RecordingHook()
        tenant_registry.add_hook(hook)
        tenant_registry.remove_hook(hook)
        tenant_registry.create_tenant("Acme", "acme.com", "acme")
        assert hook.events == []


class TestLoggingHook:
    """Tests for LoggingTenantHook."""

    def test_logs_lifecycle(
        self, tenant_registry: TenantRegistry, logging_hook: LoggingTenantHook, caplog
    ) -> None:
        caplog.set_level(logging.INFO)
        tenant_registry.add_hook(logging_hook)

        tenant = tenant_registry.create_tenant("Acme", "acme.com", "acme")
        tenant_registry.delete_tenant(tenant.tenant_id)

        messages = [r.getMessage() for r in caplog.records]
        assert f"Tenant created: {tenant.tenant_id}" in messages
        assert f"Tenant deleted: {tenant.tenant_id} (fully_deleted)" in messages


class TestMetricsHook:
    """Tests for MetricsTenantHook."""

    def test_counts(self, tenant_registry: TenantRegistry, metrics_hook: MetricsTenantHook) -> None:
        tenant_registry.add_hook(metrics_hook)

        tenant = tenant_registry.create_tenant("Acme", "acme.com", "acme", plan="basic")
        tenant_registry.update_tenant(tenant.tenant_id, plan="standard")
        tenant_registry.suspend_tenant(tenant.tenant_id)
        tenant_registry.reserve_resource(tenant.tenant_id, "cpu", 100)
        tenant_registry.delete_tenant(tenant.tenant_id)

        metrics = metrics_hook.metrics
        assert metrics.tenants_created == 1
        assert metrics.tenants_updated == 2
        assert metrics.plan_changes == 1
        assert metrics.status_changes == 1
        assert metrics.quota_rejections == 1
        assert metrics.tenants_deleted == 1
        assert metrics.partial_deletions == 0
        assert metrics.last_event_time is not None

    def test_reset(self, metrics_hook: MetricsTenantHook, tenant_registry: TenantRegistry) -> None:
        tenant_registry.add_hook(metrics_hook)
        tenant_registry.create_tenant("Acme", "acme.com", "acme")
        metrics_hook.reset()
        assert metrics_hook.metrics.tenants_created == 0


class TestAuditHook:
    """Tests for AuditTenantHook."""

    def test_audit_trail(
        self, tenant_registry: TenantRegistry, audit_hook: AuditTenantHook
    ) -> None:
        tenant_registry.add_hook(audit_hook)

        tenant = tenant_registry.create_tenant("Acme", "acme.com", "acme", plan="basic")
        tenant_registry.update_tenant(tenant.tenant_id, name="Acme Inc", plan="premium")
        tenant_registry.reserve_resource(tenant.tenant_id, "cpu", 100)

        events = audit_hook.events_for(tenant.tenant_id)
        assert [e.event_type for e in events] == [
            "tenant_created",
            "tenant_updated",
            "plan_changed",
            "quota_exceeded",
        ]
        changes = dict(events[1].details)["changes"]
        assert changes["name"] == ("Acme", "Acme Inc")
        assert changes["plan"] == ("basic", "premium")
        assert events[3].to_dict()["details"]["resource"] == "cpu"

    def test_deleted_event(
        self, tenant_registry: TenantRegistry, audit_hook: AuditTenantHook
    ) -> None:
        tenant_registry.add_hook(audit_hook)
        tenant = tenant_registry.create_tenant("Acme", "acme.com", "acme")
        tenant_registry.delete_tenant(tenant.tenant_id)

        deleted = audit_hook.events[-1]
        assert deleted.event_type == "tenant_deleted"
        assert dict(deleted.details)["status"] == "fully_deleted"

    def test_max_events(self, tenant_registry: TenantRegistry) -> None:
        hook = AuditTenantHook(max_events=2)
        tenant_registry.add_hook(hook)
        for i in range(3):
            tenant_registry.create_tenant(f"T{i}", f"t{i}.com", f"t{i}")

        assert len(hook.events) == 2
        assert dict(hook.events[0].details)["name"] == "T1"

        hook.clear()
        assert hook.events == []
