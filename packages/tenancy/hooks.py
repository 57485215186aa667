"""Tenant lifecycle hooks.

This module provides hooks for observing and reacting to tenant
lifecycle and quota events. Hooks enable loose coupling between the
registry and monitoring, auditing or provisioning code.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from common.logging import LogLevel, get_logger

if TYPE_CHECKING:
    from .models import Tenant
    from .types import DeletionResult, QuotaCheck, TenantPlan, TenantStatus


logger = get_logger(__name__)


# =============================================================================
# Hook Protocol
# =============================================================================


@runtime_checkable
class TenantHook(Protocol):
    """Protocol for tenant lifecycle hooks.

    All methods are optional; the registry only calls what a hook defines.
    """

    def on_tenant_created(self, tenant: Tenant) -> None:
        """Called after all four records of a new tenant are stored."""
        ...

    def on_tenant_updated(self, tenant: Tenant, *, previous: Tenant) -> None:
        """Called after a tenant record is replaced."""
        ...

    def on_tenant_deleted(self, tenant: Tenant, *, result: DeletionResult) -> None:
        """Called after the delete sequence finished (fully or partially)."""
        ...

    def on_plan_changed(
        self,
        tenant: Tenant,
        *,
        previous_plan: TenantPlan,
    ) -> None:
        """Called after quotas were recomputed for a new plan."""
        ...

    def on_status_changed(
        self,
        tenant: Tenant,
        *,
        previous_status: TenantStatus,
    ) -> None:
        """Called when a tenant's status changes."""
        ...

    def on_quota_exceeded(self, tenant_id: str, *, check: QuotaCheck) -> None:
        """Called when a reservation was rejected."""
        ...


# =============================================================================
# Base Hook Implementation
# =============================================================================


class BaseTenantHook:
    """Base implementation of TenantHook with no-op methods.

    Subclass and override only the methods you need.
    """

    def on_tenant_created(self, tenant: Tenant) -> None:
        pass

    def on_tenant_updated(self, tenant: Tenant, *, previous: Tenant) -> None:
        pass

    def on_tenant_deleted(self, tenant: Tenant, *, result: DeletionResult) -> None:
        pass

    def on_plan_changed(self, tenant: Tenant, *, previous_plan: TenantPlan) -> None:
        pass

    def on_status_changed(self, tenant: Tenant, *, previous_status: TenantStatus) -> None:
        pass

    def on_quota_exceeded(self, tenant_id: str, *, check: QuotaCheck) -> None:
        pass


# =============================================================================
# Logging Hook
# =============================================================================


class LoggingTenantHook(BaseTenantHook):
    """Hook that logs tenant lifecycle events at a configurable level."""

    def __init__(self, *, log_level: LogLevel = LogLevel.INFO) -> None:
        self.log_level = log_level

    def on_tenant_created(self, tenant: Tenant) -> None:
        logger.log(
            self.log_level,
            f"Tenant created: {tenant.tenant_id}",
            tenant_id=tenant.tenant_id,
            plan=tenant.plan.value,
        )

    def on_tenant_updated(self, tenant: Tenant, *, previous: Tenant) -> None:
        logger.log(
            self.log_level,
            f"Tenant updated: {tenant.tenant_id}",
            tenant_id=tenant.tenant_id,
        )

    def on_tenant_deleted(self, tenant: Tenant, *, result: DeletionResult) -> None:
        level = self.log_level if result.is_complete else LogLevel.WARNING
        logger.log(
            level,
            f"Tenant deleted: {tenant.tenant_id} ({result.status.value})",
            **result.to_dict(),
        )

    def on_plan_changed(self, tenant: Tenant, *, previous_plan: TenantPlan) -> None:
        logger.log(
            self.log_level,
            f"Tenant plan changed: {tenant.tenant_id} "
            f"({previous_plan.value} -> {tenant.plan.value})",
            tenant_id=tenant.tenant_id,
        )

    def on_status_changed(self, tenant: Tenant, *, previous_status: TenantStatus) -> None:
        logger.log(
            self.log_level,
            f"Tenant status changed: {tenant.tenant_id} "
            f"({previous_status.value} -> {tenant.status.value})",
            tenant_id=tenant.tenant_id,
        )

    def on_quota_exceeded(self, tenant_id: str, *, check: QuotaCheck) -> None:
        logger.warning(f"Quota exceeded: {tenant_id}", **check.to_dict())


# =============================================================================
# Metrics Hook
# =============================================================================


@dataclass
class TenantMetrics:
    """Container for tenant event counters."""

    tenants_created: int = 0
    tenants_updated: int = 0
    tenants_deleted: int = 0
    partial_deletions: int = 0
    plan_changes: int = 0
    status_changes: int = 0
    quota_rejections: int = 0
    last_event_time: datetime | None = None


class MetricsTenantHook(BaseTenantHook):
    """Hook that counts tenant operations for monitoring."""

    def __init__(self) -> None:
        self._metrics = TenantMetrics()

    @property
    def metrics(self) -> TenantMetrics:
        return self._metrics

    def _touch(self) -> None:
        self._metrics.last_event_time = datetime.now(UTC)

    def on_tenant_created(self, tenant: Tenant) -> None:
        self._metrics.tenants_created += 1
        self._touch()

    def on_tenant_updated(self, tenant: Tenant, *, previous: Tenant) -> None:
        self._metrics.tenants_updated += 1
        self._touch()

    def on_tenant_deleted(self, tenant: Tenant, *, result: DeletionResult) -> None:
        self._metrics.tenants_deleted += 1
        if not result.is_complete:
            self._metrics.partial_deletions += 1
        self._touch()

    def on_plan_changed(self, tenant: Tenant, *, previous_plan: TenantPlan) -> None:
        self._metrics.plan_changes += 1
        self._touch()

    def on_status_changed(self, tenant: Tenant, *, previous_status: TenantStatus) -> None:
        self._metrics.status_changes += 1
        self._touch()

    def on_quota_exceeded(self, tenant_id: str, *, check: QuotaCheck) -> None:
        self._metrics.quota_rejections += 1
        self._touch()

    def reset(self) -> None:
        self._metrics = TenantMetrics()


# =============================================================================
# Audit Hook
# =============================================================================


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """Represents an audit event for a tenant operation."""

    event_type: str
    tenant_id: str
    timestamp: datetime
    details: tuple[tuple[str, Any], ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "tenant_id": self.tenant_id,
            "timestamp": self.timestamp.isoformat(),
            "details": dict(self.details),
        }


class AuditTenantHook(BaseTenantHook):
    """Hook that keeps an in-memory audit trail.

    The trail is bounded by ``max_events``; the oldest events are dropped.
    """

    def __init__(self, *, max_events: int = 10000) -> None:
        self.max_events = max_events
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def events_for(self, tenant_id: str) -> list[AuditEvent]:
        return [event for event in self._events if event.tenant_id == tenant_id]

    def _add_event(self, event_type: str, tenant_id: str, **details: Any) -> None:
        self._events.append(
            AuditEvent(
                event_type=event_type,
                tenant_id=tenant_id,
                timestamp=datetime.now(UTC),
                details=tuple(details.items()),
            )
        )
        if len(self._events) > self.max_events:
            self._events = self._events[-self.max_events :]

    def on_tenant_created(self, tenant: Tenant) -> None:
        self._add_event(
            "tenant_created",
            tenant.tenant_id,
            name=tenant.name,
            domain=tenant.domain,
            plan=tenant.plan.value,
        )

    def on_tenant_updated(self, tenant: Tenant, *, previous: Tenant) -> None:
        changes = {}
        for attr in ("name", "domain", "subdomain", "region"):
            before, after = getattr(previous, attr), getattr(tenant, attr)
            if before != after:
                changes[attr] = (before, after)
        if previous.plan != tenant.plan:
            changes["plan"] = (previous.plan.value, tenant.plan.value)
        if previous.status != tenant.status:
            changes["status"] = (previous.status.value, tenant.status.value)
        self._add_event("tenant_updated", tenant.tenant_id, changes=changes)

    def on_tenant_deleted(self, tenant: Tenant, *, result: DeletionResult) -> None:
        details = result.to_dict()
        del details["tenant_id"]
        self._add_event("tenant_deleted", tenant.tenant_id, **details)

    def on_plan_changed(self, tenant: Tenant, *, previous_plan: TenantPlan) -> None:
        self._add_event(
            "plan_changed",
            tenant.tenant_id,
            previous=previous_plan.value,
            new=tenant.plan.value,
        )

    def on_status_changed(self, tenant: Tenant, *, previous_status: TenantStatus) -> None:
        self._add_event(
            "status_changed",
            tenant.tenant_id,
            previous=previous_status.value,
            new=tenant.status.value,
        )

    def on_quota_exceeded(self, tenant_id: str, *, check: QuotaCheck) -> None:
        details = check.to_dict()
        del details["tenant_id"]
        self._add_event("quota_exceeded", tenant_id, **details)

    def clear(self) -> None:
        self._events.clear()
