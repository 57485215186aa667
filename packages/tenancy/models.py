"""Tenant records.

The registry keeps four records per tenant, all keyed by tenant id:
Tenant, TenantConfig, ResourceQuota and TenantIsolation. Records are frozen
dataclasses; every change produces a new instance that replaces the old one
in the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, Self

from .config import plan_features
from .types import (
    IsolationDomain,
    Pairs,
    QuotaValue,
    ResourceKind,
    TenantMetadata,
    TenantPlan,
    TenantStatus,
    Unlimited,
    is_unlimited,
    plain_value,
)

if TYPE_CHECKING:
    from collections.abc import Mapping


# =============================================================================
# Tenant
# =============================================================================


@dataclass(frozen=True, slots=True)
class IsolationNamespaces:
    """Logical partition identifiers derived from a tenant id."""

    database: str
    storage: str
    cache: str
    queue: str
    network: str
    security: str

    @classmethod
    def for_tenant(cls, tenant_id: str, bucket_prefix: str = "tenant") -> IsolationNamespaces:
        return cls(
            database=f"tenant_{tenant_id}",
            storage=f"{bucket_prefix}-{tenant_id}",
            cache=f"tenant:{tenant_id}:",
            queue=f"tenant.{tenant_id}",
            network=f"net-{tenant_id[:12]}",
            security=f"key-{tenant_id}",
        )

    def for_domain(self, domain: IsolationDomain) -> str:
        return getattr(self, domain.value)

    def to_dict(self) -> dict[str, str]:
        return {domain.value: self.for_domain(domain) for domain in IsolationDomain}


@dataclass(frozen=True, slots=True)
class TenantSettings:
    """Per-tenant branding, feature flags and limit overrides.

    Attributes:
        branding: Branding key/value pairs (logo, colors, ...).
        feature_flags: Explicit (feature, enabled) flags layered over the
            plan's feature set.
        limit_overrides: (resource, ceiling) pairs replacing plan defaults.
    """

    branding: Pairs = ()
    feature_flags: tuple[tuple[str, bool], ...] = ()
    limit_overrides: tuple[tuple[ResourceKind, QuotaValue], ...] = ()

    def get_branding(self, key: str, default: Any = None) -> Any:
        for k, v in self.branding:
            if k == key:
                return v
        return default

    def with_branding(self, branding: Mapping[str, Any]) -> Self:
        """Return new settings with branding keys added or replaced."""
        merged = dict(self.branding)
        merged.update(branding)
        return replace(self, branding=tuple(merged.items()))

    def with_feature_flags(self, flags: Mapping[str, bool]) -> Self:
        merged = dict(self.feature_flags)
        merged.update(flags)
        return replace(self, feature_flags=tuple(merged.items()))

    def with_limit_overrides(self, overrides: Mapping[ResourceKind, QuotaValue]) -> Self:
        merged = dict(self.limit_overrides)
        merged.update(overrides)
        return replace(self, limit_overrides=tuple(merged.items()))

    def resolve_features(self, plan: TenantPlan) -> frozenset[str]:
        """Combine the plan's features with the explicit flags."""
        enabled = frozenset(name for name, on in self.feature_flags if on)
        disabled = frozenset(name for name, on in self.feature_flags if not on)
        return plan_features(plan, enabled) - disabled

    def to_dict(self) -> dict[str, Any]:
        return {
            "branding": dict(self.branding),
            "features": dict(self.feature_flags),
            "limits": {kind.value: plain_value(value) for kind, value in self.limit_overrides},
        }


@dataclass(frozen=True, slots=True)
class Tenant:
    """A logically isolated customer account.

    Attributes:
        tenant_id: Unique identifier, immutable.
        name: Human-readable name.
        domain: Primary domain (normalized, lower case).
        subdomain: Subdomain (normalized, lower case).
        plan: Subscription plan.
        status: Lifecycle status.
        region: Deployment region.
        settings: Branding, feature flags and limit overrides.
        namespaces: Isolation namespace identifiers.
        metadata: Audit timestamps.
    """

    tenant_id: str
    name: str
    domain: str
    subdomain: str
    namespaces: IsolationNamespaces
    plan: TenantPlan = TenantPlan.STANDARD
    status: TenantStatus = TenantStatus.ACTIVE
    region: str = "us-east-1"
    settings: TenantSettings = field(default_factory=TenantSettings)
    metadata: TenantMetadata = field(default_factory=TenantMetadata.now)

    def __post_init__(self) -> None:
        if not self.tenant_id:
            raise ValueError("Tenant ID cannot be empty")

    @property
    def is_active(self) -> bool:
        return self.status.is_operational

    @property
    def created_at(self) -> datetime:
        return self.metadata.created_at

    @property
    def updated_at(self) -> datetime:
        return self.metadata.updated_at

    @property
    def features(self) -> frozenset[str]:
        """The resolved set of enabled features."""
        return self.settings.resolve_features(self.plan)

    def matches_domain(self, value: str) -> bool:
        """Check whether ``value`` equals the domain or the subdomain."""
        value = value.strip().lower()
        return value in (self.domain, self.subdomain)

    def touched(self, **changes: Any) -> Self:
        """Return a copy with the given fields replaced and ``updated_at`` refreshed."""
        return replace(self, metadata=self.metadata.touched(), **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "name": self.name,
            "domain": self.domain,
            "subdomain": self.subdomain,
            "plan": self.plan.value,
            "status": self.status.value,
            "region": self.region,
            "settings": self.settings.to_dict(),
            "namespaces": self.namespaces.to_dict(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


# =============================================================================
# Tenant Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class DatabaseConnection:
    """Connection parameters for a tenant's database partition.

    Only the hash of the generated credential is kept.
    """

    host: str
    port: int
    database: str
    username: str
    password_hash: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "username": self.username,
            "password_hash": self.password_hash,
        }


@dataclass(frozen=True, slots=True)
class TenantConfig:
    """Derived runtime configuration for one tenant."""

    tenant_id: str
    database: DatabaseConnection
    storage_bucket: str
    cache_namespace: str
    queue_name: str
    region: str
    features: frozenset[str] = frozenset()

    def with_features(self, features: frozenset[str]) -> Self:
        return replace(self, features=features)

    def with_region(self, region: str) -> Self:
        return replace(self, region=region)

    def has_feature(self, feature: str) -> bool:
        return feature in self.features

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "database": self.database.to_dict(),
            "storage_bucket": self.storage_bucket,
            "cache_namespace": self.cache_namespace,
            "queue_name": self.queue_name,
            "region": self.region,
            "features": sorted(self.features),
        }


# =============================================================================
# Resource Quota
# =============================================================================


@dataclass(frozen=True, slots=True)
class ResourceQuota:
    """Ceilings and running usage counters for one tenant.

    Attributes:
        tenant_id: The owning tenant.
        resources: Requested logical units per resource.
        limits: Ceilings per resource; mirrors ``resources``.
        usage: Running counters per resource.
    """

    tenant_id: str
    resources: tuple[tuple[ResourceKind, QuotaValue], ...]
    limits: tuple[tuple[ResourceKind, QuotaValue], ...]
    usage: tuple[tuple[ResourceKind, int], ...]

    @classmethod
    def create(cls, tenant_id: str, limits: Mapping[ResourceKind, QuotaValue]) -> ResourceQuota:
        """Build a quota with zero usage for every resource."""
        pairs = tuple((kind, limits[kind]) for kind in ResourceKind)
        return cls(
            tenant_id=tenant_id,
            resources=pairs,
            limits=pairs,
            usage=tuple((kind, 0) for kind in ResourceKind),
        )

    def get_limit(self, resource: ResourceKind) -> QuotaValue:
        return dict(self.limits)[resource]

    def get_usage(self, resource: ResourceKind) -> int:
        return dict(self.usage).get(resource, 0)

    def is_unlimited(self, resource: ResourceKind) -> bool:
        return is_unlimited(self.get_limit(resource))

    def remaining(self, resource: ResourceKind) -> QuotaValue:
        """Headroom left under the limit. May be negative after overshoot."""
        limit = self.get_limit(resource)
        if isinstance(limit, Unlimited):
            return limit
        return limit - self.get_usage(resource)

    def utilization(self, resource: ResourceKind) -> float:
        """Usage as a percentage of the limit, 0 for unlimited resources."""
        limit = self.get_limit(resource)
        if isinstance(limit, Unlimited):
            return 0.0
        usage = self.get_usage(resource)
        if limit == 0:
            return 100.0 if usage > 0 else 0.0
        return round(usage / limit * 100, 2)

    def with_usage(self, resource: ResourceKind, value: int) -> Self:
        counters = dict(self.usage)
        counters[resource] = value
        return replace(self, usage=tuple((kind, counters.get(kind, 0)) for kind in ResourceKind))

    def with_limits(
        self,
        limits: Mapping[ResourceKind, QuotaValue],
        *,
        preserve_usage: bool = True,
    ) -> Self:
        """Return a quota with replaced ceilings.

        Args:
            limits: New ceilings for every resource.
            preserve_usage: Keep the running counters; reset them otherwise.
        """
        pairs = tuple((kind, limits[kind]) for kind in ResourceKind)
        usage = self.usage if preserve_usage else tuple((kind, 0) for kind in ResourceKind)
        return replace(self, resources=pairs, limits=pairs, usage=usage)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "resources": {kind.value: plain_value(value) for kind, value in self.resources},
            "limits": {kind.value: plain_value(value) for kind, value in self.limits},
            "usage": {kind.value: value for kind, value in self.usage},
        }


# =============================================================================
# Isolation Descriptor
# =============================================================================


@dataclass(frozen=True, slots=True)
class TenantIsolation:
    """Declares how a tenant is to be separated from others.

    Purely descriptive; infrastructure outside the registry reads these
    descriptors and applies the actual isolation.
    """

    tenant_id: str
    namespaces: IsolationNamespaces
    database: bool = True
    storage: bool = True
    cache: bool = True
    queue: bool = True
    network: bool = True
    security: bool = True

    def is_enabled(self, domain: IsolationDomain) -> bool:
        return getattr(self, domain.value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "enabled": {domain.value: self.is_enabled(domain) for domain in IsolationDomain},
            "namespaces": self.namespaces.to_dict(),
        }


# =============================================================================
# Statistics
# =============================================================================


@dataclass(frozen=True, slots=True)
class ResourceStatistics:
    """Usage summary for a single resource."""

    resource: ResourceKind
    usage: int
    limit: QuotaValue
    utilization: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "usage": self.usage,
            "limit": plain_value(self.limit),
            "utilization": self.utilization,
        }


@dataclass(frozen=True, slots=True)
class TenantStatistics:
    """Aggregated view over all four records of a tenant."""

    tenant_id: str
    name: str
    domain: str
    plan: TenantPlan
    status: TenantStatus
    created_at: datetime
    resources: tuple[ResourceStatistics, ...]
    features: frozenset[str]
    isolation: TenantIsolation

    def resource(self, kind: ResourceKind) -> ResourceStatistics:
        for stats in self.resources:
            if stats.resource == kind:
                return stats
        raise KeyError(kind)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenant": {
                "tenant_id": self.tenant_id,
                "name": self.name,
                "domain": self.domain,
                "plan": self.plan.value,
                "status": self.status.value,
                "created_at": self.created_at.isoformat(),
            },
            "resources": {s.resource.value: s.to_dict() for s in self.resources},
            "features": sorted(self.features),
            "isolation": self.isolation.to_dict(),
        }
