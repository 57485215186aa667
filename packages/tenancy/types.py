"""Tenancy type definitions and enumerations.

This module defines the enums and small value objects used throughout the
tenancy package. All enums use string values for JSON serialization
compatibility and human readability.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Union

from .exceptions import TenantQuotaExceededError, UnknownPlanError, UnknownResourceError


# =============================================================================
# Tenant Status and Plans
# =============================================================================


class TenantStatus(str, Enum):
    """Lifecycle status of a tenant.

    - ACTIVE: Tenant is fully operational
    - SUSPENDED: Tenant temporarily disabled (can be reactivated)
    - DELETED: Tenant is being torn down
    """

    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"

    @property
    def is_operational(self) -> bool:
        """Check if the tenant can consume resources."""
        return self == TenantStatus.ACTIVE


class TenantPlan(str, Enum):
    """Subscription plan of a tenant.

    The plan selects the default quota ceilings and enabled features.
    """

    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"

    @classmethod
    def parse(cls, value: TenantPlan | str) -> TenantPlan:
        """Resolve a plan from an enum member or its name.

        Raises:
            UnknownPlanError: If the value names no plan.
        """
        if isinstance(value, TenantPlan):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise UnknownPlanError(str(value)) from e


# =============================================================================
# Resources
# =============================================================================


class ResourceKind(str, Enum):
    """Measurable resources a tenant consumes.

    - CPU: vCPU cores
    - MEMORY: memory in MB
    - STORAGE: storage in GB
    - BANDWIDTH: monthly transfer in GB
    - API_CALLS: API calls per billing period
    - USERS: user accounts
    """

    CPU = "cpu"
    MEMORY = "memory"
    STORAGE = "storage"
    BANDWIDTH = "bandwidth"
    API_CALLS = "api_calls"
    USERS = "users"

    @classmethod
    def parse(cls, value: ResourceKind | str) -> ResourceKind:
        """Resolve a resource from an enum member or its name.

        Raises:
            UnknownResourceError: If the value names no resource.
        """
        if isinstance(value, ResourceKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise UnknownResourceError(str(value)) from e


class Unlimited(str, Enum):
    """Sentinel for a ceiling that is never reached."""

    UNLIMITED = "unlimited"

    def __str__(self) -> str:
        return self.value


UNLIMITED = Unlimited.UNLIMITED

QuotaValue = Union[int, Unlimited]


def is_unlimited(value: Any) -> bool:
    """Check whether a quota value is the unlimited sentinel."""
    return value is UNLIMITED or value == UNLIMITED.value


# =============================================================================
# Isolation and Storage
# =============================================================================


class IsolationDomain(str, Enum):
    """Infrastructure domains a tenant is isolated in."""

    DATABASE = "database"
    STORAGE = "storage"
    CACHE = "cache"
    QUEUE = "queue"
    NETWORK = "network"
    SECURITY = "security"


# Domains that hold tenant data and need teardown on delete.
CLEANUP_DOMAINS: tuple[IsolationDomain, ...] = (
    IsolationDomain.DATABASE,
    IsolationDomain.STORAGE,
    IsolationDomain.CACHE,
    IsolationDomain.QUEUE,
)


class EntityKind(str, Enum):
    """Record kinds kept per tenant."""

    TENANT = "tenant"
    CONFIG = "config"
    QUOTA = "quota"
    ISOLATION = "isolation"


class DeletionStatus(str, Enum):
    """Outcome of a tenant deletion."""

    FULLY_DELETED = "fully_deleted"
    PARTIALLY_DELETED = "partially_deleted"


# =============================================================================
# Value Objects
# =============================================================================


@dataclass(frozen=True, slots=True)
class TenantMetadata:
    """Audit timestamps for a tenant record.

    Attributes:
        created_at: When the tenant was created.
        updated_at: When the tenant was last updated.
    """

    created_at: datetime
    updated_at: datetime

    @classmethod
    def now(cls) -> TenantMetadata:
        timestamp = datetime.now(UTC)
        return cls(created_at=timestamp, updated_at=timestamp)

    def touched(self) -> TenantMetadata:
        """Return a copy with ``updated_at`` refreshed."""
        return TenantMetadata(created_at=self.created_at, updated_at=datetime.now(UTC))


@dataclass(frozen=True, slots=True)
class QuotaCheck:
    """Result of checking a quota for a requested amount.

    Attributes:
        tenant_id: The tenant checked.
        resource: The resource checked.
        requested: The amount requested.
        allowed: Whether the request fits under the limit.
        remaining: Headroom before the request, or UNLIMITED.
        limit: The ceiling, or UNLIMITED.
        current_usage: Usage before the request.
    """

    tenant_id: str
    resource: ResourceKind
    requested: int
    allowed: bool
    remaining: QuotaValue
    limit: QuotaValue
    current_usage: int

    def __bool__(self) -> bool:
        return self.allowed

    def raise_for_denied(self) -> None:
        """Raise TenantQuotaExceededError if the check was denied."""
        if not self.allowed:
            raise TenantQuotaExceededError(
                self.tenant_id,
                self.resource.value,
                current_usage=self.current_usage,
                quota_limit=self.limit if isinstance(self.limit, int) else None,
                requested=self.requested,
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "resource": self.resource.value,
            "requested": self.requested,
            "allowed": self.allowed,
            "remaining": plain_value(self.remaining),
            "limit": plain_value(self.limit),
            "current_usage": self.current_usage,
        }


@dataclass(frozen=True, slots=True)
class AccessDecision:
    """Outcome of a composite tenant access check."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> AccessDecision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> AccessDecision:
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True, slots=True)
class DeletionResult:
    """Result of the delete sequence for one tenant.

    Attributes:
        tenant_id: The deleted tenant.
        status: FULLY_DELETED or PARTIALLY_DELETED.
        remaining: Record kinds that could not be removed.
        failed_cleanups: Domains whose cleanup hook failed.
    """

    tenant_id: str
    status: DeletionStatus
    remaining: frozenset[EntityKind] = frozenset()
    failed_cleanups: frozenset[IsolationDomain] = frozenset()

    @property
    def is_complete(self) -> bool:
        return self.status == DeletionStatus.FULLY_DELETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "status": self.status.value,
            "remaining": sorted(kind.value for kind in self.remaining),
            "failed_cleanups": sorted(domain.value for domain in self.failed_cleanups),
        }


def plain_value(value: QuotaValue) -> int | str:
    return value.value if isinstance(value, Unlimited) else value


# =============================================================================
# Type Aliases
# =============================================================================

# Key-value pairs stored on immutable records
Pairs = tuple[tuple[str, Any], ...]
