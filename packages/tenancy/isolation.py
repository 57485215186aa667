"""Isolation descriptor construction and verification.

The registry never applies isolation itself; it records a descriptor per
tenant and can report whether that descriptor is sound: every domain is
enabled and every namespace is scoped to the tenant's id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .models import IsolationNamespaces, TenantIsolation
from .types import IsolationDomain


def build_isolation(tenant_id: str, namespaces: IsolationNamespaces) -> TenantIsolation:
    """Create the descriptor for a new tenant with every domain enabled."""
    return TenantIsolation(tenant_id=tenant_id, namespaces=namespaces)


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True, slots=True)
class IsolationCheck:
    """Outcome of verifying one isolation domain."""

    domain: IsolationDomain
    passed: bool
    namespace: str
    message: str

    def __bool__(self) -> bool:
        return self.passed

    def to_dict(self) -> dict[str, Any]:
        return {
            "check": f"{self.domain.value}_isolation",
            "status": "passed" if self.passed else "failed",
            "namespace": self.namespace,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class IsolationReport:
    """Per-domain verification results for one tenant."""

    tenant_id: str
    checks: tuple[IsolationCheck, ...]
    verified_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks)

    @property
    def failed_domains(self) -> frozenset[IsolationDomain]:
        return frozenset(check.domain for check in self.checks if not check.passed)

    def __bool__(self) -> bool:
        return self.passed

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "overall_status": "passed" if self.passed else "failed",
            "checks": [check.to_dict() for check in self.checks],
            "verified_at": self.verified_at.isoformat(),
        }


# =============================================================================
# Verification
# =============================================================================


def _is_scoped(tenant_id: str, domain: IsolationDomain, namespace: str) -> bool:
    # Network names are length limited and carry only an id prefix.
    if domain == IsolationDomain.NETWORK:
        return tenant_id[:12] in namespace
    return tenant_id in namespace


def check_domain(isolation: TenantIsolation, domain: IsolationDomain) -> IsolationCheck:
    """Verify a single domain of an isolation descriptor."""
    namespace = isolation.namespaces.for_domain(domain)
    if not isolation.is_enabled(domain):
        return IsolationCheck(domain, False, namespace, f"{domain.value} isolation is disabled")
    if not _is_scoped(isolation.tenant_id, domain, namespace):
        return IsolationCheck(
            domain,
            False,
            namespace,
            f"{domain.value} namespace '{namespace}' is not scoped to the tenant",
        )
    return IsolationCheck(domain, True, namespace, f"{domain.value} isolation verified")


def verify_isolation(isolation: TenantIsolation) -> IsolationReport:
    """Verify every domain of an isolation descriptor.

    Args:
        isolation: The descriptor to verify.

    Returns:
        A report that passes only when every domain check passes.
    """
    checks = tuple(check_domain(isolation, domain) for domain in IsolationDomain)
    return IsolationReport(tenant_id=isolation.tenant_id, checks=checks)
