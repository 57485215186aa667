"""Tenant registry with resource quotas and isolation descriptors.

This module provides:

- **Tenant Management**: Create, update, suspend and delete tenants
- **Resource Quotas**: Plan-derived ceilings, usage accounting and atomic reservations
- **Isolation Descriptors**: Per-tenant namespaces and isolation verification
- **Storage Backends**: Pluggable stores for tenant records
- **Hooks**: Lifecycle hooks for logging, metrics and auditing, plus cleanup
  hooks run on delete

Quick Start
-----------

Basic tenant management::

    from packages.tenancy import TenantRegistry

    registry = TenantRegistry()
    tenant = registry.create_tenant("Acme", "acme.com", "acme", plan="basic")

    check = registry.reserve_resource(tenant.tenant_id, "users", 10)
    if not check:
        print(f"Only {check.remaining} users left")

Using the global registry::

    from packages.tenancy import configure_registry, create_tenant, TESTING_CONFIG

    configure_registry(config=TESTING_CONFIG)
    tenant = create_tenant("Acme", "acme.com", "acme")
"""

from __future__ import annotations

from .cleanup import CallbackCleanupHook, NoOpCleanupHook, ResourceCleanupHook
from .config import (
    DEFAULT_CONFIG,
    PLAN_FEATURES,
    PLAN_QUOTAS,
    PRODUCTION_CONFIG,
    TESTING_CONFIG,
    RegistryConfig,
    plan_features,
    plan_limits,
)
from .credentials import CredentialHasher, PBKDF2CredentialHasher, generate_credential
from .exceptions import (
    DuplicateDomainError,
    TenancyError,
    TenantNotFoundError,
    TenantQuotaExceededError,
    TenantQuotaNotFoundError,
    TenantStoreError,
    TenantValidationError,
    UnknownPlanError,
    UnknownResourceError,
)
from .hooks import (
    AuditEvent,
    AuditTenantHook,
    BaseTenantHook,
    LoggingTenantHook,
    MetricsTenantHook,
    TenantHook,
    TenantMetrics,
)
from .isolation import IsolationCheck, IsolationReport, build_isolation, verify_isolation
from .models import (
    DatabaseConnection,
    IsolationNamespaces,
    ResourceQuota,
    ResourceStatistics,
    Tenant,
    TenantConfig,
    TenantIsolation,
    TenantSettings,
    TenantStatistics,
)
from .registry import (
    TenantRegistry,
    check_resource_quota,
    configure_registry,
    create_tenant,
    get_registry,
    get_tenant,
    get_tenant_by_domain,
    list_tenants,
    reserve_resource,
    reset_registry,
    tenant_exists,
    validate_tenant_access,
)
from .storage import InMemoryTenantStore, TenantStore, create_store
from .types import (
    CLEANUP_DOMAINS,
    UNLIMITED,
    AccessDecision,
    DeletionResult,
    DeletionStatus,
    EntityKind,
    IsolationDomain,
    QuotaCheck,
    QuotaValue,
    ResourceKind,
    TenantMetadata,
    TenantPlan,
    TenantStatus,
    Unlimited,
    is_unlimited,
)

__all__ = [
    # Exceptions
    "TenancyError",
    "TenantNotFoundError",
    "TenantQuotaNotFoundError",
    "TenantQuotaExceededError",
    "DuplicateDomainError",
    "TenantValidationError",
    "UnknownPlanError",
    "UnknownResourceError",
    "TenantStoreError",
    # Types
    "TenantStatus",
    "TenantPlan",
    "ResourceKind",
    "Unlimited",
    "UNLIMITED",
    "QuotaValue",
    "is_unlimited",
    "IsolationDomain",
    "CLEANUP_DOMAINS",
    "EntityKind",
    "DeletionStatus",
    "TenantMetadata",
    "QuotaCheck",
    "AccessDecision",
    "DeletionResult",
    # Configuration
    "RegistryConfig",
    "DEFAULT_CONFIG",
    "TESTING_CONFIG",
    "PRODUCTION_CONFIG",
    "PLAN_QUOTAS",
    "PLAN_FEATURES",
    "plan_limits",
    "plan_features",
    # Models
    "Tenant",
    "TenantSettings",
    "IsolationNamespaces",
    "TenantConfig",
    "DatabaseConnection",
    "ResourceQuota",
    "TenantIsolation",
    "ResourceStatistics",
    "TenantStatistics",
    # Credentials
    "CredentialHasher",
    "PBKDF2CredentialHasher",
    "generate_credential",
    # Isolation
    "IsolationCheck",
    "IsolationReport",
    "build_isolation",
    "verify_isolation",
    # Storage
    "TenantStore",
    "InMemoryTenantStore",
    "create_store",
    # Hooks
    "TenantHook",
    "BaseTenantHook",
    "LoggingTenantHook",
    "MetricsTenantHook",
    "TenantMetrics",
    "AuditTenantHook",
    "AuditEvent",
    "ResourceCleanupHook",
    "NoOpCleanupHook",
    "CallbackCleanupHook",
    # Registry
    "TenantRegistry",
    "get_registry",
    "configure_registry",
    "reset_registry",
    "create_tenant",
    "get_tenant",
    "get_tenant_by_domain",
    "list_tenants",
    "tenant_exists",
    "check_resource_quota",
    "reserve_resource",
    "validate_tenant_access",
]
