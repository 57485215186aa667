"""Tenant registry for managing tenant lifecycle and resource quotas.

This module provides the central registry that owns, per tenant, the
Tenant record, its derived TenantConfig, its ResourceQuota and its
TenantIsolation descriptor. It exposes lifecycle operations (create,
update, delete) and quota enforcement queries.

Uses the singleton pattern with thread-safe access; registries can also
be instantiated directly for testing or multi-registry scenarios.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator

from common.logging import LogContext, get_logger

from .cleanup import NoOpCleanupHook
from .config import DEFAULT_CONFIG, RegistryConfig, plan_limits
from .credentials import PBKDF2CredentialHasher, generate_credential
from .exceptions import (
    DuplicateDomainError,
    TenantNotFoundError,
    TenantQuotaNotFoundError,
    TenantStoreError,
    TenantValidationError,
    UnknownResourceError,
)
from .isolation import IsolationReport, build_isolation
from .isolation import verify_isolation as verify_descriptor
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
from .storage import create_store
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
    TenantPlan,
    TenantStatus,
    is_unlimited,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .cleanup import ResourceCleanupHook
    from .credentials import CredentialHasher
    from .hooks import TenantHook
    from .storage import TenantStore


logger = get_logger(__name__)

_NOOP_CLEANUP = NoOpCleanupHook()

# Dependent records, removed in this order before the tenant record itself.
_DEPENDENT_KINDS: tuple[EntityKind, ...] = (
    EntityKind.ISOLATION,
    EntityKind.QUOTA,
    EntityKind.CONFIG,
)


# =============================================================================
# Input Normalization
# =============================================================================


def _require_text(field_name: str, value: str | None) -> str:
    if value is None or not str(value).strip():
        raise TenantValidationError(field_name)
    return str(value).strip()


def _normalize_host(field_name: str, value: str | None) -> str:
    return _require_text(field_name, value).lower()


def _parse_status(value: TenantStatus | str) -> TenantStatus:
    if isinstance(value, TenantStatus):
        return value
    try:
        return TenantStatus(str(value).strip().lower())
    except ValueError as e:
        raise TenantValidationError("status", f"Unknown tenant status '{value}'") from e


def _feature_flags(features: Mapping[str, bool] | Iterable[str]) -> dict[str, bool]:
    """Accept either explicit flags or a collection of enabled feature names."""
    if hasattr(features, "items"):
        return {str(name): bool(on) for name, on in features.items()}
    return {str(name): True for name in features}


def _limit_overrides(limits: Mapping[ResourceKind | str, Any]) -> dict[ResourceKind, QuotaValue]:
    overrides: dict[ResourceKind, QuotaValue] = {}
    for key, value in limits.items():
        kind = ResourceKind.parse(key)
        if is_unlimited(value):
            overrides[kind] = UNLIMITED
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise TenantValidationError(
                "limits",
                f"Limit for '{kind.value}' must be a non-negative integer or 'unlimited'",
            )
        overrides[kind] = value
    return overrides


def _require_amount(field_name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise TenantValidationError(field_name, f"{field_name} must be a non-negative integer")
    return value


@dataclass(frozen=True, slots=True)
class _PendingDeletion:
    """A partial deletion, with what a retry needs to re-run failed cleanups."""

    tenant: Tenant
    isolation: TenantIsolation | None
    result: DeletionResult


# =============================================================================
# Tenant Registry
# =============================================================================


@dataclass
class TenantRegistry:
    """Central registry for tenants, their quotas and isolation descriptors.

    Provides:
    - Lifecycle operations that keep the four per-tenant records consistent
    - Quota checks, usage accounting and atomic reservations
    - Lifecycle hooks for logging, metrics and auditing
    - Cleanup hooks orchestrated during delete

    Example:
        >>> registry = TenantRegistry()
        >>> tenant = registry.create_tenant("Acme", "acme.com", "acme", plan="basic")
        >>> registry.reserve_resource(tenant.tenant_id, "users", 10).allowed
        True
    """

    config: RegistryConfig = field(default_factory=lambda: DEFAULT_CONFIG)
    store: TenantStore | None = None
    hooks: list[TenantHook] = field(default_factory=list)
    cleanup_hooks: dict[IsolationDomain, ResourceCleanupHook] = field(default_factory=dict)
    hasher: CredentialHasher | None = None

    # Internal state
    _tenant_locks: dict[str, threading.RLock] = field(default_factory=dict, repr=False)
    _inconsistencies: dict[str, _PendingDeletion] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def __post_init__(self) -> None:
        if self.store is None:
            self.store = create_store(self.config.storage_backend)
        if self.hasher is None:
            self.hasher = PBKDF2CredentialHasher(iterations=self.config.credential_iterations)

    # -------------------------------------------------------------------------
    # Locking
    # -------------------------------------------------------------------------

    def _tenant_lock(self, tenant_id: str) -> threading.RLock:
        """Return the lock of a stored tenant.

        Unknown ids get a throwaway lock that is not registered, so lookups
        of absent tenants never grow the lock map.
        """
        with self._lock:
            lock = self._tenant_locks.get(tenant_id)
            if lock is None:
                lock = threading.RLock()
                if self.get_tenant(tenant_id) is not None:
                    self._tenant_locks[tenant_id] = lock
            return lock

    # -------------------------------------------------------------------------
    # Lifecycle Operations
    # -------------------------------------------------------------------------

    def create_tenant(
        self,
        name: str,
        domain: str,
        subdomain: str,
        *,
        plan: TenantPlan | str | None = None,
        branding: Mapping[str, Any] | None = None,
        features: Mapping[str, bool] | Iterable[str] | None = None,
        limits: Mapping[ResourceKind | str, Any] | None = None,
        region: str | None = None,
    ) -> Tenant:
        """Create a tenant together with its config, quota and isolation records.

        Args:
            name: Human-readable name.
            domain: Primary domain, unique across tenants.
            subdomain: Subdomain, unique across tenants.
            plan: Subscription plan (defaults to the config's default plan).
            branding: Initial branding settings.
            features: Feature flags, or names of extra features to enable.
            limits: Per-resource ceilings replacing the plan defaults.
            region: Deployment region (defaults to the config's region).

        Returns:
            The stored tenant.

        Raises:
            TenantValidationError: If a required field is empty.
            UnknownPlanError: If the plan name is not recognized.
            DuplicateDomainError: If the domain or subdomain is taken.
        """
        name = _require_text("name", name)
        domain = _normalize_host("domain", domain)
        subdomain = _normalize_host("subdomain", subdomain)
        resolved_plan = TenantPlan.parse(plan) if plan is not None else self.config.default_plan

        settings = TenantSettings()
        if branding:
            settings = settings.with_branding(branding)
        if features:
            settings = settings.with_feature_flags(_feature_flags(features))
        if limits:
            settings = settings.with_limit_overrides(_limit_overrides(limits))

        tenant_id = uuid.uuid4().hex
        namespaces = IsolationNamespaces.for_tenant(tenant_id, self.config.bucket_prefix)
        tenant = Tenant(
            tenant_id=tenant_id,
            name=name,
            domain=domain,
            subdomain=subdomain,
            namespaces=namespaces,
            plan=resolved_plan,
            region=region or self.config.default_region,
            settings=settings,
        )
        # Records, including the hashed credential, are built before locking.
        records = (
            (EntityKind.TENANT, tenant),
            (EntityKind.CONFIG, self._build_config(tenant)),
            (
                EntityKind.QUOTA,
                ResourceQuota.create(
                    tenant_id,
                    plan_limits(resolved_plan, dict(settings.limit_overrides)),
                ),
            ),
            (EntityKind.ISOLATION, build_isolation(tenant_id, namespaces)),
        )

        with self._lock:
            self._ensure_unique_domains(domain, subdomain)

            with LogContext(operation="create_tenant", tenant_id=tenant_id):
                self._store_records(tenant, records)
                logger.info(
                    "Tenant created",
                    name=name,
                    domain=domain,
                    plan=resolved_plan.value,
                )

        self._notify_hooks("on_tenant_created", tenant)
        return tenant

    def _store_records(
        self,
        tenant: Tenant,
        records: tuple[tuple[EntityKind, Any], ...],
    ) -> None:
        """Write the records of a new tenant, undoing earlier writes on failure."""
        written: list[EntityKind] = []
        try:
            for kind, record in records:
                self.store.put(kind, tenant.tenant_id, record)
                written.append(kind)
        except TenantStoreError:
            logger.exception(
                "Tenant creation failed, rolling back",
                written=[kind.value for kind in written],
            )
            for kind in reversed(written):
                self.store.delete(kind, tenant.tenant_id)
            raise

    def _build_config(self, tenant: Tenant) -> TenantConfig:
        credential = generate_credential(self.config.credential_length)
        namespaces = tenant.namespaces
        return TenantConfig(
            tenant_id=tenant.tenant_id,
            database=DatabaseConnection(
                host=self.config.database_host,
                port=self.config.database_port,
                database=namespaces.database,
                username=f"user_{tenant.tenant_id[:12]}",
                password_hash=self.hasher.hash(credential),
            ),
            storage_bucket=namespaces.storage,
            cache_namespace=namespaces.cache,
            queue_name=namespaces.queue,
            region=tenant.region,
            features=tenant.features,
        )

    def _ensure_unique_domains(
        self,
        domain: str,
        subdomain: str,
        *,
        exclude: str | None = None,
    ) -> None:
        if not self.config.enforce_unique_domains:
            return
        for existing in self.store.list(EntityKind.TENANT):
            if existing.tenant_id == exclude:
                continue
            for value in (domain, subdomain):
                if existing.matches_domain(value):
                    raise DuplicateDomainError(value, existing.tenant_id)

    def get_tenant(self, tenant_id: str) -> Tenant | None:
        """Get a tenant by ID, or None if it does not exist."""
        return self.store.get(EntityKind.TENANT, tenant_id)

    def require_tenant(self, tenant_id: str) -> Tenant:
        """Get a tenant by ID.

        Raises:
            TenantNotFoundError: If the tenant does not exist.
        """
        tenant = self.get_tenant(tenant_id)
        if tenant is None:
            raise TenantNotFoundError(tenant_id)
        return tenant

    def get_tenant_by_domain(self, domain: str) -> Tenant | None:
        """Find the tenant whose domain or subdomain equals ``domain``.

        The comparison is case-insensitive. Returns None if no tenant matches.
        """
        if not domain or not domain.strip():
            return None
        for tenant in self.store.list(EntityKind.TENANT):
            if tenant.matches_domain(domain):
                return tenant
        return None

    def get_tenant_config(self, tenant_id: str) -> TenantConfig | None:
        return self.store.get(EntityKind.CONFIG, tenant_id)

    def get_tenant_isolation(self, tenant_id: str) -> TenantIsolation | None:
        return self.store.get(EntityKind.ISOLATION, tenant_id)

    def get_resource_quota(self, tenant_id: str) -> ResourceQuota | None:
        return self.store.get(EntityKind.QUOTA, tenant_id)

    def update_tenant(
        self,
        tenant_id: str,
        *,
        name: str | None = None,
        domain: str | None = None,
        subdomain: str | None = None,
        plan: TenantPlan | str | None = None,
        status: TenantStatus | str | None = None,
        region: str | None = None,
        branding: Mapping[str, Any] | None = None,
        features: Mapping[str, bool] | Iterable[str] | None = None,
        limits: Mapping[ResourceKind | str, Any] | None = None,
    ) -> Tenant:
        """Update a tenant.

        Only the given fields change. Branding, feature flags and limit
        overrides merge key-wise with the existing settings. A plan change
        recomputes the quota ceilings and the config's feature set.

        Args:
            tenant_id: Tenant to update.
            name: New name.
            domain: New domain.
            subdomain: New subdomain.
            plan: New plan.
            status: New status.
            region: New region.
            branding: Branding keys to add or replace.
            features: Feature flags to add or replace.
            limits: Limit overrides to add or replace.

        Returns:
            The updated tenant.

        Raises:
            TenantNotFoundError: If the tenant does not exist.
            TenantValidationError: If a given field is empty or invalid, or if
                ``status`` is DELETED.
            UnknownPlanError: If the plan name is not recognized.
            DuplicateDomainError: If the new domain or subdomain is taken.
        """
        with self._lock, self._tenant_lock(tenant_id):
            previous = self.require_tenant(tenant_id)

            changes: dict[str, Any] = {}
            if name is not None:
                changes["name"] = _require_text("name", name)
            if domain is not None:
                changes["domain"] = _normalize_host("domain", domain)
            if subdomain is not None:
                changes["subdomain"] = _normalize_host("subdomain", subdomain)
            if plan is not None:
                changes["plan"] = TenantPlan.parse(plan)
            if status is not None:
                changes["status"] = _parse_status(status)
                if changes["status"] == TenantStatus.DELETED:
                    raise TenantValidationError(
                        "status", "Tenants are removed with delete_tenant"
                    )
            if region is not None:
                changes["region"] = _require_text("region", region)

            settings = previous.settings
            if branding:
                settings = settings.with_branding(branding)
            if features:
                settings = settings.with_feature_flags(_feature_flags(features))
            if limits:
                settings = settings.with_limit_overrides(_limit_overrides(limits))
            if settings != previous.settings:
                changes["settings"] = settings

            if "domain" in changes or "subdomain" in changes:
                self._ensure_unique_domains(
                    changes.get("domain", previous.domain),
                    changes.get("subdomain", previous.subdomain),
                    exclude=tenant_id,
                )

            tenant = previous.touched(**changes)

            with LogContext(operation="update_tenant", tenant_id=tenant_id):
                self.store.put(EntityKind.TENANT, tenant_id, tenant)

                plan_changed = tenant.plan != previous.plan
                if plan_changed or settings.limit_overrides != previous.settings.limit_overrides:
                    self._recompute_quota(tenant)
                if (
                    plan_changed
                    or settings.feature_flags != previous.settings.feature_flags
                    or tenant.region != previous.region
                ):
                    self._refresh_config(tenant)

                logger.info("Tenant updated", fields=sorted(changes))

        self._notify_hooks("on_tenant_updated", tenant, previous=previous)
        if tenant.plan != previous.plan:
            self._notify_hooks("on_plan_changed", tenant, previous_plan=previous.plan)
        if tenant.status != previous.status:
            self._notify_hooks("on_status_changed", tenant, previous_status=previous.status)
        return tenant

    def _recompute_quota(self, tenant: Tenant) -> None:
        quota = self.get_resource_quota(tenant.tenant_id)
        if quota is None:
            raise TenantQuotaNotFoundError(tenant.tenant_id)
        limits = plan_limits(tenant.plan, dict(tenant.settings.limit_overrides))
        self.store.put(
            EntityKind.QUOTA,
            tenant.tenant_id,
            quota.with_limits(limits, preserve_usage=self.config.preserve_usage_on_plan_change),
        )
        logger.debug("Quota limits recomputed", plan=tenant.plan.value)

    def _refresh_config(self, tenant: Tenant) -> None:
        config = self.get_tenant_config(tenant.tenant_id)
        if config is None:
            logger.warning("Tenant config missing, features not refreshed")
            return
        self.store.put(
            EntityKind.CONFIG,
            tenant.tenant_id,
            config.with_features(tenant.features).with_region(tenant.region),
        )

    def suspend_tenant(self, tenant_id: str, *, reason: str | None = None) -> Tenant:
        """Suspend a tenant. Suspended tenants fail access validation."""
        if reason:
            logger.info("Suspending tenant", tenant_id=tenant_id, reason=reason)
        return self.update_tenant(tenant_id, status=TenantStatus.SUSPENDED)

    def activate_tenant(self, tenant_id: str) -> Tenant:
        """Activate a tenant."""
        return self.update_tenant(tenant_id, status=TenantStatus.ACTIVE)

    def delete_tenant(self, tenant_id: str) -> DeletionResult:
        """Delete a tenant and all of its records.

        Runs the cleanup hook of every data-holding domain, then removes
        the isolation, quota and config records and finally the tenant
        record. A failing cleanup hook does not stop the sequence. If a
        dependent record cannot be removed, the tenant record is kept.

        A partial deletion can be retried by calling this method again,
        even once the tenant record is gone: the retry only re-runs the
        cleanup hooks that failed and removes whatever records remain.

        Args:
            tenant_id: Tenant to delete.

        Returns:
            The outcome of the delete sequence.

        Raises:
            TenantNotFoundError: If the tenant does not exist and has no
                pending partial deletion.
        """
        with self._lock, self._tenant_lock(tenant_id):
            tenant = self.get_tenant(tenant_id)
            pending = self._inconsistencies.get(tenant_id)
            if tenant is None and pending is None:
                raise TenantNotFoundError(tenant_id)

            isolation = self.get_tenant_isolation(tenant_id)
            domains: Iterable[IsolationDomain] = CLEANUP_DOMAINS
            if pending is not None:
                if tenant is None:
                    tenant = pending.tenant
                if isolation is None:
                    isolation = pending.isolation
                domains = [d for d in CLEANUP_DOMAINS if d in pending.result.failed_cleanups]

            with LogContext(operation="delete_tenant", tenant_id=tenant_id):
                failed_cleanups = self._run_cleanups(tenant, isolation, domains)

                remaining: set[EntityKind] = set()
                for kind in _DEPENDENT_KINDS:
                    if not self._delete_record(kind, tenant_id):
                        remaining.add(kind)

                if remaining:
                    remaining.add(EntityKind.TENANT)
                elif not self._delete_record(EntityKind.TENANT, tenant_id):
                    remaining.add(EntityKind.TENANT)

                complete = not remaining and not failed_cleanups
                result = DeletionResult(
                    tenant_id=tenant_id,
                    status=(
                        DeletionStatus.FULLY_DELETED
                        if complete
                        else DeletionStatus.PARTIALLY_DELETED
                    ),
                    remaining=frozenset(remaining),
                    failed_cleanups=frozenset(failed_cleanups),
                )

                if complete:
                    self._inconsistencies.pop(tenant_id, None)
                    logger.info("Tenant deleted", retried=pending is not None)
                else:
                    self._inconsistencies[tenant_id] = _PendingDeletion(
                        tenant=tenant,
                        isolation=isolation,
                        result=result,
                    )
                    logger.warning("Tenant partially deleted", **result.to_dict())

            if EntityKind.TENANT not in remaining:
                self._tenant_locks.pop(tenant_id, None)

        self._notify_hooks("on_tenant_deleted", tenant, result=result)
        return result

    def _run_cleanups(
        self,
        tenant: Tenant,
        isolation: TenantIsolation | None,
        domains: Iterable[IsolationDomain],
    ) -> set[IsolationDomain]:
        failed: set[IsolationDomain] = set()
        for domain in domains:
            hook = self.cleanup_hooks.get(domain, _NOOP_CLEANUP)
            try:
                hook.cleanup(tenant, domain, isolation)
            except Exception:
                logger.exception("Resource cleanup failed", domain=domain.value)
                failed.add(domain)
        return failed

    def _delete_record(self, kind: EntityKind, tenant_id: str) -> bool:
        """Delete one record. Returns False only if the store failed."""
        try:
            self.store.delete(kind, tenant_id)
        except TenantStoreError:
            logger.exception("Record removal failed", kind=kind.value)
            return False
        return True

    def list_inconsistencies(self) -> list[DeletionResult]:
        """Return the partial deletions that have not been retried successfully."""
        with self._lock:
            return [pending.result for pending in self._inconsistencies.values()]

    # -------------------------------------------------------------------------
    # Quota Operations
    # -------------------------------------------------------------------------

    def _require_quota(self, tenant_id: str) -> ResourceQuota:
        quota = self.get_resource_quota(tenant_id)
        if quota is None:
            raise TenantQuotaNotFoundError(tenant_id)
        return quota

    @staticmethod
    def _check(
        quota: ResourceQuota,
        resource: ResourceKind,
        requested: int,
    ) -> QuotaCheck:
        limit = quota.get_limit(resource)
        usage = quota.get_usage(resource)
        if is_unlimited(limit):
            return QuotaCheck(
                tenant_id=quota.tenant_id,
                resource=resource,
                requested=requested,
                allowed=True,
                remaining=UNLIMITED,
                limit=UNLIMITED,
                current_usage=usage,
            )
        remaining = limit - usage
        return QuotaCheck(
            tenant_id=quota.tenant_id,
            resource=resource,
            requested=requested,
            allowed=remaining >= requested,
            remaining=remaining,
            limit=limit,
            current_usage=usage,
        )

    def check_resource_quota(
        self,
        tenant_id: str,
        resource: ResourceKind | str,
        requested_amount: int = 1,
    ) -> QuotaCheck:
        """Check whether ``requested_amount`` more of a resource fits under its limit.

        Pure read. A check followed by ``update_resource_usage`` is not
        atomic; use ``reserve_resource`` for that.

        Raises:
            TenantQuotaNotFoundError: If the tenant has no quota record.
            TenantValidationError: If ``requested_amount`` is negative.
            UnknownResourceError: If the resource name is not recognized.
        """
        kind = ResourceKind.parse(resource)
        _require_amount("requested_amount", requested_amount)
        return self._check(self._require_quota(tenant_id), kind, requested_amount)

    def update_resource_usage(
        self,
        tenant_id: str,
        resource: ResourceKind | str,
        delta: int,
    ) -> int:
        """Add ``delta`` to the usage counter of a resource.

        ``delta`` may be negative. The counter is not clamped to the limit.

        Returns:
            The new usage value.

        Raises:
            TenantQuotaNotFoundError: If the tenant has no quota record.
            UnknownResourceError: If the resource name is not recognized.
        """
        kind = ResourceKind.parse(resource)
        with self._tenant_lock(tenant_id):
            quota = self._require_quota(tenant_id)
            usage = quota.get_usage(kind) + delta
            self.store.put(EntityKind.QUOTA, tenant_id, quota.with_usage(kind, usage))
        logger.debug(
            "Resource usage updated",
            tenant_id=tenant_id,
            resource=kind.value,
            delta=delta,
            usage=usage,
        )
        return usage

    def reserve_resource(
        self,
        tenant_id: str,
        resource: ResourceKind | str,
        amount: int = 1,
    ) -> QuotaCheck:
        """Atomically check the quota and, if allowed, consume ``amount``.

        Returns:
            The check as evaluated before the increment. Usage only changes
            when ``allowed`` is true.

        Raises:
            TenantValidationError: If ``amount`` is negative.
            TenantQuotaNotFoundError: If the tenant has no quota record.
            UnknownResourceError: If the resource name is not recognized.
        """
        kind = ResourceKind.parse(resource)
        _require_amount("amount", amount)
        with self._tenant_lock(tenant_id):
            quota = self._require_quota(tenant_id)
            check = self._check(quota, kind, amount)
            if check.allowed:
                self.store.put(
                    EntityKind.QUOTA,
                    tenant_id,
                    quota.with_usage(kind, quota.get_usage(kind) + amount),
                )

        if not check.allowed:
            logger.warning("Resource reservation rejected", **check.to_dict())
            self._notify_hooks("on_quota_exceeded", tenant_id, check=check)
        return check

    def release_resource(
        self,
        tenant_id: str,
        resource: ResourceKind | str,
        amount: int = 1,
    ) -> int:
        """Give back ``amount`` of a resource. Usage never drops below zero.

        Returns:
            The new usage value.

        Raises:
            TenantQuotaNotFoundError: If the tenant has no quota record.
            TenantValidationError: If ``amount`` is negative.
        """
        kind = ResourceKind.parse(resource)
        _require_amount("amount", amount)
        with self._tenant_lock(tenant_id):
            quota = self._require_quota(tenant_id)
            usage = max(0, quota.get_usage(kind) - amount)
            self.store.put(EntityKind.QUOTA, tenant_id, quota.with_usage(kind, usage))
        return usage

    # -------------------------------------------------------------------------
    # Access Validation
    # -------------------------------------------------------------------------

    def validate_tenant_access(
        self,
        tenant_id: str,
        user_id: str | None,
        resource: ResourceKind | str,
    ) -> AccessDecision:
        """Check that a tenant exists, is active and has headroom for one unit.

        ``user_id`` is only recorded in logs; per-user authorization is
        handled elsewhere. An unrecognized resource name is denied rather
        than raised.
        """
        tenant = self.get_tenant(tenant_id)
        if tenant is None:
            decision = AccessDecision.deny("Tenant not found")
        elif not tenant.is_active:
            decision = AccessDecision.deny("Tenant is not active")
        else:
            try:
                check = self.check_resource_quota(tenant_id, resource, 1)
            except TenantQuotaNotFoundError:
                decision = AccessDecision.deny("Tenant quota not found")
            except UnknownResourceError:
                decision = AccessDecision.deny("Unknown resource")
            else:
                decision = (
                    AccessDecision.allow()
                    if check.allowed
                    else AccessDecision.deny("Resource quota exceeded")
                )

        logger.debug(
            "Tenant access validated",
            tenant_id=tenant_id,
            user_id=user_id,
            resource=resource.value if isinstance(resource, ResourceKind) else resource,
            allowed=decision.allowed,
            reason=decision.reason,
        )
        return decision

    # -------------------------------------------------------------------------
    # Query Operations
    # -------------------------------------------------------------------------

    def list_tenants(
        self,
        *,
        status: TenantStatus | str | None = None,
        plan: TenantPlan | str | None = None,
        search: str | None = None,
    ) -> list[Tenant]:
        """List tenants matching every given filter.

        Args:
            status: Only tenants with this status.
            plan: Only tenants on this plan.
            search: Case-insensitive substring of the name or domain.

        Returns:
            A snapshot list; later changes do not affect it.
        """
        wanted_status = _parse_status(status) if status is not None else None
        wanted_plan = TenantPlan.parse(plan) if plan is not None else None
        needle = search.lower() if search else None

        result = []
        for tenant in self.store.list(EntityKind.TENANT):
            if wanted_status is not None and tenant.status != wanted_status:
                continue
            if wanted_plan is not None and tenant.plan != wanted_plan:
                continue
            if needle and needle not in tenant.name.lower() and needle not in tenant.domain:
                continue
            result.append(tenant)
        return result

    def count_tenants(
        self,
        *,
        status: TenantStatus | str | None = None,
        plan: TenantPlan | str | None = None,
        search: str | None = None,
    ) -> int:
        return len(self.list_tenants(status=status, plan=plan, search=search))

    def exists(self, tenant_id: str) -> bool:
        return self.get_tenant(tenant_id) is not None

    def __iter__(self) -> Iterator[Tenant]:
        return iter(self.list_tenants())

    def __len__(self) -> int:
        return len(self.store.list(EntityKind.TENANT))

    def __contains__(self, tenant_id: str) -> bool:
        return self.exists(tenant_id)

    def get_tenant_statistics(self, tenant_id: str) -> TenantStatistics:
        """Summarize a tenant's usage, features and isolation.

        Raises:
            TenantNotFoundError: If the tenant or one of its records is missing.
        """
        tenant = self.require_tenant(tenant_id)
        quota = self.get_resource_quota(tenant_id)
        config = self.get_tenant_config(tenant_id)
        isolation = self.get_tenant_isolation(tenant_id)
        if quota is None or config is None or isolation is None:
            raise TenantNotFoundError(
                tenant_id,
                message=f"Tenant '{tenant_id}' has incomplete records",
            )

        resources = tuple(
            ResourceStatistics(
                resource=kind,
                usage=quota.get_usage(kind),
                limit=quota.get_limit(kind),
                utilization=quota.utilization(kind),
            )
            for kind in ResourceKind
        )
        return TenantStatistics(
            tenant_id=tenant.tenant_id,
            name=tenant.name,
            domain=tenant.domain,
            plan=tenant.plan,
            status=tenant.status,
            created_at=tenant.created_at,
            resources=resources,
            features=config.features,
            isolation=isolation,
        )

    def verify_isolation(self, tenant_id: str) -> IsolationReport:
        """Verify the tenant's isolation descriptor.

        Raises:
            TenantNotFoundError: If the tenant has no isolation descriptor.
        """
        isolation = self.get_tenant_isolation(tenant_id)
        if isolation is None:
            raise TenantNotFoundError(tenant_id)
        report = verify_descriptor(isolation)
        if not report.passed:
            logger.warning(
                "Isolation verification failed",
                tenant_id=tenant_id,
                failed=sorted(d.value for d in report.failed_domains),
            )
        return report

    # -------------------------------------------------------------------------
    # Hook Management
    # -------------------------------------------------------------------------

    def add_hook(self, hook: TenantHook) -> None:
        """Add a lifecycle hook."""
        self.hooks.append(hook)

    def remove_hook(self, hook: TenantHook) -> None:
        """Remove a lifecycle hook."""
        self.hooks.remove(hook)

    def set_cleanup_hook(self, domain: IsolationDomain, hook: ResourceCleanupHook) -> None:
        self.cleanup_hooks[domain] = hook

    def _notify_hooks(self, event: str, *args: Any, **kwargs: Any) -> None:
        """Notify all hooks of an event. Hook failures are logged, not raised."""
        for hook in self.hooks:
            handler = getattr(hook, event, None)
            if handler:
                try:
                    handler(*args, **kwargs)
                except Exception:
                    logger.exception(
                        "Tenant hook failed",
                        hook=type(hook).__name__,
                        event=event,
                    )

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """Reset the registry (for testing).

        Clears all records, locks and recorded inconsistencies.
        """
        with self._lock:
            self.store.clear()
            self._tenant_locks.clear()
            self._inconsistencies.clear()


# =============================================================================
# Singleton Management
# =============================================================================

_registry: TenantRegistry | None = None
_registry_lock = threading.Lock()


def get_registry() -> TenantRegistry:
    """Get the global tenant registry singleton.

    Returns:
        The global tenant registry.
    """
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = TenantRegistry()
    return _registry


def configure_registry(
    config: RegistryConfig | None = None,
    store: TenantStore | None = None,
    hooks: list[TenantHook] | None = None,
    cleanup_hooks: dict[IsolationDomain, ResourceCleanupHook] | None = None,
    hasher: CredentialHasher | None = None,
) -> TenantRegistry:
    """Configure the global tenant registry.

    Args:
        config: Registry configuration.
        store: Record store (defaults to the config's backend).
        hooks: Lifecycle hooks.
        cleanup_hooks: Cleanup hook per isolation domain.
        hasher: Credential hasher.

    Returns:
        The configured registry.
    """
    global _registry
    with _registry_lock:
        _registry = TenantRegistry(
            config=config or DEFAULT_CONFIG,
            store=store,
            hooks=hooks or [],
            cleanup_hooks=cleanup_hooks or {},
            hasher=hasher,
        )
    return _registry


def reset_registry() -> None:
    """Reset the global tenant registry.

    Useful for testing.
    """
    global _registry
    with _registry_lock:
        if _registry:
            _registry.reset()
        _registry = None


# =============================================================================
# Convenience Functions
# =============================================================================


def create_tenant(name: str, domain: str, subdomain: str, **kwargs: Any) -> Tenant:
    """Create a tenant using the global registry."""
    return get_registry().create_tenant(name, domain, subdomain, **kwargs)


def get_tenant(tenant_id: str) -> Tenant | None:
    """Get a tenant using the global registry."""
    return get_registry().get_tenant(tenant_id)


def get_tenant_by_domain(domain: str) -> Tenant | None:
    """Resolve a domain or subdomain using the global registry."""
    return get_registry().get_tenant_by_domain(domain)


def list_tenants(**kwargs: Any) -> list[Tenant]:
    """List tenants using the global registry."""
    return get_registry().list_tenants(**kwargs)


def tenant_exists(tenant_id: str) -> bool:
    """Check if a tenant exists using the global registry."""
    return get_registry().exists(tenant_id)


def check_resource_quota(
    tenant_id: str,
    resource: ResourceKind | str,
    requested_amount: int = 1,
) -> QuotaCheck:
    """Check a quota using the global registry."""
    return get_registry().check_resource_quota(tenant_id, resource, requested_amount)


def reserve_resource(tenant_id: str, resource: ResourceKind | str, amount: int = 1) -> QuotaCheck:
    """Reserve quota using the global registry."""
    return get_registry().reserve_resource(tenant_id, resource, amount)


def validate_tenant_access(
    tenant_id: str,
    user_id: str | None,
    resource: ResourceKind | str,
) -> AccessDecision:
    """Validate tenant access using the global registry."""
    return get_registry().validate_tenant_access(tenant_id, user_id, resource)
