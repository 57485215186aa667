"""Tenancy exception hierarchy.

All exceptions inherit from TenancyError, which itself inherits from
CoreError for consistency with the rest of the codebase.

Lookup failures on mutating operations are raised. "Not allowed" outcomes
of read-style checks are returned as values (see ``QuotaCheck`` and
``AccessDecision``) rather than raised.
"""

from __future__ import annotations

from typing import Any

from common.exceptions import CoreError


class TenancyError(CoreError):
    """Base exception for all tenancy operations."""


# =============================================================================
# Tenant Lifecycle Exceptions
# =============================================================================


class TenantNotFoundError(TenancyError):
    """Raised when an id does not resolve to any tenant record.

    Attributes:
        tenant_id: The ID of the tenant that was not found.
    """

    def __init__(
        self,
        tenant_id: str,
        *,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.tenant_id = tenant_id
        details = details or {}
        details["tenant_id"] = tenant_id
        super().__init__(message or f"Tenant '{tenant_id}' not found", details=details)


class DuplicateDomainError(TenancyError):
    """Raised when a domain or subdomain is already held by another tenant.

    Attributes:
        value: The colliding domain or subdomain.
        existing_tenant_id: The tenant currently holding it.
    """

    def __init__(
        self,
        value: str,
        existing_tenant_id: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.value = value
        self.existing_tenant_id = existing_tenant_id
        details = details or {}
        details["existing_tenant_id"] = existing_tenant_id
        super().__init__(
            f"Domain '{value}' is already used by tenant '{existing_tenant_id}'",
            details=details,
        )


class TenantValidationError(TenancyError):
    """Raised when tenant input data is incomplete or malformed.

    Attributes:
        field_name: The offending field.
    """

    def __init__(
        self,
        field_name: str,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.field_name = field_name
        details = details or {}
        details["field"] = field_name
        super().__init__(message or f"Tenant field '{field_name}' is required", details=details)


class UnknownPlanError(TenancyError):
    """Raised when a plan name is not one of the supported plans."""

    def __init__(self, plan: str) -> None:
        self.plan = plan
        super().__init__(f"Unknown plan '{plan}'", details={"plan": plan})


class UnknownResourceError(TenancyError):
    """Raised when a resource name is not a tracked resource kind."""

    def __init__(self, resource: str) -> None:
        self.resource = resource
        super().__init__(f"Unknown resource '{resource}'", details={"resource": resource})


# =============================================================================
# Quota Exceptions
# =============================================================================


class TenantQuotaNotFoundError(TenancyError):
    """Raised when a tenant has no quota record.

    Implies the tenant does not exist or was never fully initialized.
    """

    def __init__(self, tenant_id: str) -> None:
        self.tenant_id = tenant_id
        super().__init__(
            f"No resource quota found for tenant '{tenant_id}'",
            details={"tenant_id": tenant_id},
        )


class TenantQuotaExceededError(TenancyError):
    """Raised when a caller asks for an exception on a denied reservation.

    Attributes:
        tenant_id: The tenant whose quota was exceeded.
        resource: The resource name.
        current_usage: Usage at the time of the check.
        quota_limit: The ceiling.
        requested: The requested amount.
    """

    def __init__(
        self,
        tenant_id: str,
        resource: str,
        *,
        current_usage: int | None = None,
        quota_limit: int | None = None,
        requested: int | None = None,
    ) -> None:
        self.tenant_id = tenant_id
        self.resource = resource
        self.current_usage = current_usage
        self.quota_limit = quota_limit
        self.requested = requested
        msg = f"Tenant '{tenant_id}' exceeded {resource} quota"
        if current_usage is not None and quota_limit is not None:
            msg += f" (usage: {current_usage}, limit: {quota_limit})"
        details: dict[str, Any] = {"tenant_id": tenant_id, "resource": resource}
        if current_usage is not None:
            details["current_usage"] = current_usage
        if quota_limit is not None:
            details["quota_limit"] = quota_limit
        if requested is not None:
            details["requested"] = requested
        super().__init__(msg, details=details)


# =============================================================================
# Storage Exceptions
# =============================================================================


class TenantStoreError(TenancyError):
    """Raised when a store backend fails to read or write a record.

    Attributes:
        operation: The store operation that failed (get, put, delete, ...).
        tenant_id: The tenant whose record was involved, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        tenant_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.operation = operation
        self.tenant_id = tenant_id
        details = details or {}
        if operation:
            details["operation"] = operation
        if tenant_id:
            details["tenant_id"] = tenant_id
        super().__init__(message, details=details)
