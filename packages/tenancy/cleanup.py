"""Resource cleanup hooks run while deleting a tenant.

The registry only orchestrates teardown. Each isolated domain (database,
storage, cache, queue) is handed to a ResourceCleanupHook that talks to the
real infrastructure; the defaults here do nothing but log.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from common.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from .models import Tenant, TenantIsolation
    from .types import IsolationDomain


logger = get_logger(__name__)


@runtime_checkable
class ResourceCleanupHook(Protocol):
    """Protocol for tearing down one isolated resource domain."""

    def cleanup(
        self,
        tenant: Tenant,
        domain: IsolationDomain,
        isolation: TenantIsolation | None,
    ) -> None:
        """Release everything the tenant holds in ``domain``.

        Args:
            tenant: The tenant being deleted.
            domain: The domain to tear down.
            isolation: The tenant's isolation descriptor, if still present.

        Raises:
            Exception: Any failure; the registry records it on the
                deletion result.
        """
        ...


class NoOpCleanupHook:
    """Cleanup hook that only logs what a real hook would remove."""

    def cleanup(
        self,
        tenant: Tenant,
        domain: IsolationDomain,
        isolation: TenantIsolation | None,
    ) -> None:
        namespace = tenant.namespaces.for_domain(domain)
        logger.debug(
            "Cleanup skipped, no infrastructure wired",
            tenant_id=tenant.tenant_id,
            domain=domain.value,
            namespace=namespace,
        )


class CallbackCleanupHook:
    """Cleanup hook that delegates to a plain callable.

    Example:
        >>> hook = CallbackCleanupHook(lambda tenant, domain, iso: drop_schema(tenant))
    """

    def __init__(
        self,
        callback: Callable[[Tenant, IsolationDomain, TenantIsolation | None], None],
    ) -> None:
        self._callback = callback

    def cleanup(
        self,
        tenant: Tenant,
        domain: IsolationDomain,
        isolation: TenantIsolation | None,
    ) -> None:
        self._callback(tenant, domain, isolation)
