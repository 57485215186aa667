"""Plan presets and registry configuration.

This module holds the plan quota and feature tables, which are the single
source of truth for quota assignment, and the immutable RegistryConfig that
controls registry-wide behavior.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

import yaml

from common.exceptions import InvalidConfigValueError, wrap_exception

from .exceptions import UnknownPlanError
from .types import UNLIMITED, QuotaValue, ResourceKind, TenantPlan

if TYPE_CHECKING:
    from collections.abc import Mapping


# =============================================================================
# Plan Presets
# =============================================================================


def _basic_quotas() -> dict[ResourceKind, QuotaValue]:
    return {
        ResourceKind.CPU: 1,
        ResourceKind.MEMORY: 1024,  # 1 GB
        ResourceKind.STORAGE: 10,
        ResourceKind.BANDWIDTH: 100,
        ResourceKind.API_CALLS: 10_000,
        ResourceKind.USERS: 50,
    }


def _standard_quotas() -> dict[ResourceKind, QuotaValue]:
    return {
        ResourceKind.CPU: 2,
        ResourceKind.MEMORY: 4096,  # 4 GB
        ResourceKind.STORAGE: 50,
        ResourceKind.BANDWIDTH: 500,
        ResourceKind.API_CALLS: 50_000,
        ResourceKind.USERS: 200,
    }


def _premium_quotas() -> dict[ResourceKind, QuotaValue]:
    return {
        ResourceKind.CPU: 4,
        ResourceKind.MEMORY: 8192,  # 8 GB
        ResourceKind.STORAGE: 200,
        ResourceKind.BANDWIDTH: 2000,
        ResourceKind.API_CALLS: 200_000,
        ResourceKind.USERS: 1000,
    }


def _enterprise_quotas() -> dict[ResourceKind, QuotaValue]:
    return {kind: UNLIMITED for kind in ResourceKind}


PLAN_QUOTAS: dict[TenantPlan, dict[ResourceKind, QuotaValue]] = {
    TenantPlan.BASIC: _basic_quotas(),
    TenantPlan.STANDARD: _standard_quotas(),
    TenantPlan.PREMIUM: _premium_quotas(),
    TenantPlan.ENTERPRISE: _enterprise_quotas(),
}

_BASIC_FEATURES = frozenset({"api_access"})
_STANDARD_FEATURES = _BASIC_FEATURES | {"analytics", "custom_branding"}
_PREMIUM_FEATURES = _STANDARD_FEATURES | {"advanced_reporting", "priority_support"}
_ENTERPRISE_FEATURES = _PREMIUM_FEATURES | {"sso", "audit_logs", "dedicated_support"}

PLAN_FEATURES: dict[TenantPlan, frozenset[str]] = {
    TenantPlan.BASIC: _BASIC_FEATURES,
    TenantPlan.STANDARD: _STANDARD_FEATURES,
    TenantPlan.PREMIUM: _PREMIUM_FEATURES,
    TenantPlan.ENTERPRISE: _ENTERPRISE_FEATURES,
}


def plan_limits(
    plan: TenantPlan,
    overrides: Mapping[ResourceKind, QuotaValue] | None = None,
) -> dict[ResourceKind, QuotaValue]:
    """Resolve the ceilings for a plan with per-tenant overrides applied.

    Args:
        plan: The tenant's plan.
        overrides: Ceilings that replace the plan defaults.

    Returns:
        A fresh mapping covering every ResourceKind.
    """
    limits = dict(PLAN_QUOTAS[plan])
    if overrides:
        limits.update(overrides)
    return limits


def plan_features(plan: TenantPlan, extra: frozenset[str] = frozenset()) -> frozenset[str]:
    """Resolve the enabled features for a plan plus explicit additions."""
    return PLAN_FEATURES[plan] | extra


# =============================================================================
# Registry Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Global configuration for the tenant registry.

    Attributes:
        default_plan: Plan assigned when a tenant is created without one.
        default_region: Region assigned when a tenant is created without one.
        database_host: Host written into each tenant's connection config.
        database_port: Port written into each tenant's connection config.
        bucket_prefix: Prefix for per-tenant storage bucket names.
        enforce_unique_domains: Reject domains/subdomains already in use.
        preserve_usage_on_plan_change: Keep usage counters when limits are
            recomputed after a plan change.
        credential_length: Bytes of entropy in generated credentials.
        credential_iterations: PBKDF2 iterations for credential hashing.
        storage_backend: Store backend name.
    """

    default_plan: TenantPlan = TenantPlan.STANDARD
    default_region: str = "us-east-1"
    database_host: str = "db.internal"
    database_port: int = 5432
    bucket_prefix: str = "tenant"
    enforce_unique_domains: bool = True
    preserve_usage_on_plan_change: bool = True
    credential_length: int = 32
    credential_iterations: int = 390_000
    storage_backend: str = "memory"

    def __post_init__(self) -> None:
        if self.database_port <= 0:
            raise InvalidConfigValueError(
                "Database port must be positive",
                config_key="database_port",
                value=self.database_port,
                expected="positive integer",
            )
        if self.credential_length < 16:
            raise InvalidConfigValueError(
                "Credential length must be at least 16 bytes",
                config_key="credential_length",
                value=self.credential_length,
                expected=">= 16",
            )
        if self.credential_iterations < 1:
            raise InvalidConfigValueError(
                "Credential iterations must be positive",
                config_key="credential_iterations",
                value=self.credential_iterations,
                expected="positive integer",
            )

    # -------------------------------------------------------------------------
    # Builder Methods
    # -------------------------------------------------------------------------

    def with_defaults(
        self,
        *,
        plan: TenantPlan | None = None,
        region: str | None = None,
    ) -> Self:
        """Return a new config with updated tenant defaults."""
        return replace(
            self,
            default_plan=plan or self.default_plan,
            default_region=region or self.default_region,
        )

    def with_database(self, host: str, port: int | None = None) -> Self:
        """Return a new config with updated connection defaults."""
        return replace(self, database_host=host, database_port=port or self.database_port)

    def with_credentials(
        self,
        *,
        length: int | None = None,
        iterations: int | None = None,
    ) -> Self:
        """Return a new config with updated credential generation settings."""
        return replace(
            self,
            credential_length=length if length is not None else self.credential_length,
            credential_iterations=(
                iterations if iterations is not None else self.credential_iterations
            ),
        )

    def with_enforcement(
        self,
        *,
        unique_domains: bool | None = None,
        preserve_usage: bool | None = None,
    ) -> Self:
        """Return a new config with updated enforcement settings."""
        return replace(
            self,
            enforce_unique_domains=(
                unique_domains if unique_domains is not None else self.enforce_unique_domains
            ),
            preserve_usage_on_plan_change=(
                preserve_usage
                if preserve_usage is not None
                else self.preserve_usage_on_plan_change
            ),
        )

    # -------------------------------------------------------------------------
    # Loading Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_env(cls, prefix: str = "TENANCY") -> RegistryConfig:
        """Load configuration from environment variables.

        Environment variables:
        - {prefix}_DEFAULT_PLAN: plan name
        - {prefix}_DEFAULT_REGION: region name
        - {prefix}_DATABASE_HOST / {prefix}_DATABASE_PORT
        - {prefix}_BUCKET_PREFIX
        - {prefix}_UNIQUE_DOMAINS: "true" or "false"
        - {prefix}_PRESERVE_USAGE: "true" or "false"
        - {prefix}_CREDENTIAL_LENGTH / {prefix}_CREDENTIAL_ITERATIONS
        - {prefix}_STORAGE_BACKEND
        """

        def _get_bool(key: str, default: bool) -> bool:
            val = os.environ.get(f"{prefix}_{key}", "").lower()
            if val in ("true", "1", "yes"):
                return True
            if val in ("false", "0", "no"):
                return False
            return default

        def _get_int(key: str, default: int) -> int:
            val = os.environ.get(f"{prefix}_{key}")
            if not val:
                return default
            try:
                return int(val)
            except ValueError as e:
                raise wrap_exception(
                    e,
                    InvalidConfigValueError,
                    message=f"Environment variable {prefix}_{key} must be an integer",
                    config_key=key.lower(),
                    value=val,
                    expected="integer",
                ) from e

        def _get_str(key: str, default: str) -> str:
            return os.environ.get(f"{prefix}_{key}", default)

        return cls.from_dict({
            "default_plan": _get_str("DEFAULT_PLAN", TenantPlan.STANDARD.value),
            "default_region": _get_str("DEFAULT_REGION", "us-east-1"),
            "database_host": _get_str("DATABASE_HOST", "db.internal"),
            "database_port": _get_int("DATABASE_PORT", 5432),
            "bucket_prefix": _get_str("BUCKET_PREFIX", "tenant"),
            "enforce_unique_domains": _get_bool("UNIQUE_DOMAINS", True),
            "preserve_usage_on_plan_change": _get_bool("PRESERVE_USAGE", True),
            "credential_length": _get_int("CREDENTIAL_LENGTH", 32),
            "credential_iterations": _get_int("CREDENTIAL_ITERATIONS", 390_000),
            "storage_backend": _get_str("STORAGE_BACKEND", "memory"),
        })

    @classmethod
    def from_file(cls, path: str | Path) -> RegistryConfig:
        """Load configuration from a JSON or YAML file."""
        path = Path(path)
        with path.open() as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RegistryConfig:
        """Create from dictionary.

        Raises:
            InvalidConfigValueError: If the default plan is unknown.
        """
        try:
            default_plan = TenantPlan.parse(data.get("default_plan", "standard"))
        except UnknownPlanError as e:
            raise InvalidConfigValueError(
                f"Unknown default plan '{e.plan}'",
                config_key="default_plan",
                value=e.plan,
                expected=", ".join(p.value for p in TenantPlan),
                cause=e,
            ) from e
        return cls(
            default_plan=default_plan,
            default_region=data.get("default_region", "us-east-1"),
            database_host=data.get("database_host", "db.internal"),
            database_port=int(data.get("database_port", 5432)),
            bucket_prefix=data.get("bucket_prefix", "tenant"),
            enforce_unique_domains=data.get("enforce_unique_domains", True),
            preserve_usage_on_plan_change=data.get("preserve_usage_on_plan_change", True),
            credential_length=int(data.get("credential_length", 32)),
            credential_iterations=int(data.get("credential_iterations", 390_000)),
            storage_backend=data.get("storage_backend", "memory"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "default_plan": self.default_plan.value,
            "default_region": self.default_region,
            "database_host": self.database_host,
            "database_port": self.database_port,
            "bucket_prefix": self.bucket_prefix,
            "enforce_unique_domains": self.enforce_unique_domains,
            "preserve_usage_on_plan_change": self.preserve_usage_on_plan_change,
            "credential_length": self.credential_length,
            "credential_iterations": self.credential_iterations,
            "storage_backend": self.storage_backend,
        }


# =============================================================================
# Preset Configurations
# =============================================================================


DEFAULT_CONFIG = RegistryConfig()

# Cheap hashing so test suites stay fast
TESTING_CONFIG = RegistryConfig(
    credential_iterations=1_000,
    storage_backend="memory",
)

PRODUCTION_CONFIG = RegistryConfig(
    enforce_unique_domains=True,
    preserve_usage_on_plan_change=True,
    credential_length=48,
    credential_iterations=600_000,
)
