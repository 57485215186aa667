"""Pytest fixtures for tenancy tests."""

from __future__ import annotations

import pytest

from ..config import TESTING_CONFIG, RegistryConfig
from ..hooks import AuditTenantHook, LoggingTenantHook, MetricsTenantHook
from ..models import Tenant
from ..registry import TenantRegistry, reset_registry
from ..storage import InMemoryTenantStore
from ..types import TenantPlan


@pytest.fixture
def registry_config() -> RegistryConfig:
    """Create a test configuration."""
    return TESTING_CONFIG


@pytest.fixture
def tenant_store() -> InMemoryTenantStore:
    """Create an in-memory store."""
    return InMemoryTenantStore()


@pytest.fixture
def tenant_registry(
    registry_config: RegistryConfig,
    tenant_store: InMemoryTenantStore,
) -> TenantRegistry:
    """Create a tenant registry for testing."""
    return TenantRegistry(config=registry_config, store=tenant_store)


@pytest.fixture
def basic_tenant(tenant_registry: TenantRegistry) -> Tenant:
    """Create a tenant on the basic plan."""
    return tenant_registry.create_tenant(
        "Acme Corp",
        "acme.com",
        "acme",
        plan=TenantPlan.BASIC,
    )


@pytest.fixture
def logging_hook() -> LoggingTenantHook:
    """Create a logging hook."""
    return LoggingTenantHook()


@pytest.fixture
def metrics_hook() -> MetricsTenantHook:
    """Create a metrics hook."""
    return MetricsTenantHook()


@pytest.fixture
def audit_hook() -> AuditTenantHook:
    """Create an audit hook."""
    return AuditTenantHook()


@pytest.fixture(autouse=True)
def cleanup_registry():
    """Reset global registry after each test."""
    yield
    reset_registry()
