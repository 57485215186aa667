"""Tests for plan presets and registry configuration."""

from __future__ import annotations

import json

import pytest

from common.exceptions import InvalidConfigValueError

from ..config import (
    DEFAULT_CONFIG,
    PLAN_FEATURES,
    PLAN_QUOTAS,
    PRODUCTION_CONFIG,
    TESTING_CONFIG,
    RegistryConfig,
    plan_features,
    plan_limits,
)
from ..types import UNLIMITED, ResourceKind, TenantPlan


class TestPlanTables:
    """Tests for the plan quota and feature tables."""

    def test_every_plan_covers_every_resource(self) -> None:
        for plan in TenantPlan:
            assert set(PLAN_QUOTAS[plan]) == set(ResourceKind)

    @pytest.mark.parametrize(
        "plan,expected",
        [
            (TenantPlan.BASIC, (1, 1024, 10, 100, 10_000, 50)),
            (TenantPlan.STANDARD, (2, 4096, 50, 500, 50_000, 200)),
            (TenantPlan.PREMIUM, (4, 8192, 200, 2000, 200_000, 1000)),
        ],
    )
    def test_plan_limits(self, plan: TenantPlan, expected: tuple[int, ...]) -> None:
        order = (
            ResourceKind.CPU,
            ResourceKind.MEMORY,
            ResourceKind.STORAGE,
            ResourceKind.BANDWIDTH,
            ResourceKind.API_CALLS,
            ResourceKind.USERS,
        )
        assert tuple(PLAN_QUOTAS[plan][kind] for kind in order) == expected

    def test_enterprise_unlimited(self) -> None:
        assert all(value is UNLIMITED for value in PLAN_QUOTAS[TenantPlan.ENTERPRISE].values())

    def test_features_are_cumulative(self) -> None:
        """Test each plan includes the features of the plan below it."""
        plans = list(TenantPlan)
        for lower, higher in zip(plans, plans[1:]):
            assert PLAN_FEATURES[lower] < PLAN_FEATURES[higher]
        assert "sso" in PLAN_FEATURES[TenantPlan.ENTERPRISE]
        assert "sso" not in PLAN_FEATURES[TenantPlan.PREMIUM]

    def test_plan_limits_with_overrides(self) -> None:
        """Test overrides are applied without touching the shared table."""
        limits = plan_limits(TenantPlan.BASIC, {ResourceKind.USERS: 10})
        assert limits[ResourceKind.USERS] == 10
        assert limits[ResourceKind.CPU] == 1
        assert PLAN_QUOTAS[TenantPlan.BASIC][ResourceKind.USERS] == 50

    def test_plan_features_extra(self) -> None:
        features = plan_features(TenantPlan.BASIC, frozenset({"beta"}))
        assert features == {"api_access", "beta"}


class TestRegistryConfig:
    """Tests for RegistryConfig."""

    def test_defaults(self) -> None:
        config = RegistryConfig()
        assert config.default_plan == TenantPlan.STANDARD
        assert config.default_region == "us-east-1"
        assert config.enforce_unique_domains
        assert config.preserve_usage_on_plan_change
        assert config.storage_backend == "memory"

    def test_config_is_frozen(self) -> None:
        config = RegistryConfig()
        with pytest.raises(Exception):  # FrozenInstanceError
            config.default_region = "eu-west-1"  # type: ignore

    @pytest.mark.parametrize(
        "kwargs,key",
        [
            ({"database_port": 0}, "database_port"),
            ({"credential_length": 8}, "credential_length"),
            ({"credential_iterations": 0}, "credential_iterations"),
        ],
    )
    def test_validation(self, kwargs, key) -> None:
        with pytest.raises(InvalidConfigValueError) as exc_info:
            RegistryConfig(**kwargs)
        assert exc_info.value.config_key == key

    def test_builders(self) -> None:
        """Test builder methods return new instances."""
        config = (
            RegistryConfig()
            .with_defaults(plan=TenantPlan.BASIC, region="eu-west-1")
            .with_database("db.example.com", 6543)
            .with_credentials(length=24, iterations=10)
            .with_enforcement(unique_domains=False, preserve_usage=False)
        )
        assert config.default_plan == TenantPlan.BASIC
        assert config.default_region == "eu-west-1"
        assert config.database_host == "db.example.com"
        assert config.database_port == 6543
        assert config.credential_length == 24
        assert config.credential_iterations == 10
        assert not config.enforce_unique_domains
        assert not config.preserve_usage_on_plan_change
        assert RegistryConfig().default_plan == TenantPlan.STANDARD

    def test_builder_validates(self) -> None:
        with pytest.raises(InvalidConfigValueError):
            RegistryConfig().with_credentials(length=4)

    def test_dict_round_trip(self) -> None:
        config = PRODUCTION_CONFIG.with_defaults(plan=TenantPlan.PREMIUM)
        assert RegistryConfig.from_dict(config.to_dict()) == config

    def test_from_dict_unknown_plan(self) -> None:
        with pytest.raises(InvalidConfigValueError) as exc_info:
            RegistryConfig.from_dict({"default_plan": "platinum"})
        assert exc_info.value.config_key == "default_plan"

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TENANCY_DEFAULT_PLAN", "premium")
        monkeypatch.setenv("TENANCY_DATABASE_PORT", "6543")
        monkeypatch.setenv("TENANCY_UNIQUE_DOMAINS", "false")
        monkeypatch.setenv("TENANCY_CREDENTIAL_ITERATIONS", "2000")

        config = RegistryConfig.from_env()

        assert config.default_plan == TenantPlan.PREMIUM
        assert config.database_port == 6543
        assert not config.enforce_unique_domains
        assert config.credential_iterations == 2000
        assert config.default_region == "us-east-1"

    def test_from_env_custom_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_DEFAULT_REGION", "ap-south-1")
        assert RegistryConfig.from_env(prefix="APP").default_region == "ap-south-1"

    def test_from_env_bad_integer(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TENANCY_DATABASE_PORT", "not-a-port")
        with pytest.raises(InvalidConfigValueError) as exc_info:
            RegistryConfig.from_env()
        assert exc_info.value.value == "not-a-port"
        assert isinstance(exc_info.value.cause, ValueError)

    def test_from_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "tenancy.yaml"
        path.write_text(
            "default_plan: basic\n"
            "default_region: eu-central-1\n"
            "database_port: 15432\n"
            "enforce_unique_domains: false\n"
        )
        config = RegistryConfig.from_file(path)
        assert config.default_plan == TenantPlan.BASIC
        assert config.default_region == "eu-central-1"
        assert config.database_port == 15432
        assert not config.enforce_unique_domains

    def test_from_empty_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert RegistryConfig.from_file(path) == DEFAULT_CONFIG

    def test_from_json_file(self, tmp_path) -> None:
        path = tmp_path / "tenancy.json"
        path.write_text(json.dumps(TESTING_CONFIG.to_dict()))
        assert RegistryConfig.from_file(str(path)) == TESTING_CONFIG


class TestPresetConfigs:
    """Tests for preset configurations."""

    def test_testing_config_is_cheap(self) -> None:
        assert TESTING_CONFIG.credential_iterations < DEFAULT_CONFIG.credential_iterations

    def test_production_config_is_strict(self) -> None:
        assert PRODUCTION_CONFIG.enforce_unique_domains
        assert PRODUCTION_CONFIG.credential_iterations >= 600_000
        assert PRODUCTION_CONFIG.credential_length > DEFAULT_CONFIG.credential_length
