"""Effective configuration: plan defaults layered with tenant overrides."""

import logging

import pytest

from app.application.dtos.tenant import TenantLimitsOverride
from app.application.services.effective_config import (
    EffectiveConfigurationResolver,
    resolve_from_override,
)
from app.domain.enums import AnalyticsLevel, PlanType
from app.domain.exceptions import TenantContextRequiredException
from app.domain.plans import PLAN_DEFINITIONS
from app.infrastructure.exceptions import RecordStoreError
from app.infrastructure.record_store.repositories import TenantLimitsRepository
from app.infrastructure.record_store.repositories.tenant_limits_repo import limits_from_row
from tests.fakes import FakeRecordStore


def test_missing_row_resolves_to_basic_defaults() -> None:
    snapshot = resolve_from_override(None)
    basic = PLAN_DEFINITIONS[PlanType.BASIC]
    assert snapshot.plan_type is PlanType.BASIC
    assert snapshot.limits == basic.default_limits
    assert snapshot.features == basic.features


def test_override_replaces_only_set_limits() -> None:
    snapshot = resolve_from_override(
        TenantLimitsOverride(tenant_id="t1", plan_type="gold", max_products=5)
    )
    gold = PLAN_DEFINITIONS[PlanType.GOLD].default_limits
    assert snapshot.plan_type is PlanType.GOLD
    assert snapshot.max_products == 5
    assert snapshot.max_categories == gold.max_categories
    assert snapshot.max_image_size_mb == gold.max_image_size_mb
    assert snapshot.can_access_themes
    assert snapshot.analytics_level is AnalyticsLevel.ADVANCED


def test_override_cannot_grant_features() -> None:
    snapshot = resolve_from_override(
        TenantLimitsOverride(tenant_id="t1", plan_type="basic", max_products=500)
    )
    assert snapshot.max_products == 500
    assert not snapshot.has_analytics
    assert not snapshot.can_access_themes


def test_unknown_plan_falls_back_to_basic() -> None:
    snapshot = resolve_from_override(TenantLimitsOverride(tenant_id="t1", plan_type="platinum"))
    assert snapshot.plan_type is PlanType.BASIC
    assert snapshot.limits == PLAN_DEFINITIONS[PlanType.BASIC].default_limits


def test_limits_row_coercion() -> None:
    override = limits_from_row(
        "t1",
        {"plan_type": "Silver", "max_products": "25", "max_categories": None, "max_static_pages": "lots"},
    )
    assert override.plan_type == "Silver"
    assert override.max_products == 25
    assert override.max_categories is None
    assert override.max_static_pages is None


@pytest.fixture
def config_resolver(record_store: FakeRecordStore) -> EffectiveConfigurationResolver:
    return EffectiveConfigurationResolver(TenantLimitsRepository(record_store))


@pytest.mark.asyncio
async def test_resolve_reads_tenant_row(config_resolver: EffectiveConfigurationResolver) -> None:
    snapshot = await config_resolver.resolve("t-globex")
    assert snapshot.plan_type is PlanType.SILVER
    assert snapshot.max_categories == 3
    assert snapshot.max_products == PLAN_DEFINITIONS[PlanType.SILVER].default_limits.max_products


@pytest.mark.asyncio
async def test_resolve_without_row_is_basic(config_resolver: EffectiveConfigurationResolver) -> None:
    snapshot = await config_resolver.resolve("t-old")
    assert snapshot.plan_type is PlanType.BASIC


@pytest.mark.asyncio
async def test_resolve_warns_on_unknown_plan(
    config_resolver: EffectiveConfigurationResolver,
    record_store: FakeRecordStore,
    caplog: pytest.LogCaptureFixture,
) -> None:
    record_store.tables["tenant_limits"].append({"tenant_id": "t-old", "plan_type": "diamond"})
    with caplog.at_level(logging.WARNING, logger="app.application.services.effective_config"):
        snapshot = await config_resolver.resolve("t-old")
    assert snapshot.plan_type is PlanType.BASIC
    assert "diamond" in caplog.text


@pytest.mark.asyncio
async def test_resolve_requires_tenant(config_resolver: EffectiveConfigurationResolver) -> None:
    with pytest.raises(TenantContextRequiredException):
        await config_resolver.resolve("")


@pytest.mark.asyncio
async def test_resolve_propagates_store_errors(
    config_resolver: EffectiveConfigurationResolver, record_store: FakeRecordStore
) -> None:
    record_store.fail = True
    with pytest.raises(RecordStoreError):
        await config_resolver.resolve("t-acme")
