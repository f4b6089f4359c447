"""Effective configuration: plan defaults layered with per-tenant overrides."""

from __future__ import annotations

import logging
from dataclasses import replace

from app.application.dtos.tenant import FeatureSnapshot, TenantLimitsOverride
from app.application.interfaces.repositories import ITenantLimitsRepository
from app.domain.enums import PlanType
from app.domain.exceptions import TenantContextRequiredException
from app.domain.plans import PlanLimits, get_plan_definition, parse_plan_type
from app.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)


def resolve_from_override(override: TenantLimitsOverride | None) -> FeatureSnapshot:
    """Layer an override row over its plan's defaults. Pure.

    Numeric limits come from the override when set (not None); feature flags
    always come from the plan registry. A missing row, a missing plan, or an
    unrecognised plan string all resolve to the basic plan.

    Args:
        override: Tenant limits row, or None when the tenant has none.

    Returns:
        FeatureSnapshot with the effective plan, limits and features.
    """
    if override is None:
        definition = get_plan_definition(PlanType.BASIC)
        return FeatureSnapshot(
            plan_type=definition.type,
            limits=definition.default_limits,
            features=definition.features,
        )

    definition = get_plan_definition(override.plan_type)
    overrides = {
        name: getattr(override, name)
        for name in PlanLimits.field_names()
        if getattr(override, name) is not None
    }
    return FeatureSnapshot(
        plan_type=definition.type,
        limits=replace(definition.default_limits, **overrides),
        features=definition.features,
    )


class EffectiveConfigurationResolver:
    """Computes a tenant's FeatureSnapshot from its limits row."""

    def __init__(self, limits_repo: ITenantLimitsRepository) -> None:
        self._limits = limits_repo

    @traced("effective_config.resolve")
    async def resolve(self, tenant_id: str) -> FeatureSnapshot:
        """Fetch the tenant's override row and resolve it.

        Raises:
            TenantContextRequiredException: tenant_id is empty.
            RecordStoreError: the override lookup failed.
        """
        if not tenant_id:
            raise TenantContextRequiredException("effective_config")
        override = await self._limits.get_by_tenant(tenant_id)
        if override is not None and parse_plan_type(override.plan_type) is PlanType.UNKNOWN:
            logger.warning(
                "Tenant %s has unrecognised plan_type %r; using basic",
                tenant_id,
                override.plan_type,
            )
        snapshot = resolve_from_override(override)
        add_span_attributes(tenant_id=tenant_id, plan_type=snapshot.plan_type.value)
        return snapshot
