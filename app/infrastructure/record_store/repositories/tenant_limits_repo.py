"""Record-store-backed tenant limits repository."""

from __future__ import annotations

from typing import Any

from app.application.dtos.tenant import TenantLimitsOverride
from app.application.interfaces.services import IRecordStore
from app.core.constants import TABLE_TENANT_LIMITS
from app.domain.plans import PlanLimits


def _optional_int(value: Any) -> int | None:
    """Coerce a stored numeric limit; None and unparsable values are unset."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def limits_from_row(tenant_id: str, row: dict[str, Any]) -> TenantLimitsOverride:
    """Map a tenant_limits row to the override DTO (plan_type kept raw)."""
    return TenantLimitsOverride(
        tenant_id=tenant_id,
        plan_type=row.get("plan_type"),
        **{name: _optional_int(row.get(name)) for name in PlanLimits.field_names()},
    )


class TenantLimitsRepository:
    """Tenant limits overrides (implements ITenantLimitsRepository)."""

    def __init__(self, store: IRecordStore) -> None:
        self._store = store

    async def get_by_tenant(self, tenant_id: str) -> TenantLimitsOverride | None:
        """Return the override row for tenant or None."""
        row = await self._store.select_one(TABLE_TENANT_LIMITS, {"tenant_id": tenant_id})
        if row is None:
            return None
        return limits_from_row(tenant_id, row)
