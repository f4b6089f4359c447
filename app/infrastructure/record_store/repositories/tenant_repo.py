"""Record-store-backed tenant and domain binding repositories."""

from __future__ import annotations

import logging
from typing import Any

from app.application.interfaces.services import IRecordStore
from app.core.constants import TABLE_TENANT_DOMAINS, TABLE_TENANTS
from app.domain.entities.tenant import DomainBinding, TenantEntity
from app.domain.enums import TenantStatus

logger = logging.getLogger(__name__)


def _tenant_from_row(row: dict[str, Any]) -> TenantEntity:
    """Map a tenants row to the domain entity."""
    return TenantEntity(
        id=str(row["id"]),
        name=row.get("name") or "",
        slug=row.get("slug") or "",
        subdomain=row.get("subdomain") or "",
        status=TenantStatus.parse(row.get("status")),
    )


class TenantRepository:
    """Tenant lookups (implements ITenantRepository).

    Both lookups filter on status=active server-side and re-check the
    mapped status, so a row with an unexpected status never resolves.
    """

    def __init__(self, store: IRecordStore) -> None:
        self._store = store

    async def get_active_by_id(self, tenant_id: str) -> TenantEntity | None:
        """Return tenant by ID if active."""
        row = await self._store.select_one(
            TABLE_TENANTS,
            {"id": tenant_id, "status": TenantStatus.ACTIVE.value},
        )
        if row is None:
            return None
        tenant = _tenant_from_row(row)
        return tenant if tenant.is_active() else None

    async def get_active_by_subdomain(self, subdomain: str) -> TenantEntity | None:
        """Return the active tenant with the given subdomain label."""
        rows = await self._store.select(
            TABLE_TENANTS,
            {"subdomain": subdomain, "status": TenantStatus.ACTIVE.value},
            limit=2,
        )
        if len(rows) > 1:
            logger.error(
                "Subdomain %r matches %d active tenants; refusing to guess",
                subdomain,
                len(rows),
            )
            return None
        if not rows:
            return None
        tenant = _tenant_from_row(rows[0])
        return tenant if tenant.is_active() else None


class DomainBindingRepository:
    """Custom domain bindings (implements IDomainBindingRepository)."""

    def __init__(self, store: IRecordStore) -> None:
        self._store = store

    async def get_verified(self, domain: str) -> DomainBinding | None:
        """Return the verified binding for domain (normalized, lowercase)."""
        rows = await self._store.select(
            TABLE_TENANT_DOMAINS,
            {"domain": domain, "is_verified": True},
            limit=2,
        )
        if len(rows) > 1:
            logger.error(
                "Domain %r has %d verified bindings; refusing to guess",
                domain,
                len(rows),
            )
            return None
        if not rows:
            return None
        row = rows[0]
        return DomainBinding(
            domain=str(row.get("domain", domain)).lower(),
            tenant_id=str(row["tenant_id"]),
            is_verified=bool(row.get("is_verified")),
            is_primary=bool(row.get("is_primary")),
        )
