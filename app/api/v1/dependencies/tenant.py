"""Tenant-related dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.domain.exceptions import TenantContextRequiredException
from app.domain.value_objects import NoTenant, TenantResolution
from app.infrastructure.cache.tenant_query import TenantQueryClient


def get_tenant_resolution(request: Request) -> TenantResolution:
    """Resolution stored by TenantContextMiddleware (NoTenant if it did not run)."""
    return getattr(request.state, "tenant_resolution", None) or NoTenant()


def get_tenant_query_client(
    request: Request,
    resolution: Annotated[TenantResolution, Depends(get_tenant_resolution)],
) -> TenantQueryClient:
    """Query client bound to the request's tenant (unbound for platform/no-tenant hosts)."""
    return TenantQueryClient(request.app.state.query_cache, resolution.tenant_id)


def require_tenant_id(
    resolution: Annotated[TenantResolution, Depends(get_tenant_resolution)],
) -> str:
    """Tenant id of the request host.

    Raises:
        TenantContextRequiredException: host has no active tenant (400).
    """
    if not resolution.tenant_id:
        raise TenantContextRequiredException("storefront")
    return resolution.tenant_id
