"""Storefront API: anonymous reads for the tenant behind the request hostname.

Hosts without an active tenant get the default storefront (empty content,
basic plan), and so do visitors of a tenant whose content cannot be loaded;
the failure is logged, never returned. Only the limit check requires a
tenant.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.v1.dependencies import (
    get_storefront_queries,
    get_tenant_query_client,
    get_tenant_resolution,
    require_tenant_id,
)
from app.application.services.effective_config import resolve_from_override
from app.application.services.limit_checker import LimitResource
from app.application.use_cases.storefront import StorefrontQueries
from app.domain.exceptions import StorefrontException
from app.domain.value_objects import TenantResolution
from app.infrastructure.cache.query_cache import QueryKey
from app.infrastructure.cache.tenant_query import TenantQueryClient
from app.schemas.storefront import (
    FeatureSnapshotResponse,
    HomePageResponse,
    LimitCheckResponse,
    PageResponse,
    SiteConfigResponse,
    TenantResolutionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

Queries = Annotated[TenantQueryClient, Depends(get_tenant_query_client)]
Storefront = Annotated[StorefrontQueries, Depends(get_storefront_queries)]


@router.get("/tenant", response_model=TenantResolutionResponse)
async def get_tenant(
    resolution: Annotated[TenantResolution, Depends(get_tenant_resolution)],
) -> TenantResolutionResponse:
    """Return which storefront (tenant, platform, or none) serves this host."""
    return TenantResolutionResponse.from_resolution(resolution)


def _log_fallback(what: str, tenant_id: str, exc: StorefrontException) -> None:
    logger.warning(
        "Serving default %s for tenant %s: %s %s",
        what,
        tenant_id,
        exc.error_code,
        exc.details,
    )


@router.get("/features", response_model=FeatureSnapshotResponse)
async def get_features(queries: Queries, storefront: Storefront) -> FeatureSnapshotResponse:
    """Effective plan limits and feature flags (basic plan without a tenant)."""
    if queries.tenant_id is None:
        return FeatureSnapshotResponse.from_snapshot(resolve_from_override(None))
    try:
        result = await storefront.features(queries)
        snapshot = result.unwrap()
    except StorefrontException as e:
        _log_fallback("features", queries.tenant_id, e)
        return FeatureSnapshotResponse.from_snapshot(resolve_from_override(None))
    return FeatureSnapshotResponse.from_snapshot(snapshot, is_stale=result.is_stale)


@router.get("/home", response_model=HomePageResponse)
async def get_home(queries: Queries, storefront: Storefront) -> HomePageResponse:
    """Carousel slides, published categories and home sections."""
    if queries.tenant_id is None:
        return HomePageResponse()
    try:
        data = await storefront.home(queries)
    except StorefrontException as e:
        _log_fallback("home page", queries.tenant_id, e)
        return HomePageResponse()
    return HomePageResponse.from_data(data)


@router.get("/pages/{slug}", response_model=PageResponse)
async def get_page(slug: str, queries: Queries, storefront: Storefront) -> PageResponse:
    """Published static page by slug; any failure to load it is a 404."""
    if queries.tenant_id is None or not QueryKey.is_valid_component(slug):
        raise HTTPException(status_code=404, detail="Page not found")
    try:
        page = await storefront.page(queries, slug)
    except StorefrontException as e:
        _log_fallback(f"page {slug!r}", queries.tenant_id, e)
        page = None
    if page is None:
        raise HTTPException(status_code=404, detail="Page not found")
    return PageResponse.model_validate(page)


@router.get("/site-config", response_model=SiteConfigResponse)
async def get_site_config(queries: Queries, storefront: Storefront) -> SiteConfigResponse:
    """Site title, favicon and shop name for the document head."""
    if queries.tenant_id is None:
        return SiteConfigResponse()
    try:
        config = await storefront.site_config(queries)
    except StorefrontException as e:
        _log_fallback("site config", queries.tenant_id, e)
        return SiteConfigResponse()
    return SiteConfigResponse.model_validate(config or {})


@router.get("/limits/{resource}", response_model=LimitCheckResponse)
async def check_limit(
    resource: LimitResource,
    tenant_id: Annotated[str, Depends(require_tenant_id)],
    queries: Queries,
    storefront: Storefront,
    current: Annotated[
        int | None,
        Query(ge=0, description="Current count; counted in the record store when omitted"),
    ] = None,
) -> LimitCheckResponse:
    """Whether the tenant may create one more resource under its plan."""
    check = await storefront.check_limit(queries, resource, current)
    if not check.allowed:
        logger.info(
            "Tenant %s at %s limit (%s/%s)",
            tenant_id,
            resource.value,
            check.usage.current,
            check.usage.limit,
        )
    return LimitCheckResponse.from_check(check)
