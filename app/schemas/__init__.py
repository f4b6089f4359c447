"""Pydantic request/response schemas for the API."""

from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)
from app.schemas.storefront import (
    FeatureSnapshotResponse,
    HomePageResponse,
    LimitCheckResponse,
    PageResponse,
    SiteConfigResponse,
    TenantResolutionResponse,
)

__all__ = [
    "FeatureSnapshotResponse",
    "HealthResponse",
    "HomePageResponse",
    "LimitCheckResponse",
    "PageResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "SiteConfigResponse",
    "TenantResolutionResponse",
]
