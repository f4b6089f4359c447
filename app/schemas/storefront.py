"""Storefront API schemas."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.tenant import FeatureSnapshot
from app.application.use_cases.storefront import HomePageData, LimitCheck
from app.domain.enums import AnalyticsLevel, PlanType
from app.domain.value_objects import ResolvedTenant, TenantResolution


class TenantResolutionResponse(BaseModel):
    """Which storefront the request hostname maps to.

    Resolution failures are reported as kind "none", exactly like an unknown
    host; the degraded flag is operator-only and not part of this response.
    """

    kind: Literal["tenant", "platform", "none"]
    tenant_id: str | None = None
    name: str | None = None
    slug: str | None = None
    subdomain: str | None = None
    via: Literal["domain", "subdomain"] | None = None

    @classmethod
    def from_resolution(cls, resolution: TenantResolution) -> TenantResolutionResponse:
        if isinstance(resolution, ResolvedTenant):
            tenant = resolution.tenant
            return cls(
                kind="tenant",
                tenant_id=tenant.id,
                name=tenant.name,
                slug=tenant.slug,
                subdomain=tenant.subdomain,
                via=resolution.via,
            )
        return cls(kind=resolution.kind)


class PlanLimitsResponse(BaseModel):
    max_products: int
    max_categories: int
    max_carousel_slides: int
    max_static_pages: int
    max_image_size_mb: int


class PlanFeaturesResponse(BaseModel):
    has_analytics: bool
    analytics_level: AnalyticsLevel
    can_access_themes: bool
    can_access_advanced_features: bool


class FeatureSnapshotResponse(BaseModel):
    """Effective plan, limits and features for the request's tenant."""

    plan_type: PlanType
    limits: PlanLimitsResponse
    features: PlanFeaturesResponse
    is_stale: bool = Field(default=False, description="Served while a refetch runs")

    @classmethod
    def from_snapshot(
        cls, snapshot: FeatureSnapshot, is_stale: bool = False
    ) -> FeatureSnapshotResponse:
        limits = snapshot.limits
        features = snapshot.features
        return cls(
            plan_type=snapshot.plan_type,
            limits=PlanLimitsResponse(
                max_products=limits.max_products,
                max_categories=limits.max_categories,
                max_carousel_slides=limits.max_carousel_slides,
                max_static_pages=limits.max_static_pages,
                max_image_size_mb=limits.max_image_size_mb,
            ),
            features=PlanFeaturesResponse(
                has_analytics=features.has_analytics,
                analytics_level=features.analytics_level,
                can_access_themes=features.can_access_themes,
                can_access_advanced_features=features.can_access_advanced_features,
            ),
            is_stale=is_stale,
        )


class HomePageResponse(BaseModel):
    """Composed home page; empty for hosts without a tenant."""

    slides: list[dict[str, Any]] = Field(default_factory=list)
    categories: list[dict[str, Any]] = Field(default_factory=list)
    sections: list[dict[str, Any]] = Field(default_factory=list)
    is_stale: bool = False

    @classmethod
    def from_data(cls, data: HomePageData) -> HomePageResponse:
        return cls(
            slides=data.slides,
            categories=data.categories,
            sections=data.sections,
            is_stale=data.is_stale,
        )


class PageResponse(BaseModel):
    """Published static page."""

    model_config = ConfigDict(extra="ignore")

    id: str | int
    slug: str
    title: str | None = None
    content: Any = None


class SiteConfigResponse(BaseModel):
    """Branding for the document head; all null for hosts without a tenant."""

    site_title: str | None = None
    favicon_url: str | None = None
    shop_name: str | None = None


class LimitCheckResponse(BaseModel):
    """Whether the tenant may create one more of a limited resource."""

    resource: str
    allowed: bool
    current: int
    limit: int
    percentage: int
    near_limit: bool
    at_limit: bool
    plan_type: str

    @classmethod
    def from_check(cls, check: LimitCheck) -> LimitCheckResponse:
        summary = check.usage
        return cls(
            resource=summary.resource.value,
            allowed=check.allowed,
            current=summary.current,
            limit=summary.limit,
            percentage=summary.percentage,
            near_limit=summary.near_limit,
            at_limit=summary.at_limit,
            plan_type=check.plan_type,
        )
