"""DTOs for tenant configuration use cases (no dependency on the record store)."""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.enums import AnalyticsLevel, PlanType
from app.domain.plans import PlanFeatureFlags, PlanLimits


@dataclass(frozen=True)
class TenantLimitsOverride:
    """Per-tenant limits row. Unset (None) fields fall back to the plan default.

    plan_type is the raw stored string; it is normalized by the resolver,
    never here.
    """

    tenant_id: str
    plan_type: str | None = None
    max_products: int | None = None
    max_categories: int | None = None
    max_carousel_slides: int | None = None
    max_static_pages: int | None = None
    max_image_size_mb: int | None = None


@dataclass(frozen=True)
class FeatureSnapshot:
    """Effective configuration for a tenant: resolved plan, limits, and features."""

    plan_type: PlanType
    limits: PlanLimits
    features: PlanFeatureFlags

    @property
    def max_products(self) -> int:
        return self.limits.max_products

    @property
    def max_categories(self) -> int:
        return self.limits.max_categories

    @property
    def max_carousel_slides(self) -> int:
        return self.limits.max_carousel_slides

    @property
    def max_static_pages(self) -> int:
        return self.limits.max_static_pages

    @property
    def max_image_size_mb(self) -> int:
        return self.limits.max_image_size_mb

    @property
    def has_analytics(self) -> bool:
        return self.features.has_analytics

    @property
    def analytics_level(self) -> AnalyticsLevel:
        return self.features.analytics_level

    @property
    def can_access_themes(self) -> bool:
        return self.features.can_access_themes

    @property
    def can_access_advanced_features(self) -> bool:
        return self.features.can_access_advanced_features
