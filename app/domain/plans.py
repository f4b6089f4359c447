"""Plan registry: plan tiers with default limits and feature flags.

Pure data and lookups, no I/O. Numeric limits may be overridden per tenant
(see EffectiveConfigurationResolver); feature flags are fixed per tier.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from app.domain.enums import AnalyticsLevel, PlanType


@dataclass(frozen=True)
class PlanLimits:
    """Numeric limits for a plan (or effective limits for a tenant)."""

    max_products: int
    max_categories: int
    max_carousel_slides: int
    max_static_pages: int
    max_image_size_mb: int

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return (
            "max_products",
            "max_categories",
            "max_carousel_slides",
            "max_static_pages",
            "max_image_size_mb",
        )


@dataclass(frozen=True)
class PlanFeatureFlags:
    """Features unlocked by a plan tier."""

    has_analytics: bool
    analytics_level: AnalyticsLevel
    can_access_themes: bool
    can_access_advanced_features: bool


@dataclass(frozen=True)
class PlanDefinition:
    """A named tier bundling default limits and feature flags."""

    type: PlanType
    label: str
    description: str
    default_limits: PlanLimits
    features: PlanFeatureFlags


PLAN_ORDER: tuple[PlanType, ...] = (PlanType.BASIC, PlanType.SILVER, PlanType.GOLD)

PLAN_DEFINITIONS: Mapping[PlanType, PlanDefinition] = MappingProxyType(
    {
        PlanType.BASIC: PlanDefinition(
            type=PlanType.BASIC,
            label="Basic",
            description="Starter plan with core storefront features.",
            default_limits=PlanLimits(
                max_products=10,
                max_categories=5,
                max_carousel_slides=3,
                max_static_pages=5,
                max_image_size_mb=2,
            ),
            features=PlanFeatureFlags(
                has_analytics=False,
                analytics_level=AnalyticsLevel.NONE,
                can_access_themes=False,
                can_access_advanced_features=False,
            ),
        ),
        PlanType.SILVER: PlanDefinition(
            type=PlanType.SILVER,
            label="Silver",
            description="Growing shops with more catalog capacity and standard analytics.",
            default_limits=PlanLimits(
                max_products=50,
                max_categories=15,
                max_carousel_slides=10,
                max_static_pages=20,
                max_image_size_mb=5,
            ),
            features=PlanFeatureFlags(
                has_analytics=True,
                analytics_level=AnalyticsLevel.STANDARD,
                can_access_themes=False,
                can_access_advanced_features=True,
            ),
        ),
        PlanType.GOLD: PlanDefinition(
            type=PlanType.GOLD,
            label="Gold",
            description="High-volume shops with advanced customization and analytics.",
            default_limits=PlanLimits(
                max_products=200,
                max_categories=50,
                max_carousel_slides=30,
                max_static_pages=100,
                max_image_size_mb=10,
            ),
            features=PlanFeatureFlags(
                has_analytics=True,
                analytics_level=AnalyticsLevel.ADVANCED,
                can_access_themes=True,
                can_access_advanced_features=True,
            ),
        ),
    }
)


def parse_plan_type(value: str | PlanType | None) -> PlanType:
    """Map a stored plan string to a tier; unrecognised non-empty values map to UNKNOWN.

    None or empty string means "no plan recorded" and maps to BASIC.
    """
    if isinstance(value, PlanType):
        return value
    if not value:
        return PlanType.BASIC
    try:
        return PlanType(value.strip().lower())
    except ValueError:
        return PlanType.UNKNOWN


def normalize_plan_type(value: str | PlanType | None) -> PlanType:
    """Return a registry tier for any input; UNKNOWN and missing values become BASIC."""
    plan = parse_plan_type(value)
    if plan is PlanType.UNKNOWN:
        return PlanType.BASIC
    return plan


def get_plan_definition(value: str | PlanType | None) -> PlanDefinition:
    """Return the plan definition for a (normalized) plan value."""
    return PLAN_DEFINITIONS[normalize_plan_type(value)]


def is_at_least_plan(current: str | PlanType | None, required: str | PlanType) -> bool:
    """Return True if current tier is the same as or above required tier."""
    return PLAN_ORDER.index(normalize_plan_type(current)) >= PLAN_ORDER.index(
        normalize_plan_type(required)
    )


def plan_supports_analytics(value: str | PlanType | None) -> bool:
    return get_plan_definition(value).features.has_analytics


def get_analytics_level(value: str | PlanType | None) -> AnalyticsLevel:
    return get_plan_definition(value).features.analytics_level
