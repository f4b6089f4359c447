"""Plan limit checks and usage summaries for a tenant's FeatureSnapshot."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from app.application.dtos.tenant import FeatureSnapshot
from app.core.constants import (
    TABLE_CAROUSEL_SLIDES,
    TABLE_CATEGORIES,
    TABLE_PAGES,
    TABLE_PRODUCTS,
)
from app.domain.enums import PlanType
from app.domain.exceptions import PlanLimitExceededException
from app.domain.plans import is_at_least_plan

# Usage at or above this share of the limit is reported as near the limit.
NEAR_LIMIT_PERCENT = 80


class LimitResource(str, Enum):
    """Countable resources capped by plan limits."""

    PRODUCTS = "products"
    CATEGORIES = "categories"
    CAROUSEL_SLIDES = "carousel_slides"
    STATIC_PAGES = "static_pages"

    @property
    def limit_field(self) -> str:
        return _LIMIT_FIELDS[self]

    @property
    def table(self) -> str:
        """Record store table whose tenant rows count against the limit."""
        return _RESOURCE_TABLES[self]


_LIMIT_FIELDS = {
    LimitResource.PRODUCTS: "max_products",
    LimitResource.CATEGORIES: "max_categories",
    LimitResource.CAROUSEL_SLIDES: "max_carousel_slides",
    LimitResource.STATIC_PAGES: "max_static_pages",
}

_RESOURCE_TABLES = {
    LimitResource.PRODUCTS: TABLE_PRODUCTS,
    LimitResource.CATEGORIES: TABLE_CATEGORIES,
    LimitResource.CAROUSEL_SLIDES: TABLE_CAROUSEL_SLIDES,
    LimitResource.STATIC_PAGES: TABLE_PAGES,
}


@dataclass(frozen=True)
class UsageSummary:
    """How much of one limited resource a tenant uses."""

    resource: LimitResource
    current: int
    limit: int
    percentage: int
    near_limit: bool
    at_limit: bool


def get_limit(snapshot: FeatureSnapshot, resource: LimitResource) -> int:
    return getattr(snapshot.limits, resource.limit_field)


def check_limit(snapshot: FeatureSnapshot, resource: LimitResource, current_count: int) -> bool:
    """Return True if one more resource may be created (current_count < limit)."""
    return current_count < get_limit(snapshot, resource)


def ensure_within_limit(
    snapshot: FeatureSnapshot, resource: LimitResource, current_count: int
) -> None:
    """Raise PlanLimitExceededException if creating one more would exceed the limit."""
    limit = get_limit(snapshot, resource)
    if current_count >= limit:
        raise PlanLimitExceededException(resource.value, limit, current_count)


def check_image_size(snapshot: FeatureSnapshot, size_mb: float) -> bool:
    return size_mb <= snapshot.max_image_size_mb


def has_feature_access(snapshot: FeatureSnapshot, required_plan: PlanType | str) -> bool:
    """Feature gate: True if the tenant's plan is at least required_plan."""
    return is_at_least_plan(snapshot.plan_type, required_plan)


def usage(snapshot: FeatureSnapshot, resource: LimitResource, current: int) -> UsageSummary:
    """Summarize usage; percentage is capped at 100 (a zero limit counts as full)."""
    limit = get_limit(snapshot, resource)
    percentage = min(100, round(current * 100 / limit)) if limit > 0 else 100
    return UsageSummary(
        resource=resource,
        current=current,
        limit=limit,
        percentage=percentage,
        near_limit=percentage >= NEAR_LIMIT_PERCENT,
        at_limit=current >= limit,
    )
