"""Plan limit checks, usage summaries and feature gates."""

import pytest

from app.application.dtos.tenant import TenantLimitsOverride
from app.application.services.effective_config import resolve_from_override
from app.application.services.limit_checker import (
    LimitResource,
    check_image_size,
    check_limit,
    ensure_within_limit,
    get_limit,
    has_feature_access,
    usage,
)
from app.domain.enums import PlanType
from app.domain.exceptions import PlanLimitExceededException

SILVER_THREE_CATEGORIES = resolve_from_override(
    TenantLimitsOverride(tenant_id="t-globex", plan_type="silver", max_categories=3)
)
BASIC = resolve_from_override(None)


def test_resource_tables() -> None:
    assert LimitResource.PRODUCTS.table == "products"
    assert LimitResource.STATIC_PAGES.table == "pages"
    assert LimitResource("carousel_slides").limit_field == "max_carousel_slides"


def test_override_caps_categories() -> None:
    assert get_limit(SILVER_THREE_CATEGORIES, LimitResource.CATEGORIES) == 3
    assert check_limit(SILVER_THREE_CATEGORIES, LimitResource.CATEGORIES, 2)
    assert not check_limit(SILVER_THREE_CATEGORIES, LimitResource.CATEGORIES, 3)


def test_ensure_within_limit_raises_at_limit() -> None:
    ensure_within_limit(SILVER_THREE_CATEGORIES, LimitResource.CATEGORIES, 2)
    with pytest.raises(PlanLimitExceededException) as exc_info:
        ensure_within_limit(SILVER_THREE_CATEGORIES, LimitResource.CATEGORIES, 3)
    assert exc_info.value.details == {"resource": "categories", "limit": 3, "current": 3}


@pytest.mark.parametrize(
    ("current", "percentage", "near_limit", "at_limit"),
    [
        (0, 0, False, False),
        (7, 70, False, False),
        (8, 80, True, False),
        (10, 100, True, True),
        (14, 100, True, True),
    ],
)
def test_usage_summary(current: int, percentage: int, near_limit: bool, at_limit: bool) -> None:
    summary = usage(BASIC, LimitResource.PRODUCTS, current)
    assert summary.limit == 10
    assert summary.percentage == percentage
    assert summary.near_limit is near_limit
    assert summary.at_limit is at_limit


def test_usage_with_zero_limit_counts_as_full() -> None:
    snapshot = resolve_from_override(TenantLimitsOverride(tenant_id="t1", max_static_pages=0))
    summary = usage(snapshot, LimitResource.STATIC_PAGES, 0)
    assert summary.percentage == 100
    assert summary.at_limit
    assert not check_limit(snapshot, LimitResource.STATIC_PAGES, 0)


def test_image_size() -> None:
    assert check_image_size(BASIC, 2)
    assert not check_image_size(BASIC, 2.5)
    assert check_image_size(SILVER_THREE_CATEGORIES, 5)


def test_feature_gates_follow_plan_order() -> None:
    assert has_feature_access(SILVER_THREE_CATEGORIES, PlanType.SILVER)
    assert has_feature_access(SILVER_THREE_CATEGORIES, "basic")
    assert not has_feature_access(SILVER_THREE_CATEGORIES, PlanType.GOLD)
    assert not has_feature_access(BASIC, "silver")
