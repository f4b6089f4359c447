"""Application services: tenant resolution, effective configuration, limits, realtime invalidation."""

from app.application.services.effective_config import (
    EffectiveConfigurationResolver,
    resolve_from_override,
)
from app.application.services.limit_checker import (
    LimitResource,
    UsageSummary,
    check_image_size,
    check_limit,
    ensure_within_limit,
    has_feature_access,
    usage,
)
from app.application.services.realtime_invalidator import (
    RealtimeInvalidator,
    TenantInvalidatorPool,
    tenant_channel_name,
)
from app.application.services.storefront_session import StorefrontSession
from app.application.services.tenant_resolver import (
    MemoizedTenantResolver,
    TenantResolver,
)

__all__ = [
    "EffectiveConfigurationResolver",
    "LimitResource",
    "MemoizedTenantResolver",
    "RealtimeInvalidator",
    "StorefrontSession",
    "TenantInvalidatorPool",
    "TenantResolver",
    "UsageSummary",
    "check_image_size",
    "check_limit",
    "ensure_within_limit",
    "has_feature_access",
    "resolve_from_override",
    "tenant_channel_name",
    "usage",
]
