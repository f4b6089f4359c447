"""Domain layer: entities, value objects, enums, plan registry, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import DomainBinding, TenantEntity
from app.domain.enums import (
    AnalyticsLevel,
    CacheEntryState,
    ChangeOperation,
    PlanType,
    RefetchOnMount,
    TenantStatus,
)
from app.domain.exceptions import (
    PlanLimitExceededException,
    StorefrontException,
    TenantContextRequiredException,
    TenantNotFoundException,
    ValidationException,
)
from app.domain.plans import (
    PLAN_DEFINITIONS,
    PLAN_ORDER,
    PlanDefinition,
    PlanFeatureFlags,
    PlanLimits,
    normalize_plan_type,
)
from app.domain.value_objects import (
    Hostname,
    NoTenant,
    PlatformMarker,
    ResolvedTenant,
    TenantResolution,
)

__all__ = [
    # Entities
    "DomainBinding",
    "TenantEntity",
    # Enums
    "AnalyticsLevel",
    "CacheEntryState",
    "ChangeOperation",
    "PlanType",
    "RefetchOnMount",
    "TenantStatus",
    # Exceptions
    "PlanLimitExceededException",
    "StorefrontException",
    "TenantContextRequiredException",
    "TenantNotFoundException",
    "ValidationException",
    # Plans
    "PLAN_DEFINITIONS",
    "PLAN_ORDER",
    "PlanDefinition",
    "PlanFeatureFlags",
    "PlanLimits",
    "normalize_plan_type",
    # Value objects
    "Hostname",
    "NoTenant",
    "PlatformMarker",
    "ResolvedTenant",
    "TenantResolution",
]
