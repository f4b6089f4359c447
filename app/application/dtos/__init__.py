"""Application DTOs (no record store dependency)."""

from app.application.dtos.change_event import (
    ChangeEvent,
    ChangeFilter,
    SubscriptionHandle,
)
from app.application.dtos.tenant import FeatureSnapshot, TenantLimitsOverride

__all__ = [
    "ChangeEvent",
    "ChangeFilter",
    "FeatureSnapshot",
    "SubscriptionHandle",
    "TenantLimitsOverride",
]
