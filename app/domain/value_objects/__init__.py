"""Domain value objects and shared value types."""

from app.domain.value_objects.core import Hostname
from app.domain.value_objects.resolution import (
    NoTenant,
    PlatformMarker,
    ResolvedTenant,
    TenantResolution,
)

__all__ = [
    "Hostname",
    "NoTenant",
    "PlatformMarker",
    "ResolvedTenant",
    "TenantResolution",
]
