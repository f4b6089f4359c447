"""Tenant resolution outcomes.

A hostname resolves to exactly one of three variants. NoTenant is not an
error: callers render the default storefront and never fall back to another
tenant's data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

from app.domain.entities.tenant import TenantEntity


@dataclass(frozen=True)
class ResolvedTenant:
    """Hostname belongs to an active tenant."""

    tenant: TenantEntity
    via: Literal["domain", "subdomain"]

    kind: Literal["tenant"] = "tenant"

    @property
    def tenant_id(self) -> str:
        return self.tenant.id


@dataclass(frozen=True)
class PlatformMarker:
    """Hostname is the platform root (marketing/admin surface)."""

    kind: Literal["platform"] = "platform"

    @property
    def tenant_id(self) -> None:
        return None


@dataclass(frozen=True)
class NoTenant:
    """No active tenant matches the hostname.

    degraded is True when a record store failure forced this outcome; it is
    for operators (logs, health) and is never shown to anonymous visitors.
    """

    degraded: bool = False

    kind: Literal["none"] = "none"

    @property
    def tenant_id(self) -> None:
        return None


TenantResolution = Union[ResolvedTenant, PlatformMarker, NoTenant]
