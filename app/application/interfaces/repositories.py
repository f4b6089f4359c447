"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs only; no infrastructure imports.
Every tenant-scoped method takes tenant_id explicitly; there is no ambient filter.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.tenant import TenantLimitsOverride
    from app.domain.entities.tenant import DomainBinding, TenantEntity


class ITenantRepository(Protocol):
    """Protocol for tenant lookups used by hostname resolution."""

    async def get_active_by_id(self, tenant_id: str) -> TenantEntity | None:
        """Return the tenant if it exists and is active."""

    async def get_active_by_subdomain(self, subdomain: str) -> TenantEntity | None:
        """Return the active tenant whose subdomain equals the given label."""


class IDomainBindingRepository(Protocol):
    """Protocol for custom domain bindings."""

    async def get_verified(self, domain: str) -> DomainBinding | None:
        """Return the verified binding for a normalized domain, if any."""


class ITenantLimitsRepository(Protocol):
    """Protocol for per-tenant limit overrides (at most one row per tenant)."""

    async def get_by_tenant(self, tenant_id: str) -> TenantLimitsOverride | None:
        """Return the override row for tenant, or None when absent."""


class IStorefrontContentRepository(Protocol):
    """Protocol for published storefront content (all reads filter by tenant_id)."""

    async def get_carousel_slides(self, tenant_id: str) -> list[dict[str, Any]]:
        """Active carousel slides in display order."""

    async def get_published_categories(self, tenant_id: str) -> list[dict[str, Any]]:
        """Published categories in display order."""

    async def get_page(self, tenant_id: str, slug: str) -> dict[str, Any] | None:
        """Published page by slug."""

    async def list_pages(self, tenant_id: str) -> list[dict[str, Any]]:
        """Published pages (listing)."""

    async def get_navbar_config(self, tenant_id: str) -> dict[str, Any] | None:
        """Navbar configuration row."""

    async def get_menu_items(self, tenant_id: str) -> list[dict[str, Any]]:
        """Menu items in display order."""

    async def get_site_config(self, tenant_id: str) -> dict[str, Any] | None:
        """Public site title, favicon URL and shop name."""

    async def count(self, tenant_id: str, table: str) -> int:
        """Number of rows a tenant owns in a content table."""
