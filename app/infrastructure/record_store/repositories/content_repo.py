"""Record-store-backed storefront content reads.

Every query filters by tenant_id explicitly. Rows are returned as plain
dicts; presentation shapes them with pydantic schemas.
"""

from __future__ import annotations

from typing import Any

from app.application.interfaces.services import IRecordStore
from app.core.constants import (
    TABLE_CAROUSEL_SLIDES,
    TABLE_CATEGORIES,
    TABLE_MENU_ITEMS,
    TABLE_NAVBAR_CONFIG,
    TABLE_PAGES,
    TABLE_PUBLIC_SHOP_INFO,
)

_DISPLAY_ORDER = "display_order.asc"


class StorefrontContentRepository:
    """Published content for one tenant at a time (implements IStorefrontContentRepository)."""

    def __init__(self, store: IRecordStore) -> None:
        self._store = store

    async def get_carousel_slides(self, tenant_id: str) -> list[dict[str, Any]]:
        return await self._store.select(
            TABLE_CAROUSEL_SLIDES,
            {"tenant_id": tenant_id, "is_active": True},
            order=_DISPLAY_ORDER,
        )

    async def get_published_categories(self, tenant_id: str) -> list[dict[str, Any]]:
        return await self._store.select(
            TABLE_CATEGORIES,
            {"tenant_id": tenant_id, "is_published": True},
            order=_DISPLAY_ORDER,
        )

    async def get_page(self, tenant_id: str, slug: str) -> dict[str, Any] | None:
        return await self._store.select_one(
            TABLE_PAGES,
            {"tenant_id": tenant_id, "slug": slug, "is_published": True},
        )

    async def list_pages(self, tenant_id: str) -> list[dict[str, Any]]:
        return await self._store.select(
            TABLE_PAGES,
            {"tenant_id": tenant_id, "is_published": True},
            order="title.asc",
            columns="id,slug,title",
        )

    async def get_navbar_config(self, tenant_id: str) -> dict[str, Any] | None:
        return await self._store.select_one(TABLE_NAVBAR_CONFIG, {"tenant_id": tenant_id})

    async def get_menu_items(self, tenant_id: str) -> list[dict[str, Any]]:
        return await self._store.select(
            TABLE_MENU_ITEMS,
            {"tenant_id": tenant_id},
            order=_DISPLAY_ORDER,
        )

    async def get_site_config(self, tenant_id: str) -> dict[str, Any] | None:
        return await self._store.select_one(
            TABLE_PUBLIC_SHOP_INFO,
            {"tenant_id": tenant_id},
            columns="site_title,favicon_url,shop_name",
        )

    async def count(self, tenant_id: str, table: str) -> int:
        return await self._store.count(table, {"tenant_id": tenant_id})
