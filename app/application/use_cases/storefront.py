"""Storefront read use cases: tenant-scoped content through the query cache.

Each read goes through a TenantQueryClient, so the cache key and the
repository call both carry the bound tenant id. CMS content is read with a
"loading, not stale" policy: after an invalidation readers wait for the
refetch instead of seeing the previous rows.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from app.application.dtos.tenant import FeatureSnapshot
from app.application.services.limit_checker import (
    LimitResource,
    UsageSummary,
    check_limit,
    usage,
)
from app.core.constants import (
    HOME_PAGE_SLUG,
    QUERY_CAROUSEL_SLIDES,
    QUERY_HOME_PAGE_SECTIONS,
    QUERY_MENU_ITEMS,
    QUERY_NAVBAR_CONFIG,
    QUERY_PAGES,
    QUERY_PLAN_FEATURES,
    QUERY_PUBLISHED_CATEGORIES,
    QUERY_SITE_CONFIG,
)
from app.domain.enums import RefetchOnMount
from app.infrastructure.cache.query_cache import CacheResult, QueryPolicy

if TYPE_CHECKING:
    from app.application.interfaces.repositories import IStorefrontContentRepository
    from app.application.services.effective_config import EffectiveConfigurationResolver
    from app.infrastructure.cache.tenant_query import TenantQueryClient

logger = logging.getLogger(__name__)


def parse_home_sections(page: dict[str, Any] | None) -> list[dict[str, Any]]:
    """Decode the home page's JSON section list; anything malformed yields no sections."""
    if not page or not page.get("content"):
        return []
    content = page["content"]
    if isinstance(content, list):
        return content
    try:
        sections = json.loads(content)
    except (TypeError, ValueError):
        logger.warning("Home page %s has malformed section content", page.get("id"))
        return []
    return sections if isinstance(sections, list) else []


@dataclass(frozen=True)
class HomePageData:
    """Composed home page for one tenant."""

    slides: list[dict[str, Any]] = field(default_factory=list)
    categories: list[dict[str, Any]] = field(default_factory=list)
    sections: list[dict[str, Any]] = field(default_factory=list)
    is_stale: bool = False


@dataclass(frozen=True)
class LimitCheck:
    """Result of asking whether one more resource may be created."""

    allowed: bool
    usage: UsageSummary
    plan_type: str


class StorefrontQueries:
    """Cached storefront reads for the tenant bound to a TenantQueryClient."""

    def __init__(
        self,
        content_repo: IStorefrontContentRepository,
        config_resolver: EffectiveConfigurationResolver,
        content_stale_time_ms: int = 5 * 60 * 1000,
        features_stale_time_ms: int = 10 * 60 * 1000,
    ) -> None:
        self.content_repo = content_repo
        self.config_resolver = config_resolver
        self.content_policy = QueryPolicy(
            stale_time_ms=content_stale_time_ms,
            keep_previous_while_fetching=False,
        )
        self.features_policy = QueryPolicy(stale_time_ms=features_stale_time_ms)
        self.site_config_policy = QueryPolicy(
            stale_time_ms=0,
            refetch_on_mount=RefetchOnMount.ALWAYS,
        )

    # ---- Fetchers (tenant id first, as TenantQueryClient calls them) ----

    async def _fetch_home_sections(self, tenant_id: str) -> list[dict[str, Any]]:
        page = await self.content_repo.get_page(tenant_id, HOME_PAGE_SLUG)
        return parse_home_sections(page)

    async def _fetch_features(self, tenant_id: str) -> FeatureSnapshot:
        return await self.config_resolver.resolve(tenant_id)

    # ---- Reads ----

    async def home(self, queries: TenantQueryClient) -> HomePageData:
        """Slides, published categories and home sections for the bound tenant.

        Raises:
            TenantContextRequiredException: no tenant is bound.
            RecordStoreError: a fetch failed and no previous value exists.
        """
        slides = await queries.query(
            QUERY_CAROUSEL_SLIDES,
            self.content_repo.get_carousel_slides,
            policy=self.content_policy,
        )
        categories = await queries.query(
            QUERY_PUBLISHED_CATEGORIES,
            self.content_repo.get_published_categories,
            policy=self.content_policy,
        )
        sections = await queries.query(
            QUERY_HOME_PAGE_SECTIONS,
            self._fetch_home_sections,
            policy=self.content_policy,
        )
        return HomePageData(
            slides=slides.unwrap() or [],
            categories=categories.unwrap() or [],
            sections=sections.unwrap() or [],
            is_stale=slides.is_stale or categories.is_stale or sections.is_stale,
        )

    async def page(self, queries: TenantQueryClient, slug: str) -> dict[str, Any] | None:
        result = await queries.query(
            QUERY_PAGES, self.content_repo.get_page, slug, policy=self.content_policy
        )
        return result.unwrap()

    async def pages(self, queries: TenantQueryClient) -> list[dict[str, Any]]:
        result = await queries.query(
            QUERY_PAGES, self.content_repo.list_pages, policy=self.content_policy
        )
        return result.unwrap() or []

    async def navbar_config(self, queries: TenantQueryClient) -> dict[str, Any] | None:
        result = await queries.query(
            QUERY_NAVBAR_CONFIG,
            self.content_repo.get_navbar_config,
            policy=self.content_policy,
        )
        return result.unwrap()

    async def menu_items(self, queries: TenantQueryClient) -> list[dict[str, Any]]:
        result = await queries.query(
            QUERY_MENU_ITEMS, self.content_repo.get_menu_items, policy=self.content_policy
        )
        return result.unwrap() or []

    async def site_config(self, queries: TenantQueryClient) -> dict[str, Any] | None:
        """Site title, favicon and shop name; always refetched on read."""
        result = await queries.query(
            QUERY_SITE_CONFIG,
            self.content_repo.get_site_config,
            policy=self.site_config_policy,
        )
        return result.unwrap()

    async def features(self, queries: TenantQueryClient) -> CacheResult:
        """Effective FeatureSnapshot as a CacheResult (stale values stay readable)."""
        return await queries.query(
            QUERY_PLAN_FEATURES, self._fetch_features, policy=self.features_policy
        )

    async def check_limit(
        self, queries: TenantQueryClient, resource: LimitResource, current: int | None = None
    ) -> LimitCheck:
        """Check whether the tenant may create one more resource.

        When current is None, the tenant's rows are counted in the record store.
        """
        tenant_id = queries.require_tenant("check_limit")
        snapshot: FeatureSnapshot = (await self.features(queries)).unwrap()
        if current is None:
            current = await self.content_repo.count(tenant_id, resource.table)
        return LimitCheck(
            allowed=check_limit(snapshot, resource, current),
            usage=usage(snapshot, resource, current),
            plan_type=snapshot.plan_type.value,
        )
