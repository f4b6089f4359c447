"""Tenant-scoped query and mutation wrapper over the query cache.

Binds one tenant id; every query key and every mutation payload gets that
tenant id. Without a bound tenant, queries and mutations raise instead of
running (never fall back to another tenant).
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from app.application.interfaces.services import IQueryCache
from app.domain.exceptions import TenantContextRequiredException
from app.infrastructure.cache.keys import tenant_prefix
from app.infrastructure.cache.query_cache import (
    CacheResult,
    ObservedQuery,
    QueryKey,
    QueryPolicy,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TenantQueryClient:
    """Query cache access bound to a single tenant.

    Fetchers receive the tenant id as their first argument, so callers
    cannot accidentally close over a different tenant.
    """

    def __init__(self, cache: IQueryCache, tenant_id: str | None) -> None:
        self._cache = cache
        self._tenant_id = tenant_id or None

    @property
    def tenant_id(self) -> str | None:
        return self._tenant_id

    def require_tenant(self, operation: str | None = None) -> str:
        """Return the bound tenant id or raise TenantContextRequiredException."""
        if not self._tenant_id:
            raise TenantContextRequiredException(operation)
        return self._tenant_id

    def key(self, name: str, *discriminators: Any) -> QueryKey:
        return QueryKey.build(name, self.require_tenant(name), *discriminators)

    def _bind(
        self, fetcher: Callable[..., Awaitable[T]], tenant_id: str, args: tuple[Any, ...]
    ) -> Callable[[], Awaitable[T]]:
        async def bound() -> T:
            return await fetcher(tenant_id, *args)

        return bound

    async def query(
        self,
        name: str,
        fetcher: Callable[..., Awaitable[Any]],
        *discriminators: Any,
        policy: QueryPolicy | None = None,
    ) -> CacheResult:
        """Read through the cache; fetcher(tenant_id, *discriminators) runs on miss."""
        tenant_id = self.require_tenant(name)
        key = QueryKey.build(name, tenant_id, *discriminators)
        return await self._cache.get_or_fetch(
            key, self._bind(fetcher, tenant_id, discriminators), policy
        )

    def observe(
        self,
        name: str,
        fetcher: Callable[..., Awaitable[Any]],
        *discriminators: Any,
        policy: QueryPolicy | None = None,
    ) -> ObservedQuery:
        """Mark a query as mounted for this tenant (see QueryCache.observe)."""
        tenant_id = self.require_tenant(name)
        key = QueryKey.build(name, tenant_id, *discriminators)
        return self._cache.observe(
            key, self._bind(fetcher, tenant_id, discriminators), policy
        )

    async def mutate(
        self,
        mutation: Callable[..., Awaitable[T]],
        *,
        invalidates: tuple[str, ...] = (),
        **payload: Any,
    ) -> T:
        """Run mutation(tenant_id=..., **payload), then invalidate the named queries.

        Raises:
            TenantContextRequiredException: no tenant is bound (mutation not run).
        """
        tenant_id = self.require_tenant(getattr(mutation, "__name__", "mutation"))
        if "tenant_id" in payload and payload["tenant_id"] != tenant_id:
            logger.error(
                "Rejected mutation for tenant %s from client bound to %s",
                payload["tenant_id"],
                tenant_id,
            )
            raise TenantContextRequiredException(getattr(mutation, "__name__", None))
        payload["tenant_id"] = tenant_id
        result = await mutation(**payload)
        for name in invalidates:
            self._cache.invalidate(tenant_prefix(name, tenant_id))
        return result
