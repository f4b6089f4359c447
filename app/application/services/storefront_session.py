"""Storefront session: one hostname bound to at most one tenant at a time."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from app.application.services.realtime_invalidator import RealtimeInvalidator
from app.core.tenant_context import set_tenant_id
from app.domain.exceptions import TenantContextRequiredException
from app.domain.value_objects import NoTenant, ResolvedTenant, TenantResolution
from app.infrastructure.cache.query_cache import QueryCache
from app.infrastructure.cache.tenant_query import TenantQueryClient

logger = logging.getLogger(__name__)


class HostnameResolver(Protocol):
    async def resolve(self, hostname: str | None) -> TenantResolution: ...


class StorefrontSession:
    """Ties tenant resolution, realtime invalidation and the query cache together.

    bind() resolves a hostname; when the tenant changes, the previous
    tenant's cache entries, in-flight fetches and subscriptions are dropped
    before the next tenant is bound, so nothing fetched for one tenant is
    ever served under another.
    """

    def __init__(
        self,
        resolver: HostnameResolver,
        cache: QueryCache,
        invalidator: RealtimeInvalidator | None = None,
    ) -> None:
        self._resolver = resolver
        self._cache = cache
        self._invalidator = invalidator
        self._resolution: TenantResolution = NoTenant()
        self._bind_seq = 0
        self._switch_lock = asyncio.Lock()

    @property
    def resolution(self) -> TenantResolution:
        return self._resolution

    @property
    def tenant_id(self) -> str | None:
        return self._resolution.tenant_id

    @property
    def queries(self) -> TenantQueryClient:
        """Query client bound to the current tenant (raises on use without one)."""
        return TenantQueryClient(self._cache, self.tenant_id)

    def require_tenant(self, operation: str | None = None) -> str:
        tenant_id = self.tenant_id
        if not tenant_id:
            raise TenantContextRequiredException(operation)
        return tenant_id

    async def bind(self, hostname: str | None) -> TenantResolution:
        """Resolve hostname and switch the session to its tenant (if any).

        Only the most recent bind() is applied. A resolution that lands after
        a newer bind() started is dropped and the session's current
        resolution is returned instead.
        """
        self._bind_seq += 1
        seq = self._bind_seq
        resolution = await self._resolver.resolve(hostname)
        async with self._switch_lock:
            if seq != self._bind_seq:
                logger.debug(
                    "Dropped superseded resolution of host %s (tenant %s)",
                    hostname,
                    resolution.tenant_id,
                )
                return self._resolution
            previous = self.tenant_id
            current = resolution.tenant_id
            if previous != current:
                await self._release(previous)
                self._resolution = resolution
                if isinstance(resolution, ResolvedTenant) and self._invalidator is not None:
                    await self._invalidator.start(resolution.tenant_id)
                logger.info(
                    "Session for host %s switched from tenant %s to %s",
                    hostname,
                    previous,
                    current,
                )
            else:
                self._resolution = resolution
            set_tenant_id(current)
            return resolution

    async def close(self) -> None:
        """Release the current tenant's subscriptions and cache entries.

        Binds still resolving are dropped when they land.
        """
        self._bind_seq += 1
        async with self._switch_lock:
            await self._release(self.tenant_id)
            self._resolution = NoTenant()
            set_tenant_id(None)

    async def _release(self, tenant_id: str | None) -> None:
        if self._invalidator is not None:
            await self._invalidator.stop()
        if tenant_id:
            self._cache.drop_tenant(tenant_id)
