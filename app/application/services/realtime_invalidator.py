"""Realtime cache invalidation driven by CMS change events.

While a tenant is bound, one subscription covering every watched table
delivers row changes for that tenant; each event invalidates the query
cache prefixes the table feeds. Realtime is optional: when the channel is
unavailable, entries still refresh on their stale time.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping

from app.application.dtos.change_event import (
    ChangeEvent,
    ChangeFilter,
    SubscriptionHandle,
)
from app.application.interfaces.services import IChangeChannel, IQueryCache
from app.core.constants import (
    HOME_PAGE_SLUG,
    QUERY_ADMIN_USERS,
    QUERY_CAROUSEL_SLIDES,
    QUERY_HOME_PAGE_SECTIONS,
    QUERY_MENU_ITEMS,
    QUERY_NAVBAR_CONFIG,
    QUERY_PAGES,
    QUERY_PLAN_FEATURES,
    QUERY_PROFILE_THEME,
    QUERY_PUBLISHED_CATEGORIES,
    QUERY_SITE_CONFIG,
    QUERY_TENANT_LIMITS,
    TABLE_CAROUSEL_SLIDES,
    TABLE_CATEGORIES,
    TABLE_MENU_ITEMS,
    TABLE_NAVBAR_CONFIG,
    TABLE_PAGES,
    TABLE_PROFILES,
    TABLE_TENANT_LIMITS,
    TENANT_CHANNEL_PREFIX,
)
from app.domain.exceptions import StorefrontException
from app.infrastructure.cache.keys import tenant_prefix

logger = logging.getLogger(__name__)

# Query names invalidated by a change to each table. Pages are routed by slug
# (see _names_for) and are listed here only so they get a subscription.
TABLE_INVALIDATIONS: Mapping[str, tuple[str, ...]] = {
    TABLE_PAGES: (QUERY_PAGES,),
    TABLE_CAROUSEL_SLIDES: (QUERY_CAROUSEL_SLIDES,),
    TABLE_MENU_ITEMS: (QUERY_MENU_ITEMS,),
    TABLE_NAVBAR_CONFIG: (QUERY_NAVBAR_CONFIG,),
    TABLE_CATEGORIES: (QUERY_PUBLISHED_CATEGORIES,),
    TABLE_TENANT_LIMITS: (QUERY_TENANT_LIMITS, QUERY_PLAN_FEATURES),
    TABLE_PROFILES: (QUERY_SITE_CONFIG, QUERY_PROFILE_THEME, QUERY_ADMIN_USERS),
}

# The home page is composed from its sections, slides and categories.
HOME_PAGE_INVALIDATIONS: tuple[str, ...] = (
    QUERY_HOME_PAGE_SECTIONS,
    QUERY_CAROUSEL_SLIDES,
    QUERY_PUBLISHED_CATEGORIES,
)

# Stale rows of these tables must never render: entries are removed before
# the invalidation, so readers wait for fresh data.
REMOVE_BEFORE_INVALIDATE: frozenset[str] = frozenset({TABLE_MENU_ITEMS, TABLE_NAVBAR_CONFIG})


def tenant_channel_name(tenant_id: str) -> str:
    return f"{TENANT_CHANNEL_PREFIX}-{tenant_id}"


class RealtimeInvalidator:
    """Subscribes to one tenant's CMS changes and invalidates its cache entries.

    At most one tenant is bound at a time, with a single subscription that
    covers every watched table. start() releases the previous subscription
    before opening a new one.
    """

    def __init__(
        self,
        channel: IChangeChannel,
        cache: IQueryCache,
        tables: Mapping[str, tuple[str, ...]] = TABLE_INVALIDATIONS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._channel = channel
        self._cache = cache
        self._tables = tables
        self._clock = clock
        self._tenant_id: str | None = None
        self._handle: SubscriptionHandle | None = None
        self._failed_at: float | None = None

    @property
    def tenant_id(self) -> str | None:
        return self._tenant_id

    @property
    def subscriptions(self) -> tuple[SubscriptionHandle, ...]:
        return (self._handle,) if self._handle is not None else ()

    @property
    def is_live(self) -> bool:
        """True while the subscription is delivering events."""
        return self._handle is not None and self._handle.active

    def seconds_since_failure(self) -> float | None:
        """Time since subscribing failed or the subscription was lost."""
        if self._failed_at is None:
            return None
        return self._clock() - self._failed_at

    async def start(self, tenant_id: str) -> None:
        """Bind tenant_id and subscribe to every watched table.

        A channel failure is logged and leaves the invalidator bound with no
        live subscription.
        """
        await self.stop()
        self._tenant_id = tenant_id
        try:
            self._handle = await self._channel.subscribe(
                tenant_channel_name(tenant_id),
                ChangeFilter(tenant_id=tenant_id, tables=tuple(self._tables)),
                self.handle_event,
                self._on_error,
            )
        except StorefrontException as e:
            self._failed_at = self._clock()
            logger.warning(
                "Realtime channel unavailable for tenant %s: %s", tenant_id, e.message
            )
            return
        self._failed_at = None
        logger.info(
            "Realtime invalidation started for tenant %s (%d tables)",
            tenant_id,
            len(self._tables),
        )

    async def stop(self) -> None:
        """Release the subscription. Safe to call when not started."""
        handle, self._handle = self._handle, None
        if handle is not None:
            await self._channel.unsubscribe(handle)
        if self._tenant_id is not None:
            logger.info("Realtime invalidation stopped for tenant %s", self._tenant_id)
        self._tenant_id = None
        self._failed_at = None

    def handle_event(self, event: ChangeEvent) -> None:
        """Invalidate the prefixes fed by event.table for the bound tenant."""
        tenant_id = self._tenant_id
        if tenant_id is None or event.tenant_id != tenant_id:
            logger.debug(
                "Ignoring %s change for tenant %s (bound: %s)",
                event.table,
                event.tenant_id,
                tenant_id,
            )
            return
        names = self._names_for(event)
        if event.table in REMOVE_BEFORE_INVALIDATE:
            for name in names:
                self._cache.remove(tenant_prefix(name, tenant_id))
        for name in names:
            self._cache.invalidate(tenant_prefix(name, tenant_id))
        logger.debug(
            "Invalidated %s for tenant %s after %s %s",
            ", ".join(names),
            tenant_id,
            event.operation.value,
            event.table,
        )

    def _names_for(self, event: ChangeEvent) -> tuple[str, ...]:
        if event.table == TABLE_PAGES:
            row = event.row or {}
            if row.get("slug") == HOME_PAGE_SLUG:
                return HOME_PAGE_INVALIDATIONS
            return (QUERY_PAGES,)
        return self._tables.get(event.table, ())

    def _on_error(self, error: BaseException) -> None:
        self._failed_at = self._clock()
        logger.warning("Realtime channel error for tenant %s: %s", self._tenant_id, error)


class TenantInvalidatorPool:
    """One RealtimeInvalidator per tenant served by this process.

    The HTTP service serves many tenants from one query cache; ensure() is
    called per request and subscribes a tenant on first sight. A tenant whose
    subscription failed or was lost is resubscribed by ensure() once
    retry_seconds have passed. Beyond max_tenants, the least recently seen
    tenant is unsubscribed and its cache entries dropped.
    """

    def __init__(
        self,
        channel: IChangeChannel,
        cache: IQueryCache,
        max_tenants: int = 256,
        retry_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._channel = channel
        self._cache = cache
        self._max_tenants = max_tenants
        self._retry_seconds = retry_seconds
        self._clock = clock
        self._invalidators: dict[str, RealtimeInvalidator] = {}

    def __contains__(self, tenant_id: object) -> bool:
        return tenant_id in self._invalidators

    def __len__(self) -> int:
        return len(self._invalidators)

    async def ensure(self, tenant_id: str) -> RealtimeInvalidator:
        invalidator = self._invalidators.pop(tenant_id, None)
        if invalidator is not None:
            self._invalidators[tenant_id] = invalidator
            if not invalidator.is_live:
                since = invalidator.seconds_since_failure()
                if since is None or since >= self._retry_seconds:
                    logger.info("Resubscribing realtime invalidation for tenant %s", tenant_id)
                    await invalidator.start(tenant_id)
            return invalidator
        invalidator = RealtimeInvalidator(self._channel, self._cache, clock=self._clock)
        self._invalidators[tenant_id] = invalidator
        while len(self._invalidators) > self._max_tenants:
            oldest = next(iter(self._invalidators))
            await self.release(oldest)
        await invalidator.start(tenant_id)
        return invalidator

    async def release(self, tenant_id: str) -> None:
        invalidator = self._invalidators.pop(tenant_id, None)
        if invalidator is None:
            return
        await invalidator.stop()
        self._cache.drop_tenant(tenant_id)

    async def stop_all(self) -> None:
        for tenant_id in list(self._invalidators):
            invalidator = self._invalidators.pop(tenant_id)
            await invalidator.stop()
