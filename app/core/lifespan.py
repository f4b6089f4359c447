"""Application lifespan: startup and shutdown.

init_state puts the record store client, resolvers, query cache and
invalidator pool on app.state; the lifespan connects the change channel and
closes everything on shutdown.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.application.interfaces.services import IRecordStore
from app.application.services.effective_config import EffectiveConfigurationResolver
from app.application.services.realtime_invalidator import TenantInvalidatorPool
from app.application.services.tenant_resolver import (
    MemoizedTenantResolver,
    TenantResolver,
)
from app.application.use_cases.storefront import StorefrontQueries
from app.core.config import Settings, get_settings
from app.infrastructure.cache.query_cache import QueryCache
from app.infrastructure.record_store import RecordStoreClient
from app.infrastructure.record_store.repositories import (
    DomainBindingRepository,
    StorefrontContentRepository,
    TenantLimitsRepository,
    TenantRepository,
)

logger = logging.getLogger(__name__)


def init_state(app: FastAPI, settings: Settings, record_store: IRecordStore) -> None:
    """Build resolver, cache and storefront queries on app.state.

    Tests call this directly with an in-memory record store.
    """
    resolver = TenantResolver(
        settings.platform_root_domain,
        TenantRepository(record_store),
        DomainBindingRepository(record_store),
    )
    app.state.record_store = record_store
    app.state.tenant_resolver = MemoizedTenantResolver(
        resolver, settings.tenant_resolution_ttl_seconds
    )
    app.state.query_cache = QueryCache(max_entries=settings.query_cache_max_entries)
    app.state.storefront = StorefrontQueries(
        StorefrontContentRepository(record_store),
        EffectiveConfigurationResolver(TenantLimitsRepository(record_store)),
        content_stale_time_ms=settings.cache_stale_time_content_ms,
        features_stale_time_ms=settings.cache_stale_time_features_ms,
    )
    app.state.change_channel = None
    app.state.invalidators = None


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: record store client, query cache, Redis change channel
    (if realtime is enabled). Shutdown runs in reverse: subscriptions,
    channel, cache, record store client, then the telemetry provider that
    create_app() started.
    """
    settings = get_settings()

    # ---- Startup ----
    record_store = RecordStoreClient(
        settings.record_store_url,
        api_key=(
            settings.record_store_api_key.get_secret_value()
            if settings.record_store_api_key
            else None
        ),
        timeout=settings.record_store_timeout_seconds,
    )
    init_state(app, settings, record_store)

    if settings.realtime_enabled:
        from app.infrastructure.messaging import RedisChangeChannel

        channel = RedisChangeChannel()
        await channel.connect()
        if channel.is_available():
            app.state.change_channel = channel
            app.state.invalidators = TenantInvalidatorPool(channel, app.state.query_cache)
        else:
            logger.warning("Realtime disabled: Redis change channel unavailable")

    yield

    # ---- Shutdown ----
    if app.state.invalidators is not None:
        await app.state.invalidators.stop_all()
        logger.info("Realtime subscriptions released")

    if app.state.change_channel is not None:
        await app.state.change_channel.unsubscribe_all()
        await app.state.change_channel.disconnect()

    await app.state.query_cache.aclose()
    await record_store.aclose()
    logger.info("Record store client closed")

    telemetry = getattr(app.state, "telemetry", None)
    if telemetry is not None:
        telemetry.shutdown()
