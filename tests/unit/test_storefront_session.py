"""StorefrontSession: binding hostnames and switching tenants."""

import asyncio

import pytest

from app.application.services.realtime_invalidator import RealtimeInvalidator
from app.application.services.storefront_session import StorefrontSession
from app.application.services.tenant_resolver import TenantResolver
from app.core.tenant_context import get_tenant_id
from app.domain.exceptions import TenantContextRequiredException
from app.domain.value_objects import PlatformMarker, ResolvedTenant
from app.infrastructure.cache.query_cache import QueryCache
from tests.fakes import FakeChangeChannel


async def _load(tenant_id: str) -> str:
    return f"pages for {tenant_id}"


@pytest.fixture
def session(
    resolver: TenantResolver, cache: QueryCache, change_channel: FakeChangeChannel
) -> StorefrontSession:
    return StorefrontSession(resolver, cache, RealtimeInvalidator(change_channel, cache))


@pytest.mark.asyncio
async def test_bind_resolves_and_subscribes(
    session: StorefrontSession, change_channel: FakeChangeChannel
) -> None:
    resolution = await session.bind("shop.acme.com")
    assert isinstance(resolution, ResolvedTenant)
    assert session.tenant_id == "t-acme"
    assert get_tenant_id() == "t-acme"
    assert change_channel.tenants() == {"t-acme"}


@pytest.mark.asyncio
async def test_switching_tenant_drops_previous_cache_and_subscriptions(
    session: StorefrontSession, cache: QueryCache, change_channel: FakeChangeChannel
) -> None:
    await session.bind("shop.acme.com")
    await session.queries.query("pages", _load)
    assert len(cache.entries("t-acme")) == 1

    await session.bind("globex.shopplatform.test")

    assert session.tenant_id == "t-globex"
    assert cache.entries("t-acme") == []
    assert change_channel.tenants() == {"t-globex"}
    result = await session.queries.query("pages", _load)
    assert result.value == "pages for t-globex"


@pytest.mark.asyncio
async def test_rebinding_same_tenant_keeps_cache(
    session: StorefrontSession, cache: QueryCache, change_channel: FakeChangeChannel
) -> None:
    await session.bind("shop.acme.com")
    await session.queries.query("pages", _load)
    subscriptions = change_channel.subscribe_calls
    await session.bind("acme.shopplatform.test")
    assert len(cache.entries("t-acme")) == 1
    assert change_channel.subscribe_calls == subscriptions


@pytest.mark.asyncio
async def test_platform_host_unbinds_tenant(
    session: StorefrontSession, change_channel: FakeChangeChannel
) -> None:
    await session.bind("shop.acme.com")
    resolution = await session.bind("shopplatform.test")
    assert isinstance(resolution, PlatformMarker)
    assert session.tenant_id is None
    assert change_channel.live == {}
    with pytest.raises(TenantContextRequiredException):
        session.require_tenant("home")
    with pytest.raises(TenantContextRequiredException):
        await session.queries.query("pages", _load)


@pytest.mark.asyncio
async def test_close_releases_everything(
    session: StorefrontSession, cache: QueryCache, change_channel: FakeChangeChannel
) -> None:
    await session.bind("shop.acme.com")
    await session.queries.query("pages", _load)
    await session.close()
    assert session.tenant_id is None
    assert len(cache) == 0
    assert change_channel.live == {}
    assert get_tenant_id() is None


class GatedResolver:
    """Delegates to a real resolver, holding chosen hosts until released."""

    def __init__(self, inner: TenantResolver, *held: str) -> None:
        self.inner = inner
        self.gates = {host: asyncio.Event() for host in held}

    async def resolve(self, hostname: str | None):
        gate = self.gates.get(hostname or "")
        if gate is not None:
            await gate.wait()
        return await self.inner.resolve(hostname)


@pytest.mark.asyncio
async def test_late_resolution_does_not_override_newer_bind(
    resolver: TenantResolver, cache: QueryCache, change_channel: FakeChangeChannel
) -> None:
    gated = GatedResolver(resolver, "shop.acme.com")
    session = StorefrontSession(gated, cache, RealtimeInvalidator(change_channel, cache))
    slow = asyncio.create_task(session.bind("shop.acme.com"))
    await asyncio.sleep(0)

    await session.bind("globex.shopplatform.test")
    gated.gates["shop.acme.com"].set()
    returned = await slow

    assert returned.tenant_id == "t-globex"
    assert session.tenant_id == "t-globex"
    assert change_channel.tenants() == {"t-globex"}
    assert get_tenant_id() == "t-globex"
