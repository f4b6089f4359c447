"""Unit tests for QueryCache: coalescing, generations, staleness, invalidation."""

import asyncio

import pytest

from app.domain.enums import CacheEntryState
from app.domain.exceptions import TenantContextRequiredException
from app.infrastructure.cache.query_cache import (
    QueryCache,
    QueryCancelledError,
    QueryKey,
    QueryPolicy,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingFetcher:
    """Returns values in order; optionally blocks until release()."""

    def __init__(self, *values: object, block: bool = False) -> None:
        self.values = list(values)
        self.calls = 0
        self.gate = asyncio.Event()
        if not block:
            self.gate.set()

    def release(self) -> None:
        self.gate.set()

    async def __call__(self) -> object:
        index = self.calls
        self.calls += 1
        await self.gate.wait()
        value = self.values[min(index, len(self.values) - 1)]
        if isinstance(value, Exception):
            raise value
        return value


async def _spin(times: int = 5) -> None:
    for _ in range(times):
        await asyncio.sleep(0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def clocked_cache(clock: FakeClock) -> QueryCache:
    query_cache = QueryCache(clock=clock)
    yield query_cache
    await query_cache.aclose()


KEY = QueryKey.build("pages", "t1")


def test_key_requires_tenant() -> None:
    with pytest.raises(TenantContextRequiredException):
        QueryKey.build("pages", None)
    with pytest.raises(TenantContextRequiredException):
        QueryKey.build("pages", "")


def test_key_rejects_separator_in_component() -> None:
    with pytest.raises(ValueError):
        QueryKey.build("pages", "t1", "a:b")


def test_key_prefix_matching() -> None:
    key = QueryKey.build("pages", "t1", "about")
    assert str(key) == "pages:t1:about"
    assert key.matches(("pages",))
    assert key.matches(("pages", "t1"))
    assert not key.matches(("pages", "t2"))


@pytest.mark.asyncio
async def test_concurrent_reads_share_one_fetch(cache: QueryCache) -> None:
    fetcher = CountingFetcher("v1", block=True)
    first = asyncio.create_task(cache.get_or_fetch(KEY, fetcher))
    second = asyncio.create_task(cache.get_or_fetch(KEY, fetcher))
    await _spin()
    assert cache.is_fetching(KEY)
    fetcher.release()
    results = await asyncio.gather(first, second)
    assert fetcher.calls == 1
    assert [r.value for r in results] == ["v1", "v1"]


@pytest.mark.asyncio
async def test_fresh_value_served_without_fetch(clocked_cache: QueryCache, clock: FakeClock) -> None:
    fetcher = CountingFetcher("v1", "v2")
    policy = QueryPolicy(stale_time_ms=60_000)
    await clocked_cache.get_or_fetch(KEY, fetcher, policy)
    clock.advance(30)
    result = await clocked_cache.get_or_fetch(KEY, fetcher, policy)
    assert result.value == "v1"
    assert not result.is_stale
    assert fetcher.calls == 1
    assert clocked_cache.entry(KEY).state is CacheEntryState.FRESH


@pytest.mark.asyncio
async def test_superseded_fetch_result_is_discarded(cache: QueryCache) -> None:
    slow = CountingFetcher("old", block=True)
    fast = CountingFetcher("new")
    observed = cache.observe(KEY, fast)
    reader = asyncio.create_task(cache.get_or_fetch(KEY, slow))
    await _spin()
    cache.invalidate(("pages", "t1"))
    await _spin()
    assert cache.peek(KEY).value == "new"
    slow.release()
    result = await reader
    assert result.value == "new"
    assert cache.peek(KEY).value == "new"
    assert cache.entry(KEY).generation == 2
    observed.close()


@pytest.mark.asyncio
async def test_stale_value_returned_while_refetching(clocked_cache: QueryCache, clock: FakeClock) -> None:
    fetcher = CountingFetcher("v1", "v2")
    policy = QueryPolicy(stale_time_ms=1000)
    await clocked_cache.get_or_fetch(KEY, fetcher, policy)
    clock.advance(5)
    result = await clocked_cache.get_or_fetch(KEY, fetcher, policy)
    assert result.value == "v1"
    assert result.is_stale
    await clocked_cache.settle()
    assert clocked_cache.peek(KEY).value == "v2"


@pytest.mark.asyncio
async def test_loading_policy_waits_for_refetch(clocked_cache: QueryCache, clock: FakeClock) -> None:
    fetcher = CountingFetcher("v1", "v2")
    policy = QueryPolicy(stale_time_ms=1000, keep_previous_while_fetching=False)
    await clocked_cache.get_or_fetch(KEY, fetcher, policy)
    clock.advance(5)
    result = await clocked_cache.get_or_fetch(KEY, fetcher, policy)
    assert result.value == "v2"
    assert not result.is_stale


@pytest.mark.asyncio
async def test_failed_refetch_keeps_previous_value(clocked_cache: QueryCache, clock: FakeClock) -> None:
    fetcher = CountingFetcher("v1", RuntimeError("store down"))
    policy = QueryPolicy(stale_time_ms=1000, keep_previous_while_fetching=False)
    await clocked_cache.get_or_fetch(KEY, fetcher, policy)
    clock.advance(5)
    result = await clocked_cache.get_or_fetch(KEY, fetcher, policy)
    assert result.is_error
    assert result.is_stale
    assert result.unwrap() == "v1"


@pytest.mark.asyncio
async def test_failed_first_fetch_raises_on_unwrap(cache: QueryCache) -> None:
    fetcher = CountingFetcher(RuntimeError("store down"))
    result = await cache.get_or_fetch(KEY, fetcher)
    assert not result.has_value
    with pytest.raises(RuntimeError):
        result.unwrap()


@pytest.mark.asyncio
async def test_tenants_never_share_entries(cache: QueryCache) -> None:
    await cache.get_or_fetch(QueryKey.build("pages", "t1"), CountingFetcher("acme"))
    result = await cache.get_or_fetch(QueryKey.build("pages", "t2"), CountingFetcher("globex"))
    assert result.value == "globex"
    assert len(cache.entries("t1")) == 1
    assert cache.entries("t1")[0].value == "acme"


@pytest.mark.asyncio
async def test_drop_tenant_cancels_waiters(cache: QueryCache) -> None:
    fetcher = CountingFetcher("v1", block=True)
    waiter = asyncio.create_task(cache.get_or_fetch(KEY, fetcher))
    await _spin()
    other = QueryKey.build("pages", "t2")
    await cache.get_or_fetch(other, CountingFetcher("kept"))
    assert cache.drop_tenant("t1") == 1
    result = await waiter
    assert isinstance(result.error, QueryCancelledError)
    with pytest.raises(QueryCancelledError):
        result.unwrap()
    assert cache.peek(KEY) is None
    assert cache.peek(other).value == "kept"


@pytest.mark.asyncio
async def test_invalidate_refetches_observed_and_drops_unobserved(cache: QueryCache) -> None:
    observed_key = QueryKey.build("pages", "t1", "home")
    idle_key = QueryKey.build("pages", "t1", "about")
    observed_fetcher = CountingFetcher("home-1", "home-2")
    idle_fetcher = CountingFetcher("about-1")
    with cache.observe(observed_key, observed_fetcher) as observed:
        await observed.read()
        await cache.get_or_fetch(idle_key, idle_fetcher)
        assert cache.invalidate(("pages", "t1")) == 2
        await cache.settle()
        assert cache.peek(observed_key).value == "home-2"
        assert cache.peek(idle_key) is None
        assert idle_fetcher.calls == 1
    assert not cache.is_observed(observed_key)


@pytest.mark.asyncio
async def test_invalidate_leaves_other_tenants_alone(cache: QueryCache) -> None:
    other = QueryKey.build("pages", "t2")
    await cache.get_or_fetch(KEY, CountingFetcher("t1"))
    await cache.get_or_fetch(other, CountingFetcher("t2"))
    cache.invalidate(("pages", "t1"))
    assert cache.peek(KEY) is None
    assert cache.peek(other).value == "t2"


@pytest.mark.asyncio
async def test_remove_then_invalidate_refetches_observed_from_scratch(cache: QueryCache) -> None:
    fetcher = CountingFetcher("v1", "v2")
    observed = cache.observe(KEY, fetcher)
    await observed.read()
    assert cache.remove(("pages", "t1")) == 1
    assert cache.peek(KEY) is None
    assert cache.invalidate(("pages", "t1")) == 1
    await cache.settle()
    assert cache.peek(KEY).value == "v2"
    observed.close()


async def test_observer_count_and_entries(cache: QueryCache) -> None:
    key = QueryKey.build("pages", "t-1")
    fetcher = CountingFetcher(["about"])
    first = cache.observe(key, fetcher)
    second = cache.observe(key, fetcher)
    await first.read()

    first.close()
    assert cache.is_observed(key)
    second.close()
    assert not cache.is_observed(key)

    await cache.get_or_fetch(QueryKey.build("pages", "t-2"), CountingFetcher([]))
    assert [view.key for view in cache.entries("t-1")] == [key]
    assert len(cache.entries()) == 2


@pytest.mark.asyncio
async def test_invalidate_mid_fetch_rereads_for_waiting_reader(cache: QueryCache) -> None:
    fetcher = CountingFetcher("before-change", "after-change", block=True)
    policy = QueryPolicy(keep_previous_while_fetching=False)
    reader = asyncio.create_task(cache.get_or_fetch(KEY, fetcher, policy))
    await _spin()
    assert cache.invalidate(("pages", "t1")) == 1
    fetcher.release()
    result = await reader
    assert result.error is None
    assert result.value == "after-change"
    assert fetcher.calls == 2
    assert cache.peek(KEY).value == "after-change"


@pytest.mark.asyncio
async def test_remove_mid_fetch_rereads_for_waiting_reader(cache: QueryCache) -> None:
    fetcher = CountingFetcher("old-menu", "new-menu", block=True)
    reader = asyncio.create_task(cache.get_or_fetch(KEY, fetcher))
    await _spin()
    cache.remove(("pages", "t1"))
    fetcher.release()
    assert (await reader).value == "new-menu"


@pytest.mark.asyncio
async def test_least_recently_read_idle_entries_are_evicted() -> None:
    bounded = QueryCache(max_entries=2)
    first = QueryKey.build("pages", "t1", "a")
    second = QueryKey.build("pages", "t1", "b")
    third = QueryKey.build("pages", "t1", "c")
    policy = QueryPolicy(stale_time_ms=60_000)
    await bounded.get_or_fetch(first, CountingFetcher("a"), policy)
    await bounded.get_or_fetch(second, CountingFetcher("b"), policy)
    await bounded.get_or_fetch(first, CountingFetcher("a"), policy)
    await bounded.get_or_fetch(third, CountingFetcher("c"), policy)
    assert len(bounded) == 2
    assert bounded.peek(second) is None
    assert bounded.peek(first).value == "a"
    await bounded.aclose()


@pytest.mark.asyncio
async def test_eviction_skips_observed_and_fetching_entries() -> None:
    bounded = QueryCache(max_entries=1)
    watched = QueryKey.build("pages", "t1", "home")
    busy = QueryKey.build("pages", "t1", "about")
    with bounded.observe(watched, CountingFetcher("home")) as observed:
        await observed.read()
        slow = CountingFetcher("about", block=True)
        reader = asyncio.create_task(bounded.get_or_fetch(busy, slow))
        await _spin()
        await bounded.get_or_fetch(QueryKey.build("pages", "t1", "faq"), CountingFetcher(None))
        assert bounded.peek(watched).value == "home"
        assert bounded.is_fetching(busy)
        slow.release()
        assert (await reader).value == "about"
    await bounded.aclose()
