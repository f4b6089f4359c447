"""Tenant-scoped in-process query cache.

Keyed store of "query -> result" with per-key request coalescing and
generation tokens. Keys always carry a tenant id, so a result fetched for one
tenant is never served for another.

Write discipline: only the fetch task for a key writes its value. A fetch
result is applied only if its generation is still the key's latest one, so a
slow superseded fetch never clobbers fresher data. invalidate() and remove()
bump generations but never write values themselves.

Single event loop, no threads: there is no await between reading and
updating an entry, so no locks are needed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.application.interfaces.services import Fetcher
from app.core.constants import CACHE_KEY_SEP
from app.domain.enums import CacheEntryState, RefetchOnMount
from app.domain.exceptions import StorefrontException, TenantContextRequiredException
from app.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the cache key separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        ValueError: If value contains CACHE_KEY_SEP.
    """
    if not value:
        raise ValueError(f"Cache key component {name!r} must not be empty")
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


@dataclass(frozen=True)
class QueryKey:
    """Composite cache key: (logical name, tenant id, *discriminators)."""

    name: str
    tenant_id: str
    discriminators: tuple[str, ...] = ()

    @classmethod
    def build(cls, name: str, tenant_id: str | None, *discriminators: Any) -> QueryKey:
        """Build a validated key. A missing tenant id is a hard error.

        Raises:
            TenantContextRequiredException: tenant_id is None or empty.
            ValueError: a component contains the key separator.
        """
        if not tenant_id:
            raise TenantContextRequiredException(name)
        _validate_key_component(name, "name")
        _validate_key_component(tenant_id, "tenant_id")
        parts = tuple(str(d) for d in discriminators)
        for index, part in enumerate(parts):
            _validate_key_component(part, f"discriminator[{index}]")
        return cls(name, tenant_id, parts)

    @staticmethod
    def is_valid_component(value: str) -> bool:
        """True if value can be used as a key component (non-empty, no separator)."""
        return bool(value) and CACHE_KEY_SEP not in value

    @property
    def parts(self) -> tuple[str, ...]:
        return (self.name, self.tenant_id, *self.discriminators)

    def matches(self, prefix: tuple[str, ...]) -> bool:
        """Return True if prefix is a leading slice of this key's parts."""
        return self.parts[: len(prefix)] == tuple(prefix)

    def __str__(self) -> str:
        return CACHE_KEY_SEP.join(self.parts)


@dataclass(frozen=True)
class QueryPolicy:
    """Freshness rule for one read.

    keep_previous_while_fetching=False is "loading, not stale": the caller
    waits for the refetch instead of seeing the previous value.
    """

    stale_time_ms: int = 0
    refetch_on_mount: RefetchOnMount = RefetchOnMount.IF_STALE
    keep_previous_while_fetching: bool = True


DEFAULT_POLICY = QueryPolicy()


class QueryCancelledError(StorefrontException):
    """The tenant's entries were dropped (tenant switch, shutdown) while the caller waited."""

    def __init__(self, key: QueryKey) -> None:
        super().__init__(
            f"Query cancelled: {key}",
            "QUERY_CANCELLED",
            {"key": str(key)},
        )


@dataclass(frozen=True)
class CacheResult:
    """What a reader sees: value plus staleness and error flags."""

    value: Any = None
    error: BaseException | None = None
    is_stale: bool = False
    fetched_at: datetime | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def has_value(self) -> bool:
        return self.fetched_at is not None

    def unwrap(self) -> Any:
        """Return value, raising the fetch error when no value was ever fetched."""
        if self.error is not None and not self.has_value:
            raise self.error
        return self.value


@dataclass(frozen=True)
class CacheEntryView:
    """Read-only snapshot of a cache entry (inspection/debug)."""

    key: QueryKey
    value: Any
    fetched_at: datetime | None
    state: CacheEntryState
    generation: int
    error: BaseException | None

    @property
    def tenant_id(self) -> str:
        return self.key.tenant_id


@dataclass
class _Entry:
    key: QueryKey
    value: Any = None
    has_value: bool = False
    fetched_at: datetime | None = None
    fetched_at_mono: float | None = None
    invalidated: bool = False
    error: BaseException | None = None
    generation: int = 0
    task: asyncio.Task[None] | None = None
    cancelled: bool = False

    @property
    def state(self) -> CacheEntryState:
        if self.task is not None and not self.task.done():
            return CacheEntryState.FETCHING
        if self.invalidated or self.error is not None or not self.has_value:
            return CacheEntryState.STALE
        return CacheEntryState.FRESH

    def view(self) -> CacheEntryView:
        return CacheEntryView(
            key=self.key,
            value=self.value,
            fetched_at=self.fetched_at,
            state=self.state,
            generation=self.generation,
            error=self.error,
        )


@dataclass
class _Observer:
    fetcher: Fetcher
    policy: QueryPolicy
    count: int = 0


@dataclass
class ObservedQuery:
    """Handle returned by observe(); use as a (async) context manager or call close()."""

    cache: QueryCache
    key: QueryKey
    fetcher: Fetcher
    policy: QueryPolicy
    _closed: bool = field(default=False, repr=False)

    async def read(self) -> CacheResult:
        """Read through the cache with this observer's fetcher and policy."""
        return await self.cache.get_or_fetch(self.key, self.fetcher, self.policy)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self.cache.unobserve(self.key)

    def __enter__(self) -> ObservedQuery:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    async def __aenter__(self) -> ObservedQuery:
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.close()


class QueryCache:
    """Process-wide keyed query cache with coalescing and generation tokens.

    Lifecycle is the application session: create at startup, aclose() at
    shutdown. Inject clock for deterministic staleness in tests.

    At most max_entries keys are kept; beyond that the least recently read
    keys that are neither observed nor fetching are evicted.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int | None = 10_000,
    ) -> None:
        self._entries: OrderedDict[QueryKey, _Entry] = OrderedDict()
        self._max_entries = max_entries
        self._observers: dict[QueryKey, _Observer] = {}
        self._clock = clock

    # ---- Reads ----

    async def get_or_fetch(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        policy: QueryPolicy | None = None,
    ) -> CacheResult:
        """Return the cached value or run (or join) the single fetch for key.

        A fetch starts when there is no value, the policy demands a refetch,
        the entry was invalidated, or its age exceeds stale_time_ms. With
        keep_previous_while_fetching, an existing value is returned at once
        (flagged stale) while the fetch continues in the background.
        """
        policy = policy or DEFAULT_POLICY
        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry(key=key)
            self._entries[key] = entry
            self._evict(keep=key)
        else:
            self._entries.move_to_end(key)

        if not self._needs_fetch(entry, policy):
            return self._result(entry)

        self._ensure_fetch(entry, fetcher)
        if entry.has_value and policy.keep_previous_while_fetching:
            return self._result(entry, stale=True)
        return await self._wait(entry, fetcher, policy)

    def peek(self, key: QueryKey) -> CacheResult | None:
        """Return the current value for key without fetching, or None if absent."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        return self._result(entry)

    def entry(self, key: QueryKey) -> CacheEntryView | None:
        entry = self._entries.get(key)
        return entry.view() if entry is not None else None

    def entries(self, tenant_id: str | None = None) -> list[CacheEntryView]:
        """Snapshot of all entries, optionally for one tenant."""
        return [
            e.view()
            for e in self._entries.values()
            if tenant_id is None or e.key.tenant_id == tenant_id
        ]

    def is_fetching(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.state is CacheEntryState.FETCHING

    # ---- Observation ----

    def observe(
        self,
        key: QueryKey,
        fetcher: Fetcher,
        policy: QueryPolicy | None = None,
    ) -> ObservedQuery:
        """Mark key as mounted so invalidation refetches it immediately."""
        policy = policy or DEFAULT_POLICY
        observer = self._observers.get(key)
        if observer is None:
            observer = _Observer(fetcher=fetcher, policy=policy)
            self._observers[key] = observer
        else:
            observer.fetcher = fetcher
            observer.policy = policy
        observer.count += 1
        return ObservedQuery(cache=self, key=key, fetcher=fetcher, policy=policy)

    def unobserve(self, key: QueryKey) -> None:
        observer = self._observers.get(key)
        if observer is None:
            return
        observer.count -= 1
        if observer.count <= 0:
            del self._observers[key]

    def is_observed(self, key: QueryKey) -> bool:
        return key in self._observers

    # ---- Invalidation ----

    def invalidate(self, prefix: tuple[str, ...]) -> int:
        """Mark entries matching prefix stale.

        Observed keys refetch immediately (superseding any in-flight fetch);
        unobserved keys are dropped so the next read refetches. Readers
        already waiting on a dropped key join that refetch instead of
        failing. Observed keys with no entry (e.g. after remove()) are
        fetched from scratch.

        Returns:
            Number of keys affected.
        """
        affected = 0
        for key in [k for k in self._entries if k.matches(prefix)]:
            entry = self._entries[key]
            observer = self._observers.get(key)
            if observer is None:
                self._discard(key)
            else:
                entry.invalidated = True
                self._start_fetch(entry, observer.fetcher)
            affected += 1
        for key, observer in list(self._observers.items()):
            if key.matches(prefix) and key not in self._entries:
                entry = _Entry(key=key)
                self._entries[key] = entry
                self._start_fetch(entry, observer.fetcher)
                affected += 1
        if affected:
            logger.debug("Cache INVALIDATE: %s (%s keys)", CACHE_KEY_SEP.join(prefix), affected)
        return affected

    def remove(self, prefix: tuple[str, ...]) -> int:
        """Drop entries matching prefix; readers waiting on them refetch.

        Observers are kept, so a following invalidate() refetches them
        without exposing the removed value.
        """
        keys = [k for k in self._entries if k.matches(prefix)]
        for key in keys:
            self._discard(key)
        if keys:
            logger.debug("Cache REMOVE: %s (%s keys)", CACHE_KEY_SEP.join(prefix), len(keys))
        return len(keys)

    def drop_tenant(self, tenant_id: str) -> int:
        """Drop every entry and observer for tenant.

        In-flight fetches are cancelled and their waiters get QueryCancelledError.
        """
        keys = [k for k in self._entries if k.tenant_id == tenant_id]
        for key in keys:
            self._discard(key, cancel=True)
        for key in [k for k in self._observers if k.tenant_id == tenant_id]:
            del self._observers[key]
        if keys:
            logger.info("Cache dropped %s keys for tenant %s", len(keys), tenant_id)
        return len(keys)

    def clear(self) -> None:
        for key in list(self._entries):
            self._discard(key, cancel=True)
        self._observers.clear()

    async def settle(self) -> None:
        """Wait until no fetch is in flight (tests, graceful shutdown)."""
        while True:
            pending = [
                e.task for e in self._entries.values() if e.task is not None and not e.task.done()
            ]
            if not pending:
                return
            await asyncio.wait(pending)

    async def aclose(self) -> None:
        """Cancel all in-flight fetches and drop all entries."""
        tasks = [e.task for e in self._entries.values() if e.task is not None]
        self.clear()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[QueryKey]:
        return iter(list(self._entries))

    # ---- Internals ----

    def _needs_fetch(self, entry: _Entry, policy: QueryPolicy) -> bool:
        if not entry.has_value or entry.invalidated or entry.error is not None:
            return True
        if policy.refetch_on_mount is RefetchOnMount.ALWAYS:
            return True
        age_ms = (self._clock() - (entry.fetched_at_mono or 0.0)) * 1000
        return age_ms >= policy.stale_time_ms

    def _ensure_fetch(self, entry: _Entry, fetcher: Fetcher) -> None:
        """Join the in-flight fetch for entry, or start one."""
        if entry.task is not None and not entry.task.done():
            return
        self._start_fetch(entry, fetcher)

    def _start_fetch(self, entry: _Entry, fetcher: Fetcher) -> None:
        """Start a new generation for entry; any older in-flight fetch is superseded."""
        entry.generation += 1
        generation = entry.generation
        entry.task = asyncio.create_task(
            self._run_fetch(entry, generation, fetcher),
            name=f"query-fetch:{entry.key}:{generation}",
        )

    def _is_current(self, entry: _Entry, generation: int) -> bool:
        return self._entries.get(entry.key) is entry and entry.generation == generation

    async def _run_fetch(self, entry: _Entry, generation: int, fetcher: Fetcher) -> None:
        """Run fetcher; apply its outcome only if this generation is still current."""
        try:
            value = await fetcher()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if self._is_current(entry, generation):
                entry.error = exc
                logger.warning(
                    "Query fetch failed for %s (generation %s): %s",
                    entry.key,
                    generation,
                    exc,
                )
            else:
                logger.debug("Discarded failure from superseded fetch %s#%s", entry.key, generation)
            return
        if not self._is_current(entry, generation):
            logger.debug("Discarded result from superseded fetch %s#%s", entry.key, generation)
            return
        entry.value = value
        entry.has_value = True
        entry.fetched_at = utc_now()
        entry.fetched_at_mono = self._clock()
        entry.invalidated = False
        entry.error = None

    async def _wait(self, entry: _Entry, fetcher: Fetcher, policy: QueryPolicy) -> CacheResult:
        """Wait for the latest generation of entry to land, following supersession.

        If the entry is dropped meanwhile by invalidate(), remove() or
        eviction, the read starts over on the key's new entry. Only a
        cancelling drop (drop_tenant, clear, aclose) ends it with
        QueryCancelledError.
        """
        while entry.task is not None and not entry.task.done():
            await asyncio.wait({entry.task})
            if self._entries.get(entry.key) is not entry:
                if entry.cancelled:
                    return CacheResult(error=QueryCancelledError(entry.key))
                logger.debug("Re-reading %s after it was dropped mid-fetch", entry.key)
                return await self.get_or_fetch(entry.key, fetcher, policy)
        return self._result(entry)

    def _result(self, entry: _Entry, stale: bool = False) -> CacheResult:
        return CacheResult(
            value=entry.value,
            error=entry.error,
            is_stale=stale or entry.invalidated or entry.error is not None,
            fetched_at=entry.fetched_at,
        )

    def _discard(self, key: QueryKey, cancel: bool = False) -> None:
        """Drop key's entry and abort its fetch.

        cancel=True also fails the entry's waiters; otherwise they re-read.
        """
        entry = self._entries.pop(key, None)
        if entry is None:
            return
        entry.cancelled = cancel
        if entry.task is not None and not entry.task.done():
            entry.task.cancel()

    def _evict(self, keep: QueryKey) -> None:
        """Evict least recently read idle entries beyond max_entries."""
        if self._max_entries is None:
            return
        excess = len(self._entries) - self._max_entries
        if excess <= 0:
            return
        victims: list[QueryKey] = []
        for key, entry in self._entries.items():
            if len(victims) >= excess:
                break
            if key == keep or key in self._observers:
                continue
            if entry.state is not CacheEntryState.FETCHING:
                victims.append(key)
        for key in victims:
            del self._entries[key]
        if len(victims) < excess:
            logger.warning("Query cache over capacity: %s busy entries", len(self._entries))
