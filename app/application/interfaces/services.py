"""Service interfaces (ports) for the application layer.

Protocols define contracts for external collaborators and shared services (DIP):
the record store, the change notification channel, and the query cache.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.change_event import (
        ChangeEvent,
        ChangeFilter,
        SubscriptionHandle,
    )
    from app.infrastructure.cache.query_cache import (
        CacheResult,
        ObservedQuery,
        QueryKey,
        QueryPolicy,
    )


# Record store interface
class IRecordStore(Protocol):
    """Protocol for the keyed record store reached over request/response calls."""

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        limit: int | None = None,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        """Return rows matching all equality filters."""

    async def select_one(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """Return the single matching row, or None."""

    async def count(self, table: str, filters: dict[str, Any]) -> int:
        """Return the number of rows matching all equality filters."""

    async def insert(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return it."""

    async def update(
        self, table: str, payload: dict[str, Any], filters: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Update matching rows and return them."""

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        """Delete matching rows."""


ChangeHandler = Callable[["ChangeEvent"], Awaitable[None] | None]
ErrorHandler = Callable[[BaseException], None]


# Change channel interface
class IChangeChannel(Protocol):
    """Protocol for "subscribe to table change" notifications."""

    async def subscribe(
        self,
        channel_name: str,
        change_filter: ChangeFilter,
        on_event: ChangeHandler,
        on_error: ErrorHandler | None = None,
    ) -> SubscriptionHandle:
        """Deliver one tenant's changes to the filter's tables to on_event."""

    async def unsubscribe(self, handle: SubscriptionHandle) -> None:
        """Stop delivery for handle. Idempotent."""


Fetcher = Callable[[], Awaitable[Any]]


# Query cache interface
class IQueryCache(Protocol):
    """Protocol for the tenant-scoped query cache (single writer per key)."""

    async def get_or_fetch(
        self, key: QueryKey, fetcher: Fetcher, policy: QueryPolicy | None = None
    ) -> CacheResult:
        """Return cached value or run (or join) the single in-flight fetch."""

    def observe(
        self, key: QueryKey, fetcher: Fetcher, policy: QueryPolicy | None = None
    ) -> ObservedQuery:
        """Mark key as mounted so invalidation refetches it immediately."""

    def unobserve(self, key: QueryKey) -> None:
        """Undo one observe() for key."""

    def invalidate(self, prefix: tuple[str, ...]) -> int:
        """Mark matching entries stale; refetch observed, drop unobserved."""

    def remove(self, prefix: tuple[str, ...]) -> int:
        """Drop matching entries and cancel their in-flight fetches."""

    def drop_tenant(self, tenant_id: str) -> int:
        """Drop every entry and in-flight fetch for tenant."""
