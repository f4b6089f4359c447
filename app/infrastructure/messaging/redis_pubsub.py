"""Redis Pub/Sub change notification channel.

Events are published on one Redis channel per table and tenant. A
subscription covers all watched tables of one tenant with a single PubSub
connection and one listener task, so a tenant's events are handled in
publish order.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import uuid

import redis.asyncio as redis

from app.application.dtos.change_event import (
    ChangeEvent,
    ChangeFilter,
    SubscriptionHandle,
)
from app.application.interfaces.services import ChangeHandler, ErrorHandler
from app.core.config import get_settings
from app.core.constants import CHANGE_CHANNEL_PREFIX
from app.infrastructure.exceptions import ChangeChannelError

logger = logging.getLogger(__name__)


def change_channel(table: str, tenant_id: str) -> str:
    """Redis channel name for one table and tenant."""
    return f"{CHANGE_CHANNEL_PREFIX}:{table}:{tenant_id}"


class _RedisPubSubBase:
    """Owns the Redis client shared by the publisher and the channel.

    A failed connect() leaves the instance unavailable instead of raising;
    callers check is_available().
    """

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        self.redis = redis_client
        self.settings = get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Open and ping the client built from REDIS_* settings."""
        if self._connected:
            return
        if self.redis is None:
            try:
                self.redis = redis.Redis(
                    host=self.settings.redis_host,
                    port=self.settings.redis_port,
                    db=self.settings.redis_db,
                    password=self.settings.redis_password.get_secret_value() if self.settings.redis_password else None,
                    decode_responses=True,
                    socket_connect_timeout=5,
                )
                await self.redis.ping()
                self._connected = True
                logger.info("Change channel connected to %s:%s", self.settings.redis_host, self.settings.redis_port)
            except (redis.ConnectionError, redis.TimeoutError) as exc:
                logger.warning("Change channel unavailable, realtime updates disabled: %s", exc)
                self._connected = False
                self.redis = None

    async def disconnect(self) -> None:
        """Close the client if one is open."""
        if self.redis:
            await self.redis.aclose()
            self._connected = False
            logger.info("Change channel closed")

    def is_available(self) -> bool:
        return self._connected and self.redis is not None


class ChangePublisher(_RedisPubSubBase):
    """Publishes change events to the per-table, per-tenant channel."""

    async def publish(self, event: ChangeEvent) -> bool:
        """Publish a change event.

        Returns:
            True if published, False if Redis unavailable or publish failed.
        """
        if not self.is_available() or self.redis is None:
            logger.debug("Change channel offline; dropping %s event for %s", event.table, event.tenant_id)
            return False
        try:
            channel = change_channel(event.table, event.tenant_id)
            await self.redis.publish(channel, json.dumps(event.to_dict(), default=str))
            logger.debug("Published %s change to %s", event.operation.value, channel)
        except redis.RedisError:
            logger.exception("Failed to publish change event")
            return False
        else:
            return True


class RedisChangeChannel(_RedisPubSubBase):
    """Subscribe to one tenant's table changes (implements IChangeChannel).

    Each subscribe() call opens one PubSub listening on the channel of every
    table in the filter, and one listener task dispatching its messages.
    Several tenants can be live at once, one PubSub each.
    """

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        super().__init__(redis_client)
        self._subscriptions: dict[str, tuple[redis.client.PubSub, asyncio.Task[None]]] = {}

    async def subscribe(
        self,
        channel_name: str,
        change_filter: ChangeFilter,
        on_event: ChangeHandler,
        on_error: ErrorHandler | None = None,
    ) -> SubscriptionHandle:
        """Subscribe to change_filter.tables for change_filter.tenant_id.

        Raises:
            ChangeChannelError: Redis unavailable or SUBSCRIBE failed.
        """
        if not self.is_available() or self.redis is None:
            raise ChangeChannelError(channel_name, "Redis not available")
        redis_channels = [
            change_channel(table, change_filter.tenant_id) for table in change_filter.tables
        ]
        pubsub = self.redis.pubsub()
        try:
            await pubsub.subscribe(*redis_channels)
        except redis.RedisError as e:
            await pubsub.aclose()
            raise ChangeChannelError(channel_name, str(e)) from e
        handle = SubscriptionHandle(
            id=uuid.uuid4().hex,
            channel_name=channel_name,
            filter=change_filter,
            meta={"redis_channels": redis_channels},
        )
        task = asyncio.create_task(
            self._listen(handle, pubsub, on_event, on_error),
            name=f"change-listener:{channel_name}",
        )
        self._subscriptions[handle.id] = (pubsub, task)
        logger.info(
            "Subscribed %s to %d table channels for tenant %s",
            channel_name,
            len(redis_channels),
            change_filter.tenant_id,
        )
        return handle

    async def unsubscribe(self, handle: SubscriptionHandle) -> None:
        """Stop the listener and close its PubSub. Idempotent."""
        handle.active = False
        entry = self._subscriptions.pop(handle.id, None)
        if entry is None:
            return
        pubsub, task = entry
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        try:
            await pubsub.unsubscribe()
            await pubsub.aclose()
        except redis.RedisError as e:
            logger.warning("Error closing subscription %s: %s", handle.channel_name, e)
        logger.info("Unsubscribed %s", handle.channel_name)

    async def unsubscribe_all(self) -> None:
        for pubsub, task in list(self._subscriptions.values()):
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            await pubsub.aclose()
        self._subscriptions.clear()

    @property
    def active_count(self) -> int:
        return len(self._subscriptions)

    async def _listen(
        self,
        handle: SubscriptionHandle,
        pubsub: redis.client.PubSub,
        on_event: ChangeHandler,
        on_error: ErrorHandler | None,
    ) -> None:
        """Deliver messages to on_event in order; malformed messages are skipped.

        If the connection fails, the handle is marked inactive and on_error
        is told; the owner resubscribes when it wants realtime back.
        """
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    event = ChangeEvent.from_dict(json.loads(message["data"]))
                except (json.JSONDecodeError, KeyError, TypeError, ValueError):
                    logger.exception("Failed to parse change event message")
                    continue
                if not handle.filter.accepts(event):
                    continue
                try:
                    result = on_event(event)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception("Change handler failed for %s", handle.channel_name)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            handle.active = False
            logger.exception(
                "Subscription %s lost; realtime off for tenant %s until resubscribed",
                handle.channel_name,
                handle.filter.tenant_id,
            )
            if on_error is not None:
                on_error(e)
