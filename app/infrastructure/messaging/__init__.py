"""Messaging: Redis pub/sub change notification channel and publisher.

Used by the realtime invalidator to keep the query cache fresh.
"""

from app.infrastructure.messaging.redis_pubsub import (
    ChangePublisher,
    RedisChangeChannel,
    change_channel,
)

__all__ = [
    "ChangePublisher",
    "RedisChangeChannel",
    "change_channel",
]
