"""Best-effort delivery of domain events to connected viewers.

Nothing here is a correctness dependency: clients also poll the leaderboard,
so a dropped notification only delays a refresh. Every failure is logged and
swallowed at this boundary so it can never fail the request that caused it.
"""

import asyncio
import contextlib
import logging
from typing import Optional

from redis.asyncio import Redis

from ..domain.events import DomainEvent
from .hub import ConnectionHub
from .schemas import RoutedEvent, event_to_routed

logger = logging.getLogger(__name__)


class EventDispatcher:
    def __init__(self, hub: ConnectionHub, redis: Optional[Redis] = None, channel: str = "classquiz:events") -> None:
        self.hub = hub
        self.redis = redis
        self.channel = channel

    async def dispatch(self, event: DomainEvent) -> None:
        routed = event_to_routed(event)
        try:
            if self.redis is not None:
                await self.redis.publish(self.channel, routed.model_dump_json())
            else:
                await self.deliver(routed)
        except Exception:
            logger.exception("Dropping %s notification for quiz %s", event.type, event.quiz_id)

    async def deliver(self, routed: RoutedEvent) -> int:
        return await self.hub.broadcast(routed.room, routed.message.model_dump(exclude_none=True))


class RedisEventRelay:
    """Forwards events published on the Redis channel to this process's hub."""

    def __init__(self, redis: Redis, dispatcher: EventDispatcher) -> None:
        self.redis = redis
        self.dispatcher = dispatcher
        self._task: Optional[asyncio.Task] = None

    async def run(self) -> None:
        pubsub = self.redis.pubsub()
        await pubsub.subscribe(self.dispatcher.channel)
        logger.info("Relaying notifications from %s", self.dispatcher.channel)
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    routed = RoutedEvent.model_validate_json(message["data"])
                    await self.dispatcher.deliver(routed)
                except Exception:
                    logger.exception("Could not relay notification")
        except Exception:
            logger.exception("Notification relay stopped; clients fall back to polling")
        finally:
            await pubsub.aclose()

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self.run(), name="redis-event-relay")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
