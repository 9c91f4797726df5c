"""In-process fan-out of notification change events to live subscribers.

Each subscriber owns a bounded ``asyncio.Queue``; publishing never blocks, and
a subscriber that stops draining its queue loses its oldest events rather than
stalling the publisher.  Subscriptions are scoped with ``async with`` so a
disconnecting client always releases its queue.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from havbors.schemas.notifications import NotificationEvent

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100


class NotificationBroker:
    def __init__(self, *, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[str, set[asyncio.Queue[NotificationEvent]]] = defaultdict(set)

    def subscriber_count(self, user_id: str) -> int:
        return len(self._subscribers.get(user_id, ()))

    @asynccontextmanager
    async def subscribe(self, user_id: str) -> AsyncIterator[asyncio.Queue[NotificationEvent]]:
        queue: asyncio.Queue[NotificationEvent] = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers[user_id].add(queue)
        logger.debug("Notification subscriber added for %s", user_id)
        try:
            yield queue
        finally:
            queues = self._subscribers.get(user_id)
            if queues is not None:
                queues.discard(queue)
                if not queues:
                    del self._subscribers[user_id]
            logger.debug("Notification subscriber released for %s", user_id)

    def publish(self, event: NotificationEvent) -> int:
        """Deliver ``event`` to every subscriber of its user; returns the fan-out."""

        queues = self._subscribers.get(event.user_id)
        if not queues:
            return 0
        for queue in queues:
            if queue.full():
                queue.get_nowait()
                logger.warning("Dropping oldest notification event for %s", event.user_id)
            queue.put_nowait(event)
        return len(queues)


_broker = NotificationBroker()


def get_notification_broker() -> NotificationBroker:
    return _broker


__all__ = ["NotificationBroker", "get_notification_broker"]
