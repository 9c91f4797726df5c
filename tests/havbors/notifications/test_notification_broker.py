from __future__ import annotations

import pytest

from havbors.schemas.notifications import NotificationEvent
from havbors.services.notification_broker import NotificationBroker


def _event(user_id: str, notification_id: int) -> NotificationEvent:
    return NotificationEvent(
        event="created", notification_id=notification_id, user_id=user_id, unread_count=1
    )


@pytest.mark.asyncio
async def test_publish_reaches_only_subscribers_of_that_user() -> None:
    broker = NotificationBroker()

    async with broker.subscribe("anna") as first, broker.subscribe("anna") as second:
        async with broker.subscribe("bjorn") as other:
            delivered = broker.publish(_event("anna", 1))

            assert delivered == 2
            assert first.get_nowait().notification_id == 1
            assert second.get_nowait().notification_id == 1
            assert other.empty()


@pytest.mark.asyncio
async def test_subscription_is_released_on_exit() -> None:
    broker = NotificationBroker()

    async with broker.subscribe("anna"):
        assert broker.subscriber_count("anna") == 1

    assert broker.subscriber_count("anna") == 0
    assert broker.publish(_event("anna", 1)) == 0


@pytest.mark.asyncio
async def test_full_queue_drops_oldest_event() -> None:
    broker = NotificationBroker(queue_size=2)

    async with broker.subscribe("anna") as queue:
        for notification_id in (1, 2, 3):
            broker.publish(_event("anna", notification_id))

        assert [queue.get_nowait().notification_id for _ in range(2)] == [2, 3]
