from __future__ import annotations

import pytest

from havbors.api.notifications import _event_stream
from havbors.schemas.notifications import NotificationEvent
from havbors.services.notification_broker import NotificationBroker


class _FakeRequest:
    """Reports a disconnect after ``checks`` polls."""

    def __init__(self, checks: int) -> None:
        self._checks = checks

    async def is_disconnected(self) -> bool:
        self._checks -= 1
        return self._checks < 0


@pytest.mark.asyncio
async def test_event_stream_emits_events_and_keepalives() -> None:
    broker = NotificationBroker()
    stream = _event_stream(_FakeRequest(checks=2), broker, "anna", keepalive=0.01)

    assert await anext(stream) == ": connected\n\n"
    assert broker.subscriber_count("anna") == 1

    broker.publish(
        NotificationEvent(event="created", notification_id=7, user_id="anna", unread_count=3)
    )
    message = await anext(stream)
    assert message.startswith("event: created\ndata: ")
    assert '"unread_count":3' in message

    assert await anext(stream) == ": keepalive\n\n"
    with pytest.raises(StopAsyncIteration):
        await anext(stream)
    assert broker.subscriber_count("anna") == 0
