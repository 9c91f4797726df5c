"""Notification inbox service tests over the in-memory database."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from havbors.cache import notification_list_key
from havbors.db.models import NotificationType
from havbors.db.repositories import NotificationRepository
from havbors.errors import NotFoundError
from havbors.schemas.notifications import NotificationCreate
from havbors.services.notification_broker import NotificationBroker
from havbors.services.notifications_service import NotificationsService
from tests.havbors.support.doubles import MemoryCache
from tests.havbors.support.factories import seed_notification

USER = "user-anna"


def _service(
    session: AsyncSession,
    *,
    broker: NotificationBroker | None = None,
    cache: MemoryCache | None = None,
) -> NotificationsService:
    return NotificationsService(
        NotificationRepository(session),
        broker=broker or NotificationBroker(),
        cache=cache,
    )


@pytest.mark.asyncio
async def test_list_returns_active_notifications_newest_first(session: AsyncSession) -> None:
    now = datetime.now(UTC)
    await seed_notification(session, USER, "Eldre", created_at=now - timedelta(days=2))
    await seed_notification(session, USER, "Ny", created_at=now - timedelta(minutes=5))
    await seed_notification(session, USER, "Lest", dismissed=True)
    await seed_notification(session, "someone-else", "Fremmed")

    result = await _service(session).list_notifications(user_id=USER)

    assert [item.body for item in result.notifications] == ["Ny", "Eldre"]
    assert result.total == 2
    assert result.notifications[0].time_ago == "5 minutter siden"
    assert result.notifications[1].time_ago == "2 dager siden"


@pytest.mark.asyncio
async def test_without_user_list_and_count_are_empty(session: AsyncSession) -> None:
    await seed_notification(session, USER, "Hei")
    service = _service(session)

    listed = await service.list_notifications(user_id=None)
    unread = await service.unread_count(user_id=None)

    assert listed.total == 0
    assert listed.notifications == []
    assert unread.count == 0
    assert unread.label is None


@pytest.mark.asyncio
async def test_dismiss_is_idempotent_and_updates_badge(
    session: AsyncSession, memory_cache: MemoryCache
) -> None:
    first = await seed_notification(session, USER, "Første")
    await seed_notification(session, USER, "Andre")
    broker = NotificationBroker()
    service = _service(session, broker=broker, cache=memory_cache)

    await service.list_notifications(user_id=USER)
    assert notification_list_key(USER) in memory_cache.store

    async with broker.subscribe(USER) as queue:
        dismissed = await service.dismiss(user_id=USER, notification_id=first.id)
        again = await service.dismiss(user_id=USER, notification_id=first.id)

        assert dismissed.dismissed is True
        assert again.dismissed is True
        assert queue.qsize() == 1
        event = queue.get_nowait()
        assert event.event == "dismissed"
        assert event.unread_count == 1

    assert notification_list_key(USER) not in memory_cache.store
    unread = await service.unread_count(user_id=USER)
    assert (unread.count, unread.label) == (1, "1")
    listed = await service.list_notifications(user_id=USER)
    assert [item.body for item in listed.notifications] == ["Andre"]


@pytest.mark.asyncio
async def test_dismiss_of_foreign_notification_is_not_found(session: AsyncSession) -> None:
    foreign = await seed_notification(session, "someone-else", "Privat")

    with pytest.raises(NotFoundError):
        await _service(session).dismiss(user_id=USER, notification_id=foreign.id)


@pytest.mark.asyncio
async def test_create_publishes_event(session: AsyncSession) -> None:
    broker = NotificationBroker()
    service = _service(session, broker=broker)

    async with broker.subscribe(USER) as queue:
        created = await service.create(
            NotificationCreate(
                user_id=USER,
                body="Annonsen din utløper i morgen",
                type=NotificationType.WARNING,
                link="/listings/job/job-1",
            )
        )
        event = queue.get_nowait()

    assert created.type is NotificationType.WARNING
    assert created.time_ago == "Akkurat nå"
    assert event.event == "created"
    assert event.notification_id == created.id
    assert event.unread_count == 1


@pytest.mark.asyncio
async def test_badge_label_overflows_past_ninety_nine(session: AsyncSession) -> None:
    for index in range(100):
        await seed_notification(session, USER, f"Melding {index}")

    unread = await _service(session).unread_count(user_id=USER)

    assert unread.count == 100
    assert unread.label == "99+"
