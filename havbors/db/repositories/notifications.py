"""Queries for the per-user notification inbox."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from havbors.db.models import Notification, NotificationType


class NotificationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_active(self, user_id: str) -> list[Notification]:
        """Return the user's non-dismissed notifications, newest first."""

        query = (
            select(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.dismissed.is_(False),
            )
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def count_active(self, user_id: str) -> int:
        query = select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.dismissed.is_(False),
        )
        return (await self._session.execute(query)).scalar_one()

    async def get_for_user(self, user_id: str, notification_id: int) -> Notification | None:
        query = select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def create(
        self,
        *,
        user_id: str,
        body: str,
        type: NotificationType,
        link: str | None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            body=body,
            type=type.value,
            link=link,
        )
        self._session.add(notification)
        await self._session.flush()
        return notification

    async def dismiss(self, notification: Notification) -> Notification:
        notification.dismissed = True
        await self._session.flush()
        return notification
