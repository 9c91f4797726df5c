"""Notification inbox: listing, unread badge, dismissal and creation."""

from __future__ import annotations

import logging
from datetime import datetime

from havbors.cache import CacheClient, notification_list_key
from havbors.db.models import Notification as NotificationModel
from havbors.db.repositories.notifications import NotificationRepository
from havbors.errors import NotFoundError
from havbors.schemas.notifications import (
    Notification,
    NotificationCreate,
    NotificationEvent,
    NotificationListResponse,
    UnreadCount,
)
from havbors.services.notification_broker import NotificationBroker
from havbors.utils.time_ago import format_time_ago, unread_badge_label

logger = logging.getLogger(__name__)

NOTIFICATION_CACHE_TTL = 30


class NotificationsService:
    def __init__(
        self,
        repository: NotificationRepository,
        *,
        broker: NotificationBroker,
        cache: CacheClient | None = None,
    ) -> None:
        self._repository = repository
        self._broker = broker
        self._cache = cache

    def to_schema(self, notification: NotificationModel, *, now: datetime | None = None) -> Notification:
        payload = Notification.model_validate(notification)
        payload.time_ago = format_time_ago(notification.created_at, now=now)
        return payload

    async def list_notifications(self, *, user_id: str | None) -> NotificationListResponse:
        """Return active notifications newest first; empty without a session."""

        if not user_id:
            return NotificationListResponse(total=0, notifications=[])

        if self._cache is not None:
            cached = await self._cache.get_json(notification_list_key(user_id))
            if cached is not None:
                items = [Notification.model_validate(item) for item in cached]
                for item in items:
                    item.time_ago = format_time_ago(item.created_at)
                return NotificationListResponse(total=len(items), notifications=items)

        rows = await self._repository.list_active(user_id)
        items = [self.to_schema(row) for row in rows]
        if self._cache is not None:
            await self._cache.set_json(
                notification_list_key(user_id),
                [item.model_dump(mode="json") for item in items],
                ttl=NOTIFICATION_CACHE_TTL,
            )
        return NotificationListResponse(total=len(items), notifications=items)

    async def unread_count(self, *, user_id: str | None) -> UnreadCount:
        if not user_id:
            return UnreadCount(count=0, label=None)
        count = await self._repository.count_active(user_id)
        return UnreadCount(count=count, label=unread_badge_label(count))

    async def dismiss(self, *, user_id: str, notification_id: int) -> Notification:
        """Soft-delete one notification; dismissing twice is a no-op."""

        notification = await self._repository.get_for_user(user_id, notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        if not notification.dismissed:
            await self._repository.dismiss(notification)
            await self._after_change("dismissed", notification)
        return self.to_schema(notification)

    async def create(self, payload: NotificationCreate) -> Notification:
        notification = await self._repository.create(
            user_id=payload.user_id,
            body=payload.body,
            type=payload.type,
            link=payload.link,
        )
        logger.info(
            "Created %s notification %s for %s",
            notification.type,
            notification.id,
            notification.user_id,
        )
        await self._after_change("created", notification)
        return self.to_schema(notification)

    async def _after_change(self, event: str, notification: NotificationModel) -> None:
        if self._cache is not None:
            await self._cache.delete(notification_list_key(notification.user_id))
        unread = await self._repository.count_active(notification.user_id)
        self._broker.publish(
            NotificationEvent(
                event=event,
                notification_id=notification.id,
                user_id=notification.user_id,
                unread_count=unread,
            )
        )


__all__ = ["NotificationsService"]
