"""Notification inbox endpoints and the realtime change stream."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse

from havbors.schemas.notifications import (
    Notification,
    NotificationCreate,
    NotificationListResponse,
    UnreadCount,
)
from havbors.services.dependencies import get_notifications_service
from havbors.services.notification_broker import (
    NotificationBroker,
    get_notification_broker,
)
from havbors.services.notifications_service import NotificationsService
from havbors.utils.auth import get_current_user_id, get_optional_user_id

logger = logging.getLogger(__name__)

router = APIRouter()

STREAM_KEEPALIVE_SECONDS = 15.0


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    user_id: str | None = Depends(get_optional_user_id),
    service: NotificationsService = Depends(get_notifications_service),
) -> NotificationListResponse:
    return await service.list_notifications(user_id=user_id)


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(
    user_id: str | None = Depends(get_optional_user_id),
    service: NotificationsService = Depends(get_notifications_service),
) -> UnreadCount:
    return await service.unread_count(user_id=user_id)


@router.post("/{notification_id}/dismiss", response_model=Notification)
async def dismiss_notification(
    notification_id: int,
    user_id: str = Depends(get_current_user_id),
    service: NotificationsService = Depends(get_notifications_service),
) -> Notification:
    return await service.dismiss(user_id=user_id, notification_id=notification_id)


@router.post("", response_model=Notification, status_code=status.HTTP_201_CREATED)
async def create_notification(
    payload: NotificationCreate,
    service: NotificationsService = Depends(get_notifications_service),
) -> Notification:
    """Internal endpoint used by back-office processes; not exposed via the gateway."""

    return await service.create(payload)


async def _event_stream(
    request: Request,
    broker: NotificationBroker,
    user_id: str,
    *,
    keepalive: float,
) -> AsyncIterator[str]:
    async with broker.subscribe(user_id) as queue:
        yield ": connected\n\n"
        while not await request.is_disconnected():
            try:
                event = await asyncio.wait_for(queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue
            yield f"event: {event.event}\ndata: {event.model_dump_json()}\n\n"
    logger.debug("Notification stream closed for %s", user_id)


@router.get("/stream")
async def stream_notifications(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    broker: NotificationBroker = Depends(get_notification_broker),
) -> StreamingResponse:
    """Server-Sent Events feed of created and dismissed notifications."""

    return StreamingResponse(
        _event_stream(request, broker, user_id, keepalive=STREAM_KEEPALIVE_SECONDS),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
