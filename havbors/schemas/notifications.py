"""Pydantic schemas for the notification inbox."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from havbors.db.models import NotificationType


class NotificationCreate(BaseModel):
    """Internal payload used by back-office processes to notify a user."""

    user_id: str = Field(..., min_length=1, max_length=128)
    body: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.INFO
    link: str | None = Field(None, max_length=1024)


class Notification(BaseModel):
    id: int
    user_id: str
    body: str
    type: NotificationType
    dismissed: bool = False
    link: str | None = None
    created_at: datetime
    time_ago: str = Field("", description="Norwegian relative time label")

    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    total: int
    notifications: list[Notification] = Field(default_factory=list)


class UnreadCount(BaseModel):
    count: int = Field(..., ge=0)
    label: str | None = Field(
        None, description='Badge text; "99+" above 99 and null when there is nothing unread'
    )


class NotificationEvent(BaseModel):
    """Change event pushed to realtime subscribers."""

    event: str = Field(..., description="created or dismissed")
    notification_id: int
    user_id: str
    unread_count: int = Field(..., ge=0)
