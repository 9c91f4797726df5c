"""Per-user notifications created by back-office processes.

Clients only ever flip ``dismissed``; rows are never hard-deleted through the
API.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from . import Base, NotificationType, utcnow


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_dismissed", "user_id", "dismissed"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=NotificationType.INFO.value,
        server_default=NotificationType.INFO.value,
    )
    dismissed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="0",
    )
    link: Mapped[str | None] = mapped_column(
        String(1024),
        nullable=True,
        doc="Optional deep link opened when the notification is tapped.",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
