"""Repositories encapsulating SQLAlchemy queries per aggregate."""

from havbors.db.repositories.listings import ListingRepository
from havbors.db.repositories.notifications import NotificationRepository
from havbors.db.repositories.profiles import ProfileRepository

__all__ = ["ListingRepository", "NotificationRepository", "ProfileRepository"]
