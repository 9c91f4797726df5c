"""FastAPI dependency wiring for the service layer.

Factories only resolve infrastructure (database session, cache client,
storage) and construct the service, which keeps the service modules free of
web-layer imports and lets tests override a single dependency.
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from havbors.cache import CacheClient, get_cache_client
from havbors.db.connection import get_db
from havbors.db.repositories import (
    ListingRepository,
    NotificationRepository,
    ProfileRepository,
)
from havbors.services.avatar_storage import AvatarStorage
from havbors.services.favorites import (
    FavoritesCache,
    FavoritesPersistence,
    FavoritesPresenter,
)
from havbors.services.favorites_service import FavoritesService
from havbors.services.feed_service import FeedService
from havbors.services.notification_broker import (
    NotificationBroker,
    get_notification_broker,
)
from havbors.services.notifications_service import NotificationsService
from havbors.services.profile_service import ProfileService
from havbors.settings import get_settings


def get_feed_service(
    session: AsyncSession = Depends(get_db),
    cache: CacheClient = Depends(get_cache_client),
) -> FeedService:
    return FeedService(ListingRepository(session), cache=cache, settings=get_settings())


def get_favorites_service(
    session: AsyncSession = Depends(get_db),
    cache: CacheClient = Depends(get_cache_client),
) -> FavoritesService:
    return FavoritesService(
        persistence=FavoritesPersistence(session),
        cache=FavoritesCache(cache),
        presenter=FavoritesPresenter(),
    )


def get_notifications_service(
    session: AsyncSession = Depends(get_db),
    cache: CacheClient = Depends(get_cache_client),
    broker: NotificationBroker = Depends(get_notification_broker),
) -> NotificationsService:
    return NotificationsService(NotificationRepository(session), broker=broker, cache=cache)


def get_avatar_storage() -> AvatarStorage:
    return AvatarStorage.from_settings(get_settings())


def get_profile_service(
    session: AsyncSession = Depends(get_db),
    cache: CacheClient = Depends(get_cache_client),
    storage: AvatarStorage = Depends(get_avatar_storage),
) -> ProfileService:
    return ProfileService(ProfileRepository(session), storage=storage, cache=cache)


__all__ = [
    "get_avatar_storage",
    "get_favorites_service",
    "get_feed_service",
    "get_notifications_service",
    "get_profile_service",
]
