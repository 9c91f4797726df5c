"""Caching helpers dedicated to favorites orchestration."""

from __future__ import annotations

from pydantic import ValidationError

from havbors.cache import (
    CacheClient,
    favorite_list_key,
    folder_list_key,
    invalidate_user_favorites,
)
from havbors.schemas.favorites import FavoriteListResponse, FolderListResponse

FAVORITES_CACHE_TTL = 120


class FavoritesCache:
    """Typed read/write helpers over the user-scoped favorites cache entries.

    Every successful mutation calls :meth:`invalidate`, which drops the folder
    list and every per-folder favorites list of that user in one sweep.
    """

    def __init__(self, client: CacheClient) -> None:
        self._client = client

    async def read_favorite_list(
        self, *, user_id: str, folder_id: int | None
    ) -> FavoriteListResponse | None:
        cached = await self._client.get_json(favorite_list_key(user_id, folder_id))
        if cached is None:
            return None
        try:
            return FavoriteListResponse.model_validate(cached)
        except ValidationError:
            return None

    async def write_favorite_list(
        self,
        *,
        user_id: str,
        folder_id: int | None,
        payload: FavoriteListResponse,
    ) -> None:
        await self._client.set_json(
            favorite_list_key(user_id, folder_id),
            payload.model_dump(mode="json"),
            ttl=FAVORITES_CACHE_TTL,
        )

    async def read_folder_list(self, *, user_id: str) -> FolderListResponse | None:
        cached = await self._client.get_json(folder_list_key(user_id))
        if cached is None:
            return None
        try:
            return FolderListResponse.model_validate(cached)
        except ValidationError:
            return None

    async def write_folder_list(self, *, user_id: str, payload: FolderListResponse) -> None:
        await self._client.set_json(
            folder_list_key(user_id),
            payload.model_dump(mode="json"),
            ttl=FAVORITES_CACHE_TTL,
        )

    async def invalidate(self, *, user_id: str) -> None:
        await invalidate_user_favorites(self._client, user_id)
