"""Conversions from favorites ORM rows to API schemas."""

from __future__ import annotations

from collections.abc import Iterable

from havbors.db.models import Favorite as FavoriteModel
from havbors.db.models import FavoriteFolder
from havbors.schemas.favorites import (
    Favorite,
    FavoriteListResponse,
    Folder,
    FolderListResponse,
)
from havbors.schemas.listings import ListingSummary


class FavoritesPresenter:
    def favorite_to_schema(self, favorite: FavoriteModel) -> Favorite:
        return Favorite(
            id=favorite.id,
            user_id=favorite.user_id,
            listing_kind=favorite.kind,
            listing_id=favorite.listing_id,
            folder_id=favorite.folder_id,
            created_at=favorite.created_at,
            listing=ListingSummary.model_validate(favorite.listing),
        )

    def favorite_list(
        self, favorites: Iterable[FavoriteModel], *, folder_id: int | None
    ) -> FavoriteListResponse:
        items = [self.favorite_to_schema(favorite) for favorite in favorites]
        return FavoriteListResponse(total=len(items), folder_id=folder_id, favorites=items)

    def folder_to_schema(self, folder: FavoriteFolder, *, favorite_count: int = 0) -> Folder:
        return Folder(
            id=folder.id,
            name=folder.name,
            created_at=folder.created_at,
            favorite_count=favorite_count,
        )

    def folder_list(self, rows: Iterable[tuple[FavoriteFolder, int]]) -> FolderListResponse:
        folders = [self.folder_to_schema(folder, favorite_count=count) for folder, count in rows]
        return FolderListResponse(total=len(folders), folders=folders)
