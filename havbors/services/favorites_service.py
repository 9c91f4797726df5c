"""Business logic powering the favorites and folders endpoints.

Persistence-oriented operations are delegated to :class:`FavoritesPersistence`,
schema conversion to :class:`FavoritesPresenter` and cached list payloads to
:class:`FavoritesCache`.  The service enforces the ownership rules:

* every operation needs a user id and raises ``NotAuthenticatedError`` without;
* a favorite or folder that does not belong to the caller is reported exactly
  like a missing one (``NotFoundError``);
* a (user, listing) pair is saved at most once, so saving it again moves the
  existing favorite to the requested folder;
* folder names are unique per user and clash with ``ConflictError``;
* deleting a folder keeps its favorites, now without a folder.

Each successful mutation drops the caller's cached lists.
"""

from __future__ import annotations

import logging

from havbors.db.models import Favorite as FavoriteModel
from havbors.errors import NotAuthenticatedError, NotFoundError
from havbors.schemas.favorites import (
    Favorite,
    FavoriteCreate,
    FavoriteListResponse,
    FavoriteToggleResponse,
    Folder,
    FolderCreate,
    FolderListResponse,
    FolderRename,
)
from havbors.schemas.listings import ListingRef
from havbors.services.favorites import (
    FavoritesCache,
    FavoritesPersistence,
    FavoritesPresenter,
)

logger = logging.getLogger(__name__)


def _require_user(user_id: str | None) -> str:
    if not user_id:
        raise NotAuthenticatedError()
    return user_id


class FavoritesService:
    """Orchestrates persistence, presentation, and caching dependencies."""

    def __init__(
        self,
        *,
        persistence: FavoritesPersistence,
        cache: FavoritesCache,
        presenter: FavoritesPresenter | None = None,
    ) -> None:
        self._persistence = persistence
        self._cache = cache
        self._presenter = presenter or FavoritesPresenter()

    # -- favorites -----------------------------------------------------------

    async def list_favorites(
        self, *, user_id: str | None, folder_id: int | None = None
    ) -> FavoriteListResponse:
        owner = _require_user(user_id)

        cached = await self._cache.read_favorite_list(user_id=owner, folder_id=folder_id)
        if cached is not None:
            return cached

        if folder_id is not None:
            await self._require_folder(owner, folder_id)

        favorites = await self._persistence.list_favorites(user_id=owner, folder_id=folder_id)
        payload = self._presenter.favorite_list(favorites, folder_id=folder_id)
        await self._cache.write_favorite_list(
            user_id=owner, folder_id=folder_id, payload=payload
        )
        return payload

    async def add_favorite(
        self, *, user_id: str | None, payload: FavoriteCreate
    ) -> tuple[Favorite, bool]:
        """Save ``payload.listing``; returns the favorite and whether it is new.

        An existing favorite for the same listing is moved to
        ``payload.folder_id`` instead of inserting a second row.
        """

        owner = _require_user(user_id)
        if payload.folder_id is not None:
            await self._require_folder(owner, payload.folder_id)

        existing = await self._persistence.find_favorite_for_listing(
            user_id=owner, listing_id=payload.listing.id
        )
        if existing is not None:
            if existing.listing_kind != payload.listing.kind.value:
                raise NotFoundError("Listing", f"{payload.listing.kind.value}/{payload.listing.id}")
            await self._persistence.move_favorite(existing, payload.folder_id)
            await self._cache.invalidate(user_id=owner)
            logger.debug(
                "Listing %s already saved by %s; moved to folder %s",
                payload.listing.id,
                owner,
                payload.folder_id,
            )
            return self._presenter.favorite_to_schema(existing), False

        listing = await self._persistence.load_listing(payload.listing)
        if listing is None:
            raise NotFoundError("Listing", f"{payload.listing.kind.value}/{payload.listing.id}")

        favorite = await self._persistence.add_favorite(
            user_id=owner, listing=listing, folder_id=payload.folder_id
        )
        await self._cache.invalidate(user_id=owner)
        return self._presenter.favorite_to_schema(favorite), True

    async def remove_favorite(self, *, user_id: str | None, favorite_id: int) -> None:
        owner = _require_user(user_id)
        favorite = await self._require_favorite(owner, favorite_id)
        await self._persistence.delete_favorite(favorite)
        await self._cache.invalidate(user_id=owner)

    async def move_favorite(
        self, *, user_id: str | None, favorite_id: int, folder_id: int | None
    ) -> Favorite:
        """Change only the folder reference; ``None`` takes it out of any folder."""

        owner = _require_user(user_id)
        favorite = await self._require_favorite(owner, favorite_id)
        if folder_id is not None:
            await self._require_folder(owner, folder_id)
        await self._persistence.move_favorite(favorite, folder_id)
        await self._cache.invalidate(user_id=owner)
        return self._presenter.favorite_to_schema(favorite)

    async def toggle_favorite(
        self,
        *,
        user_id: str | None,
        listing: ListingRef,
        folder_id: int | None = None,
    ) -> FavoriteToggleResponse:
        """Remove the favorite when present, otherwise save it straight away."""

        owner = _require_user(user_id)
        existing = await self._persistence.find_favorite_for_listing(
            user_id=owner, listing_id=listing.id
        )
        if existing is not None:
            if existing.listing_kind != listing.kind.value:
                raise NotFoundError("Listing", f"{listing.kind.value}/{listing.id}")
            await self._persistence.delete_favorite(existing)
            await self._cache.invalidate(user_id=owner)
            return FavoriteToggleResponse(listing=listing, is_favorite=False)

        favorite, _ = await self.add_favorite(
            user_id=owner,
            payload=FavoriteCreate(listing=listing, folder_id=folder_id),
        )
        return FavoriteToggleResponse(listing=listing, is_favorite=True, favorite=favorite)

    # -- folders -------------------------------------------------------------

    async def list_folders(self, *, user_id: str | None) -> FolderListResponse:
        owner = _require_user(user_id)

        cached = await self._cache.read_folder_list(user_id=owner)
        if cached is not None:
            return cached

        rows = await self._persistence.list_folders(user_id=owner)
        payload = self._presenter.folder_list(rows)
        await self._cache.write_folder_list(user_id=owner, payload=payload)
        return payload

    async def create_folder(self, *, user_id: str | None, payload: FolderCreate) -> Folder:
        owner = _require_user(user_id)
        folder = await self._persistence.create_folder(user_id=owner, name=payload.name)
        await self._cache.invalidate(user_id=owner)
        return self._presenter.folder_to_schema(folder)

    async def rename_folder(
        self, *, user_id: str | None, folder_id: int, payload: FolderRename
    ) -> Folder:
        owner = _require_user(user_id)
        folder = await self._require_folder(owner, folder_id)
        await self._persistence.rename_folder(folder, payload.name)
        await self._cache.invalidate(user_id=owner)
        count = await self._persistence.count_folder_favorites(folder)
        return self._presenter.folder_to_schema(folder, favorite_count=count)

    async def delete_folder(self, *, user_id: str | None, folder_id: int) -> int:
        """Delete the folder and return how many favorites lost their folder."""

        owner = _require_user(user_id)
        folder = await self._require_folder(owner, folder_id)
        detached = await self._persistence.delete_folder(folder)
        await self._cache.invalidate(user_id=owner)
        logger.info(
            "Deleted folder %s for user %s; %d favorites kept without folder",
            folder_id,
            owner,
            detached,
        )
        return detached

    # -- helpers -------------------------------------------------------------

    async def _require_favorite(self, user_id: str, favorite_id: int) -> FavoriteModel:
        favorite = await self._persistence.load_favorite(
            user_id=user_id, favorite_id=favorite_id
        )
        if favorite is None:
            raise NotFoundError("Favorite", favorite_id)
        return favorite

    async def _require_folder(self, user_id: str, folder_id: int):
        folder = await self._persistence.load_folder(user_id=user_id, folder_id=folder_id)
        if folder is None:
            raise NotFoundError("Folder", folder_id)
        return folder


__all__ = ["FavoritesService"]
