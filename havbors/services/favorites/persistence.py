"""Database-oriented helpers for favorites and folders."""

from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from havbors.db.models import Favorite, FavoriteFolder, Listing
from havbors.errors import DUPLICATE_FOLDER_NAME, ConflictError
from havbors.schemas.listings import ListingRef

logger = logging.getLogger(__name__)


def _duplicate_folder(name: str) -> ConflictError:
    return ConflictError(
        f"A folder named {name!r} already exists",
        code=DUPLICATE_FOLDER_NAME,
    )


class FavoritesPersistence:
    """Encapsulates SQLAlchemy operations required by the favorites domain."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_favorites(
        self, *, user_id: str, folder_id: int | None = None
    ) -> list[Favorite]:
        """Return the user's favorites newest first with listings eagerly loaded."""

        query = (
            select(Favorite)
            .options(selectinload(Favorite.listing))
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        )
        if folder_id is not None:
            query = query.where(Favorite.folder_id == folder_id)
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def load_favorite(self, *, user_id: str, favorite_id: int) -> Favorite | None:
        query = (
            select(Favorite)
            .options(selectinload(Favorite.listing))
            .where(Favorite.id == favorite_id, Favorite.user_id == user_id)
        )
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def find_favorite_for_listing(
        self, *, user_id: str, listing_id: str
    ) -> Favorite | None:
        query = (
            select(Favorite)
            .options(selectinload(Favorite.listing))
            .where(Favorite.user_id == user_id, Favorite.listing_id == listing_id)
        )
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def load_listing(self, ref: ListingRef) -> Listing | None:
        """Resolve ``ref`` to its listing, requiring the kinds to agree."""

        query = select(Listing).where(Listing.id == ref.id, Listing.kind == ref.kind.value)
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def add_favorite(
        self, *, user_id: str, listing: Listing, folder_id: int | None
    ) -> Favorite:
        favorite = Favorite(
            user_id=user_id,
            listing_kind=listing.kind,
            listing=listing,
            folder_id=folder_id,
        )
        self._session.add(favorite)
        await self._session.flush()
        return favorite

    async def move_favorite(self, favorite: Favorite, folder_id: int | None) -> Favorite:
        favorite.folder_id = folder_id
        await self._session.flush()
        return favorite

    async def delete_favorite(self, favorite: Favorite) -> None:
        await self._session.delete(favorite)
        await self._session.flush()

    async def list_folders(self, *, user_id: str) -> list[tuple[FavoriteFolder, int]]:
        """Return ``(folder, favorite_count)`` pairs ordered by name."""

        query = (
            select(FavoriteFolder, func.count(Favorite.id))
            .outerjoin(Favorite, Favorite.folder_id == FavoriteFolder.id)
            .where(FavoriteFolder.user_id == user_id)
            .group_by(FavoriteFolder.id)
            .order_by(FavoriteFolder.name, FavoriteFolder.id)
        )
        result = await self._session.execute(query)
        return [(folder, count) for folder, count in result.all()]

    async def load_folder(self, *, user_id: str, folder_id: int) -> FavoriteFolder | None:
        query = select(FavoriteFolder).where(
            FavoriteFolder.id == folder_id,
            FavoriteFolder.user_id == user_id,
        )
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def count_folder_favorites(self, folder: FavoriteFolder) -> int:
        query = select(func.count(Favorite.id)).where(Favorite.folder_id == folder.id)
        return (await self._session.execute(query)).scalar_one()

    async def folder_name_taken(
        self, *, user_id: str, name: str, exclude_id: int | None = None
    ) -> bool:
        query = select(FavoriteFolder.id).where(
            FavoriteFolder.user_id == user_id,
            FavoriteFolder.name == name,
        )
        if exclude_id is not None:
            query = query.where(FavoriteFolder.id != exclude_id)
        result = await self._session.execute(query.limit(1))
        return result.first() is not None

    async def create_folder(self, *, user_id: str, name: str) -> FavoriteFolder:
        """Insert a folder; a name already used by this user raises ``ConflictError``.

        The pre-check gives a clean error in the common case while the unique
        constraint still decides races between concurrent requests.
        """

        if await self.folder_name_taken(user_id=user_id, name=name):
            raise _duplicate_folder(name)

        folder = FavoriteFolder(user_id=user_id, name=name)
        self._session.add(folder)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            logger.info("Folder insert for user %s hit the unique constraint", user_id)
            raise _duplicate_folder(name) from exc
        return folder

    async def rename_folder(self, folder: FavoriteFolder, name: str) -> FavoriteFolder:
        if folder.name == name:
            return folder
        if await self.folder_name_taken(
            user_id=folder.user_id, name=name, exclude_id=folder.id
        ):
            raise _duplicate_folder(name)

        folder.name = name
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise _duplicate_folder(name) from exc
        return folder

    async def delete_folder(self, folder: FavoriteFolder) -> int:
        """Detach the folder's favorites, then delete it; returns how many were detached.

        The detach is explicit so favorites survive even where the database
        does not enforce ``ON DELETE SET NULL`` (SQLite without foreign keys).
        """

        detached = await self.count_folder_favorites(folder)
        await self._session.execute(
            update(Favorite)
            .where(Favorite.folder_id == folder.id)
            .values(folder_id=None)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.delete(folder)
        await self._session.flush()
        return detached
