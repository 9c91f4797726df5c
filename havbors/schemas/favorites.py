"""Pydantic schemas that power the favorites and folders API surface."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from havbors.db.models import ListingKind
from havbors.schemas.listings import ListingRef, ListingSummary

FOLDER_NAME_MAX_LENGTH = 120


class FavoriteCreate(BaseModel):
    """Payload for saving a listing, optionally straight into a folder."""

    listing: ListingRef
    folder_id: int | None = Field(
        None,
        ge=1,
        description="Folder to file the favorite under; omitted means no folder.",
    )


class FavoriteMove(BaseModel):
    """Move payload; ``folder_id`` of ``null`` takes the favorite out of its folder."""

    folder_id: int | None = Field(None, ge=1)


class Favorite(BaseModel):
    """Read model exposed in API responses."""

    id: int = Field(..., description="Surrogate primary key for the favorite row")
    user_id: str
    listing_kind: ListingKind
    listing_id: str
    folder_id: int | None = None
    created_at: datetime
    listing: ListingSummary = Field(
        ..., description="Card data of the referenced listing, resolved by kind."
    )

    model_config = ConfigDict(from_attributes=True)


class FavoriteListResponse(BaseModel):
    total: int
    folder_id: int | None = None
    favorites: list[Favorite] = Field(default_factory=list)


class FavoriteToggleResponse(BaseModel):
    """Outcome of the heart button: the resulting state plus the row, if any."""

    listing: ListingRef
    is_favorite: bool
    favorite: Favorite | None = None


class _FolderName(BaseModel):
    name: str = Field(..., min_length=1, max_length=FOLDER_NAME_MAX_LENGTH)

    @field_validator("name", mode="before")
    @classmethod
    def _trim_name(cls, value: object) -> object:
        """Folder names are compared after trimming surrounding whitespace."""

        if isinstance(value, str):
            return value.strip()
        return value


class FolderCreate(_FolderName):
    """Payload for creating a folder."""


class FolderRename(_FolderName):
    """Payload for renaming a folder."""


class Folder(BaseModel):
    id: int
    name: str
    created_at: datetime
    favorite_count: int = Field(0, ge=0, description="Favorites filed in the folder")

    model_config = ConfigDict(from_attributes=True)


class FolderListResponse(BaseModel):
    total: int
    folders: list[Folder] = Field(default_factory=list)
