"""FastAPI router exposing favorites and folder management.

The caller is identified by the gateway-forwarded ``X-User-Id`` header.  Reads
without it return empty payloads; mutations answer 401.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from havbors.schemas.favorites import (
    Favorite,
    FavoriteCreate,
    FavoriteListResponse,
    FavoriteMove,
    FavoriteToggleResponse,
    Folder,
    FolderCreate,
    FolderListResponse,
    FolderRename,
)
from havbors.services.dependencies import get_favorites_service
from havbors.services.favorites_service import FavoritesService
from havbors.utils.auth import get_current_user_id, get_optional_user_id

router = APIRouter()


@router.get("", response_model=FavoriteListResponse)
async def list_favorites(
    folder_id: int | None = Query(None, ge=1, description="Only favorites filed in this folder"),
    user_id: str | None = Depends(get_optional_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteListResponse:
    """Return the caller's favorites newest first, each with its listing card."""

    if user_id is None:
        return FavoriteListResponse(total=0, folder_id=folder_id, favorites=[])
    return await service.list_favorites(user_id=user_id, folder_id=folder_id)


@router.post("", response_model=Favorite, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    payload: FavoriteCreate,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> Favorite:
    """Save a listing; an already saved listing is moved and answered with 200."""

    favorite, created = await service.add_favorite(user_id=user_id, payload=payload)
    if not created:
        response.status_code = status.HTTP_200_OK
    return favorite


@router.post("/toggle", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    payload: FavoriteCreate,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteToggleResponse:
    return await service.toggle_favorite(
        user_id=user_id, listing=payload.listing, folder_id=payload.folder_id
    )


@router.get("/folders", response_model=FolderListResponse)
async def list_folders(
    user_id: str | None = Depends(get_optional_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FolderListResponse:
    if user_id is None:
        return FolderListResponse(total=0, folders=[])
    return await service.list_folders(user_id=user_id)


@router.post("/folders", response_model=Folder, status_code=status.HTTP_201_CREATED)
async def create_folder(
    payload: FolderCreate,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> Folder:
    """Create a folder; a name the caller already uses answers 409."""

    return await service.create_folder(user_id=user_id, payload=payload)


@router.patch("/folders/{folder_id}", response_model=Folder)
async def rename_folder(
    folder_id: int,
    payload: FolderRename,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> Folder:
    return await service.rename_folder(user_id=user_id, folder_id=folder_id, payload=payload)


@router.delete("/folders/{folder_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_folder(
    folder_id: int,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> Response:
    """Delete a folder; its favorites stay saved without a folder."""

    await service.delete_folder(user_id=user_id, folder_id=folder_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{favorite_id}", response_model=Favorite)
async def move_favorite(
    favorite_id: int,
    payload: FavoriteMove,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> Favorite:
    return await service.move_favorite(
        user_id=user_id, favorite_id=favorite_id, folder_id=payload.folder_id
    )


@router.delete("/{favorite_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite(
    favorite_id: int,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> Response:
    await service.remove_favorite(user_id=user_id, favorite_id=favorite_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
