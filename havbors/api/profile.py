"""Profile screen endpoints including avatar upload and download.

Avatars are public objects: any authenticated caller may download any
stored avatar by its key, the way a public avatar bucket serves them.
Only uploads are scoped to the caller.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile

from havbors.schemas.profile import Profile, ProfileUpdate
from havbors.services.avatar_storage import avatar_key
from havbors.services.dependencies import get_profile_service
from havbors.services.profile_service import ProfileService
from havbors.utils.auth import get_current_user_id

router = APIRouter()


@router.get("", response_model=Profile)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    return await service.get_profile(user_id)


@router.patch("", response_model=Profile)
async def update_profile(
    payload: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    return await service.update_profile(user_id, payload)


@router.put("/avatar", response_model=Profile)
async def upload_avatar(
    file: UploadFile = File(..., description="Image file (PNG, GIF, JPEG, WebP, ...)"),
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    """Replace the caller's avatar; the image is resized before it is stored."""

    data = await file.read()
    return await service.upload_avatar(user_id, data)


@router.get("/avatar")
async def download_avatar(
    path: str | None = Query(None, description="Storage key; defaults to the caller's avatar"),
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> Response:
    """Serve a stored avatar by key; avatars are readable by every signed-in user."""

    data, content_type = await service.download_avatar(path or avatar_key(user_id))
    return Response(content=data, media_type=content_type)
