"""Profile read/update and avatar upload orchestration."""

from __future__ import annotations

import logging

from havbors.cache import CacheClient, profile_key
from havbors.db.repositories.profiles import ProfileRepository
from havbors.errors import NotFoundError
from havbors.schemas.profile import Profile, ProfileUpdate
from havbors.services.avatar_storage import AvatarStorage
from havbors.services.caching import CacheableService, cached

logger = logging.getLogger(__name__)

PROFILE_CACHE_TTL = 300


class ProfileService(CacheableService):
    def __init__(
        self,
        repository: ProfileRepository,
        *,
        storage: AvatarStorage,
        cache: CacheClient | None = None,
    ) -> None:
        super().__init__(cache=cache)
        self._repository = repository
        self._storage = storage

    @cached(
        lambda _self, user_id: profile_key(user_id),
        ttl=PROFILE_CACHE_TTL,
        serializer=lambda profile: profile.model_dump(mode="json"),
        deserializer=Profile.model_validate,
    )
    async def get_profile(self, user_id: str) -> Profile:
        profile = await self._repository.get(user_id)
        if profile is None:
            raise NotFoundError("Profile", user_id)
        return Profile.model_validate(profile)

    async def update_profile(self, user_id: str, payload: ProfileUpdate) -> Profile:
        """Apply the validated form; ``full_name``/``avatar_url`` only when sent."""

        profile = await self._repository.get(user_id)
        if profile is None:
            raise NotFoundError("Profile", user_id)

        values = payload.model_dump(exclude_unset=True)
        values["email"] = str(payload.email)
        await self._repository.update(profile, **values)
        await self._invalidate(user_id)
        return Profile.model_validate(profile)

    async def upload_avatar(self, user_id: str, data: bytes) -> Profile:
        """Store the avatar at ``{user_id}/avatar`` and point the profile at it.

        A profile row is created on first upload when the user has none yet.
        """

        stored = await self._storage.save_avatar(user_id, data)
        profile = await self._repository.get(user_id)
        if profile is None:
            profile = await self._repository.create(user_id, avatar_url=stored.key)
        else:
            await self._repository.update(profile, avatar_url=stored.key)
        await self._invalidate(user_id)
        return Profile.model_validate(profile)

    async def download_avatar(self, path: str) -> tuple[bytes, str]:
        return await self._storage.load(path)

    async def _invalidate(self, user_id: str) -> None:
        if self._cache is not None:
            await self._cache.delete(profile_key(user_id))


__all__ = ["ProfileService"]
