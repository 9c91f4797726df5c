"""Persistence helpers for user profiles."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from havbors.db.models import Profile

_PROFILE_FIELDS = ("full_name", "email", "phone", "job_title", "avatar_url")


class ProfileRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str) -> Profile | None:
        result = await self._session.execute(select(Profile).where(Profile.id == user_id))
        return result.scalar_one_or_none()

    async def update(self, profile: Profile, **values: object) -> Profile:
        """Assign the supplied columns and flush; ``updated_at`` bumps itself."""

        for field, value in values.items():
            setattr(profile, field, value)
        await self._session.flush()
        return profile

    async def create(self, user_id: str, **values: object) -> Profile:
        columns: dict[str, object] = dict.fromkeys(_PROFILE_FIELDS)
        columns.update(values)
        profile = Profile(id=user_id, **columns)
        self._session.add(profile)
        await self._session.flush()
        return profile
