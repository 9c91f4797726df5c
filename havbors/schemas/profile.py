"""Pydantic schemas for the profile screen."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class Profile(BaseModel):
    id: str
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    job_title: str | None = None
    avatar_url: str | None = Field(
        None, description="Storage key of the avatar, served from /profile/avatar"
    )
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Edit-profile form; every field is validated before anything is written."""

    email: EmailStr
    phone: str = Field(..., min_length=8, max_length=32)
    job_title: str = Field(..., min_length=1, max_length=255)
    full_name: str | None = Field(None, max_length=255)
    avatar_url: str | None = Field(None, max_length=512)

    @field_validator("phone", "job_title", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value
