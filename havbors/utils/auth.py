"""Caller identity as forwarded by the authentication gateway.

The gateway terminates the session and forwards the authenticated user id in
``X-User-Id``.  Read endpoints treat a missing header as the "no session yet"
state and render empty results; mutations require it.
"""

from __future__ import annotations

from fastapi import Header

from havbors.errors import NotAuthenticatedError

USER_ID_HEADER = "X-User-Id"


def _normalize(user_id: str | None) -> str | None:
    if user_id is None:
        return None
    cleaned = user_id.strip()
    return cleaned or None


async def get_optional_user_id(
    x_user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
) -> str | None:
    return _normalize(x_user_id)


async def get_current_user_id(
    x_user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
) -> str:
    user_id = _normalize(x_user_id)
    if user_id is None:
        raise NotAuthenticatedError()
    return user_id
