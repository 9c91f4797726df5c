"""Request-scoped context metadata shared by middleware and error handlers.

Every inbound HTTP call is tagged with a request identifier (taken from the
``X-Request-ID`` header or generated).  The helpers below wrap the underlying
``ContextVar`` so middleware, exception handlers and tests agree on one source.
"""

from __future__ import annotations

from contextvars import ContextVar, Token

__all__ = [
    "REQUEST_ID_CONTEXT",
    "clear_request_id",
    "get_request_id",
    "set_request_id",
]

# Each request handler runs in its own task, so the value never leaks between
# concurrent requests.
REQUEST_ID_CONTEXT: ContextVar[str] = ContextVar("havbors_request_id", default="")


def set_request_id(request_id: str) -> Token[str]:
    """Store ``request_id`` for the active request and return the reset token."""

    return REQUEST_ID_CONTEXT.set(request_id)


def get_request_id() -> str:
    """Return the identifier of the active request, or ``""`` outside one."""

    return REQUEST_ID_CONTEXT.get()


def clear_request_id(token: Token[str] | None = None) -> None:
    """Reset the identifier, restoring the prior value when a token is given."""

    if token is not None:
        REQUEST_ID_CONTEXT.reset(token)
    else:
        REQUEST_ID_CONTEXT.set("")
