"""Domain exceptions raised by the service layer.

Each class extends the builtin exception that best describes the failure so
callers that only care about the broad category (``LookupError`` for a missing
row, ``PermissionError`` for a missing session) keep working, while the
application-level handlers in :mod:`havbors.main` can translate the precise
subclass into the structured error envelope.
"""

from __future__ import annotations

DUPLICATE_FOLDER_NAME = "duplicate_folder_name"


class NotAuthenticatedError(PermissionError):
    """Raised when an operation requires a user id but none was supplied."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class NotFoundError(LookupError):
    """Raised when the target of a read or mutation does not exist."""

    def __init__(self, resource: str, identifier: object | None = None) -> None:
        self.resource = resource
        self.identifier = identifier
        if identifier is None:
            message = f"{resource} not found"
        else:
            message = f"{resource} {identifier!r} not found"
        super().__init__(message)


class ConflictError(ValueError):
    """Raised when a mutation violates a uniqueness rule.

    ``code`` is a stable machine-readable identifier so clients can present a
    localized message for the specific conflict (for example a folder name that
    is already taken).
    """

    def __init__(self, message: str, *, code: str) -> None:
        self.code = code
        super().__init__(message)


class InvalidImageError(ValueError):
    """Raised when uploaded bytes cannot be decoded as a supported image."""


__all__ = [
    "ConflictError",
    "DUPLICATE_FOLDER_NAME",
    "InvalidImageError",
    "NotAuthenticatedError",
    "NotFoundError",
]
