"""Helpers for constructing the structured error envelope.

Every exception handler in :mod:`havbors.main` funnels through these builders
so payloads share one shape: request id, timezone-aware timestamp and, for
errors the mobile client localizes, a stable ``code``.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from havbors.schemas.error import (
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from havbors.utils.request_context import get_request_id

__all__ = [
    "build_error_response",
    "build_validation_error_response",
]


def _current_timestamp() -> datetime:
    return datetime.now(UTC)


def build_validation_error_response(
    *,
    errors: Sequence[ValidationErrorDetail],
    message: str,
    detail: str,
    status_code: int,
    path: str,
    request_id: str | None = None,
) -> ValidationErrorResponse:
    """Construct a ``ValidationErrorResponse`` enriched with request metadata."""

    return ValidationErrorResponse(
        error_type=ErrorType.VALIDATION_ERROR,
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id(),
        path=path,
        errors=list(errors),
    )


def build_error_response(
    *,
    error_type: ErrorType,
    message: str,
    detail: str | None,
    status_code: int,
    path: str,
    code: str | None = None,
    retry_after: int | None = None,
    request_id: str | None = None,
) -> ErrorResponse:
    """Construct a generic ``ErrorResponse``.

    ``code`` is only set for errors with a client-facing translation, such as
    ``duplicate_folder_name``; ``retry_after`` only for transient failures.
    """

    return ErrorResponse(
        error_type=error_type,
        message=message,
        detail=detail,
        code=code,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id(),
        path=path,
        retry_after=retry_after,
    )
