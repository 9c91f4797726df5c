import logging
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
)
from sqlalchemy.exc import (
    TimeoutError as SQLAlchemyTimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncEngine

from havbors.cache import close_redis
from havbors.db.connection import dispose_engine
from havbors.db.connection import get_database_type as _connection_get_database_type
from havbors.db.connection import get_database_url as _connection_get_database_url
from havbors.db.connection import get_engine as _connection_get_engine
from havbors.db.models import Base
from havbors.errors import (
    ConflictError,
    InvalidImageError,
    NotAuthenticatedError,
    NotFoundError,
)
from havbors.settings import get_settings

from .api import favorites, listings, notifications, profile
from .schemas.error import ErrorType, ValidationErrorDetail
from .utils.error_responses import build_error_response, build_validation_error_response
from .utils.request_context import get_request_id, set_request_id

settings = get_settings()

logging.basicConfig(
    level=settings.log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def validate_environment() -> None:
    """Log a banner of warnings for optional configuration left unset."""

    warnings = get_settings().optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning("  • %s", warning)
        logger.warning("=" * 60)


def _sanitize_database_url(url: str) -> str:
    """Hide the password component of ``url`` for logging."""

    try:
        return make_url(url).render_as_string(hide_password=True)
    except Exception:  # noqa: BLE001 - fall back to the scheme only
        return url.split("://", 1)[0] + "://***"


def get_database_type() -> str:
    """Module-level proxy that tests patch to simulate another database."""

    return _connection_get_database_type()


def get_database_url() -> str:
    return _connection_get_database_url()


def get_engine() -> AsyncEngine:
    return _connection_get_engine()


async def _prepare_sqlite(engine: AsyncEngine, url: str) -> None:
    """Create the SQLite file's directory and the tables for local development."""

    database = make_url(url).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("SQLite mode - tables created from ORM metadata")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""

    validate_environment()

    db_type = get_database_type()
    db_url = get_database_url()

    logger.info("=" * 60)
    logger.info("Havbørs API - Database Preflight Check")
    logger.info("=" * 60)
    logger.info("Database Type: %s", db_type.upper())
    logger.info("Database URL: %s", _sanitize_database_url(db_url))
    if db_type == "postgresql":
        logger.info("PostgreSQL mode - schema is managed by Alembic migrations")
        logger.info("Ensure migrations are up to date (run: alembic upgrade head)")
    else:
        await _prepare_sqlite(get_engine(), db_url)
    logger.info("=" * 60)

    from havbors.warmup import warmup_all

    await warmup_all(get_engine)

    yield

    logger.info("Shutting down Havbørs API")
    await close_redis()
    await dispose_engine()


app = FastAPI(
    title="Havbørs API",
    version="0.1.0",
    description="Marketplace data service: listings feed, favorites, notifications and profiles.",
    lifespan=lifespan,
    redirect_slashes=False,
)


def _default_origins() -> list[str]:
    origins: list[str] = []
    for host in ("localhost", "127.0.0.1"):
        origins.extend(f"http://{host}:{port}" for port in (3000, 8081, 19006))
    return origins


def _combine_origins(*origin_groups: list[str]) -> list[str]:
    """Merge origins preserving order and removing duplicates."""

    seen: set[str] = set()
    combined: list[str] = []
    for group in origin_groups:
        for origin in group:
            normalized = origin.rstrip("/")
            if normalized and normalized not in seen:
                seen.add(normalized)
                combined.append(normalized)
    return combined


allow_origins = _combine_origins(_default_origins(), settings.cors_allow_origins)
logger.info("Configured CORS allow_origins: %s", ", ".join(allow_origins))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Tag the request with an id, reusing the caller's ``X-Request-ID`` if sent."""

    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


def _error_json(
    request: Request,
    *,
    error_type: ErrorType,
    message: str,
    detail: str | None,
    status_code: int,
    code: str | None = None,
    retry_after: int | None = None,
) -> JSONResponse:
    error_response = build_error_response(
        error_type=error_type,
        message=message,
        detail=detail,
        status_code=status_code,
        path=str(request.url.path),
        code=code,
        retry_after=retry_after,
    )
    headers = {"Retry-After": str(retry_after)} if retry_after else None
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
        headers=headers,
    )


def _validation_details(errors: list[dict]) -> list[ValidationErrorDetail]:
    return [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in errors
    ]


def _validation_json(request: Request, *, message: str, errors: list[ValidationErrorDetail]) -> JSONResponse:
    error_response = build_validation_error_response(
        message=message,
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=str(request.url.path),
        errors=errors,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(mode="json"),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = _validation_details(list(exc.errors()))
    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )
    return _validation_json(request, message="Request validation failed", errors=errors)


@app.exception_handler(ValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: ValidationError):
    errors = _validation_details(exc.errors())
    logger.warning(
        "Pydantic validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )
    return _validation_json(request, message="Data validation failed", errors=errors)


@app.exception_handler(InvalidImageError)
async def invalid_image_exception_handler(request: Request, exc: InvalidImageError):
    errors = [ValidationErrorDetail(field="file", message=str(exc))]
    return _validation_json(request, message="Image upload rejected", errors=errors)


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_exception_handler(request: Request, exc: NotAuthenticatedError):
    return _error_json(
        request,
        error_type=ErrorType.AUTHENTICATION_ERROR,
        message="Authentication required",
        detail=str(exc),
        status_code=status.HTTP_401_UNAUTHORIZED,
    )


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return _error_json(
        request,
        error_type=ErrorType.NOT_FOUND,
        message=f"{exc.resource} not found",
        detail=str(exc),
        status_code=status.HTTP_404_NOT_FOUND,
    )


@app.exception_handler(ConflictError)
async def conflict_exception_handler(request: Request, exc: ConflictError):
    logger.info("Conflict (%s) for request %s to %s", exc.code, get_request_id(), request.url.path)
    return _error_json(
        request,
        error_type=ErrorType.CONFLICT,
        message=str(exc),
        detail=None,
        status_code=status.HTTP_409_CONFLICT,
        code=exc.code,
    )


@app.exception_handler(IntegrityError)
async def database_integrity_exception_handler(request: Request, exc: IntegrityError):
    logger.error(
        "Database integrity error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )
    return _error_json(
        request,
        error_type=ErrorType.CONFLICT,
        message="Data integrity constraint violation",
        detail="The operation would violate a database constraint.",
        status_code=status.HTTP_409_CONFLICT,
    )


@app.exception_handler(OperationalError)
@app.exception_handler(DBAPIError)
async def database_connection_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Database connection error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )
    return _error_json(
        request,
        error_type=ErrorType.DATABASE_ERROR,
        message="Database connection failed",
        detail="Unable to connect to the database. Please try again later.",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        retry_after=5,
    )


@app.exception_handler(SQLAlchemyTimeoutError)
async def database_timeout_exception_handler(request: Request, exc: SQLAlchemyTimeoutError):
    logger.error(
        "Database timeout error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )
    return _error_json(
        request,
        error_type=ErrorType.TIMEOUT_ERROR,
        message="Database query timeout",
        detail="The database query took too long to complete. Please try again.",
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        retry_after=3,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )
    return _error_json(
        request,
        error_type=ErrorType.INTERNAL_ERROR,
        message="Internal server error",
        detail=f"An unexpected error occurred: {type(exc).__name__}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple health endpoint for readiness checks."""
    return {"status": "ok"}


app.include_router(listings.router, prefix="/listings", tags=["listings"])
app.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
app.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
app.include_router(profile.router, prefix="/profile", tags=["profile"])
