"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import health, notes, users, versions
from core.config import get_settings
from services.exceptions import (
    AttachmentLimitExceededError,
    NoteAccessDeniedError,
    NotFoundError,
    StorageError,
    TitleTooLongError,
    VersionMismatchError,
)

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking - API shouldn't be framed
        response.headers["X-Frame-Options"] = "DENY"
        return response


app_settings = get_settings()

app = FastAPI(
    title="Note Vault API",
    description="Personal notes with attachments, reminders and version history.",
    version="0.1.0",
)


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
    """Unknown note, version or attachment."""
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(NoteAccessDeniedError)
async def access_denied_exception_handler(
    _request: Request, exc: NoteAccessDeniedError,
) -> JSONResponse:
    """Requester does not own the note."""
    logger.info("Denied access: %s", exc)
    return JSONResponse(status_code=403, content={"detail": "Not allowed"})


@app.exception_handler(VersionMismatchError)
async def version_mismatch_exception_handler(
    _request: Request, exc: VersionMismatchError,
) -> JSONResponse:
    """Version does not belong to the note in the path."""
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(AttachmentLimitExceededError)
async def attachment_limit_exception_handler(
    _request: Request, exc: AttachmentLimitExceededError,
) -> JSONResponse:
    """Too many attachments on a note."""
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(TitleTooLongError)
async def title_too_long_exception_handler(
    _request: Request, exc: TitleTooLongError,
) -> JSONResponse:
    """Title longer than MAX_TITLE_LENGTH."""
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(StorageError)
async def storage_exception_handler(_request: Request, exc: StorageError) -> JSONResponse:
    """
    Persistence failure on the primary operation of a request.

    Includes a restore backup that exceeded SNAPSHOT_TIMEOUT_SECONDS.
    """
    logger.error("Storage failure: %s", exc, exc_info=exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Storage is temporarily unavailable. Please try again."},
    )


# Security headers middleware (runs after CORS, adds headers to responses)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(users.router)
app.include_router(notes.router)
app.include_router(versions.router)
