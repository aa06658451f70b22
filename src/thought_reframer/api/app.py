"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import FileResponse, JSONResponse

from thought_reframer.adapters.local_file_storage import content_type_for
from thought_reframer.api.sessions import router as sessions_router
from thought_reframer.api.voice import router as voice_router
from thought_reframer.app_logging import configure_logging
from thought_reframer.containers import AppContainer
from thought_reframer.domain.errors import (
    InvalidAudioUpload,
    NoAudioUploaded,
    ReframerError,
    RunAlreadyActive,
    SessionAccessDenied,
    SessionNotFound,
    UploadTooLarge,
    VoiceCloningError,
)

_ERROR_STATUS: list[tuple[type[ReframerError], int]] = [
    (SessionNotFound, status.HTTP_404_NOT_FOUND),
    (SessionAccessDenied, status.HTTP_403_FORBIDDEN),
    (NoAudioUploaded, status.HTTP_400_BAD_REQUEST),
    (RunAlreadyActive, status.HTTP_409_CONFLICT),
    (UploadTooLarge, status.HTTP_413_CONTENT_TOO_LARGE),
    (InvalidAudioUpload, status.HTTP_415_UNSUPPORTED_MEDIA_TYPE),
    (VoiceCloningError, status.HTTP_502_BAD_GATEWAY),
]


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Serving uploads from %s, generated audio from %s",
            container.settings.upload_dir,
            container.settings.generated_audio_dir,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(sessions_router)
    app.include_router(voice_router)

    @app.exception_handler(ReframerError)
    async def handle_domain_error(request: Request, exc: ReframerError) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Request failed: %s", exc, extra={"path": request.url.path}
            )
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", extra={"path": request.url.path})
        state_container: AppContainer = request.app.state.container
        message = "Internal server error"
        if state_container.settings.environment == "local":
            message = f"{type(exc).__name__}: {exc}"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": message},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok", "timestamp": datetime.now(tz=UTC).isoformat()}

    @app.get("/uploads/{filename}")
    async def generated_audio(filename: str, request: Request) -> FileResponse:
        """Serve a synthesized audio file."""
        state_container: AppContainer = request.app.state.container
        path = state_container.file_storage.resolve_generated_audio(filename)
        if path is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="File not found"
            )
        return FileResponse(
            path,
            media_type=content_type_for(path.name),
            content_disposition_type="inline",
            filename=path.name,
        )

    return app


def _status_for(exc: ReframerError) -> int:
    """Map a domain error to an HTTP status code."""
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR
