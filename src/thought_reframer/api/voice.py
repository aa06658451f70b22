"""Voice enrollment endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Request,
    UploadFile,
    status,
)

from thought_reframer.api.dependencies import require_owner
from thought_reframer.config import parse_content_types

if TYPE_CHECKING:
    from thought_reframer.containers import AppContainer

router = APIRouter(prefix="/voice", tags=["voice"])


@router.get("/cloning-text")
async def cloning_text(
    request: Request,
    _: UUID = Depends(require_owner),
) -> dict[str, str]:
    """Return the paragraph to read aloud for voice cloning."""
    container: AppContainer = request.app.state.container
    return {"text": container.voice_cloning_service.cloning_text()}


@router.post("/clone")
async def clone_voice(
    request: Request,
    audio: UploadFile | None = File(default=None),
    name: str | None = Form(default=None),
    owner_id: UUID = Depends(require_owner),
) -> dict[str, object]:
    """Create a voice clone from an uploaded sample."""
    container: AppContainer = request.app.state.container
    if audio is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No audio file provided"
        )
    allowed = parse_content_types(container.settings.allowed_audio_types)
    if (audio.content_type or "").lower() not in allowed:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Invalid file type. Only audio files are allowed.",
        )
    content = await audio.read()
    if len(content) > container.settings.max_voice_sample_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail="Voice sample too large",
        )
    user = await container.voice_cloning_service.clone_voice(
        owner_id,
        name=name,
        filename=audio.filename or "voice_sample",
        content=content,
    )
    return {"message": "Voice clone created successfully", "voice_id": user.voice_id}


@router.get("/status")
async def voice_status(
    request: Request,
    owner_id: UUID = Depends(require_owner),
) -> dict[str, object]:
    """Report whether the caller has an enrolled voice."""
    container: AppContainer = request.app.state.container
    voice_id = container.user_service.get_voice_id(owner_id)
    return {"has_voice_clone": voice_id is not None, "voice_id": voice_id}
