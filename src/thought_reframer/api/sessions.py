"""Session endpoints: create, upload, process and poll."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    Request,
    UploadFile,
    status,
)

from thought_reframer.api.dependencies import require_owner

if TYPE_CHECKING:
    from thought_reframer.containers import AppContainer
    from thought_reframer.domain.sessions import SessionRecord

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("")
async def list_sessions(
    request: Request,
    owner_id: UUID = Depends(require_owner),
) -> dict[str, object]:
    """Return the caller's sessions, newest first."""
    container: AppContainer = request.app.state.container
    sessions = await container.session_store.list_by_owner(owner_id)
    return {"sessions": [session_payload(session) for session in sessions]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(
    request: Request,
    owner_id: UUID = Depends(require_owner),
) -> dict[str, object]:
    """Create an empty session for the caller."""
    container: AppContainer = request.app.state.container
    session = await container.session_store.create(owner_id)
    return session_payload(session)


@router.post("/{session_id}/upload")
async def upload_audio(
    request: Request,
    session_id: UUID,
    audio: UploadFile | None = File(default=None),
    owner_id: UUID = Depends(require_owner),
) -> dict[str, object]:
    """Attach an audio recording to the session."""
    container: AppContainer = request.app.state.container
    if audio is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No audio file provided"
        )
    content = await audio.read()
    audio_file = await container.upload_service.attach_audio(
        session_id,
        owner_id,
        original_name=audio.filename or "recording",
        content_type=(audio.content_type or "").lower(),
        content=content,
    )
    return {
        "message": "Audio file uploaded successfully",
        "file": {
            "filename": audio_file.filename,
            "size": audio_file.size,
            "content_type": audio_file.content_type,
        },
    }


@router.post("/{session_id}/process", status_code=status.HTTP_202_ACCEPTED)
async def process_session(
    request: Request,
    session_id: UUID,
    owner_id: UUID = Depends(require_owner),
) -> dict[str, object]:
    """Start the pipeline in the background and return immediately."""
    container: AppContainer = request.app.state.container
    session = await container.dispatcher.begin(session_id, owner_id)
    return {
        "message": "Processing started",
        "session_id": str(session.id),
        "status": session.status.value,
    }


@router.get("/{session_id}")
async def get_session(
    request: Request,
    session_id: UUID,
    owner_id: UUID = Depends(require_owner),
) -> dict[str, object]:
    """Return the session's status and results."""
    container: AppContainer = request.app.state.container
    session = await container.session_store.get_owned(session_id, owner_id)
    return session_payload(session)


def session_payload(session: SessionRecord) -> dict[str, object]:
    """Serialize a session for API responses."""
    return {
        "id": str(session.id),
        "owner_id": str(session.owner_id),
        "status": session.status.value,
        "audio_files": [
            {
                "filename": audio.filename,
                "original_name": audio.original_name,
                "size": audio.size,
                "content_type": audio.content_type,
                "uploaded_at": audio.uploaded_at.isoformat(),
            }
            for audio in session.audio_files
        ],
        "transcript": session.transcript,
        "reframed_text": session.reframed_text,
        "generated_audio_url": session.generated_audio_url,
        "error": session.error,
        "created_at": session.created_at.isoformat(),
        "updated_at": session.updated_at.isoformat(),
    }
