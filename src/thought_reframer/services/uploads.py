"""Upload boundary: stores audio and appends it to a session."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from thought_reframer.domain.errors import InvalidAudioUpload, UploadTooLarge
from thought_reframer.domain.sessions import AudioFile
from thought_reframer.services.sessions import SessionStore

logger = logging.getLogger(__name__)


class AudioStorage(Protocol):
    """Storage interface for uploaded session audio."""

    def save_session_audio(
        self, session_id: UUID, original_name: str, content: bytes
    ) -> tuple[str, str]:
        """Store audio bytes and return ``(filename, path)``."""

    def delete(self, path: str) -> None:
        """Remove a stored file if it exists."""


@dataclass
class UploadService:
    """Validates uploads and records them on the owning session."""

    store: SessionStore
    storage: AudioStorage
    allowed_content_types: frozenset[str]
    max_upload_bytes: int

    async def attach_audio(
        self,
        session_id: UUID,
        owner_id: UUID,
        *,
        original_name: str,
        content_type: str,
        content: bytes,
    ) -> AudioFile:
        """Store an uploaded recording and append it to the session."""
        await self.store.get_owned(session_id, owner_id)
        if content_type not in self.allowed_content_types:
            raise InvalidAudioUpload(
                "Invalid file type. Only audio files are allowed."
            )
        if not content:
            raise InvalidAudioUpload("No audio file provided")
        if len(content) > self.max_upload_bytes:
            raise UploadTooLarge(
                f"File too large. Max size: {self.max_upload_bytes // (1024 * 1024)} MB"
            )

        filename, path = self.storage.save_session_audio(
            session_id, original_name, content
        )
        audio_file = AudioFile(
            filename=filename,
            original_name=original_name,
            path=path,
            size=len(content),
            content_type=content_type,
            uploaded_at=datetime.now(tz=UTC),
        )
        try:
            await self.store.append_audio_file(session_id, audio_file)
        except Exception:
            self.storage.delete(path)
            raise
        logger.info(
            "Stored audio upload",
            extra={"session_id": str(session_id), "audio_filename": filename},
        )
        return audio_file
