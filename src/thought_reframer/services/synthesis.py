"""Text-to-speech stage."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from thought_reframer.domain.errors import SynthesisError
from thought_reframer.services.users import UserService

logger = logging.getLogger(__name__)


class SpeechClient(Protocol):
    """Interface for a text-to-speech provider."""

    async def text_to_speech(self, *, voice_id: str, text: str) -> bytes:
        """Return encoded audio for the text."""


class GeneratedAudioStorage(Protocol):
    """Storage interface for synthesized audio."""

    def save_generated_audio(self, session_id: UUID, content: bytes) -> str:
        """Store synthesized audio and return its filename."""


@dataclass
class SynthesisService:
    """Speaks reframed text in the owner's enrolled voice."""

    client: SpeechClient
    user_service: UserService
    storage: GeneratedAudioStorage
    default_voice_id: str | None
    url_prefix: str = "/uploads"

    async def synthesize(self, text: str, *, owner_id: UUID, session_id: UUID) -> str:
        """Synthesize speech and return the artifact URL."""
        voice_id = self.user_service.resolve_voice_id(owner_id, self.default_voice_id)
        if not voice_id:
            raise SynthesisError(
                "ElevenLabs Voice ID not configured. "
                "Please enroll a voice first or clone your voice."
            )
        try:
            audio = await self.client.text_to_speech(voice_id=voice_id, text=text)
        except Exception as exc:
            raise SynthesisError(f"TTS generation failed: {exc}") from exc
        filename = self.storage.save_generated_audio(session_id, audio)
        logger.info(
            "Stored synthesized audio",
            extra={"session_id": str(session_id), "audio_filename": filename},
        )
        return f"{self.url_prefix}/{filename}"
