"""Voice enrollment via instant voice cloning."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from thought_reframer.domain.errors import VoiceCloningError
from thought_reframer.domain.users import UserRecord
from thought_reframer.services.users import UserService

logger = logging.getLogger(__name__)

VOICE_CLONING_TEXT = (
    "Welcome to the future of voice technology. This paragraph is designed to "
    "capture the unique characteristics of your voice, including your tone, "
    "pitch, rhythm, and pronunciation patterns. As you read these words, the "
    "advanced voice cloning system will learn to replicate your natural speaking "
    "style. The goal is to create a digital version of your voice that sounds "
    "remarkably similar to the real thing. This technology has applications in "
    "various fields, from accessibility features to creative content production. "
    "Your voice is unique, and this system aims to preserve its distinctive "
    "qualities while enabling new possibilities for communication and expression."
)


class VoiceCloneClient(Protocol):
    """Interface for a voice cloning provider."""

    async def add_voice(
        self, *, name: str, description: str, filename: str, content: bytes
    ) -> dict[str, object]:
        """Create a cloned voice and return the provider payload."""


@dataclass
class VoiceCloningService:
    """Creates a cloned voice from a sample and stores it on the owner."""

    client: VoiceCloneClient
    user_service: UserService

    def cloning_text(self) -> str:
        """Return the paragraph owners read aloud for enrollment."""
        return VOICE_CLONING_TEXT

    async def clone_voice(
        self, owner_id: UUID, *, name: str | None, filename: str, content: bytes
    ) -> UserRecord:
        """Clone the owner's voice from an audio sample."""
        voice_name = name or "My Voice Clone"
        try:
            payload = await self.client.add_voice(
                name=voice_name,
                description="Voice clone created from user recording",
                filename=filename,
                content=content,
            )
        except Exception as exc:
            raise VoiceCloningError(f"Voice cloning failed: {exc}") from exc
        voice_id = payload.get("voice_id")
        if not isinstance(voice_id, str) or not voice_id:
            raise VoiceCloningError("Voice cloning failed: no voice id returned")
        logger.info("Created voice clone", extra={"user_id": str(owner_id)})
        return self.user_service.enroll_voice(owner_id, voice_id)
