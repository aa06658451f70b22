"""Speech-to-text stage."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from thought_reframer.domain.errors import TranscriptionError

logger = logging.getLogger(__name__)


class TranscriptionClient(Protocol):
    """Interface for a speech-to-text provider."""

    async def transcribe(
        self, *, model: str, language: str, filename: str, content: bytes
    ) -> str:
        """Return the plain-text transcript of the audio."""


@dataclass
class TranscriptionService:
    """Transcribes stored audio files through the configured client."""

    client: TranscriptionClient
    model: str
    language: str

    async def transcribe(self, audio_path: str) -> str:
        """Transcribe an audio file on disk."""
        path = Path(audio_path)
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise TranscriptionError(
                f"Transcription failed: cannot read {path.name}"
            ) from exc
        logger.info(
            "Transcribing %s (%.2f MB)", path.name, len(content) / (1024 * 1024)
        )
        try:
            transcript = await self.client.transcribe(
                model=self.model,
                language=self.language,
                filename=path.name,
                content=content,
            )
        except Exception as exc:
            raise TranscriptionError(f"Transcription failed: {exc}") from exc
        transcript = transcript.strip()
        if not transcript:
            raise TranscriptionError("Transcription failed: empty transcript")
        logger.info("Transcription returned %d characters", len(transcript))
        return transcript
