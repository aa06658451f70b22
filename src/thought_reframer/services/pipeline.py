"""Three-stage pipeline: transcription, reframing, speech synthesis."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from thought_reframer.domain.errors import NoAudioUploaded
from thought_reframer.domain.sessions import SessionRecord, SessionStatus
from thought_reframer.services.retry import RetryPolicy
from thought_reframer.services.sessions import SessionStore

logger = logging.getLogger(__name__)


class Transcriber(Protocol):
    """Speech-to-text boundary."""

    async def transcribe(self, audio_path: str) -> str:
        """Return the transcript of an audio file."""


class Reframer(Protocol):
    """Text reframing boundary."""

    async def reframe(self, text: str) -> str:
        """Return a reframed version of the text."""


class Synthesizer(Protocol):
    """Text-to-speech boundary."""

    async def synthesize(self, text: str, *, owner_id: UUID, session_id: UUID) -> str:
        """Synthesize speech in the owner's voice and return an artifact URL."""


@dataclass(frozen=True)
class StageTimeouts:
    """Upper bounds, in seconds, for a single call to each stage."""

    transcription: float = 300.0
    reframing: float = 60.0
    synthesis: float = 120.0


@dataclass
class PipelineOrchestrator:
    """Drives a session through the fixed stage sequence.

    Every status change is written before and after the stage it belongs to
    so pollers can follow progress. Transcription and reframing failures end
    the run with status ``error``; a synthesis failure is recorded in
    ``error`` and the run still completes.
    """

    store: SessionStore
    transcriber: Transcriber
    reframer: Reframer
    synthesizer: Synthesizer
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    timeouts: StageTimeouts = field(default_factory=StageTimeouts)

    async def run(self, session_id: UUID) -> SessionRecord:
        """Run the pipeline for a session and return its final record."""
        session = await self.store.get(session_id)
        audio_file = session.latest_audio_file
        if audio_file is None:
            error = NoAudioUploaded(session_id)
            await self.store.update(
                session_id, status=SessionStatus.ERROR, error=str(error)
            )
            raise error

        logger.info("[%s] Starting transcription", session_id)
        await self.store.update(session_id, status=SessionStatus.TRANSCRIBING)
        try:
            transcript = await self.retry_policy.run(
                lambda: asyncio.wait_for(
                    self.transcriber.transcribe(audio_file.path),
                    timeout=self.timeouts.transcription,
                ),
                label="Transcription",
            )
        except Exception as exc:
            return await self._fail(session_id, "transcription", exc)
        await self.store.update(
            session_id, transcript=transcript, status=SessionStatus.TRANSCRIBED
        )
        logger.info("[%s] Transcription complete", session_id)

        logger.info("[%s] Starting reframing", session_id)
        await self.store.update(session_id, status=SessionStatus.REFRAMING)
        try:
            reframed_text = await asyncio.wait_for(
                self.reframer.reframe(transcript), timeout=self.timeouts.reframing
            )
        except Exception as exc:
            return await self._fail(session_id, "reframing", exc)
        await self.store.update(
            session_id, reframed_text=reframed_text, status=SessionStatus.REFRAMED
        )
        logger.info("[%s] Reframing complete", session_id)

        logger.info("[%s] Starting speech synthesis", session_id)
        await self.store.update(session_id, status=SessionStatus.GENERATING_AUDIO)
        try:
            audio_url = await asyncio.wait_for(
                self.synthesizer.synthesize(
                    reframed_text, owner_id=session.owner_id, session_id=session_id
                ),
                timeout=self.timeouts.synthesis,
            )
        except Exception as exc:
            logger.warning(
                "[%s] Speech synthesis failed (non-critical): %s",
                session_id,
                _describe(exc),
            )
            await self.store.update(
                session_id,
                error=(
                    f"TTS unavailable: {_describe(exc)}. "
                    "Transcript and reframe are ready."
                ),
            )
        else:
            await self.store.update(session_id, generated_audio_url=audio_url)
            logger.info("[%s] Speech synthesis complete", session_id)

        completed = await self.store.update(session_id, status=SessionStatus.COMPLETED)
        logger.info("[%s] Pipeline completed", session_id)
        return completed

    async def _fail(
        self, session_id: UUID, stage: str, exc: Exception
    ) -> SessionRecord:
        logger.error(
            "[%s] Pipeline stopped at %s: %s", session_id, stage, _describe(exc)
        )
        return await self.store.update(
            session_id, status=SessionStatus.ERROR, error=_describe(exc)
        )


def _describe(exc: BaseException) -> str:
    """Return a readable message, falling back to the exception type."""
    message = str(exc).strip()
    return message or type(exc).__name__
