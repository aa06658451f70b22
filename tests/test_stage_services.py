"""Tests for the transcription, reframing, synthesis and voice services."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from uuid import UUID, uuid4

import pytest

from thought_reframer.adapters.local_file_storage import LocalFileStorage
from thought_reframer.domain.errors import (
    ReframingError,
    SynthesisError,
    TranscriptionError,
    VoiceCloningError,
)
from thought_reframer.domain.users import UserRecord
from thought_reframer.services.reframing import (
    REFRAMING_SYSTEM_PROMPT,
    ReframingService,
    build_reframe_prompt,
)
from thought_reframer.services.synthesis import SynthesisService
from thought_reframer.services.transcription import TranscriptionService
from thought_reframer.services.users import UserService
from thought_reframer.services.voice import VOICE_CLONING_TEXT, VoiceCloningService
from tests.conftest import FakeVoiceCloneClient, InMemoryUserRepository


@dataclass
class FakeTranscriptionClient:
    transcript: str = "  I always mess things up.  "
    error: Exception | None = None
    requests: list[dict[str, object]] = field(default_factory=list)

    async def transcribe(
        self, *, model: str, language: str, filename: str, content: bytes
    ) -> str:
        self.requests.append(
            {"model": model, "language": language, "filename": filename, "content": content}
        )
        if self.error is not None:
            raise self.error
        return self.transcript


@dataclass
class FakeReframingClient:
    reply: str = "I am still learning."
    error: Exception | None = None
    requests: list[dict[str, object]] = field(default_factory=list)

    async def complete(
        self, *, system_prompt: str, user_prompt: str, max_tokens: int
    ) -> str:
        self.requests.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "max_tokens": max_tokens,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


@dataclass
class FakeSpeechClient:
    audio: bytes = b"mp3-bytes"
    error: Exception | None = None
    voices: list[str] = field(default_factory=list)

    async def text_to_speech(self, *, voice_id: str, text: str) -> bytes:
        self.voices.append(voice_id)
        if self.error is not None:
            raise self.error
        return self.audio


class BrokenUserRepository(InMemoryUserRepository):
    def get_user(self, user_id: UUID) -> UserRecord | None:
        raise RuntimeError("database offline")


def test_transcription_reads_file_and_strips_text(tmp_path: Path) -> None:
    audio = tmp_path / "audio_1.m4a"
    audio.write_bytes(b"audio")
    client = FakeTranscriptionClient()
    service = TranscriptionService(client=client, model="whisper-1", language="en")

    transcript = asyncio.run(service.transcribe(str(audio)))

    assert transcript == "I always mess things up."
    assert client.requests == [
        {
            "model": "whisper-1",
            "language": "en",
            "filename": "audio_1.m4a",
            "content": b"audio",
        }
    ]


def test_transcription_keeps_provider_error_as_cause(tmp_path: Path) -> None:
    audio = tmp_path / "audio_1.wav"
    audio.write_bytes(b"audio")
    cause = ConnectionResetError("socket hang up")
    service = TranscriptionService(
        client=FakeTranscriptionClient(error=cause), model="whisper-1", language="en"
    )

    with pytest.raises(TranscriptionError) as exc_info:
        asyncio.run(service.transcribe(str(audio)))

    assert exc_info.value.__cause__ is cause
    assert "socket hang up" in str(exc_info.value)


def test_transcription_missing_file(tmp_path: Path) -> None:
    service = TranscriptionService(
        client=FakeTranscriptionClient(), model="whisper-1", language="en"
    )

    with pytest.raises(TranscriptionError):
        asyncio.run(service.transcribe(str(tmp_path / "missing.mp3")))


def test_transcription_rejects_empty_transcript(tmp_path: Path) -> None:
    audio = tmp_path / "audio_1.wav"
    audio.write_bytes(b"audio")
    service = TranscriptionService(
        client=FakeTranscriptionClient(transcript="   "),
        model="whisper-1",
        language="en",
    )

    with pytest.raises(TranscriptionError):
        asyncio.run(service.transcribe(str(audio)))


def test_reframing_sends_prompts() -> None:
    client = FakeReframingClient(reply="  I am still learning.\n")
    service = ReframingService(client=client)

    result = asyncio.run(service.reframe("I always mess things up."))

    assert result == "I am still learning."
    request = client.requests[0]
    assert request["system_prompt"] == REFRAMING_SYSTEM_PROMPT
    assert request["user_prompt"] == build_reframe_prompt("I always mess things up.")
    assert request["max_tokens"] == 500
    assert '"I always mess things up."' in str(request["user_prompt"])


def test_reframing_wraps_provider_errors() -> None:
    service = ReframingService(client=FakeReframingClient(error=RuntimeError("boom")))

    with pytest.raises(ReframingError, match="Reframing failed: boom"):
        asyncio.run(service.reframe("text"))


def test_reframing_rejects_empty_reply() -> None:
    service = ReframingService(client=FakeReframingClient(reply=""))

    with pytest.raises(ReframingError, match="empty response"):
        asyncio.run(service.reframe("text"))


def test_synthesis_prefers_owner_voice(file_storage: LocalFileStorage) -> None:
    owner_id = uuid4()
    session_id = uuid4()
    users = InMemoryUserRepository()
    users.set_voice_id(owner_id, "owner-voice")
    client = FakeSpeechClient()
    service = SynthesisService(
        client=client,
        user_service=UserService(users),
        storage=file_storage,
        default_voice_id="default-voice",
    )

    url = asyncio.run(
        service.synthesize("Kind words", owner_id=owner_id, session_id=session_id)
    )

    assert client.voices == ["owner-voice"]
    filename = url.removeprefix("/uploads/")
    assert url.startswith("/uploads/reframed_")
    assert (file_storage.generated_dir / filename).read_bytes() == b"mp3-bytes"


def test_synthesis_falls_back_to_default_voice(file_storage: LocalFileStorage) -> None:
    client = FakeSpeechClient()
    service = SynthesisService(
        client=client,
        user_service=UserService(BrokenUserRepository()),
        storage=file_storage,
        default_voice_id="default-voice",
    )

    asyncio.run(service.synthesize("Kind words", owner_id=uuid4(), session_id=uuid4()))

    assert client.voices == ["default-voice"]


def test_synthesis_without_any_voice(file_storage: LocalFileStorage) -> None:
    client = FakeSpeechClient()
    service = SynthesisService(
        client=client,
        user_service=UserService(InMemoryUserRepository()),
        storage=file_storage,
        default_voice_id=None,
    )

    with pytest.raises(SynthesisError, match="Voice ID not configured"):
        asyncio.run(service.synthesize("text", owner_id=uuid4(), session_id=uuid4()))

    assert client.voices == []


def test_synthesis_wraps_provider_errors(file_storage: LocalFileStorage) -> None:
    service = SynthesisService(
        client=FakeSpeechClient(error=RuntimeError("quota exceeded")),
        user_service=UserService(InMemoryUserRepository()),
        storage=file_storage,
        default_voice_id="default-voice",
    )

    with pytest.raises(SynthesisError, match="TTS generation failed: quota exceeded"):
        asyncio.run(service.synthesize("text", owner_id=uuid4(), session_id=uuid4()))


def test_clone_voice_enrolls_owner() -> None:
    owner_id = uuid4()
    users = InMemoryUserRepository()
    client = FakeVoiceCloneClient(voice_id="cloned-1")
    service = VoiceCloningService(client=client, user_service=UserService(users))

    user = asyncio.run(
        service.clone_voice(owner_id, name=None, filename="sample.wav", content=b"abc")
    )

    assert user.voice_id == "cloned-1"
    assert users.users[owner_id].voice_id == "cloned-1"
    assert client.requests == [
        {"name": "My Voice Clone", "filename": "sample.wav", "size": 3}
    ]
    assert service.cloning_text() == VOICE_CLONING_TEXT


def test_clone_voice_requires_voice_id() -> None:
    service = VoiceCloningService(
        client=FakeVoiceCloneClient(voice_id=""),
        user_service=UserService(InMemoryUserRepository()),
    )

    with pytest.raises(VoiceCloningError):
        asyncio.run(
            service.clone_voice(uuid4(), name="Me", filename="a.wav", content=b"a")
        )
