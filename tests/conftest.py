"""Shared test fixtures."""

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from uuid import UUID

import pytest

from thought_reframer.adapters.local_file_storage import LocalFileStorage
from thought_reframer.config import Settings, parse_content_types
from thought_reframer.containers import AppContainer
from thought_reframer.domain.sessions import SessionRecord
from thought_reframer.domain.users import UserRecord
from thought_reframer.services.dispatch import PipelineDispatcher
from thought_reframer.services.pipeline import PipelineOrchestrator
from thought_reframer.services.retry import RetryPolicy
from thought_reframer.services.sessions import SessionRepository, SessionStore
from thought_reframer.services.uploads import UploadService
from thought_reframer.services.users import UserRepository, UserService
from thought_reframer.services.voice import VoiceCloneClient, VoiceCloningService

SERVICE_KEY = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
    "eyJyb2xlIjoic2VydmljZV9yb2xlIn0."
    "c2lnbmF0dXJl"
)


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository for tests."""

    sessions: dict[UUID, SessionRecord] = field(default_factory=dict)
    saves: list[SessionRecord] = field(default_factory=list)

    def insert_session(self, session: SessionRecord) -> SessionRecord:
        self.sessions[session.id] = session
        return session

    def get_session(self, session_id: UUID) -> SessionRecord | None:
        return self.sessions.get(session_id)

    def save_session(self, session: SessionRecord) -> None:
        self.sessions[session.id] = session
        self.saves.append(session)

    def list_sessions_by_owner(self, owner_id: UUID) -> list[SessionRecord]:
        return [s for s in self.sessions.values() if s.owner_id == owner_id]

    def statuses(self, session_id: UUID) -> list[str]:
        return [s.status.value for s in self.saves if s.id == session_id]


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory owner repository for tests."""

    users: dict[UUID, UserRecord] = field(default_factory=dict)

    def get_user(self, user_id: UUID) -> UserRecord | None:
        return self.users.get(user_id)

    def set_voice_id(self, user_id: UUID, voice_id: str) -> UserRecord:
        user = UserRecord(id=user_id, voice_id=voice_id)
        self.users[user_id] = user
        return user


@dataclass
class StubTranscriber:
    """Transcriber returning a fixed transcript or raising queued errors."""

    transcript: str = "hello"
    errors: list[Exception] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)

    async def transcribe(self, audio_path: str) -> str:
        self.calls.append(audio_path)
        if self.errors:
            raise self.errors.pop(0)
        return self.transcript


@dataclass
class StubReframer:
    """Reframer returning a fixed reply or failing."""

    reply: str = "HELLO"
    error: Exception | None = None
    calls: list[str] = field(default_factory=list)

    async def reframe(self, text: str) -> str:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.reply


@dataclass
class StubSynthesizer:
    """Synthesizer returning a fixed artifact reference or failing."""

    artifact: str = "a1"
    error: Exception | None = None
    calls: list[tuple[str, UUID, UUID]] = field(default_factory=list)

    async def synthesize(self, text: str, *, owner_id: UUID, session_id: UUID) -> str:
        self.calls.append((text, owner_id, session_id))
        if self.error is not None:
            raise self.error
        return self.artifact


@dataclass
class FakeVoiceCloneClient(VoiceCloneClient):
    """Voice clone client returning a fixed voice id."""

    voice_id: str = "voice-123"
    requests: list[dict[str, object]] = field(default_factory=list)

    async def add_voice(
        self, *, name: str, description: str, filename: str, content: bytes
    ) -> dict[str, object]:
        self.requests.append({"name": name, "filename": filename, "size": len(content)})
        return {"voice_id": self.voice_id, "name": name}


@dataclass
class RecordingSleep:
    """Replacement for asyncio.sleep that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=SERVICE_KEY,
        openai_api_key="openai-key",
        elevenlabs_api_key="elevenlabs-key",
        upload_dir=str(tmp_path / "uploads"),
        generated_audio_dir=str(tmp_path / "uploads" / "generated"),
    )


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def session_store(session_repository: InMemorySessionRepository) -> SessionStore:
    return SessionStore(session_repository)


@pytest.fixture
def file_storage(settings: Settings) -> LocalFileStorage:
    return LocalFileStorage.create(settings.upload_dir, settings.generated_audio_dir)


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def transcriber() -> StubTranscriber:
    return StubTranscriber()


@pytest.fixture
def reframer() -> StubReframer:
    return StubReframer()


@pytest.fixture
def synthesizer() -> StubSynthesizer:
    return StubSynthesizer()


@pytest.fixture
def orchestrator(
    session_store: SessionStore,
    transcriber: StubTranscriber,
    reframer: StubReframer,
    synthesizer: StubSynthesizer,
    sleeper: RecordingSleep,
) -> PipelineOrchestrator:
    return PipelineOrchestrator(
        store=session_store,
        transcriber=transcriber,
        reframer=reframer,
        synthesizer=synthesizer,
        retry_policy=RetryPolicy(sleep=sleeper),
    )


@pytest.fixture
def container(
    settings: Settings,
    session_store: SessionStore,
    file_storage: LocalFileStorage,
    orchestrator: PipelineOrchestrator,
) -> AppContainer:
    user_service = UserService(InMemoryUserRepository())
    dispatcher = PipelineDispatcher(store=session_store, orchestrator=orchestrator)
    upload_service = UploadService(
        store=session_store,
        storage=file_storage,
        allowed_content_types=parse_content_types(settings.allowed_audio_types),
        max_upload_bytes=settings.max_upload_bytes,
    )
    voice_cloning_service = VoiceCloningService(
        client=FakeVoiceCloneClient(), user_service=user_service
    )

    async def close_resources() -> None:
        await dispatcher.drain()

    return AppContainer(
        settings=settings,
        session_store=session_store,
        upload_service=upload_service,
        dispatcher=dispatcher,
        user_service=user_service,
        voice_cloning_service=voice_cloning_service,
        file_storage=file_storage,
        close_resources=close_resources,
    )


def with_fields(session: SessionRecord, **fields: object) -> SessionRecord:
    """Return a copy of a session with fields replaced."""
    return dataclasses.replace(session, **fields)
