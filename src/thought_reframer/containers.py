"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from thought_reframer.adapters.anthropic_client import HttpxAnthropicClient
from thought_reframer.adapters.elevenlabs_client import HttpxElevenLabsClient
from thought_reframer.adapters.local_file_storage import LocalFileStorage
from thought_reframer.adapters.openai_chat_client import OpenAIChatClient
from thought_reframer.adapters.openai_whisper_client import OpenAIWhisperClient
from thought_reframer.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from thought_reframer.adapters.supabase_user_repository import SupabaseUserRepository
from thought_reframer.config import Settings, parse_content_types
from thought_reframer.services.dispatch import PipelineDispatcher
from thought_reframer.services.pipeline import PipelineOrchestrator, StageTimeouts
from thought_reframer.services.reframing import ReframingService
from thought_reframer.services.retry import RetryPolicy
from thought_reframer.services.sessions import SessionStore
from thought_reframer.services.synthesis import SynthesisService
from thought_reframer.services.transcription import TranscriptionService
from thought_reframer.services.uploads import UploadService
from thought_reframer.services.users import UserService
from thought_reframer.services.voice import VoiceCloningService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_store: SessionStore
    upload_service: UploadService
    dispatcher: PipelineDispatcher
    user_service: UserService
    voice_cloning_service: VoiceCloningService
    file_storage: LocalFileStorage
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_store = SessionStore(SupabaseSessionRepository(supabase_client))
    user_service = UserService(SupabaseUserRepository(supabase_client))
    file_storage = LocalFileStorage.create(
        resolved_settings.upload_dir, resolved_settings.generated_audio_dir
    )

    whisper_client = OpenAIWhisperClient.create(
        resolved_settings.openai_api_key,
        timeout=resolved_settings.transcription_timeout_seconds,
    )
    reframing_client: HttpxAnthropicClient | OpenAIChatClient
    if resolved_settings.use_anthropic_for_reframing:
        reframing_client = HttpxAnthropicClient.create(
            api_key=resolved_settings.anthropic_api_key or "",
            model=resolved_settings.anthropic_model,
            timeout=resolved_settings.reframing_timeout_seconds,
        )
    else:
        reframing_client = OpenAIChatClient.create(
            api_key=resolved_settings.openai_api_key,
            model=resolved_settings.openai_reframing_model,
            timeout=resolved_settings.reframing_timeout_seconds,
        )
    elevenlabs_client = HttpxElevenLabsClient.create(
        api_key=resolved_settings.elevenlabs_api_key,
        model_id=resolved_settings.elevenlabs_model_id,
        base_url=resolved_settings.elevenlabs_base_url,
        timeout=resolved_settings.synthesis_timeout_seconds,
    )

    orchestrator = PipelineOrchestrator(
        store=session_store,
        transcriber=TranscriptionService(
            client=whisper_client,
            model=resolved_settings.openai_transcription_model,
            language=resolved_settings.transcription_language,
        ),
        reframer=ReframingService(client=reframing_client),
        synthesizer=SynthesisService(
            client=elevenlabs_client,
            user_service=user_service,
            storage=file_storage,
            default_voice_id=resolved_settings.elevenlabs_voice_id,
        ),
        retry_policy=RetryPolicy(max_attempts=resolved_settings.retry_max_attempts),
        timeouts=StageTimeouts(
            transcription=resolved_settings.transcription_timeout_seconds,
            reframing=resolved_settings.reframing_timeout_seconds,
            synthesis=resolved_settings.synthesis_timeout_seconds,
        ),
    )
    dispatcher = PipelineDispatcher(store=session_store, orchestrator=orchestrator)
    upload_service = UploadService(
        store=session_store,
        storage=file_storage,
        allowed_content_types=parse_content_types(
            resolved_settings.allowed_audio_types
        ),
        max_upload_bytes=resolved_settings.max_upload_bytes,
    )
    voice_cloning_service = VoiceCloningService(
        client=elevenlabs_client, user_service=user_service
    )

    async def close_resources() -> None:
        await dispatcher.drain(timeout=resolved_settings.shutdown_grace_seconds)
        await whisper_client.close()
        await reframing_client.close()
        await elevenlabs_client.close()

    return AppContainer(
        settings=resolved_settings,
        session_store=session_store,
        upload_service=upload_service,
        dispatcher=dispatcher,
        user_service=user_service,
        voice_cloning_service=voice_cloning_service,
        file_storage=file_storage,
        close_resources=close_resources,
    )
