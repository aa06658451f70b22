"""Application configuration."""

import os

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_transcription_model: str = "whisper-1"
    transcription_language: str = "en"
    openai_reframing_model: str = "gpt-4"
    use_anthropic_for_reframing: bool = False
    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-3-opus-20240229"
    elevenlabs_api_key: str
    elevenlabs_voice_id: str | None = None
    elevenlabs_model_id: str = "eleven_multilingual_v2"
    elevenlabs_base_url: str = "https://api.elevenlabs.io/v1"
    upload_dir: str = "./uploads"
    generated_audio_dir: str = "./uploads/generated"
    max_upload_bytes: int = 100 * 1024 * 1024
    max_voice_sample_bytes: int = 50 * 1024 * 1024
    allowed_audio_types: str = (
        "audio/mpeg,audio/mp3,audio/wav,audio/webm,audio/m4a,audio/x-m4a"
    )
    retry_max_attempts: int = 3
    transcription_timeout_seconds: float = 300
    reframing_timeout_seconds: float = 60
    synthesis_timeout_seconds: float = 120
    shutdown_grace_seconds: float = 30
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_reframing_credentials(self) -> "Settings":
        if self.use_anthropic_for_reframing and not self.anthropic_api_key:
            raise ValueError(
                "anthropic_api_key is required when use_anthropic_for_reframing is set"
            )
        return self


def parse_content_types(raw: str) -> frozenset[str]:
    """Parse a comma-separated list of MIME types."""
    return frozenset(
        chunk.strip().lower() for chunk in raw.split(",") if chunk.strip()
    )
