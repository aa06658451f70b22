"""Domain models for reframing sessions."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class SessionStatus(StrEnum):
    """Lifecycle states of a session."""

    CREATED = "created"
    AUDIO_UPLOADED = "audio_uploaded"
    PROCESSING = "processing"
    TRANSCRIBING = "transcribing"
    TRANSCRIBED = "transcribed"
    REFRAMING = "reframing"
    REFRAMED = "reframed"
    GENERATING_AUDIO = "generating_audio"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class AudioFile:
    """Descriptor of an uploaded audio file."""

    filename: str
    original_name: str
    path: str
    size: int
    content_type: str
    uploaded_at: datetime


@dataclass(frozen=True)
class SessionRecord:
    """Represents a persisted reframing session."""

    id: UUID
    owner_id: UUID
    status: SessionStatus
    created_at: datetime
    updated_at: datetime
    audio_files: tuple[AudioFile, ...] = field(default_factory=tuple)
    transcript: str | None = None
    reframed_text: str | None = None
    generated_audio_url: str | None = None
    error: str | None = None

    @property
    def latest_audio_file(self) -> AudioFile | None:
        """Return the most recently appended audio file, if any."""
        if not self.audio_files:
            return None
        return self.audio_files[-1]
