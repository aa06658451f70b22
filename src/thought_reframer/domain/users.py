"""Domain models for session owners."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Represents an owner and their enrolled synthesis voice."""

    id: UUID
    voice_id: str | None
