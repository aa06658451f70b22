"""Owner records used for voice selection."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from thought_reframer.domain.users import UserRecord

logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Persistence interface for owner records."""

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return the owner record, if present."""

    def set_voice_id(self, user_id: UUID, voice_id: str) -> UserRecord:
        """Store the owner's enrolled voice and return the record."""


@dataclass
class UserService:
    """Application service for owner voice enrollment."""

    repository: UserRepository

    def get_voice_id(self, user_id: UUID) -> str | None:
        """Return the owner's enrolled voice id, if any."""
        user = self.repository.get_user(user_id)
        return user.voice_id if user else None

    def resolve_voice_id(self, user_id: UUID, default: str | None) -> str | None:
        """Return the owner's voice, else the default voice."""
        try:
            voice_id = self.get_voice_id(user_id)
        except Exception as exc:
            logger.warning(
                "Could not fetch owner voice, using default: %s",
                exc,
                extra={"user_id": str(user_id)},
            )
            return default
        return voice_id or default

    def enroll_voice(self, user_id: UUID, voice_id: str) -> UserRecord:
        """Record the owner's cloned voice."""
        return self.repository.set_voice_id(user_id, voice_id)
