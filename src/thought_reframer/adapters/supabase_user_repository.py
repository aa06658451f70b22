"""Supabase-backed owner repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from thought_reframer.domain.users import UserRecord
from thought_reframer.services.users import UserRepository


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for owner voice enrollment."""

    client: Client

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return the owner record, if present."""
        response = (
            self.client.table("users")
            .select("id, voice_id")
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if response.data:
            row = response.data[0]
            return UserRecord(id=UUID(row["id"]), voice_id=row.get("voice_id"))
        return None

    def set_voice_id(self, user_id: UUID, voice_id: str) -> UserRecord:
        """Upsert the owner's voice id and return the record."""
        response = (
            self.client.table("users")
            .upsert(
                {
                    "id": str(user_id),
                    "voice_id": voice_id,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to store voice id in Supabase")
        row = response.data[0]
        return UserRecord(id=UUID(row["id"]), voice_id=row.get("voice_id"))
