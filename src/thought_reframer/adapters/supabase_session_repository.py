"""Supabase-backed session repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from thought_reframer.domain.sessions import AudioFile, SessionRecord, SessionStatus
from thought_reframer.services.sessions import SessionRepository

_COLUMNS = (
    "id, owner_id, status, audio_files, transcript, reframed_text, "
    "generated_audio_url, error, created_at, updated_at"
)


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for reframing sessions."""

    client: Client

    def insert_session(self, session: SessionRecord) -> SessionRecord:
        """Insert a session row and return it."""
        response = self.client.table("sessions").insert(_to_row(session)).execute()
        if not response.data:
            raise RuntimeError("Failed to create session")
        return _from_row(response.data[0])

    def get_session(self, session_id: UUID) -> SessionRecord | None:
        """Return a session by id, if present."""
        response = (
            self.client.table("sessions")
            .select(_COLUMNS)
            .eq("id", str(session_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _from_row(response.data[0])

    def save_session(self, session: SessionRecord) -> None:
        """Overwrite the mutable columns of a session row."""
        row = _to_row(session)
        for column in ("id", "owner_id", "created_at"):
            row.pop(column)
        self.client.table("sessions").update(row).eq("id", str(session.id)).execute()

    def list_sessions_by_owner(self, owner_id: UUID) -> list[SessionRecord]:
        """Return an owner's sessions, newest first."""
        response = (
            self.client.table("sessions")
            .select(_COLUMNS)
            .eq("owner_id", str(owner_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_from_row(row) for row in response.data or []]


def _to_row(session: SessionRecord) -> dict[str, object]:
    return {
        "id": str(session.id),
        "owner_id": str(session.owner_id),
        "status": session.status.value,
        "audio_files": [
            {
                "filename": audio.filename,
                "original_name": audio.original_name,
                "path": audio.path,
                "size": audio.size,
                "content_type": audio.content_type,
                "uploaded_at": audio.uploaded_at.isoformat(),
            }
            for audio in session.audio_files
        ],
        "transcript": session.transcript,
        "reframed_text": session.reframed_text,
        "generated_audio_url": session.generated_audio_url,
        "error": session.error,
        "created_at": session.created_at.isoformat(),
        "updated_at": session.updated_at.isoformat(),
    }


def _from_row(row: dict[str, object]) -> SessionRecord:
    return SessionRecord(
        id=UUID(str(row["id"])),
        owner_id=UUID(str(row["owner_id"])),
        status=SessionStatus(row["status"]),
        audio_files=tuple(
            AudioFile(
                filename=item["filename"],
                original_name=item["original_name"],
                path=item["path"],
                size=int(item["size"]),
                content_type=item["content_type"],
                uploaded_at=datetime.fromisoformat(item["uploaded_at"]),
            )
            for item in row.get("audio_files") or []
        ),
        transcript=row.get("transcript"),
        reframed_text=row.get("reframed_text"),
        generated_audio_url=row.get("generated_audio_url"),
        error=row.get("error"),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
    )
