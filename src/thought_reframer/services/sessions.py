"""Durable session store with per-session write serialization."""

import asyncio
import dataclasses
import logging
import weakref
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID, uuid4

from thought_reframer.domain.errors import SessionAccessDenied, SessionNotFound
from thought_reframer.domain.sessions import AudioFile, SessionRecord, SessionStatus

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = frozenset({"id", "owner_id", "created_at", "updated_at"})
_MUTABLE_FIELDS = frozenset(
    f.name for f in dataclasses.fields(SessionRecord)
) - _IMMUTABLE_FIELDS


class SessionRepository(Protocol):
    """Persistence interface for session records."""

    def insert_session(self, session: SessionRecord) -> SessionRecord:
        """Insert a new session record and return it."""

    def get_session(self, session_id: UUID) -> SessionRecord | None:
        """Return a session by id, if present."""

    def save_session(self, session: SessionRecord) -> None:
        """Overwrite the stored record with the given one."""

    def list_sessions_by_owner(self, owner_id: UUID) -> list[SessionRecord]:
        """Return all sessions belonging to an owner."""


@dataclass
class SessionStore:
    """Read/modify/write access to session records.

    ``update`` replaces the whole record. Repository calls run in a worker
    thread, so writers in this process are serialized per session id around
    the read and the write; writers in other processes still follow
    last-write-wins.
    """

    repository: SessionRepository
    _locks: weakref.WeakValueDictionary[UUID, asyncio.Lock] = field(
        default_factory=weakref.WeakValueDictionary, init=False, repr=False
    )

    async def create(self, owner_id: UUID) -> SessionRecord:
        """Create an empty session for the owner."""
        now = datetime.now(tz=UTC)
        session = SessionRecord(
            id=uuid4(),
            owner_id=owner_id,
            status=SessionStatus.CREATED,
            created_at=now,
            updated_at=now,
        )
        created = await asyncio.to_thread(self.repository.insert_session, session)
        logger.info("Created session", extra={"session_id": str(created.id)})
        return created

    async def get(self, session_id: UUID) -> SessionRecord:
        """Return a session or raise SessionNotFound."""
        session = await asyncio.to_thread(self.repository.get_session, session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    async def get_owned(self, session_id: UUID, owner_id: UUID) -> SessionRecord:
        """Return a session the given owner is allowed to see."""
        session = await self.get(session_id)
        if session.owner_id != owner_id:
            raise SessionAccessDenied(session_id)
        return session

    async def update(self, session_id: UUID, **fields: object) -> SessionRecord:
        """Merge fields into the stored session and return the new record."""
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update session fields: {sorted(unknown)}")
        if "status" in fields:
            fields["status"] = SessionStatus(fields["status"])
        async with self._lock_for(session_id):
            current = await self.get(session_id)
            updated = dataclasses.replace(
                current, **fields, updated_at=_next_timestamp(current.updated_at)
            )
            await asyncio.to_thread(self.repository.save_session, updated)
            return updated

    async def append_audio_file(
        self, session_id: UUID, audio_file: AudioFile
    ) -> SessionRecord:
        """Append an uploaded file and mark the session as having audio."""
        async with self._lock_for(session_id):
            current = await self.get(session_id)
            updated = dataclasses.replace(
                current,
                audio_files=(*current.audio_files, audio_file),
                status=SessionStatus.AUDIO_UPLOADED,
                updated_at=_next_timestamp(current.updated_at),
            )
            await asyncio.to_thread(self.repository.save_session, updated)
            return updated

    async def list_by_owner(self, owner_id: UUID) -> list[SessionRecord]:
        """Return the owner's sessions, newest first."""
        rows = await asyncio.to_thread(self.repository.list_sessions_by_owner, owner_id)
        sessions = [session for session in rows if session.owner_id == owner_id]
        return sorted(sessions, key=lambda session: session.created_at, reverse=True)

    def _lock_for(self, session_id: UUID) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock


def _next_timestamp(previous: datetime) -> datetime:
    """Return now, nudged forward so timestamps strictly increase."""
    now = datetime.now(tz=UTC)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now
