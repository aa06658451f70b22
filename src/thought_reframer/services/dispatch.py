"""Fire-and-forget trigger for pipeline runs."""

import asyncio
import logging
from dataclasses import dataclass, field
from uuid import UUID

from thought_reframer.domain.errors import (
    NoAudioUploaded,
    ReframerError,
    RunAlreadyActive,
    SessionNotFound,
)
from thought_reframer.domain.sessions import SessionRecord, SessionStatus
from thought_reframer.services.pipeline import PipelineOrchestrator
from thought_reframer.services.sessions import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class PipelineDispatcher:
    """Starts pipeline runs as supervised background tasks.

    A session may have at most one live run in this process; a second
    trigger while one is live raises RunAlreadyActive. Anything escaping the
    orchestrator is logged and written to the session as status ``error``.
    """

    store: SessionStore
    orchestrator: PipelineOrchestrator
    _runs: dict[UUID, asyncio.Task[None]] = field(
        default_factory=dict, init=False, repr=False
    )
    _starting: set[UUID] = field(default_factory=set, init=False, repr=False)

    async def begin(self, session_id: UUID, owner_id: UUID) -> SessionRecord:
        """Validate the trigger, mark the session processing and start a run."""
        session = await self.store.get_owned(session_id, owner_id)
        if not session.audio_files:
            raise NoAudioUploaded(session_id)
        if self.is_running(session_id):
            raise RunAlreadyActive(session_id)

        self._starting.add(session_id)
        try:
            session = await self.store.update(
                session_id,
                status=SessionStatus.PROCESSING,
                error=None,
                generated_audio_url=None,
            )
        finally:
            self._starting.discard(session_id)
        task = asyncio.create_task(
            self._supervise(session_id), name=f"pipeline-{session_id}"
        )
        self._runs[session_id] = task
        task.add_done_callback(lambda done: self._forget(session_id, done))
        logger.info("[%s] Processing started", session_id)
        return session

    def is_running(self, session_id: UUID) -> bool:
        """Return true while a run for the session is live."""
        if session_id in self._starting:
            return True
        task = self._runs.get(session_id)
        return task is not None and not task.done()

    async def join(self, session_id: UUID) -> None:
        """Wait for the live run of a session, if any."""
        task = self._runs.get(session_id)
        if task is not None:
            await asyncio.shield(task)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for all live runs, giving up after the timeout."""
        tasks = [task for task in self._runs.values() if not task.done()]
        if not tasks:
            return
        logger.info("Waiting for %d pipeline run(s) to finish", len(tasks))
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        if pending:
            logger.warning(
                "%d pipeline run(s) still active at shutdown", len(pending)
            )

    def _forget(self, session_id: UUID, task: asyncio.Task[None]) -> None:
        if self._runs.get(session_id) is task:
            del self._runs[session_id]

    async def _supervise(self, session_id: UUID) -> None:
        try:
            await self.orchestrator.run(session_id)
        except SessionNotFound:
            logger.warning("[%s] Session disappeared before the run", session_id)
        except ReframerError as exc:
            logger.warning("[%s] Run rejected: %s", session_id, exc)
        except Exception as exc:
            logger.exception(
                "Pipeline run failed", extra={"session_id": str(session_id)}
            )
            await self._record_failure(session_id, exc)

    async def _record_failure(self, session_id: UUID, exc: Exception) -> None:
        try:
            await self.store.update(
                session_id,
                status=SessionStatus.ERROR,
                error=str(exc) or type(exc).__name__,
            )
        except Exception:
            logger.exception(
                "Failed to record pipeline failure",
                extra={"session_id": str(session_id)},
            )
