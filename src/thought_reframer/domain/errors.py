"""Exception taxonomy for the reframing pipeline."""

from uuid import UUID


class ReframerError(Exception):
    """Base class for all domain errors."""


class SessionNotFound(ReframerError):
    """Raised when a session id does not exist."""

    def __init__(self, session_id: UUID) -> None:
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id


class SessionAccessDenied(ReframerError):
    """Raised when a caller touches a session owned by someone else."""

    def __init__(self, session_id: UUID) -> None:
        super().__init__(f"Access to session {session_id} denied")
        self.session_id = session_id


class NoAudioUploaded(ReframerError):
    """Raised when a run is requested for a session without audio."""

    def __init__(self, session_id: UUID) -> None:
        super().__init__("No audio files uploaded for this session")
        self.session_id = session_id


class RunAlreadyActive(ReframerError):
    """Raised when a session already has a live pipeline run."""

    def __init__(self, session_id: UUID) -> None:
        super().__init__(f"Session {session_id} is already being processed")
        self.session_id = session_id


class InvalidAudioUpload(ReframerError):
    """Raised when an uploaded file is rejected."""


class UploadTooLarge(InvalidAudioUpload):
    """Raised when an uploaded file exceeds the size limit."""


class StageError(ReframerError):
    """Base class for failures of an external pipeline stage."""


class TranscriptionError(StageError):
    """Raised when speech-to-text fails."""


class ReframingError(StageError):
    """Raised when text reframing fails."""


class SynthesisError(StageError):
    """Raised when text-to-speech fails."""


class VoiceCloningError(ReframerError):
    """Raised when voice enrollment fails."""


class RateLimitExceeded(StageError):
    """Raised when a rate-limited call runs out of attempts."""

    def __init__(self, label: str, attempts: int) -> None:
        super().__init__(
            f"{label} failed: rate limit exceeded after {attempts} attempts. "
            "Please try again in a few minutes."
        )
        self.attempts = attempts


class RetriesExhausted(StageError):
    """Raised when a transiently failing call runs out of attempts."""

    def __init__(self, label: str, attempts: int, last_error: BaseException) -> None:
        detail = str(last_error) or type(last_error).__name__
        super().__init__(f"{label} failed after {attempts} attempts: {detail}")
        self.attempts = attempts
        self.last_error = last_error
