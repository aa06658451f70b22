"""Local filesystem storage for uploaded and generated audio."""

import time
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

_CONTENT_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".webm": "audio/webm",
}


@dataclass
class LocalFileStorage:
    """Keeps session uploads and synthesized audio on local disk."""

    upload_dir: Path
    generated_dir: Path

    @classmethod
    def create(cls, upload_dir: str, generated_dir: str) -> "LocalFileStorage":
        """Create the storage and make sure its directories exist."""
        storage = cls(upload_dir=Path(upload_dir), generated_dir=Path(generated_dir))
        storage.upload_dir.mkdir(parents=True, exist_ok=True)
        storage.generated_dir.mkdir(parents=True, exist_ok=True)
        return storage

    def save_session_audio(
        self, session_id: UUID, original_name: str, content: bytes
    ) -> tuple[str, str]:
        """Write an upload to ``<upload_dir>/<session id>/audio_<ms><ext>``."""
        session_dir = self.upload_dir / str(session_id)
        session_dir.mkdir(parents=True, exist_ok=True)
        extension = Path(original_name).suffix.lower()
        filename = f"audio_{_millis()}{extension}"
        path = session_dir / filename
        path.write_bytes(content)
        return filename, str(path)

    def save_generated_audio(self, session_id: UUID, content: bytes) -> str:
        """Write synthesized speech and return its filename."""
        filename = f"reframed_{session_id}_{_millis()}.mp3"
        (self.generated_dir / filename).write_bytes(content)
        return filename

    def resolve_generated_audio(self, filename: str) -> Path | None:
        """Return the path of a generated file, refusing paths outside the dir."""
        root = self.generated_dir.resolve()
        candidate = (root / filename).resolve()
        if not candidate.is_relative_to(root) or candidate == root:
            return None
        if not candidate.is_file():
            return None
        return candidate

    def delete(self, path: str) -> None:
        """Remove a stored file if it exists."""
        Path(path).unlink(missing_ok=True)


def content_type_for(filename: str) -> str:
    """Return the audio content type for a filename."""
    return _CONTENT_TYPES.get(Path(filename).suffix.lower(), "application/octet-stream")


def _millis() -> int:
    return time.time_ns() // 1_000_000
