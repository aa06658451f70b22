"""OpenAI audio transcription client."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from thought_reframer.services.transcription import TranscriptionClient


@dataclass
class OpenAIWhisperClient(TranscriptionClient):
    """Transcription client backed by the OpenAI audio API."""

    client: AsyncOpenAI

    @classmethod
    def create(
        cls, api_key: str, timeout: float, max_retries: int = 0
    ) -> "OpenAIWhisperClient":
        """Create a Whisper client with a long request timeout."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=max_retries)
        )

    async def transcribe(
        self, *, model: str, language: str, filename: str, content: bytes
    ) -> str:
        """Upload the audio and return the plain-text transcript."""
        response = await self.client.audio.transcriptions.create(
            model=model,
            file=(filename, content),
            language=language,
            response_format="text",
        )
        if isinstance(response, str):
            return response
        return str(getattr(response, "text", ""))

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP session."""
        await self.client.close()
