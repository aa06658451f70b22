"""ElevenLabs API client for speech synthesis and voice cloning."""

from dataclasses import dataclass

import httpx

from thought_reframer.services.synthesis import SpeechClient
from thought_reframer.services.voice import VoiceCloneClient

_VOICE_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "style": 0.0,
    "use_speaker_boost": True,
}


@dataclass
class HttpxElevenLabsClient(SpeechClient, VoiceCloneClient):
    """ElevenLabs client implemented with httpx."""

    api_key: str
    model_id: str
    base_url: str
    http_client: httpx.AsyncClient
    synthesis_timeout: float = 120
    cloning_timeout: float = 120

    @classmethod
    def create(
        cls, api_key: str, model_id: str, base_url: str, timeout: float
    ) -> "HttpxElevenLabsClient":
        """Create an ElevenLabs client with a managed httpx session."""
        return cls(
            api_key=api_key,
            model_id=model_id,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            synthesis_timeout=timeout,
        )

    async def text_to_speech(self, *, voice_id: str, text: str) -> bytes:
        """Render text with the given voice and return mp3 bytes."""
        response = await self.http_client.post(
            f"{self.base_url}/text-to-speech/{voice_id}",
            headers={"xi-api-key": self.api_key, "Accept": "audio/mpeg"},
            json={
                "text": text,
                "model_id": self.model_id,
                "voice_settings": _VOICE_SETTINGS,
            },
            timeout=self.synthesis_timeout,
        )
        _raise_for_status(response)
        return response.content

    async def add_voice(
        self, *, name: str, description: str, filename: str, content: bytes
    ) -> dict[str, object]:
        """Create an instant voice clone from a single sample."""
        response = await self.http_client.post(
            f"{self.base_url}/voices/add",
            headers={"xi-api-key": self.api_key},
            data={"name": name, "description": description},
            files={"files": (filename, content)},
            timeout=self.cloning_timeout,
        )
        _raise_for_status(response)
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _raise_for_status(response: httpx.Response) -> None:
    """Raise HTTPStatusError with the API's detail message when present."""
    if response.is_success:
        return
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    message = detail.get("message") if isinstance(detail, dict) else detail
    raise httpx.HTTPStatusError(
        str(message or f"ElevenLabs request failed with {response.status_code}"),
        request=response.request,
        response=response,
    )
