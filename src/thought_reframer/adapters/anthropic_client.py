"""Anthropic Messages API client for reframing."""

from dataclasses import dataclass

import httpx

from thought_reframer.services.reframing import ReframingClient

_API_VERSION = "2023-06-01"


@dataclass
class HttpxAnthropicClient(ReframingClient):
    """Reframing client calling the Anthropic Messages API over httpx."""

    api_key: str
    model: str
    http_client: httpx.AsyncClient
    base_url: str = "https://api.anthropic.com/v1"
    timeout: float = 60

    @classmethod
    def create(cls, api_key: str, model: str, timeout: float) -> "HttpxAnthropicClient":
        """Create an Anthropic client with a managed httpx session."""
        return cls(
            api_key=api_key,
            model=model,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def complete(
        self, *, system_prompt: str, user_prompt: str, max_tokens: int
    ) -> str:
        """Send a single-turn message and return the text reply."""
        response = await self.http_client.post(
            f"{self.base_url}/messages",
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": _API_VERSION,
            },
            json={
                "model": self.model,
                "max_tokens": max_tokens,
                "system": system_prompt,
                "messages": [{"role": "user", "content": user_prompt}],
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        return "".join(
            block.get("text", "")
            for block in payload.get("content", [])
            if block.get("type") == "text"
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
