"""OpenAI chat completions client for reframing."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from thought_reframer.services.reframing import ReframingClient


@dataclass
class OpenAIChatClient(ReframingClient):
    """Reframing client backed by OpenAI chat completions."""

    client: AsyncOpenAI
    model: str
    temperature: float = 0.7

    @classmethod
    def create(cls, api_key: str, model: str, timeout: float) -> "OpenAIChatClient":
        """Create an OpenAI chat client."""
        return cls(client=AsyncOpenAI(api_key=api_key, timeout=timeout), model=model)

    async def complete(
        self, *, system_prompt: str, user_prompt: str, max_tokens: int
    ) -> str:
        """Send a system and user message and return the reply text."""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.temperature,
            max_tokens=max_tokens,
        )
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP session."""
        await self.client.close()
