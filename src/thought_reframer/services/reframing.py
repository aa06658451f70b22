"""Text reframing stage."""

from dataclasses import dataclass
from typing import Protocol

from thought_reframer.domain.errors import ReframingError

REFRAMING_SYSTEM_PROMPT = (
    "You are a helpful assistant that reframes negative or unhelpful thoughts "
    "into more positive, constructive, and empowering perspectives. "
    "Your goal is to help people see situations from a different, more helpful "
    "angle while maintaining authenticity and not being overly dismissive of "
    "their feelings. "
    "Return only the reframed text, without additional commentary or explanation."
)


class ReframingClient(Protocol):
    """Interface for a chat-style language model."""

    async def complete(
        self, *, system_prompt: str, user_prompt: str, max_tokens: int
    ) -> str:
        """Return the model's text reply."""


@dataclass
class ReframingService:
    """Builds the reframing prompt and validates the reply."""

    client: ReframingClient
    max_tokens: int = 500

    async def reframe(self, text: str) -> str:
        """Reframe a transcript into a more constructive perspective."""
        try:
            reply = await self.client.complete(
                system_prompt=REFRAMING_SYSTEM_PROMPT,
                user_prompt=build_reframe_prompt(text),
                max_tokens=self.max_tokens,
            )
        except Exception as exc:
            raise ReframingError(f"Reframing failed: {exc}") from exc
        reframed = reply.strip()
        if not reframed:
            raise ReframingError("Reframing failed: empty response")
        return reframed


def build_reframe_prompt(text: str) -> str:
    """Return the user prompt for a transcript."""
    return (
        "Please reframe the following thought in a more positive and "
        f'constructive way:\n\n"{text}"'
    )
