"""Bounded retries with backoff for external stage calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

import httpx
import openai

from thought_reframer.domain.errors import RateLimitExceeded, RetriesExhausted

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TOO_MANY_REQUESTS = 429
_TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
    httpx.TransportError,
    openai.APIConnectionError,
)


class FailureKind(Enum):
    """How a failed call should be treated by the retry loop."""

    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    FATAL = "fatal"


def classify_failure(exc: BaseException) -> FailureKind:
    """Classify an error, looking through chained causes."""
    for error in _error_chain(exc):
        if _is_rate_limited(error):
            return FailureKind.RATE_LIMITED
        if isinstance(error, _TRANSIENT_ERRORS):
            return FailureKind.TRANSIENT
    return FailureKind.FATAL


def _is_rate_limited(error: BaseException) -> bool:
    if isinstance(error, openai.RateLimitError):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code == _TOO_MANY_REQUESTS
    return getattr(error, "status_code", None) == _TOO_MANY_REQUESTS


def _error_chain(exc: BaseException) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


@dataclass
class RetryPolicy:
    """Attempt budget and backoff table for a single boundary call."""

    max_attempts: int = 3
    rate_limit_step_seconds: float = 10.0
    rate_limit_cap_seconds: float = 60.0
    transient_step_seconds: float = 3.0
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def rate_limit_delay(self, attempt: int) -> float:
        """Return the wait after a rate-limited attempt."""
        return min(attempt * self.rate_limit_step_seconds, self.rate_limit_cap_seconds)

    def transient_delay(self, attempt: int) -> float:
        """Return the wait after a transient connection failure."""
        return attempt * self.transient_step_seconds

    async def run(self, operation: Callable[[], Awaitable[T]], *, label: str) -> T:
        """Run the operation, retrying rate limits and transient failures."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except Exception as exc:
                kind = classify_failure(exc)
                if kind is FailureKind.FATAL:
                    raise
                remaining = attempt < self.max_attempts
                if kind is FailureKind.RATE_LIMITED:
                    if not remaining:
                        raise RateLimitExceeded(label, attempt) from exc
                    delay = self.rate_limit_delay(attempt)
                else:
                    if not remaining:
                        raise RetriesExhausted(label, attempt, exc) from exc
                    delay = self.transient_delay(attempt)
                logger.warning(
                    "%s attempt %d/%d failed (%s), retrying in %.0fs: %s",
                    label,
                    attempt,
                    self.max_attempts,
                    kind.value,
                    delay,
                    exc,
                )
                await self.sleep(delay)
        raise ValueError("max_attempts must be at least 1")
