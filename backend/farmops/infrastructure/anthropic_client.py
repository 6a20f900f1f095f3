"""Resilient Anthropic Client — one messages.create call with retry, backoff, and error mapping.

Invariants:
    - Every SDK failure is classified into one api_error_type
      (rate_limit, overloaded, connection_error, timeout, client_error, unknown)
    - Only rate_limit, overloaded and connection_error are retried, at most `max_retries` times
    - Retry-After (seconds) on a 429 overrides the computed backoff
    - Callers only ever see AIProviderError (core/errors.py)

Design Decisions:
    - SDK-level retries disabled (max_retries=0 on AsyncAnthropic): one retry policy
    - ±25% jitter on backoff so concurrent insight requests spread out
"""

import asyncio
import logging
import random

import anthropic
from anthropic import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)

from farmops.core.errors import AIProviderError, ErrorContext

logger = logging.getLogger(__name__)

_OVERLOADED_STATUS = 529
RETRYABLE = frozenset({"rate_limit", "overloaded", "connection_error"})


def classify_error(e: Exception) -> str:
    """Map an SDK exception onto an api_error_type."""
    if isinstance(e, RateLimitError):
        return "rate_limit"
    # APITimeoutError subclasses APIConnectionError
    if isinstance(e, APITimeoutError):
        return "timeout"
    if isinstance(e, (APIConnectionError, InternalServerError)):
        return "connection_error"
    if isinstance(e, APIStatusError) and e.status_code == _OVERLOADED_STATUS:
        return "overloaded"
    if isinstance(e, APIError):
        return "client_error"
    return "unknown"


def retry_after_ms(e: Exception) -> int | None:
    """Retry-After header of a status error, in milliseconds."""
    response = getattr(e, "response", None)
    if response is None:
        return None
    value = response.headers.get("retry-after")
    try:
        return int(float(value) * 1000) if value else None
    except ValueError:
        return None


def extract_text(response) -> str:
    """Concatenate the text blocks of a Messages API response."""
    return "".join(
        getattr(block, "text", "") for block in response.content
        if getattr(block, "type", None) == "text"
    )


class ResilientAnthropicClient:
    """AsyncAnthropic plus the insight workflow's retry policy."""

    def __init__(
        self,
        api_key: str,
        max_retries: int = 2,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        timeout_seconds: int = 60,
    ):
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key, timeout=timeout_seconds, max_retries=0,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def create_message(
        self,
        *,
        model: str,
        max_tokens: int,
        system: str,
        messages: list,
        context: ErrorContext | None = None,
    ):
        attempt = 0
        while True:
            try:
                response = await self.client.messages.create(
                    model=model,
                    max_tokens=max_tokens,
                    system=system,
                    messages=messages,
                )
            except Exception as e:
                delay_ms = self._delay_or_raise(e, attempt, context)
                logger.warning(
                    f"Anthropic call failed ({type(e).__name__}), "
                    f"retrying in {delay_ms}ms",
                    extra={"attempt": attempt + 1},
                )
                await asyncio.sleep(delay_ms / 1000)
                attempt += 1
                continue

            usage = response.usage
            logger.info(
                "Anthropic API success",
                extra={
                    "attempt": attempt + 1,
                    "input_tokens": usage.input_tokens,
                    "output_tokens": usage.output_tokens,
                },
            )
            return response

    def _delay_or_raise(
        self, e: Exception, attempt: int, context: ErrorContext | None,
    ) -> int:
        """Backoff before the next attempt; raises AIProviderError when giving up."""
        error_type = classify_error(e)
        wait_ms = retry_after_ms(e) if error_type == "rate_limit" else None

        if error_type not in RETRYABLE:
            if error_type == "unknown":
                logger.error(f"Unexpected Anthropic error: {e}", exc_info=True)
            raise AIProviderError(str(e), error_type, context=context) from e
        if attempt >= self.max_retries:
            raise AIProviderError(
                f"Gave up after {attempt + 1} attempts: {e}",
                error_type,
                retry_after_ms=wait_ms,
                context=context,
            ) from e
        return wait_ms or self._backoff(attempt)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311


# Singleton (initialized on startup)
ai_client: ResilientAnthropicClient | None = None


def init_ai_client(api_key: str, **kwargs) -> None:
    global ai_client
    ai_client = ResilientAnthropicClient(api_key, **kwargs)


def get_ai_client() -> ResilientAnthropicClient:
    """FastAPI dependency for the AI client."""
    if not ai_client:
        raise RuntimeError("AI client not initialized")
    return ai_client
