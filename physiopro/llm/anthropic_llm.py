"""Anthropic Claude client used as the fallback provider."""

import logging
from typing import Any, Optional

from anthropic import APIConnectionError, APIError, APITimeoutError, AsyncAnthropic, RateLimitError

from physiopro.llm.base import (
    BaseLLM,
    LLMConnectionError,
    LLMOverloadError,
    LLMResponse,
    LLMTimeoutError,
    Message,
    MessageRole,
)

logger = logging.getLogger(__name__)


def split_system(messages: list[Message]) -> tuple[str, list[dict[str, str]]]:
    """Anthropic takes the system prompt as its own parameter."""
    system_parts = [m.content for m in messages if m.role == MessageRole.SYSTEM]
    conversation = [m.to_dict() for m in messages if m.role != MessageRole.SYSTEM]
    return "\n\n".join(system_parts), conversation


class AnthropicLLM(BaseLLM):
    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        timeout: int = 120,
    ):
        self._model = model
        self._timeout = timeout
        self._client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def provider(self) -> str:
        return "anthropic"

    async def complete(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        stop: Optional[list[str]] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        system, conversation = split_system(messages)
        try:
            response = await self._client.messages.create(
                model=self._model,
                messages=conversation,
                system=system,
                temperature=temperature,
                max_tokens=max_tokens,
                stop_sequences=stop or [],
                **kwargs,
            )
        except APITimeoutError as e:
            logger.error(f"Anthropic timeout: {e}")
            raise LLMTimeoutError(f"Anthropic request timed out after {self._timeout}s") from e
        except APIConnectionError as e:
            logger.error(f"Anthropic connection error: {e}")
            raise LLMConnectionError("Failed to connect to Anthropic API") from e
        except RateLimitError as e:
            logger.warning(f"Anthropic rate limit: {e}")
            raise LLMOverloadError("Anthropic API rate limited") from e
        except APIError as e:
            logger.error(f"Anthropic API error: {e}")
            raise LLMConnectionError(f"Anthropic API returned an error: {e}") from e

        text = "".join(block.text for block in response.content if block.type == "text")
        return LLMResponse(
            content=text,
            model=response.model,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
            finish_reason=response.stop_reason,
        )

    async def health_check(self) -> bool:
        try:
            response = await self._client.messages.create(
                model=self._model,
                messages=[{"role": "user", "content": "Hi"}],
                max_tokens=10,
            )
            return len(response.content) > 0
        except Exception as e:
            logger.debug(f"Anthropic health check failed: {e}")
            return False
