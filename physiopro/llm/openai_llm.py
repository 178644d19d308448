"""Hosted model client for any OpenAI-compatible chat completions API."""

import logging
from typing import Any, Optional

import httpx
from openai import APIConnectionError, APIError, APITimeoutError, AsyncOpenAI, RateLimitError

from physiopro.llm.base import (
    BaseLLM,
    LLMConnectionError,
    LLMOverloadError,
    LLMResponse,
    LLMTimeoutError,
    Message,
)

logger = logging.getLogger(__name__)


class OpenAICompatibleLLM(BaseLLM):
    """Primary generative model reached through the OpenAI SDK."""

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: str,
        timeout: int = 60,
    ):
        self._base_url = base_url
        self._model = model
        self._timeout = timeout
        self._client = AsyncOpenAI(
            base_url=base_url,
            api_key=api_key or "not-configured",
            timeout=httpx.Timeout(timeout, connect=10.0),
            max_retries=0,
        )

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def provider(self) -> str:
        return "openai"

    async def complete(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        stop: Optional[list[str]] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[m.to_dict() for m in messages],
                temperature=temperature,
                max_tokens=max_tokens,
                stop=stop,
                **kwargs,
            )
        except APITimeoutError as e:
            logger.error(f"Model request timed out: {e}")
            raise LLMTimeoutError(f"Model request timed out after {self._timeout}s") from e
        except APIConnectionError as e:
            logger.error(f"Model connection error: {e}")
            raise LLMConnectionError(f"Failed to reach model endpoint at {self._base_url}") from e
        except RateLimitError as e:
            logger.warning(f"Model rate limited: {e}")
            raise LLMOverloadError("Model endpoint is rate limiting requests") from e
        except APIError as e:
            logger.error(f"Model API error: {e}")
            raise LLMConnectionError(f"Model endpoint returned an error: {e}") from e

        choice = response.choices[0]
        usage = response.usage
        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            usage={
                "prompt_tokens": usage.prompt_tokens if usage else 0,
                "completion_tokens": usage.completion_tokens if usage else 0,
            },
            finish_reason=choice.finish_reason,
        )

    async def health_check(self) -> bool:
        try:
            await self._client.models.list()
            return True
        except Exception as e:
            logger.debug(f"Model health check failed: {e}")
            return False
