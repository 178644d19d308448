"""Failover router: hosted primary model first, Anthropic fallback second."""

import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from pydantic import BaseModel
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from physiopro.llm.base import TRANSIENT_ERRORS, BaseLLM, LLMError, LLMResponse, Message
from physiopro.observability import get_observability_logger

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
R = TypeVar("R")


class LLMRouter:
    """Routes each call to the primary provider and fails over on ``LLMError``.

    Timeouts and overloads are retried per provider with exponential backoff.
    After ``failure_threshold`` consecutive primary failures the primary is
    marked unhealthy; with ``always_try_primary`` off it is then skipped until
    a call through it succeeds again.
    """

    def __init__(
        self,
        primary: BaseLLM,
        fallback: Optional[BaseLLM] = None,
        max_retries: int = 3,
        always_try_primary: bool = True,
        failure_threshold: int = 3,
        retry_wait: float = 1.0,
    ):
        self.primary = primary
        self.fallback = fallback
        self.max_retries = max(1, max_retries)
        self.always_try_primary = always_try_primary
        self.retry_wait = retry_wait

        self._primary_healthy = True
        self._consecutive_failures = 0
        self._failure_threshold = failure_threshold

    async def complete(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        stop: Optional[list[str]] = None,
        request_id: Optional[str] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        obs = get_observability_logger()
        request_id = request_id or obs.generate_request_id()
        msg_dicts = [m.to_dict() for m in messages]

        async def call(llm: BaseLLM, is_fallback: bool) -> LLMResponse:
            with obs.llm_call(
                provider=llm.provider,
                model=llm.model_name,
                messages=msg_dicts,
                temperature=temperature,
                max_tokens=max_tokens,
                request_id=request_id,
            ) as event:
                event.is_fallback = is_fallback
                response = await self._with_retry(
                    lambda: llm.complete(
                        messages, temperature=temperature, max_tokens=max_tokens, stop=stop, **kwargs
                    )
                )
                event.response_content = response.content
                event.input_tokens = response.input_tokens
                event.output_tokens = response.output_tokens
                event.total_tokens = response.input_tokens + response.output_tokens
                return response

        return await self._route(call, request_id)

    async def complete_structured(
        self,
        messages: list[Message],
        schema: type[T],
        *,
        temperature: float = 0.3,
        max_tokens: int = 2048,
        request_id: Optional[str] = None,
        **kwargs: Any,
    ) -> T:
        obs = get_observability_logger()
        request_id = request_id or obs.generate_request_id()
        msg_dicts = [m.to_dict() for m in messages]

        async def call(llm: BaseLLM, is_fallback: bool) -> T:
            with obs.llm_call(
                provider=llm.provider,
                model=llm.model_name,
                messages=msg_dicts,
                temperature=temperature,
                max_tokens=max_tokens,
                request_id=request_id,
            ) as event:
                event.is_fallback = is_fallback
                event.structured_schema = schema.__name__
                result = await self._with_retry(
                    lambda: llm.complete_structured(
                        messages, schema, temperature=temperature, max_tokens=max_tokens, **kwargs
                    )
                )
                event.response_content = result.model_dump_json()
                return result

        return await self._route(call, request_id)

    async def _route(
        self,
        call: Callable[[BaseLLM, bool], Awaitable[R]],
        request_id: str,
    ) -> R:
        obs = get_observability_logger()

        if self._should_try_primary():
            try:
                result = await call(self.primary, False)
                self._record_success()
                return result
            except LLMError as e:
                self._record_failure()
                logger.warning(
                    f"Primary model ({self.primary.provider}) failed: {e}. "
                    f"{'Trying fallback...' if self.fallback else 'No fallback configured.'}"
                )
                obs.log_llm_fallback(
                    from_provider=self.primary.provider,
                    to_provider=self.fallback.provider if self.fallback else "none",
                    reason=str(e),
                    request_id=request_id,
                )
                if not self.fallback:
                    raise

        if self.fallback:
            try:
                result = await call(self.fallback, True)
            except LLMError as e:
                logger.error(f"Fallback model ({self.fallback.provider}) also failed: {e}")
                raise
            logger.info(f"Fallback model ({self.fallback.provider}) succeeded")
            return result

        raise LLMError("No healthy model provider available")

    async def _with_retry(self, fn: Callable[[], Awaitable[R]]) -> R:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_wait, min=0, max=10),
            reraise=True,
        ):
            with attempt:
                return await fn()
        raise LLMError("Retry loop exited without a result")

    def _should_try_primary(self) -> bool:
        return self.always_try_primary or self._primary_healthy

    def _record_success(self) -> None:
        self._primary_healthy = True
        self._consecutive_failures = 0

    def _record_failure(self) -> None:
        self._consecutive_failures += 1
        if self._consecutive_failures >= self._failure_threshold:
            self._primary_healthy = False
            logger.warning(f"Primary model marked unhealthy after {self._consecutive_failures} failures")

    async def health_check(self) -> dict[str, bool]:
        result = {"primary": await self.primary.health_check()}
        if self.fallback:
            result["fallback"] = await self.fallback.health_check()
        return result

    @property
    def active_provider(self) -> str:
        if self._primary_healthy:
            return self.primary.provider
        if self.fallback:
            return self.fallback.provider
        return "none"


def create_router_from_settings() -> LLMRouter:
    from physiopro.config import get_settings
    from physiopro.llm.anthropic_llm import AnthropicLLM
    from physiopro.llm.openai_llm import OpenAICompatibleLLM

    settings = get_settings()
    primary = OpenAICompatibleLLM(
        base_url=settings.llm_base_url,
        model=settings.llm_model,
        api_key=settings.llm_api_key,
        timeout=settings.llm_timeout,
    )

    fallback = None
    if settings.has_anthropic_key:
        fallback = AnthropicLLM(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
        )

    return LLMRouter(primary=primary, fallback=fallback, max_retries=settings.max_retries)
