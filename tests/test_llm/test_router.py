"""Tests for the failover router and structured-output parsing."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from pydantic import BaseModel

from physiopro.llm.base import (
    BaseLLM,
    LLMConnectionError,
    LLMError,
    LLMOverloadError,
    LLMResponse,
    LLMTimeoutError,
    LLMValidationError,
    Message,
    MessageRole,
    parse_structured_response,
    strip_code_fence,
    with_schema_instruction,
)
from physiopro.llm.router import LLMRouter, create_router_from_settings


class SearchResult(BaseModel):
    results: list[str]


def _mock_llm(provider: str, model: str) -> MagicMock:
    llm = MagicMock(spec=BaseLLM)
    llm.complete = AsyncMock()
    llm.complete_structured = AsyncMock()
    llm.health_check = AsyncMock(return_value=True)
    llm.model_name = model
    llm.provider = provider
    return llm


@pytest.fixture
def mock_primary_llm():
    return _mock_llm("openai", "gpt-4o-mini")


@pytest.fixture
def mock_fallback_llm():
    return _mock_llm("anthropic", "claude-model")


@pytest.fixture
def router(mock_primary_llm, mock_fallback_llm):
    return LLMRouter(primary=mock_primary_llm, fallback=mock_fallback_llm, max_retries=3, retry_wait=0)


@pytest.fixture
def router_no_fallback(mock_primary_llm):
    return LLMRouter(primary=mock_primary_llm, fallback=None, retry_wait=0)


@pytest.fixture
def sample_messages():
    return [
        Message(role=MessageRole.SYSTEM, content="You find exercises."),
        Message(role=MessageRole.USER, content="Query: knee pain"),
    ]


@pytest.fixture
def success_response():
    return LLMResponse(
        content="Try a wall sit.",
        model="test-model",
        usage={"prompt_tokens": 10, "completion_tokens": 20},
    )


class TestLLMRouter:
    @pytest.mark.asyncio
    async def test_primary_success(self, router, mock_primary_llm, mock_fallback_llm, sample_messages, success_response):
        mock_primary_llm.complete.return_value = success_response

        result = await router.complete(sample_messages)

        assert result.content == "Try a wall sit."
        mock_primary_llm.complete.assert_called_once()
        mock_fallback_llm.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_fallback_on_connection_error(
        self, router, mock_primary_llm, mock_fallback_llm, sample_messages, success_response
    ):
        mock_primary_llm.complete.side_effect = LLMConnectionError("Connection failed")
        mock_fallback_llm.complete.return_value = success_response

        result = await router.complete(sample_messages)

        assert result.content == "Try a wall sit."
        assert mock_primary_llm.complete.call_count == 1
        mock_fallback_llm.complete.assert_called_once()

    @pytest.mark.asyncio
    async def test_timeouts_are_retried_before_fallback(
        self, router, mock_primary_llm, mock_fallback_llm, sample_messages, success_response
    ):
        mock_primary_llm.complete.side_effect = LLMTimeoutError("Request timed out")
        mock_fallback_llm.complete.return_value = success_response

        await router.complete(sample_messages)

        assert mock_primary_llm.complete.call_count == 3
        mock_fallback_llm.complete.assert_called_once()

    @pytest.mark.asyncio
    async def test_overload_recovers_on_retry(self, router, mock_primary_llm, sample_messages, success_response):
        mock_primary_llm.complete.side_effect = [LLMOverloadError("Busy"), success_response]

        result = await router.complete(sample_messages)

        assert result.content == "Try a wall sit."
        assert mock_primary_llm.complete.call_count == 2

    @pytest.mark.asyncio
    async def test_validation_error_is_not_retried(
        self, router, mock_primary_llm, mock_fallback_llm, sample_messages
    ):
        mock_primary_llm.complete_structured.side_effect = LLMValidationError("Not JSON")
        mock_fallback_llm.complete_structured.return_value = SearchResult(results=["Wall Sit"])

        result = await router.complete_structured(sample_messages, SearchResult)

        assert result.results == ["Wall Sit"]
        assert mock_primary_llm.complete_structured.call_count == 1

    @pytest.mark.asyncio
    async def test_no_fallback_raises_error(self, router_no_fallback, mock_primary_llm, sample_messages):
        mock_primary_llm.complete.side_effect = LLMConnectionError("Connection failed")

        with pytest.raises(LLMConnectionError):
            await router_no_fallback.complete(sample_messages)

    @pytest.mark.asyncio
    async def test_both_fail(self, router, mock_primary_llm, mock_fallback_llm, sample_messages):
        mock_primary_llm.complete.side_effect = LLMConnectionError("Primary failed")
        mock_fallback_llm.complete.side_effect = LLMConnectionError("Fallback failed")

        with pytest.raises(LLMConnectionError, match="Fallback failed"):
            await router.complete(sample_messages)

    @pytest.mark.asyncio
    async def test_structured_output_primary(self, router, mock_primary_llm, sample_messages):
        mock_primary_llm.complete_structured.return_value = SearchResult(results=["Plank"])

        result = await router.complete_structured(sample_messages, SearchResult)

        assert result.results == ["Plank"]
        args = mock_primary_llm.complete_structured.call_args
        assert args.args[1] is SearchResult


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_check(self, router, mock_primary_llm, mock_fallback_llm):
        mock_primary_llm.health_check.return_value = False

        assert await router.health_check() == {"primary": False, "fallback": True}

    @pytest.mark.asyncio
    async def test_health_check_without_fallback(self, router_no_fallback):
        assert await router_no_fallback.health_check() == {"primary": True}

    def test_active_provider(self, router, router_no_fallback):
        assert router.active_provider == "openai"
        router._primary_healthy = False
        assert router.active_provider == "anthropic"
        router_no_fallback._primary_healthy = False
        assert router_no_fallback.active_provider == "none"

    @pytest.mark.asyncio
    async def test_consecutive_failures_mark_unhealthy(
        self, router, mock_primary_llm, mock_fallback_llm, sample_messages, success_response
    ):
        mock_primary_llm.complete.side_effect = LLMConnectionError("Failed")
        mock_fallback_llm.complete.return_value = success_response

        for _ in range(3):
            await router.complete(sample_messages)

        assert router._primary_healthy is False
        assert router.active_provider == "anthropic"

    @pytest.mark.asyncio
    async def test_success_resets_failure_count(self, router, mock_primary_llm, sample_messages, success_response):
        router._consecutive_failures = 2
        mock_primary_llm.complete.return_value = success_response

        await router.complete(sample_messages)

        assert router._consecutive_failures == 0
        assert router._primary_healthy is True

    @pytest.mark.asyncio
    async def test_unhealthy_primary_skipped_when_not_forced(
        self, mock_primary_llm, mock_fallback_llm, sample_messages, success_response
    ):
        router = LLMRouter(primary=mock_primary_llm, fallback=mock_fallback_llm, always_try_primary=False)
        router._primary_healthy = False
        mock_fallback_llm.complete.return_value = success_response

        await router.complete(sample_messages)

        mock_primary_llm.complete.assert_not_called()
        mock_fallback_llm.complete.assert_called_once()

    @pytest.mark.asyncio
    async def test_no_provider_left(self, mock_primary_llm, sample_messages):
        router = LLMRouter(primary=mock_primary_llm, always_try_primary=False)
        router._primary_healthy = False

        with pytest.raises(LLMError, match="No healthy model provider"):
            await router.complete(sample_messages)


class TestStructuredParsing:
    def test_strip_code_fence(self):
        assert strip_code_fence('```json\n{"results": []}\n```') == '{"results": []}'
        assert strip_code_fence('  {"results": []}  ') == '{"results": []}'

    def test_parse_valid(self):
        parsed = parse_structured_response('```json\n{"results": ["Plank"]}\n```', SearchResult)
        assert parsed.results == ["Plank"]

    def test_parse_invalid_json(self):
        with pytest.raises(LLMValidationError, match="Invalid JSON"):
            parse_structured_response("Here are some exercises: Plank", SearchResult)

    def test_parse_wrong_shape(self):
        with pytest.raises(LLMValidationError, match="doesn't match schema"):
            parse_structured_response('{"results": "Plank"}', SearchResult)

    def test_schema_instruction_appended_to_last_turn(self, sample_messages):
        messages = with_schema_instruction(sample_messages, SearchResult)
        assert messages[0] is sample_messages[0]
        assert messages[1].content.startswith("Query: knee pain")
        assert "Respond ONLY with the JSON object" in messages[1].content
        assert sample_messages[1].content == "Query: knee pain"

    def test_usage_key_variants(self, success_response):
        assert success_response.input_tokens == 10
        assert success_response.output_tokens == 20


class TestRouterFactory:
    def test_without_anthropic_key(self):
        settings = MagicMock(
            llm_base_url="https://llm.example.com/v1", llm_model="gpt-4o-mini", llm_api_key="k",
            llm_timeout=30, has_anthropic_key=False, max_retries=2,
        )
        with patch("physiopro.config.get_settings", return_value=settings):
            router = create_router_from_settings()

        assert router.primary.provider == "openai"
        assert router.fallback is None
        assert router.max_retries == 2
