"""Generative model access: hosted primary with Anthropic fallback."""

from physiopro.llm.anthropic_llm import AnthropicLLM
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
)
from physiopro.llm.openai_llm import OpenAICompatibleLLM
from physiopro.llm.router import LLMRouter, create_router_from_settings

__all__ = [
    "AnthropicLLM",
    "BaseLLM",
    "LLMConnectionError",
    "LLMError",
    "LLMOverloadError",
    "LLMResponse",
    "LLMRouter",
    "LLMTimeoutError",
    "LLMValidationError",
    "Message",
    "MessageRole",
    "OpenAICompatibleLLM",
    "create_router_from_settings",
]
