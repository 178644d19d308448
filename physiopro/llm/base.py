"""Provider-neutral chat model interface used by the AI flows."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Message:
    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class LLMResponse:
    """Text returned by a provider plus token accounting."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    finish_reason: Optional[str] = None

    @property
    def input_tokens(self) -> int:
        return self.usage.get("input_tokens", 0) or self.usage.get("prompt_tokens", 0)

    @property
    def output_tokens(self) -> int:
        return self.usage.get("output_tokens", 0) or self.usage.get("completion_tokens", 0)


T = TypeVar("T", bound=BaseModel)


class LLMError(Exception):
    """Base exception for generative model failures."""


class LLMConnectionError(LLMError):
    """The provider could not be reached or refused the request."""


class LLMTimeoutError(LLMError):
    """The provider did not answer in time."""


class LLMOverloadError(LLMError):
    """The provider is rate limiting or overloaded."""


class LLMValidationError(LLMError):
    """The model answered, but not with JSON matching the output schema."""


TRANSIENT_ERRORS = (LLMTimeoutError, LLMOverloadError)


def schema_instruction(schema: type[BaseModel]) -> str:
    schema_json = json.dumps(schema.model_json_schema(), indent=2)
    return (
        "Respond with valid JSON matching this schema:\n"
        f"```json\n{schema_json}\n```\n\n"
        "Respond ONLY with the JSON object, no other text."
    )


def with_schema_instruction(messages: list[Message], schema: type[BaseModel]) -> list[Message]:
    """Copy ``messages`` with the JSON schema contract appended to the last turn."""
    if not messages:
        raise ValueError("At least one message is required")
    last = messages[-1]
    return [
        *messages[:-1],
        Message(role=last.role, content=f"{last.content}\n\n{schema_instruction(schema)}"),
    ]


def strip_code_fence(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        if lines[-1].strip() == "```":
            text = "\n".join(lines[1:-1])
        else:
            text = "\n".join(lines[1:])
    return text.strip()


def parse_structured_response(content: str, schema: type[T]) -> T:
    """Parse model output (optionally fenced in ```json) into ``schema``.

    Raises:
        LLMValidationError: If the text is not JSON or does not fit the schema.
    """
    try:
        data = json.loads(strip_code_fence(content))
        return schema.model_validate(data)
    except json.JSONDecodeError as e:
        logger.error(f"Model returned invalid JSON: {e}\nContent: {content[:500]}")
        raise LLMValidationError(f"Invalid JSON in response: {e}") from e
    except ValidationError as e:
        logger.error(f"Model output does not match {schema.__name__}: {e}")
        raise LLMValidationError(f"Response doesn't match schema: {e}") from e


class BaseLLM(ABC):
    """A chat model provider.

    Subclasses implement ``complete``; structured output is layered on top
    by appending the schema contract and parsing the reply.
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        stop: Optional[list[str]] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate a completion.

        Raises:
            LLMConnectionError: If the provider is unreachable or errors.
            LLMTimeoutError: If the request times out.
            LLMOverloadError: If the provider is rate limiting.
        """

    async def complete_structured(
        self,
        messages: list[Message],
        schema: type[T],
        *,
        temperature: float = 0.3,
        max_tokens: int = 2048,
        **kwargs: Any,
    ) -> T:
        response = await self.complete(
            with_schema_instruction(messages, schema),
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
        return parse_structured_response(response.content, schema)

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True when the provider answers."""

    @property
    @abstractmethod
    def model_name(self) -> str: ...

    @property
    @abstractmethod
    def provider(self) -> str: ...
