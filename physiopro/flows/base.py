"""Base class for AI flows: a prompt, an input schema and an output schema."""

import logging
from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from physiopro.llm import LLMRouter, LLMValidationError, Message, MessageRole
from physiopro.observability import get_observability_logger

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)


class BaseFlow(ABC, Generic[InputT, OutputT]):
    """A declarative prompt executed against the hosted model.

    Each flow follows the same steps:
    1. Render the typed input into a user message
    2. Call the model for structured output matching ``output_schema``
    3. Return the parsed result, or the flow's default when the model's
       answer does not fit the schema and the flow defines one
    """

    name: str = "flow"
    temperature: float = 0.4
    max_tokens: int = 1024

    def __init__(self, llm: LLMRouter):
        self.llm = llm
        self.logger = logging.getLogger(f"physiopro.flows.{self.name}")

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        pass

    @property
    @abstractmethod
    def output_schema(self) -> type[OutputT]:
        pass

    @abstractmethod
    def format_input(self, inputs: InputT) -> str:
        pass

    def default_output(self, inputs: InputT) -> Optional[OutputT]:
        """Answer used when the model output is unusable; None re-raises."""
        return None

    async def run(self, inputs: InputT, request_id: Optional[str] = None) -> OutputT:
        obs = get_observability_logger()
        request_id = request_id or obs.generate_request_id()

        with obs.flow_run(
            flow_name=self.name,
            input_type=type(inputs).__name__,
            input_summary=self.summarize_input(inputs),
            request_id=request_id,
        ) as event:
            self.logger.info(f"Running {self.name} flow")
            messages = [
                Message(role=MessageRole.SYSTEM, content=self.system_prompt),
                Message(role=MessageRole.USER, content=self.format_input(inputs)),
            ]

            try:
                result = await self.llm.complete_structured(
                    messages,
                    self.output_schema,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    request_id=request_id,
                )
            except LLMValidationError as e:
                default = self.default_output(inputs)
                if default is None:
                    raise
                self.logger.warning(f"{self.name} flow fell back to its default answer: {e}")
                event.used_default = True
                result = default

            event.output_type = type(result).__name__
            event.output_summary = result.model_dump_json()
            return result

    def summarize_input(self, inputs: InputT) -> str:
        return inputs.model_dump_json(exclude_none=True)
