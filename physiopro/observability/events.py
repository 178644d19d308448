"""Telemetry events written by the observability logger."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class EventType(str, Enum):
    LLM_CALL_START = "llm_call_start"
    LLM_CALL_SUCCESS = "llm_call_success"
    LLM_CALL_ERROR = "llm_call_error"
    LLM_FALLBACK = "llm_fallback"
    FLOW_START = "flow_start"
    FLOW_SUCCESS = "flow_success"
    FLOW_ERROR = "flow_error"


class ObservabilityEvent(BaseModel):
    event_type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: Optional[str] = None
    duration_ms: Optional[float] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class LLMCallEvent(ObservabilityEvent):
    """One request to a model provider."""

    provider: str
    model: str
    messages: list[dict[str, str]] = Field(default_factory=list)
    temperature: float = 0.7
    max_tokens: int = 2048

    response_content: Optional[str] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    error_type: Optional[str] = None
    error_message: Optional[str] = None

    structured_schema: Optional[str] = None

    is_fallback: bool = False
    fallback_reason: Optional[str] = None


class FlowEvent(ObservabilityEvent):
    """One run of an AI flow, covering every model call it made."""

    flow_name: str
    input_type: Optional[str] = None
    input_summary: Optional[str] = None

    output_type: Optional[str] = None
    output_summary: Optional[str] = None

    # True when the flow answered with its default instead of model output
    used_default: bool = False

    error_type: Optional[str] = None
    error_message: Optional[str] = None
