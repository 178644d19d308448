"""JSONL telemetry for model calls and AI flow runs."""

from physiopro.observability.events import EventType, FlowEvent, LLMCallEvent, ObservabilityEvent
from physiopro.observability.logger import ObservabilityLogger, get_observability_logger

__all__ = [
    "EventType",
    "FlowEvent",
    "LLMCallEvent",
    "ObservabilityEvent",
    "ObservabilityLogger",
    "get_observability_logger",
]
