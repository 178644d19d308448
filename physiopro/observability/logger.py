"""Observability logger writing telemetry events as JSON Lines."""

import json
import logging
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from physiopro.observability.events import (
    EventType,
    FlowEvent,
    LLMCallEvent,
    ObservabilityEvent,
)

logger = logging.getLogger(__name__)


class ObservabilityLogger:
    """Process-wide sink for model call and flow telemetry.

    Message and response content is truncated to ``max_content_length``
    unless ``log_full_content`` is set, since prompts carry patient data.
    """

    _instance: Optional["ObservabilityLogger"] = None

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        enabled: bool = True,
        log_full_content: bool = False,
        max_content_length: int = 500,
    ):
        self.enabled = enabled
        self.log_full_content = log_full_content
        self.max_content_length = max_content_length
        self.log_dir = Path(log_dir) if log_dir is not None else Path("data/logs")

        self._log_files: dict[str, Path] = {
            "llm": self.log_dir / "llm_calls.jsonl",
            "flows": self.log_dir / "flow_runs.jsonl",
        }

    @classmethod
    def get_instance(cls) -> "ObservabilityLogger":
        if cls._instance is None:
            from physiopro.config import get_settings

            settings = get_settings()
            cls._instance = cls(
                log_dir=settings.observability_log_dir,
                enabled=settings.observability_enabled,
            )
        return cls._instance

    def generate_request_id(self) -> str:
        return uuid.uuid4().hex[:8]

    def _write_event(self, event: ObservabilityEvent, log_type: str) -> None:
        if not self.enabled:
            return
        log_file = self._log_files.get(log_type)
        if not log_file:
            return
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(log_file, "a") as f:
                f.write(event.model_dump_json() + "\n")
        except OSError as e:
            logger.warning(f"Failed to write observability event: {e}")

    def _truncate(self, content: str) -> str:
        if self.log_full_content or len(content) <= self.max_content_length:
            return content
        return content[: self.max_content_length] + "..."

    @contextmanager
    def llm_call(
        self,
        provider: str,
        model: str,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 2048,
        request_id: Optional[str] = None,
    ) -> Iterator[LLMCallEvent]:
        """Time a provider call; the caller fills in the response fields.

        Usage:
            with obs.llm_call(provider, model, messages) as event:
                response = await llm.complete(...)
                event.response_content = response.content
        """
        start = time.perf_counter()
        event = LLMCallEvent(
            event_type=EventType.LLM_CALL_START,
            provider=provider,
            model=model,
            messages=[
                {"role": m["role"], "content": self._truncate(m.get("content", ""))}
                for m in messages
            ],
            temperature=temperature,
            max_tokens=max_tokens,
            request_id=request_id or self.generate_request_id(),
        )
        try:
            yield event
            event.event_type = EventType.LLM_CALL_SUCCESS
            if event.response_content:
                event.response_content = self._truncate(event.response_content)
        except Exception as e:
            event.event_type = EventType.LLM_CALL_ERROR
            event.error_type = type(e).__name__
            event.error_message = str(e)[:200]
            raise
        finally:
            event.duration_ms = (time.perf_counter() - start) * 1000
            self._write_event(event, "llm")

    def log_llm_fallback(
        self,
        from_provider: str,
        to_provider: str,
        reason: str,
        request_id: Optional[str] = None,
    ) -> None:
        event = LLMCallEvent(
            event_type=EventType.LLM_FALLBACK,
            provider=to_provider,
            model="",
            is_fallback=True,
            fallback_reason=reason[:200],
            request_id=request_id,
            metadata={"from_provider": from_provider},
        )
        self._write_event(event, "llm")

    @contextmanager
    def flow_run(
        self,
        flow_name: str,
        input_type: Optional[str] = None,
        input_summary: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> Iterator[FlowEvent]:
        start = time.perf_counter()
        event = FlowEvent(
            event_type=EventType.FLOW_START,
            flow_name=flow_name,
            input_type=input_type,
            input_summary=self._truncate(input_summary) if input_summary else None,
            request_id=request_id or self.generate_request_id(),
        )
        try:
            yield event
            event.event_type = EventType.FLOW_SUCCESS
            if event.output_summary:
                event.output_summary = self._truncate(event.output_summary)
        except Exception as e:
            event.event_type = EventType.FLOW_ERROR
            event.error_type = type(e).__name__
            event.error_message = str(e)[:200]
            raise
        finally:
            event.duration_ms = (time.perf_counter() - start) * 1000
            self._write_event(event, "flows")

    def get_recent_events(self, log_type: str, limit: int = 100) -> list[dict[str, Any]]:
        log_file = self._log_files.get(log_type)
        if not log_file or not log_file.exists():
            return []

        events = []
        with open(log_file) as f:
            for line in f:
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
        return events[-limit:]

    def get_stats(self, log_type: str) -> dict[str, Any]:
        events = self.get_recent_events(log_type, limit=1000)
        if not events:
            return {"total": 0}

        total = len(events)
        errors = sum(1 for e in events if e.get("event_type", "").endswith("_error"))
        fallbacks = sum(1 for e in events if e.get("event_type") == EventType.LLM_FALLBACK.value)
        avg_duration = sum(e.get("duration_ms") or 0 for e in events) / total
        return {
            "total": total,
            "errors": errors,
            "fallbacks": fallbacks,
            "error_rate": errors / total,
            "avg_duration_ms": avg_duration,
        }


def get_observability_logger() -> ObservabilityLogger:
    return ObservabilityLogger.get_instance()
