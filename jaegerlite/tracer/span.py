"""Span implementation."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from jaegerlite.context.context import pop_span, push_span
from jaegerlite.tracer.span_context import SpanContext

if TYPE_CHECKING:
    from jaegerlite.processors.collector import Collector


class Span:
    """
    One recorded unit of work.

    The call site that started the span owns it until ``finish()``; finishing
    hands a snapshot to the collector, after which further mutations are
    ignored.
    """

    def __init__(
        self,
        context: SpanContext,
        operation_name: str,
        collector: "Collector",
        start_time: Optional[float] = None,
        tags: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize span.

        Args:
            context: Resolved span context (ids and flags)
            operation_name: Name of the unit of work
            collector: Collector receiving the span on finish
            start_time: Start timestamp in seconds, defaults to now
            tags: Initial tags
        """
        self.context = context
        self.operation_name = operation_name
        self.start_time = time.time() if start_time is None else start_time
        self.end_time: Optional[float] = None
        self.tags: Dict[str, Any] = dict(tags or {})
        self.logs: List[Tuple[float, Dict[str, Any]]] = []

        self._collector = collector
        self._activation_token = None

    @property
    def finished(self) -> bool:
        return self.end_time is not None

    @property
    def duration(self) -> Optional[float]:
        """Span duration in seconds, ``None`` until finished."""
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    def set_operation_name(self, operation_name: str) -> "Span":
        if not self.finished:
            self.operation_name = operation_name
        return self

    def set_tag(self, key: str, value: Any) -> "Span":
        """Set a tag on the span."""
        if not self.finished:
            self.tags[key] = value
        return self

    def log_kv(self, fields: Dict[str, Any], timestamp: Optional[float] = None) -> "Span":
        """Record a timestamped set of key/value fields."""
        if not self.finished:
            self.logs.append((time.time() if timestamp is None else timestamp, dict(fields)))
        return self

    def finish(self, end_time: Optional[float] = None) -> None:
        """Finish the span and hand it to the collector. Only the first call counts."""
        if self.finished:
            return
        self.end_time = time.time() if end_time is None else end_time
        self._collector.send_span(self, self.end_time)

    # Context manager support
    def __enter__(self) -> "Span":
        self._activation_token = push_span(self)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc is not None:
                self._record_exception(exc)
            self.finish()
        finally:
            if self._activation_token is not None:
                pop_span(self._activation_token)
                self._activation_token = None
        return False

    def _record_exception(self, error: BaseException) -> None:
        self.set_tag("error", True)
        self.log_kv({
            "event": "error",
            "error.kind": type(error).__name__,
            "error.object": error,
            "message": str(error),
        })

    def __repr__(self) -> str:
        return f"Span({self.operation_name!r}, {self.context!r})"
