"""Thread-safe holding buffer for finished spans awaiting export."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from jaegerlite.tracer.span import Span

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinishedSpan:
    """Snapshot of a span taken when it is handed to the collector."""

    trace_id: int
    span_id: int
    parent_id: int
    flags: int
    operation_name: str
    start_time: float
    duration: float
    tags: Dict[str, Any] = field(default_factory=dict)
    logs: Tuple[Tuple[float, Dict[str, Any]], ...] = ()


class Collector:
    """
    Buffer shared by every thread that finishes spans and the export worker.

    ``send_span`` appends and ``retrieve`` drains under the same lock, so a
    span is either in the current drain or in the next one, never both.
    """

    def __init__(self) -> None:
        self._buffer: List[FinishedSpan] = []
        self._lock = threading.Lock()

    def send_span(self, span: "Span", timestamp: float) -> None:
        """Buffer ``span`` if its trace is sampled or it is marked debug."""
        context = span.context
        if not (context.sampled or context.debug):
            logger.debug(f"Discarding unsampled span '{span.operation_name}'")
            return

        finished = FinishedSpan(
            trace_id=context.trace_id,
            span_id=context.span_id,
            parent_id=context.parent_id,
            flags=context.flags,
            operation_name=span.operation_name,
            start_time=span.start_time,
            duration=max(timestamp - span.start_time, 0.0),
            tags=dict(span.tags),
            logs=tuple((ts, dict(fields)) for ts, fields in span.logs),
        )
        with self._lock:
            self._buffer.append(finished)

    def retrieve(self) -> List[FinishedSpan]:
        """Return every buffered span and clear the buffer."""
        with self._lock:
            spans, self._buffer = self._buffer, []
        return spans

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)
