"""Tracer facade tying sampling, span creation, propagation and export together."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

from jaegerlite.context.carriers import carrier_for
from jaegerlite.context.context import get_current_span
from jaegerlite.context.propagators import (
    UberTraceContextPropagator,
    get_span_context,
    set_span_context,
)
from jaegerlite.processors.collector import Collector
from jaegerlite.processors.sampler import ConstSampler, Sampler
from jaegerlite.tracer.span import Span
from jaegerlite.tracer.span_context import SpanContext

if TYPE_CHECKING:
    from jaegerlite.exporter.udp_exporter import UdpExporter

logger = logging.getLogger(__name__)


class Tracer:
    """
    Creates spans and moves their contexts across process boundaries.

    Sampling happens once per trace, when a root span is started; children
    and spans continuing a remote trace inherit the root's flags.
    """

    def __init__(
        self,
        collector: Collector,
        exporter: "UdpExporter",
        sampler: Optional[Sampler] = None,
    ) -> None:
        """
        Initialize tracer.

        Args:
            collector: Collector that receives finished spans
            exporter: Exporter draining the collector, stopped with the tracer
            sampler: Sampler for new traces, defaults to ConstSampler(True)
        """
        self.collector = collector
        self.exporter = exporter
        self.sampler = sampler or ConstSampler(True)
        self._propagator = UberTraceContextPropagator()

    def start_span(
        self,
        operation_name: str,
        child_of: Optional[Any] = None,
        start_time: Optional[float] = None,
        tags: Optional[Dict[str, Any]] = None,
    ) -> Span:
        """
        Start a new span.

        Args:
            operation_name: The operation name for the span
            child_of: SpanContext that acts as a parent to the new span. If a
                Span is provided, its context is used.
            start_time: When the span started, if not now
            tags: Tags to assign to the span at start time

        Returns:
            The newly-started Span
        """
        tags = dict(tags or {})
        if child_of is not None:
            parent_context = child_of.context if hasattr(child_of, "context") else child_of
            context = SpanContext.create_from_parent_context(parent_context)
        else:
            context = SpanContext.create_parent_context()
            if self.sampler.is_sampled(context.trace_id, operation_name):
                context.sampled = True
                tags.update(self.sampler.tags)

        return Span(context, operation_name, self.collector, start_time=start_time, tags=tags)

    def start_active_span(
        self,
        operation_name: str,
        child_of: Optional[Any] = None,
        start_time: Optional[float] = None,
        tags: Optional[Dict[str, Any]] = None,
        ignore_active_span: bool = False,
    ) -> Span:
        """
        Start a span parented to the active span, for use as a context manager.

        Example::

            with tracer.start_active_span("handle-request") as span:
                span.set_tag("http.method", "GET")
        """
        if child_of is None and not ignore_active_span:
            child_of = self.active_span
        return self.start_span(operation_name, child_of=child_of, start_time=start_time, tags=tags)

    @property
    def active_span(self) -> Optional[Span]:
        return get_current_span()

    def inject(self, span_context: Any, format: Any, carrier: Any) -> None:
        """
        Inject a SpanContext into the given carrier.

        Args:
            span_context: SpanContext (or Span) to propagate
            format: Format.TEXT_MAP or Format.HTTP_HEADERS
            carrier: Mutable mapping the header is written to
        """
        accessors = carrier_for(format)
        if accessors is None:
            logger.warning(f"jaegerlite does not support injecting format {format!r} yet")
            return
        _, setter = accessors

        if hasattr(span_context, "context"):
            span_context = span_context.context
        self._propagator.inject(carrier, context=set_span_context(span_context), setter=setter)

    def extract(self, format: Any, carrier: Any) -> Optional[SpanContext]:
        """
        Extract a SpanContext in the given format from the given carrier.

        Returns:
            The extracted SpanContext, or None if none could be found
        """
        accessors = carrier_for(format)
        if accessors is None:
            logger.warning(f"jaegerlite does not support extracting format {format!r} yet")
            return None
        getter, _ = accessors
        return get_span_context(self._propagator.extract(carrier, getter=getter))

    def stop(self) -> None:
        """Stop exporting; remaining spans get one last flush."""
        self.exporter.stop()
        self.sampler.close()

    def __enter__(self) -> "Tracer":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.stop()
        return False
