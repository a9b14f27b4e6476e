"""uber-trace-id context propagation using OpenTelemetry's text map propagator interface."""

from __future__ import annotations

import logging
from typing import Optional, Set, Union

from opentelemetry import context as context_api
from opentelemetry.context import Context
from opentelemetry.propagators.textmap import (
    CarrierT,
    Getter,
    Setter,
    TextMapPropagator,
    default_setter,
)

from jaegerlite.context.carriers import text_map_getter
from jaegerlite.tracer.span_context import SpanContext
from jaegerlite.utils.helpers import format_id, parse_id

logger = logging.getLogger(__name__)

TRACE_ID_HEADER = "uber-trace-id"

_SPAN_CONTEXT_KEY = context_api.create_key("jaegerlite-span-context")


def format_uber_trace_id(context: SpanContext) -> str:
    """
    Format the header value ``trace:span:parent:flags``.

    Every field is lower-case hex without zero padding.
    """
    return ":".join(
        format_id(value)
        for value in (context.trace_id, context.span_id, context.parent_id, context.flags)
    )


def parse_uber_trace_id(header_value: Optional[Union[str, bytes]]) -> Optional[SpanContext]:
    """
    Parse an ``uber-trace-id`` header into a SpanContext.

    Returns None for a missing or empty value, a field count other than
    four, a field that is not hex, or a zero trace or span id. The span id
    of the result is the remote span's id; start a child from it.
    Byte values are decoded as latin-1; any other type yields None.
    """
    if isinstance(header_value, (bytes, bytearray)):
        header_value = bytes(header_value).decode("latin-1")
    if not header_value or not isinstance(header_value, str):
        return None

    fields = header_value.split(":")
    if len(fields) != 4:
        return None

    try:
        trace_id, span_id, parent_id, flags = (parse_id(field.strip()) for field in fields)
    except ValueError:
        logger.debug(f"Ignoring malformed {TRACE_ID_HEADER} header '{header_value}'")
        return None

    if trace_id == 0 or span_id == 0:
        return None

    return SpanContext(trace_id=trace_id, span_id=span_id, parent_id=parent_id, flags=flags)


def set_span_context(span_context: SpanContext, context: Optional[Context] = None) -> Context:
    """Return a copy of ``context`` carrying ``span_context``."""
    return context_api.set_value(_SPAN_CONTEXT_KEY, span_context, context)


def get_span_context(context: Optional[Context] = None) -> Optional[SpanContext]:
    return context_api.get_value(_SPAN_CONTEXT_KEY, context)


class UberTraceContextPropagator(TextMapPropagator):
    """Propagator for the single-header ``uber-trace-id`` format."""

    def extract(
        self,
        carrier: CarrierT,
        context: Optional[Context] = None,
        getter: Getter[CarrierT] = text_map_getter,
    ) -> Context:
        if context is None:
            context = Context()

        values = getter.get(carrier, TRACE_ID_HEADER)
        span_context = parse_uber_trace_id(values[0] if values else None)
        if span_context is None:
            return context
        return set_span_context(span_context, context)

    def inject(
        self,
        carrier: CarrierT,
        context: Optional[Context] = None,
        setter: Setter[CarrierT] = default_setter,
    ) -> None:
        span_context = get_span_context(context)
        if span_context is None or not span_context.is_valid():
            return
        setter.set(carrier, TRACE_ID_HEADER, format_uber_trace_id(span_context))

    @property
    def fields(self) -> Set[str]:
        return {TRACE_ID_HEADER}
