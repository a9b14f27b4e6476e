"""Context utilities for jaegerlite."""

from jaegerlite.context.context import get_current_span, pop_span, push_span
from jaegerlite.context.carriers import Format, HTTPHeadersGetter, TextMapGetter, carrier_for
from jaegerlite.context.propagators import (
    TRACE_ID_HEADER,
    UberTraceContextPropagator,
    format_uber_trace_id,
    get_span_context,
    parse_uber_trace_id,
    set_span_context,
)

__all__ = [
    "get_current_span",
    "push_span",
    "pop_span",
    "Format",
    "HTTPHeadersGetter",
    "TextMapGetter",
    "carrier_for",
    "TRACE_ID_HEADER",
    "UberTraceContextPropagator",
    "format_uber_trace_id",
    "parse_uber_trace_id",
    "get_span_context",
    "set_span_context",
]
