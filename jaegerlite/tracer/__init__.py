"""Tracer components for jaegerlite."""

from jaegerlite.tracer.span_context import Flags, SpanContext
from jaegerlite.tracer.span import Span
from jaegerlite.tracer.tracer import Tracer

__all__ = [
    "Flags",
    "Span",
    "SpanContext",
    "Tracer",
]
