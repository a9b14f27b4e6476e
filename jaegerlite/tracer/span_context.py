"""Trace identity and sampling flags."""

from __future__ import annotations

from enum import IntFlag

from jaegerlite.tracer import trace_id as trace_ids
from jaegerlite.utils.helpers import format_id


class Flags(IntFlag):
    SAMPLED = 0x01
    DEBUG = 0x02


class SpanContext:
    """
    Identity of a span inside a trace plus its flag bitmask.

    The three ids are fixed at construction. ``flags`` is the only mutable
    state and is inherited unchanged by child contexts, so the sampling
    decision taken at the trace root reaches every descendant.
    """

    __slots__ = ("_trace_id", "_span_id", "_parent_id", "flags")

    def __init__(self, trace_id: int, span_id: int, parent_id: int = 0, flags: int = 0) -> None:
        self._trace_id = trace_id
        self._span_id = span_id
        self._parent_id = parent_id or 0
        self.flags = int(flags)

    @classmethod
    def create_parent_context(cls) -> "SpanContext":
        """Create the context of a new trace root."""
        return cls(
            trace_id=trace_ids.generate(),
            span_id=trace_ids.generate(),
            parent_id=0,
            flags=0,
        )

    @classmethod
    def create_from_parent_context(cls, parent: "SpanContext") -> "SpanContext":
        """Create a child context; ``parent`` may have been extracted from a carrier."""
        return cls(
            trace_id=parent.trace_id,
            span_id=trace_ids.generate(),
            parent_id=parent.span_id,
            flags=parent.flags,
        )

    @property
    def trace_id(self) -> int:
        return self._trace_id

    @property
    def span_id(self) -> int:
        return self._span_id

    @property
    def parent_id(self) -> int:
        return self._parent_id

    @property
    def sampled(self) -> bool:
        return bool(self.flags & Flags.SAMPLED)

    @sampled.setter
    def sampled(self, value: bool) -> None:
        self._set_flag(Flags.SAMPLED, value)

    @property
    def debug(self) -> bool:
        return bool(self.flags & Flags.DEBUG)

    @debug.setter
    def debug(self, value: bool) -> None:
        self._set_flag(Flags.DEBUG, value)

    def is_valid(self) -> bool:
        return bool(self._trace_id and self._span_id)

    def _set_flag(self, flag: Flags, value: bool) -> None:
        if value:
            self.flags = self.flags | int(flag)
        else:
            self.flags = self.flags & ~int(flag)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpanContext):
            return NotImplemented
        return (
            self._trace_id == other._trace_id
            and self._span_id == other._span_id
            and self._parent_id == other._parent_id
            and self.flags == other.flags
        )

    __hash__ = None  # flags are mutable

    def __repr__(self) -> str:
        return (
            f"SpanContext(trace_id={format_id(self._trace_id)}, "
            f"span_id={format_id(self._span_id)}, "
            f"parent_id={format_id(self._parent_id)}, flags={self.flags:#x})"
        )
