"""Batch encoding for the agent transport."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Sequence

from jaegerlite.processors.collector import FinishedSpan
from jaegerlite.utils.helpers import to_microseconds

# Largest payload the agent accepts in a single datagram.
UDP_PACKET_MAX_LENGTH = 65000

_MAX_STRING_LENGTH = 1024
_LONG_MIN = -(2**63)
_LONG_MAX = 2**63 - 1


@dataclass(frozen=True)
class Process:
    service_name: str
    tags: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Batch:
    process: Process
    spans: Sequence[FinishedSpan] = ()


class BatchEncoder(Protocol):
    def serialize(self, batch: Batch) -> bytes:
        ...


def build_tag(key: str, value: Any) -> Dict[str, Any]:
    """
    Convert a tag value to the agent's typed tag layout.

    Tag values must be bool, str, bytes, int or float; anything else is
    stringified and truncated.
    """
    if isinstance(value, bool):
        return {"key": key, "vType": "BOOL", "vBool": value}
    if isinstance(value, int) and _LONG_MIN <= value <= _LONG_MAX:
        return {"key": key, "vType": "LONG", "vLong": value}
    if isinstance(value, float):
        return {"key": key, "vType": "DOUBLE", "vDouble": value}
    if isinstance(value, (bytes, bytearray)):
        return {"key": key, "vType": "BINARY", "vBinary": bytes(value).hex()}
    return {"key": key, "vType": "STRING", "vStr": str(value)[:_MAX_STRING_LENGTH]}


def _split_trace_id(trace_id: int) -> Dict[str, int]:
    # Ids above 64 bits arrive only from remote 128-bit contexts.
    low = trace_id & 0xFFFFFFFFFFFFFFFF
    high = trace_id >> 64
    return {"traceIdLow": _signed(low), "traceIdHigh": _signed(high)}


def _signed(value: int) -> int:
    """Reinterpret an unsigned 64-bit id as the agent's signed i64."""
    return value - (1 << 64) if value > _LONG_MAX else value


class JsonBatchEncoder:
    """Encodes a batch as compact UTF-8 JSON using the agent's span layout."""

    def serialize(self, batch: Batch) -> bytes:
        payload = {
            "process": self.encode_process(batch.process),
            "spans": [self.encode_span(span) for span in batch.spans],
        }
        return json.dumps(payload, separators=(",", ":"), default=str).encode("utf-8")

    def encode_process(self, process: Process) -> Dict[str, Any]:
        return {
            "serviceName": process.service_name,
            "tags": [build_tag(k, v) for k, v in process.tags.items()],
        }

    def encode_span(self, span: FinishedSpan) -> Dict[str, Any]:
        encoded = _split_trace_id(span.trace_id)
        encoded.update({
            "spanId": _signed(span.span_id),
            "parentSpanId": _signed(span.parent_id),
            "operationName": span.operation_name,
            "flags": span.flags,
            "startTime": to_microseconds(span.start_time),
            "duration": to_microseconds(span.duration),
            "tags": [build_tag(k, v) for k, v in span.tags.items()],
            "logs": self._encode_logs(span),
        })
        return encoded

    def _encode_logs(self, span: FinishedSpan) -> List[Dict[str, Any]]:
        return [
            {
                "timestamp": to_microseconds(timestamp),
                "fields": [build_tag(k, v) for k, v in fields.items()],
            }
            for timestamp, fields in span.logs
        ]
