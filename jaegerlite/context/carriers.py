"""Propagation formats and the carriers that back them."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from opentelemetry.propagators.textmap import (
    Getter,
    Setter,
    default_setter,
)


class Format(str, Enum):
    TEXT_MAP = "text_map"
    HTTP_HEADERS = "http_headers"
    BINARY = "binary"


class TextMapGetter(Getter[Mapping[str, Any]]):
    """
    Reads a plain mapping.

    A single ``str`` or ``bytes`` value is returned whole; other iterables
    are treated as repeated values.
    """

    def get(self, carrier: Mapping[str, Any], key: str) -> Optional[List[Any]]:
        value = carrier.get(key)
        if value is None:
            return None
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes, bytearray)):
            return list(value)
        return [value]

    def keys(self, carrier: Mapping[str, Any]) -> List[str]:
        return list(carrier.keys())


class HTTPHeadersGetter(Getter[Mapping[str, str]]):
    """
    Reads headers from a WSGI/Rack style environ.

    ``uber-trace-id`` is looked up as ``HTTP_UBER_TRACE_ID`` first, then as a
    plain header name ignoring case, so a raw header dict works too.
    """

    def get(self, carrier: Mapping[str, str], key: str) -> Optional[List[str]]:
        value = carrier.get(environ_key(key))
        if value is None:
            lowered = key.lower()
            for name, candidate in carrier.items():
                if name.lower() == lowered:
                    value = candidate
                    break
        if value is None:
            return None
        return [value]

    def keys(self, carrier: Mapping[str, str]) -> List[str]:
        return list(carrier.keys())


def environ_key(header: str) -> str:
    """Translate a header name to its CGI environ key."""
    return "HTTP_" + header.upper().replace("-", "_")


text_map_getter = TextMapGetter()
http_headers_getter = HTTPHeadersGetter()

_CARRIERS = {
    Format.TEXT_MAP: (text_map_getter, default_setter),
    # Outgoing requests carry the plain header name.
    Format.HTTP_HEADERS: (http_headers_getter, default_setter),
}


def carrier_for(format) -> Optional[Tuple[Getter, Setter]]:
    """Return the (getter, setter) pair for ``format`` or None if unsupported."""
    try:
        return _CARRIERS.get(Format(format))
    except ValueError:
        return None
