"""Tests for uber-trace-id injection and extraction."""

import logging

import pytest

from jaegerlite.context.carriers import Format, carrier_for, environ_key
from jaegerlite.context.propagators import (
    TRACE_ID_HEADER,
    UberTraceContextPropagator,
    format_uber_trace_id,
    get_span_context,
    parse_uber_trace_id,
    set_span_context,
)
from jaegerlite.tracer.span_context import SpanContext


class TestFormat:
    """Test formatting of the uber-trace-id header value."""

    def test_lower_case_hex_without_padding(self):
        context = SpanContext(trace_id=0x1A, span_id=0x1B, parent_id=0, flags=1)
        assert format_uber_trace_id(context) == "1a:1b:0:1"

    def test_field_order(self):
        context = SpanContext(trace_id=0xABCDEF, span_id=0x10, parent_id=0xFF, flags=3)
        assert format_uber_trace_id(context) == "abcdef:10:ff:3"


class TestParse:
    """Test parsing of the uber-trace-id header value."""

    def test_parses_four_fields(self):
        assert parse_uber_trace_id("1a:1b:0:1") == SpanContext(0x1A, 0x1B, 0, 1)

    @pytest.mark.parametrize(
        "value",
        [
            None,
            "",
            "1a:1b:0",
            "1a:1b:0:1:5",
            "0:1b:0:1",
            "1a:0:0:1",
            "xyz:1b:0:1",
            "1a:-1b:0:1",
            "1a::0:1",
        ],
    )
    def test_invalid_values_yield_no_context(self, value):
        """Malformed header values produce no context."""
        assert parse_uber_trace_id(value) is None

    def test_parses_byte_values(self):
        """Byte header values are decoded."""
        assert parse_uber_trace_id(b"1a:1b:0:1") == SpanContext(0x1A, 0x1B, 0, 1)

    @pytest.mark.parametrize("value", [5, 1.5, ["1a:1b:0:1"], object()])
    def test_non_string_values_yield_no_context(self, value):
        """Values of other types produce no context."""
        assert parse_uber_trace_id(value) is None

    def test_extracted_span_id_is_the_remote_span(self):
        context = parse_uber_trace_id("abc:def:123:1")
        assert context.span_id == 0xDEF
        assert context.parent_id == 0x123


class TestCarriers:
    """Test the text map and HTTP header carriers."""

    def test_environ_key(self):
        assert environ_key(TRACE_ID_HEADER) == "HTTP_UBER_TRACE_ID"

    def test_unsupported_format(self):
        assert carrier_for(Format.BINARY) is None
        assert carrier_for("no-such-format") is None

    def test_http_getter_reads_environ_key(self):
        getter, _ = carrier_for(Format.HTTP_HEADERS)
        assert getter.get({"HTTP_UBER_TRACE_ID": "1:2:0:1"}, TRACE_ID_HEADER) == ["1:2:0:1"]

    def test_text_map_getter_keeps_scalar_values_whole(self):
        getter, _ = carrier_for(Format.TEXT_MAP)
        assert getter.get({TRACE_ID_HEADER: b"1:2:0:1"}, TRACE_ID_HEADER) == [b"1:2:0:1"]
        assert getter.get({TRACE_ID_HEADER: "1:2:0:1"}, TRACE_ID_HEADER) == ["1:2:0:1"]
        assert getter.get({TRACE_ID_HEADER: ("1:2:0:1", "3:4:0:1")}, TRACE_ID_HEADER) == [
            "1:2:0:1",
            "3:4:0:1",
        ]
        assert getter.get({}, TRACE_ID_HEADER) is None

    def test_http_getter_falls_back_to_header_name(self):
        getter, _ = carrier_for(Format.HTTP_HEADERS)
        assert getter.get({"Uber-Trace-Id": "1:2:0:1"}, TRACE_ID_HEADER) == ["1:2:0:1"]
        assert getter.get({}, TRACE_ID_HEADER) is None


class TestPropagator:
    """Test the OpenTelemetry text map propagator."""

    def test_round_trip_through_otel_context(self):
        """A span context survives inject then extract."""
        propagator = UberTraceContextPropagator()
        context = SpanContext(trace_id=5, span_id=6, parent_id=7, flags=1)
        carrier = {}

        propagator.inject(carrier, context=set_span_context(context))
        assert carrier == {TRACE_ID_HEADER: "5:6:7:1"}
        assert get_span_context(propagator.extract(carrier)) == context

    def test_inject_without_context_is_noop(self):
        carrier = {}
        UberTraceContextPropagator().inject(carrier)
        assert carrier == {}

    def test_extract_invalid_header_leaves_context_empty(self):
        ctx = UberTraceContextPropagator().extract({TRACE_ID_HEADER: "0:1:0:1"})
        assert get_span_context(ctx) is None

    def test_fields(self):
        assert UberTraceContextPropagator().fields == {TRACE_ID_HEADER}


class TestTracerPropagation:
    """Test inject and extract through the tracer."""

    def test_text_map_round_trip(self, tracer):
        span = tracer.start_span("client")
        carrier = {}

        tracer.inject(span.context, Format.TEXT_MAP, carrier)
        extracted = tracer.extract(Format.TEXT_MAP, carrier)

        assert extracted.trace_id == span.context.trace_id
        assert extracted.span_id == span.context.span_id
        assert extracted.flags == span.context.flags

    def test_child_of_extracted_context(self, tracer):
        """A span started from a remote context joins its trace."""
        span = tracer.start_span("client")
        carrier = {}
        tracer.inject(span, Format.TEXT_MAP, carrier)

        child = tracer.start_span("server", child_of=tracer.extract(Format.TEXT_MAP, carrier))

        assert child.context.trace_id == span.context.trace_id
        assert child.context.parent_id == span.context.span_id
        assert child.context.flags == span.context.flags

    def test_debug_flag_survives_propagation(self, tracer):
        """The debug bit is carried in the flags field."""
        span = tracer.start_span("client")
        span.context.debug = True
        carrier = {}
        tracer.inject(span.context, Format.TEXT_MAP, carrier)
        assert tracer.extract(Format.TEXT_MAP, carrier).debug

    def test_http_headers_inject_and_extract(self, tracer):
        span = tracer.start_span("client")
        headers = {}
        tracer.inject(span.context, Format.HTTP_HEADERS, headers)
        assert TRACE_ID_HEADER in headers

        environ = {"HTTP_UBER_TRACE_ID": headers[TRACE_ID_HEADER]}
        extracted = tracer.extract(Format.HTTP_HEADERS, environ)
        assert extracted.span_id == span.context.span_id

    def test_extract_missing_header(self, tracer):
        assert tracer.extract(Format.TEXT_MAP, {}) is None
        assert tracer.extract(Format.TEXT_MAP, {TRACE_ID_HEADER: ""}) is None

    def test_extract_reads_text_map_values(self, tracer):
        carrier = {TRACE_ID_HEADER: "1a:1b:0:1"}
        assert tracer.extract(Format.TEXT_MAP, carrier) == SpanContext(0x1A, 0x1B, 0, 1)

    def test_extract_reads_byte_header_values(self, tracer):
        """ASGI style byte headers are decoded rather than iterated."""
        carrier = {TRACE_ID_HEADER: b"1a:1b:0:1"}
        assert tracer.extract(Format.TEXT_MAP, carrier) == SpanContext(0x1A, 0x1B, 0, 1)

    def test_extract_ignores_non_string_header_values(self, tracer):
        """Non-string header values produce no context."""
        assert tracer.extract(Format.TEXT_MAP, {TRACE_ID_HEADER: 42}) is None
        assert tracer.extract(Format.HTTP_HEADERS, {"HTTP_UBER_TRACE_ID": 42}) is None

    def test_unsupported_format_warns_on_inject(self, tracer, caplog):
        carrier = {}
        with caplog.at_level(logging.WARNING, logger="jaegerlite"):
            tracer.inject(tracer.start_span("op").context, Format.BINARY, carrier)
        assert carrier == {}
        assert "does not support" in caplog.text

    def test_unsupported_format_warns_on_extract(self, tracer, caplog):
        with caplog.at_level(logging.WARNING, logger="jaegerlite"):
            assert tracer.extract(Format.BINARY, {TRACE_ID_HEADER: "1:2:0:1"}) is None
        assert "does not support" in caplog.text
