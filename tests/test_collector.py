"""Tests for the span collector."""

import threading
import time

from jaegerlite.processors.collector import Collector, FinishedSpan
from jaegerlite.tracer.span import Span
from jaegerlite.tracer.span_context import SpanContext


def make_span(collector, sampled=True, debug=False, name="op-name"):
    context = SpanContext.create_parent_context()
    context.sampled = sampled
    context.debug = debug
    return Span(context, name, collector, start_time=100.0, tags={"k": "v"})


class TestSendSpan:
    """Test which finished spans the collector keeps."""

    def test_buffers_debug_spans(self, collector):
        """Debug spans are kept even when not sampled."""
        span = make_span(collector, sampled=False, debug=True)
        collector.send_span(span, time.time())
        assert collector.retrieve()

    def test_buffers_sampled_spans(self, collector):
        span = make_span(collector, sampled=True, debug=False)
        collector.send_span(span, time.time())
        assert collector.retrieve()

    def test_does_not_buffer_non_sampled_non_debug_spans(self, collector):
        """Spans that are neither sampled nor debug are dropped."""
        span = make_span(collector, sampled=False, debug=False)
        collector.send_span(span, time.time())
        assert collector.retrieve() == []

    def test_snapshot_fields(self, collector):
        span = make_span(collector)
        span.log_kv({"event": "cache-miss"}, timestamp=101.0)
        collector.send_span(span, 102.5)

        [finished] = collector.retrieve()
        assert isinstance(finished, FinishedSpan)
        assert finished.trace_id == span.context.trace_id
        assert finished.span_id == span.context.span_id
        assert finished.parent_id == 0
        assert finished.flags == span.context.flags
        assert finished.operation_name == "op-name"
        assert finished.start_time == 100.0
        assert finished.duration == 2.5
        assert finished.tags == {"k": "v"}
        assert finished.logs == ((101.0, {"event": "cache-miss"}),)

    def test_snapshot_is_detached_from_span(self, collector):
        """Mutating the span after finish does not change the snapshot."""
        span = make_span(collector)
        collector.send_span(span, 101.0)
        span.tags["late"] = True

        [finished] = collector.retrieve()
        assert "late" not in finished.tags


class TestRetrieve:
    """Test draining the collector buffer."""

    def test_retrieve_clears_buffer(self, collector):
        collector.send_span(make_span(collector), 101.0)
        assert len(collector) == 1
        assert len(collector.retrieve()) == 1
        assert len(collector) == 0
        assert collector.retrieve() == []

    def test_concurrent_drain_loses_and_duplicates_nothing(self):
        """Every span ends up in exactly one drain."""
        collector = Collector()
        writers = 8
        per_writer = 250
        drained = []
        done = threading.Event()

        def write():
            for _ in range(per_writer):
                collector.send_span(make_span(collector), 101.0)

        def drain():
            while not done.is_set():
                drained.extend(collector.retrieve())
            drained.extend(collector.retrieve())

        drainer = threading.Thread(target=drain)
        drainer.start()
        threads = [threading.Thread(target=write) for _ in range(writers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        done.set()
        drainer.join()

        span_ids = [span.span_id for span in drained]
        assert len(span_ids) == writers * per_writer
        assert len(set(span_ids)) == len(span_ids)
