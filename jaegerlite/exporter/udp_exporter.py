"""UDP exporter draining the collector on a background worker."""

from __future__ import annotations

import logging
import socket
import threading
from typing import Any, Dict, Iterator, List, Optional

from opentelemetry.sdk.resources import SERVICE_NAME, OTELResourceDetector, Resource

from jaegerlite.errors import ExportError
from jaegerlite.exporter.encoder import (
    UDP_PACKET_MAX_LENGTH,
    Batch,
    BatchEncoder,
    JsonBatchEncoder,
    Process,
)
from jaegerlite.processors.collector import Collector, FinishedSpan
from jaegerlite.version import __version__

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6831
DEFAULT_FLUSH_INTERVAL = 10.0


class UdpExporter:
    """
    Exports collected spans to a local agent over UDP.

    One daemon worker wakes every ``flush_interval`` seconds, drains the
    collector and sends the spans in as few datagrams as the packet limit
    allows. Delivery is best-effort: spans that fail to encode or send are
    dropped and logged, never raised to the threads that finish spans.
    """

    def __init__(
        self,
        service_name: str,
        collector: Collector,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        flush_interval: float = DEFAULT_FLUSH_INTERVAL,
        encoder: Optional[BatchEncoder] = None,
        max_packet_size: int = UDP_PACKET_MAX_LENGTH,
        process_tags: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize UDP exporter.

        Args:
            service_name: Name reported as the process service name
            collector: Collector drained on every flush
            host: Agent host
            port: Agent UDP port
            flush_interval: Seconds between flushes
            encoder: Batch encoder, defaults to JsonBatchEncoder
            max_packet_size: Largest datagram payload in bytes
            process_tags: Extra process-level tags
        """
        self.collector = collector
        self.host = host
        self.port = port
        self.flush_interval = flush_interval
        self.encoder = encoder or JsonBatchEncoder()
        self.max_packet_size = max_packet_size
        self.process = self._build_process(service_name, process_tags)

        self._socket: Optional[socket.socket] = None
        self._worker: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._stop_complete = threading.Event()
        self._lifecycle_lock = threading.Lock()
        self._flush_lock = threading.Lock()
        self._stopped = False
        self._closed = False

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._stopped

    def start(self) -> None:
        """Open the socket and start the flush worker. Calling twice is a no-op."""
        with self._lifecycle_lock:
            if self._stopped:
                raise ExportError("Exporter has been stopped", {"host": self.host, "port": self.port})
            if self._worker is not None:
                return
            with self._flush_lock:
                self._ensure_socket()
            self._worker = threading.Thread(
                target=self._worker_loop,
                name="jaegerlite-udp-exporter",
                daemon=True,
            )
            self._worker.start()
        logger.debug(f"UDP exporter started for {self.host}:{self.port}")

    def stop(self) -> None:
        """Stop the worker, flush what is left and release the socket."""
        with self._lifecycle_lock:
            first = not self._stopped
            self._stopped = True
            self._stop_event.set()
            worker = self._worker

        on_worker = worker is not None and worker is threading.current_thread()
        if not first:
            # Another caller owns the shutdown; wait for its final flush.
            if not on_worker:
                self._stop_complete.wait()
            return

        if worker is not None and not on_worker:
            worker.join()

        with self._flush_lock:
            self._flush_locked()
            self._close_socket()
        self._stop_complete.set()
        logger.debug(f"UDP exporter for {self.host}:{self.port} stopped")

    def flush(self) -> int:
        """
        Run one flush cycle.

        Returns:
            Number of spans handed to the transport
        """
        with self._flush_lock:
            if self._closed:
                return 0
            return self._flush_locked()

    # Internal
    def _worker_loop(self) -> None:
        """Background worker that periodically flushes spans."""
        while not self._stop_event.wait(self.flush_interval):
            try:
                self.flush()
            except Exception:
                # The worker must survive anything a flush throws.
                logger.exception("Unexpected error while flushing spans")

    def _flush_locked(self) -> int:
        spans = self.collector.retrieve()
        if not spans:
            return 0

        self._ensure_socket()
        sent = 0
        for frame in self._frames(spans):
            sent += self._send_frame(frame)
        logger.debug(f"Flushed {sent}/{len(spans)} spans to {self.host}:{self.port}")
        return sent

    def _frames(self, spans: List[FinishedSpan]) -> Iterator[List[FinishedSpan]]:
        """
        Split spans into frames that fit the packet limit.

        Spans accumulate into a pending frame which is emitted as soon as the
        next span would push it over the limit.
        """
        try:
            empty_size = self._encoded_size([])
        except Exception:
            logger.exception(f"Failed to encode process metadata, dropping {len(spans)} spans")
            return

        pending: List[FinishedSpan] = []
        pending_size = empty_size
        for span in spans:
            try:
                # One extra byte per span covers the list separator.
                span_size = self._encoded_size([span]) - empty_size + 1
            except Exception:
                logger.exception(f"Failed to encode span '{span.operation_name}', dropping it")
                continue

            if empty_size + span_size - 1 > self.max_packet_size:
                logger.warning(
                    f"Span '{span.operation_name}' needs {empty_size + span_size - 1} bytes, "
                    f"more than the {self.max_packet_size} byte packet limit; dropping it"
                )
                continue

            if pending and pending_size + span_size > self.max_packet_size:
                yield pending
                pending, pending_size = [], empty_size
            pending.append(span)
            pending_size += span_size

        if pending:
            yield pending

    def _send_frame(self, frame: List[FinishedSpan]) -> int:
        try:
            payload = self.encoder.serialize(Batch(self.process, frame))
            if len(payload) > self.max_packet_size:
                raise ExportError(
                    "Encoded batch exceeds the packet limit",
                    {"size": len(payload), "max_packet_size": self.max_packet_size},
                )
            self._socket.sendto(payload, (self.host, self.port))
        except ExportError as e:
            logger.warning(f"Dropping {len(frame)} spans: {e}")
            return 0
        except OSError as e:
            logger.warning(f"Failed to send {len(frame)} spans to {self.host}:{self.port}: {e}")
            return 0
        except Exception:
            logger.exception(f"Failed to encode a batch of {len(frame)} spans")
            return 0
        return len(frame)

    def _encoded_size(self, spans: List[FinishedSpan]) -> int:
        return len(self.encoder.serialize(Batch(self.process, spans)))

    def _ensure_socket(self) -> None:
        """Ensure UDP socket is created."""
        if self._socket is None:
            self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def _close_socket(self) -> None:
        if self._socket is not None:
            try:
                self._socket.close()
            except OSError as e:
                logger.debug(f"Error closing UDP socket: {e}")
            self._socket = None
        self._closed = True

    @staticmethod
    def _build_process(service_name: str, process_tags: Optional[Dict[str, Any]]) -> Process:
        attributes = {
            SERVICE_NAME: service_name,
            "hostname": socket.gethostname(),
            "jaegerlite.version": __version__,
        }
        attributes.update(process_tags or {})
        # OTEL_RESOURCE_ATTRIBUTES from the environment contribute process tags too.
        resource = OTELResourceDetector().detect().merge(Resource(attributes))
        tags = {k: v for k, v in resource.attributes.items() if k != SERVICE_NAME}
        return Process(service_name=service_name, tags=tags)
