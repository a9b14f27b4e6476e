"""Shared fixtures for jaegerlite tests."""

import threading

import pytest

from jaegerlite.exporter.udp_exporter import UdpExporter
from jaegerlite.processors.collector import Collector
from jaegerlite.processors.sampler import ConstSampler
from jaegerlite.tracer.tracer import Tracer


class FakeClock:
    """Manually advanced clock for the rate limiting sampler."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSocket:
    """Records datagrams instead of sending them."""

    def __init__(self, error: Exception = None) -> None:
        self.error = error
        self.sent = []
        self.closed = False
        self._lock = threading.Lock()

    def sendto(self, payload, address):
        if self.error is not None:
            raise self.error
        with self._lock:
            self.sent.append((payload, address))
        return len(payload)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def collector():
    return Collector()


@pytest.fixture
def fake_socket():
    return FakeSocket()


@pytest.fixture
def exporter(collector, fake_socket):
    exporter = UdpExporter("test-service", collector, flush_interval=60.0)
    exporter._socket = fake_socket
    yield exporter
    exporter.stop()


@pytest.fixture
def tracer(collector, exporter):
    return Tracer(collector, exporter, ConstSampler(True))
