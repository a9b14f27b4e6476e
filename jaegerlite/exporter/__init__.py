"""Exporters for delivering spans to the agent."""

from jaegerlite.exporter.encoder import (
    UDP_PACKET_MAX_LENGTH,
    Batch,
    BatchEncoder,
    JsonBatchEncoder,
    Process,
)
from jaegerlite.exporter.udp_exporter import UdpExporter

__all__ = [
    "UdpExporter",
    "Batch",
    "BatchEncoder",
    "JsonBatchEncoder",
    "Process",
    "UDP_PACKET_MAX_LENGTH",
]
