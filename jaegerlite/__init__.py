"""jaegerlite: a sampling, uber-trace-id propagating tracer reporting to a local agent over UDP."""

from jaegerlite.version import __version__
from jaegerlite.tracer import Flags, Span, SpanContext, Tracer
from jaegerlite.context import Format, TRACE_ID_HEADER
from jaegerlite.processors import (
    Collector,
    ConstSampler,
    ProbabilisticSampler,
    RatelimitingSampler,
    Sampler,
    SamplerType,
)
from jaegerlite.exporter import JsonBatchEncoder, UdpExporter
from jaegerlite.errors import ConfigurationError, ExportError, JaegerliteError
from jaegerlite.builder import build, build_from_config

__all__ = [
    "__version__",
    "build",
    "build_from_config",
    "Tracer",
    "Span",
    "SpanContext",
    "Flags",
    "Format",
    "TRACE_ID_HEADER",
    "Collector",
    "Sampler",
    "SamplerType",
    "ConstSampler",
    "ProbabilisticSampler",
    "RatelimitingSampler",
    "UdpExporter",
    "JsonBatchEncoder",
    "JaegerliteError",
    "ConfigurationError",
    "ExportError",
]
