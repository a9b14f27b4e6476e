"""Sampling and span buffering."""

from jaegerlite.processors.collector import Collector, FinishedSpan
from jaegerlite.processors.sampler import (
    ConstSampler,
    ProbabilisticSampler,
    RatelimitingSampler,
    Sampler,
    SamplerType,
)

__all__ = [
    "Collector",
    "FinishedSpan",
    "Sampler",
    "SamplerType",
    "ConstSampler",
    "ProbabilisticSampler",
    "RatelimitingSampler",
]
