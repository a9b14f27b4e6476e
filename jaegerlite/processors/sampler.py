"""Sampling decisions for traces.

The decision is made once, at the trace root, and stamped into the root
span context; children inherit it through the flag bits.
"""

from __future__ import annotations

import abc
import logging
import math
import threading
import time
from enum import Enum
from typing import Any, Callable, Dict, Optional

from jaegerlite.errors import ConfigurationError
from jaegerlite.tracer.trace_id import UPPER_BOUND

logger = logging.getLogger(__name__)


class SamplerType(str, Enum):
    CONST = "const"
    PROBABILISTIC = "probabilistic"
    RATELIMITING = "ratelimiting"


def sampler_tags(sampler_type: SamplerType, param: Any) -> Dict[str, Any]:
    return {"sampler.type": sampler_type.value, "sampler.param": param}


class Sampler(abc.ABC):
    """Base sampler deciding whether a new trace is kept."""

    sampler_type: SamplerType

    @staticmethod
    def build(type: str = SamplerType.CONST.value, param: Any = None) -> "Sampler":
        """
        Build a sampler from its configuration name and parameter.

        The names and params mirror the sampler options of other Jaeger
        clients, e.g. ``Sampler.build("probabilistic", 0.001)``.

        Args:
            type: One of ``const``, ``probabilistic`` or ``ratelimiting``
            param: Sampler specific parameter, ``None`` selects its default

        Raises:
            ConfigurationError: Unknown type or invalid parameter
        """
        name = type.value if isinstance(type, SamplerType) else str(type)
        try:
            sampler_type = SamplerType(name)
        except ValueError:
            raise ConfigurationError(
                f"Unknown sampler type '{name}'",
                {"known": ", ".join(t.value for t in SamplerType)},
            ) from None

        sampler_cls = _SAMPLERS[sampler_type]
        sampler = sampler_cls() if param is None else sampler_cls(param)
        logger.debug(f"Built sampler {sampler!r}")
        return sampler

    @property
    def name(self) -> str:
        """Canonical lower-case name of the strategy."""
        return self.sampler_type.value

    @property
    def tags(self) -> Dict[str, Any]:
        return dict(self._tags)

    @abc.abstractmethod
    def is_sampled(self, trace_id: int, operation_name: str) -> bool:
        """Return the sampling decision for a new trace."""
        raise NotImplementedError

    def close(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._tags['sampler.param']!r})"


class ConstSampler(Sampler):
    """Either always sample, or never."""

    sampler_type = SamplerType.CONST

    def __init__(self, decision: bool = True) -> None:
        self.decision = bool(decision)
        self._tags = sampler_tags(self.sampler_type, self.decision)

    def is_sampled(self, trace_id: int, operation_name: str) -> bool:
        return self.decision


class ProbabilisticSampler(Sampler):
    """
    Sample a portion of traces using the trace id as the random draw.

    The decision is a pure function of the trace id, so every process that
    uses the same rate agrees on it.
    """

    sampler_type = SamplerType.PROBABILISTIC

    def __init__(self, rate: float = 0.001) -> None:
        rate = _as_float(rate, "sampling rate")
        if not math.isfinite(rate) or not 0.0 <= rate <= 1.0:
            raise ConfigurationError(
                f"Sampling rate must be between 0.0 and 1.0, received {rate}",
                {"sampler.type": self.sampler_type.value},
            )
        self.rate = rate
        self.boundary = UPPER_BOUND * rate
        self._tags = sampler_tags(self.sampler_type, rate)

    def is_sampled(self, trace_id: int, operation_name: str) -> bool:
        return self.boundary >= trace_id


class RatelimitingSampler(Sampler):
    """
    Sample a configured amount of traces per second.

    Keeps a credit balance that grows proportionally to the time elapsed
    since the last decision and is capped at ``max(rate, 1.0)``. Every
    positive decision costs exactly one credit.
    """

    sampler_type = SamplerType.RATELIMITING

    def __init__(
        self,
        max_traces_per_second: float = 1.0,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        rate = _as_float(max_traces_per_second, "max traces per second")
        if not math.isfinite(rate) or rate < 0.0:
            raise ConfigurationError(
                f"Max traces per second must be a finite non-negative number, received {rate}",
                {"sampler.type": self.sampler_type.value},
            )
        self.max_traces_per_second = rate
        self._tags = sampler_tags(self.sampler_type, rate)
        self._clock = clock or time.time

        # Token bucket state
        self._balance = 1.0
        self._max_balance = max(rate, 1.0)
        self._last_tick = self._clock()
        self._lock = threading.Lock()

    @property
    def balance(self) -> float:
        with self._lock:
            return self._balance

    @property
    def last_tick(self) -> float:
        with self._lock:
            return self._last_tick

    def is_sampled(self, trace_id: int, operation_name: str) -> bool:
        with self._lock:
            self._refill_balance()
            if self._balance >= 1.0:
                self._balance -= 1.0
                return True
            return False

    def _refill_balance(self) -> None:
        """Credit the time elapsed since the last decision. Caller holds the lock."""
        now = self._clock()
        elapsed = now - self._last_tick
        self._balance = min(self._balance + elapsed * self.max_traces_per_second, self._max_balance)
        self._last_tick = now


def _as_float(value: Any, what: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid {what}", {"value": repr(value)}) from None


_SAMPLERS = {
    SamplerType.CONST: ConstSampler,
    SamplerType.PROBABILISTIC: ProbabilisticSampler,
    SamplerType.RATELIMITING: RatelimitingSampler,
}
