"""Adaptive low-pass (One Euro) filter for a single scalar channel.

Each sample:

1. estimates the signal velocity from the previous filtered value,
2. smooths that velocity with a fixed-cutoff low-pass,
3. sets the cutoff to ``min_cutoff_hz + beta * |velocity|``,
4. low-passes the sample with that adaptive cutoff.

The low-pass primitive weights the new sample with
``alpha = 1 / (1 + 2*pi*cutoff*dt)``, which stays in (0, 1] for positive
cutoff and dt. The cutoff is not clamped.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


def smoothing_factor(cutoff_hz: float, dt_s: float) -> float:
    """Blend weight for the newest sample, in (0, 1] for positive inputs."""
    return 1.0 / (1.0 + 2.0 * math.pi * cutoff_hz * dt_s)


def low_pass(x: float, previous: float, cutoff_hz: float, dt_s: float) -> float:
    """Exponential smoothing of ``x`` toward ``previous``.

    Args:
        x: New sample.
        previous: Previous output of the same low-pass stage.
        cutoff_hz: Cutoff frequency in Hz (> 0).
        dt_s: Elapsed time since the previous sample in seconds (> 0).

    Returns:
        ``alpha * x + (1 - alpha) * previous``
    """
    alpha = smoothing_factor(cutoff_hz, dt_s)
    return alpha * x + (1.0 - alpha) * previous


def _as_float(value: Any) -> Optional[float]:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


@dataclass(frozen=True)
class FilterConfig:
    """Parameters of one adaptive filter.

    Attributes:
        sampling_frequency_hz: Nominal frame rate. Only used to advance the
            filter clock when a sample arrives without a timestamp.
        min_cutoff_hz: Cutoff used when the signal is still.
        beta: Speed coefficient mapping |velocity| onto the cutoff.
        derivative_cutoff_hz: Fixed cutoff for the velocity estimate.
    """

    sampling_frequency_hz: float = 30.0
    min_cutoff_hz: float = 1.0
    beta: float = 0.007
    derivative_cutoff_hz: float = 1.0

    def __post_init__(self):
        for name in ("sampling_frequency_hz", "min_cutoff_hz", "derivative_cutoff_hz"):
            value = getattr(self, name)
            if not (isinstance(value, (int, float)) and math.isfinite(value) and value > 0):
                raise ValueError(f"{name} must be a positive finite number, got {value!r}")
        if not (isinstance(self.beta, (int, float)) and math.isfinite(self.beta) and self.beta >= 0):
            raise ValueError(f"beta must be a non-negative finite number, got {self.beta!r}")

    @classmethod
    def trunk(cls) -> "FilterConfig":
        """Preset for trunk (lumbar) angles."""
        return cls(sampling_frequency_hz=30.0, min_cutoff_hz=1.0, beta=0.01, derivative_cutoff_hz=1.0)

    @classmethod
    def limb(cls) -> "FilterConfig":
        """Preset for hip and limb angles."""
        return cls(sampling_frequency_hz=30.0, min_cutoff_hz=1.2, beta=0.015, derivative_cutoff_hz=1.0)

    @property
    def frame_interval_ms(self) -> float:
        return 1000.0 / self.sampling_frequency_hz


@dataclass
class FilterState:
    """Mutable state owned by exactly one AdaptiveFilter."""

    previous_value: float = 0.0
    previous_derivative: float = 0.0
    previous_timestamp_ms: float = 0.0
    initialized: bool = False


class AdaptiveFilter:
    """One Euro filter for one scalar channel.

    ``filter()`` never raises. The first accepted sample is returned unchanged.
    A sample whose timestamp does not advance (``dt <= 0``) or whose value is
    not finite is rejected: the previous output is returned and the state is
    left untouched.

    Example:
        >>> f = AdaptiveFilter(FilterConfig(min_cutoff_hz=1.0, beta=0.0))
        >>> f.filter(10.0, 0.0)
        10.0
    """

    def __init__(self, config: Optional[FilterConfig] = None):
        self._config = config or FilterConfig()
        self._state = FilterState()

    @property
    def config(self) -> FilterConfig:
        return self._config

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def initialized(self) -> bool:
        return self._state.initialized

    @property
    def last_value(self) -> Optional[float]:
        """Most recent output, or None before the first accepted sample."""
        return self._state.previous_value if self._state.initialized else None

    def filter(self, value: float, timestamp_ms: Optional[float] = None) -> float:
        """Filter one sample.

        Args:
            value: Raw measurement.
            timestamp_ms: Sample time in milliseconds. When omitted, the
                previous timestamp is advanced by one nominal frame interval.

        Returns:
            Filtered value. An unusable sample on a fresh filter gives NaN.
        """
        state = self._state
        x = _as_float(value)

        if timestamp_ms is None:
            t = (
                state.previous_timestamp_ms + self._config.frame_interval_ms
                if state.initialized
                else 0.0
            )
        else:
            t = _as_float(timestamp_ms)

        if x is None or t is None:
            if state.initialized:
                logger.debug("Rejected non-finite sample value=%r t=%r", value, timestamp_ms)
                return state.previous_value
            # nothing to fall back on yet; NaN is never stored as state
            return x if x is not None else math.nan

        if not state.initialized:
            state.previous_value = x
            state.previous_derivative = 0.0
            state.previous_timestamp_ms = t
            state.initialized = True
            return x

        dt = (t - state.previous_timestamp_ms) / 1000.0
        if dt <= 0:
            logger.debug(
                "Rejected sample with non-positive dt (t=%.3f ms, previous=%.3f ms)",
                t,
                state.previous_timestamp_ms,
            )
            return state.previous_value

        raw_derivative = (x - state.previous_value) / dt
        derivative = low_pass(
            raw_derivative,
            state.previous_derivative,
            self._config.derivative_cutoff_hz,
            dt,
        )

        cutoff = self._config.min_cutoff_hz + self._config.beta * abs(derivative)
        filtered = low_pass(x, state.previous_value, cutoff, dt)

        state.previous_value = filtered
        state.previous_derivative = derivative
        state.previous_timestamp_ms = t
        return filtered

    def reset(self) -> None:
        """Return to the uninitialized state; the next sample passes through."""
        self._state = FilterState()

    def __repr__(self) -> str:
        return f"AdaptiveFilter({self._config!r}, initialized={self._state.initialized})"
