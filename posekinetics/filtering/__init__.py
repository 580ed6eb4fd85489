"""Temporal filtering of per-frame scalar channels.

- one_euro_filter: AdaptiveFilter (One Euro) and its FilterConfig
- channel_smoother: MultiChannelSmoother owning one filter per channel
"""

from .channel_smoother import MultiChannelSmoother, coordinate_channel, coordinate_channels
from .one_euro_filter import (
    AdaptiveFilter,
    FilterConfig,
    FilterState,
    low_pass,
    smoothing_factor,
)

__all__ = [
    "AdaptiveFilter",
    "FilterConfig",
    "FilterState",
    "MultiChannelSmoother",
    "coordinate_channel",
    "coordinate_channels",
    "low_pass",
    "smoothing_factor",
]
