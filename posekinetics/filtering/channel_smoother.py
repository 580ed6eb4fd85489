"""Named collection of adaptive filters, one per tracked scalar channel.

A channel is any scalar followed across frames: a derived joint angle
("lumbar_flexion") or one axis of one landmark ("left_hip.x"). The channel set
is fixed when the smoother is built; every value of a frame is filtered with
the same frame timestamp.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, Mapping, Optional, Union

from posekinetics.shared.constants import AXES, landmark_name

from .one_euro_filter import AdaptiveFilter, FilterConfig

logger = logging.getLogger(__name__)


def coordinate_channel(landmark: Union[str, int], axis: str) -> str:
    """Channel id for one axis of one landmark, e.g. ``left_hip.x``."""
    if axis not in AXES:
        raise ValueError(f"Unknown axis {axis!r}; expected one of {AXES}")
    return f"{landmark_name(landmark)}.{axis}"


def coordinate_channels(
    landmarks: Iterable[Union[str, int]],
    config: Optional[FilterConfig] = None,
    axes: Iterable[str] = AXES,
) -> Dict[str, FilterConfig]:
    """Build ``<landmark>.<axis>`` channels sharing one filter config."""
    config = config or FilterConfig()
    axes = tuple(axes)
    return {
        coordinate_channel(lm, axis): config
        for lm in landmarks
        for axis in axes
    }


class MultiChannelSmoother:
    """Route per-channel scalars through their own AdaptiveFilter.

    Filters are independent: no state is shared between channels, so the
    order in which channels are filtered within a frame does not matter.

    Args:
        channels: Mapping of channel id to the FilterConfig for that channel.
    """

    def __init__(self, channels: Mapping[str, FilterConfig]):
        if not channels:
            raise ValueError("MultiChannelSmoother needs at least one channel")
        self._filters: Dict[str, AdaptiveFilter] = {
            name: AdaptiveFilter(cfg) for name, cfg in channels.items()
        }

    @property
    def channels(self) -> tuple:
        return tuple(self._filters)

    def config_for(self, channel: str) -> FilterConfig:
        return self._get(channel).config

    def filter_for(self, channel: str) -> AdaptiveFilter:
        return self._get(channel)

    def filter(self, channel: str, value: float, timestamp_ms: Optional[float] = None) -> float:
        """Filter a single value on one channel."""
        return self._get(channel).filter(value, timestamp_ms)

    def filter_frame(
        self,
        values: Mapping[str, Optional[float]],
        timestamp_ms: Optional[float] = None,
    ) -> Dict[str, Optional[float]]:
        """Filter every value of one frame with a shared timestamp.

        Channels whose value is None are unavailable this frame: their filter
        is not touched and None is passed through.

        Raises:
            KeyError: If a channel id is not owned by this smoother.
        """
        unknown = [name for name in values if name not in self._filters]
        if unknown:
            raise KeyError(f"Unknown channel(s): {', '.join(sorted(unknown))}")

        out: Dict[str, Optional[float]] = {}
        for name, value in values.items():
            if value is None:
                out[name] = None
                continue
            out[name] = self._filters[name].filter(value, timestamp_ms)
        return out

    def reset(self, channel: str) -> None:
        self._get(channel).reset()

    def reset_all(self) -> None:
        """Reset every filter; call when a new capture session starts."""
        for f in self._filters.values():
            f.reset()
        logger.debug("Reset %d filter channels", len(self._filters))

    def _get(self, channel: str) -> AdaptiveFilter:
        try:
            return self._filters[channel]
        except KeyError:
            raise KeyError(f"Unknown channel: {channel!r}") from None

    def __contains__(self, channel: object) -> bool:
        return channel in self._filters

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self) -> Iterator[str]:
        return iter(self._filters)
