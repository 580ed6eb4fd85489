"""Configuration for a frame-processing session.

The filter parameters, stability window and scale factor are empirical and tied
to the coordinate convention of the incoming landmarks (normalized 0-1 image
space by default). They live here rather than inside the algorithms so a
session can be tuned without code changes:

    config = ProcessorConfig.default().replace(window_size=45)
    config = ProcessorConfig.from_json(Path("session.json"))
"""

from __future__ import annotations

import dataclasses
import json
import numbers
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from posekinetics.filtering.one_euro_filter import FilterConfig
from posekinetics.shared.constants import (
    HIP_FLEXION_LEFT,
    HIP_FLEXION_RIGHT,
    LUMBAR_FLEXION,
    landmark_name,
)

# Angle channels the frame processor knows how to compute
ANGLE_CHANNELS: Tuple[str, ...] = (LUMBAR_FLEXION, HIP_FLEXION_LEFT, HIP_FLEXION_RIGHT)

_LANDMARK_FIELDS = (
    "coordinate_landmarks",
    "tracked_joints",
    "compensatory_joints",
    "steadiness_landmarks",
)


def _default_angle_channels() -> Mapping[str, FilterConfig]:
    return MappingProxyType(
        {
            LUMBAR_FLEXION: FilterConfig.trunk(),
            HIP_FLEXION_LEFT: FilterConfig.limb(),
            HIP_FLEXION_RIGHT: FilterConfig.limb(),
        }
    )


@dataclass(frozen=True)
class ProcessorConfig:
    """Settings for one FrameProcessor.

    Attributes:
        angle_channels: Angle channel id -> filter parameters. Any subset of
            ANGLE_CHANNELS; an empty mapping disables angle filtering. Stored
            as a read-only mapping.
        coordinate_landmarks: Landmarks whose x/y/z coordinates are also
            filtered as independent channels.
        coordinate_filter: Filter parameters shared by coordinate channels.
        tracked_joints: Landmarks whose positions are buffered for stability.
        window_size: Number of recent positions (and frames for the
            steadiness index) kept per session.
        stability_scale_factor: Score points lost per unit of joint travel.
        primary_joint: Joint expected to move (None disables the
            compensatory-movement score).
        compensatory_joints: Joints expected to stay still.
        steadiness_landmarks: Landmark group scored by the steadiness index
            (empty disables it).
        min_visibility: Minimum confidence for a landmark position to enter
            a stability history.
        round_decimals: Rounding applied to reported angles (None = raw).
    """

    angle_channels: Mapping[str, FilterConfig] = field(
        default_factory=_default_angle_channels, hash=False
    )
    coordinate_landmarks: Tuple[str, ...] = ()
    coordinate_filter: FilterConfig = field(default_factory=FilterConfig)
    tracked_joints: Tuple[str, ...] = (
        "left_shoulder",
        "right_shoulder",
        "left_hip",
        "right_hip",
        "left_knee",
        "right_knee",
    )
    window_size: int = 30
    stability_scale_factor: float = 1000.0
    primary_joint: Optional[str] = "left_hip"
    compensatory_joints: Tuple[str, ...] = ("left_shoulder", "right_shoulder", "right_hip")
    steadiness_landmarks: Tuple[str, ...] = (
        "left_hip",
        "right_hip",
        "left_shoulder",
        "right_shoulder",
    )
    min_visibility: float = 0.5
    round_decimals: Optional[int] = 2

    def __post_init__(self):
        """Validate values and canonicalize landmark names.

        Raises:
            ValueError: On any invalid value, including wrong types and
                unknown landmark names.
        """
        if not isinstance(self.angle_channels, Mapping):
            raise ValueError("angle_channels must be a mapping of channel id to FilterConfig")
        unknown = [name for name in self.angle_channels if name not in ANGLE_CHANNELS]
        if unknown:
            raise ValueError(
                f"Unknown angle channel(s) {unknown}; available: {list(ANGLE_CHANNELS)}"
            )
        for name, cfg in self.angle_channels.items():
            if not isinstance(cfg, FilterConfig):
                raise ValueError(f"angle_channels[{name!r}] must be a FilterConfig")
        if not isinstance(self.coordinate_filter, FilterConfig):
            raise ValueError("coordinate_filter must be a FilterConfig")

        object.__setattr__(self, "angle_channels", MappingProxyType(dict(self.angle_channels)))
        for name in _LANDMARK_FIELDS:
            object.__setattr__(self, name, _landmark_names(getattr(self, name), name))
        if self.primary_joint is not None:
            object.__setattr__(
                self, "primary_joint", _landmark_names([self.primary_joint], "primary_joint")[0]
            )

        if not _is_int(self.window_size) or self.window_size < 2:
            raise ValueError(f"window_size must be an integer >= 2, got {self.window_size!r}")
        if not _is_real(self.stability_scale_factor) or not self.stability_scale_factor > 0:
            raise ValueError(
                f"stability_scale_factor must be a positive number, got {self.stability_scale_factor!r}"
            )
        if not _is_real(self.min_visibility) or not 0.0 <= self.min_visibility <= 1.0:
            raise ValueError(f"min_visibility must be a number in [0, 1], got {self.min_visibility!r}")
        if self.round_decimals is not None and not _is_int(self.round_decimals):
            raise ValueError(f"round_decimals must be an integer or None, got {self.round_decimals!r}")

        if self.primary_joint is not None:
            missing = [
                j for j in (self.primary_joint, *self.compensatory_joints)
                if j not in self.tracked_joints
            ]
            if missing:
                raise ValueError(f"Joints {missing} must also be listed in tracked_joints")

    @classmethod
    def default(cls) -> "ProcessorConfig":
        """Trunk and bilateral hip angles, six tracked joints, 30-frame window."""
        return cls()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProcessorConfig":
        """Create a config from plain data (e.g. parsed JSON), overriding defaults.

        Filter parameters are given as mappings of FilterConfig field names.

        Raises:
            ValueError: On unknown keys or invalid values.
        """
        if not isinstance(data, Mapping):
            raise ValueError("Config data must be a mapping")
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config key(s): {', '.join(unknown)}")

        kwargs: Dict[str, Any] = dict(data)
        if "angle_channels" in kwargs:
            channels = kwargs["angle_channels"]
            if not isinstance(channels, Mapping):
                raise ValueError("angle_channels must be a mapping of channel id to filter parameters")
            kwargs["angle_channels"] = {
                name: _filter_config(params, f"angle_channels.{name}")
                for name, params in channels.items()
            }
        if "coordinate_filter" in kwargs:
            kwargs["coordinate_filter"] = _filter_config(kwargs["coordinate_filter"], "coordinate_filter")
        return cls(**kwargs)

    @classmethod
    def from_json(cls, path: Path) -> "ProcessorConfig":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a JSON object: {path}")
        return cls.from_mapping(data)

    def replace(self, **changes: Any) -> "ProcessorConfig":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form accepted by from_mapping."""
        data = {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}
        data["angle_channels"] = {
            name: dataclasses.asdict(cfg) for name, cfg in self.angle_channels.items()
        }
        data["coordinate_filter"] = dataclasses.asdict(self.coordinate_filter)
        return data


def _is_int(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_real(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _landmark_names(values: Iterable[Union[str, int]], label: str) -> Tuple[str, ...]:
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise ValueError(f"{label} must be a list of landmark names or indices")
    try:
        return tuple(landmark_name(lm) for lm in values)
    except (KeyError, ValueError, TypeError) as e:
        raise ValueError(f"Invalid landmark in {label}: {e}") from e


def _filter_config(params: Any, label: str) -> FilterConfig:
    if isinstance(params, FilterConfig):
        return params
    if not isinstance(params, Mapping):
        raise ValueError(f"{label} must be a mapping of filter parameters")
    try:
        return FilterConfig(**params)
    except TypeError as e:
        raise ValueError(f"Invalid filter parameters for {label}: {e}") from e
