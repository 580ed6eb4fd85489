"""Typed pose containers consumed by the processing pipeline.

The pose detector itself is an external collaborator. Whatever it emits is
converted once into a PoseFrame: a fixed-shape (33, 3) coordinate array plus a
(33,) visibility array and the frame timestamp in milliseconds. Downstream code
looks landmarks up by LandmarkIndex, never by bare numbers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

import numpy as np

from posekinetics.shared.constants import NUM_LANDMARKS, LandmarkIndex, landmark_index


def _coerce(value: Any, default: float = math.nan) -> float:
    """Convert a coordinate to float; malformed values become NaN."""
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _field(source: Any, name: str, default: float = math.nan) -> float:
    if isinstance(source, Mapping):
        return _coerce(source.get(name), default)
    return _coerce(getattr(source, name, None), default)


@dataclass(frozen=True)
class Landmark:
    """A single tracked body-joint position.

    Attributes:
        x, y, z: Coordinates (normalized image units or meters).
        visibility: Detector confidence in [0, 1].
    """

    x: float
    y: float
    z: float = 0.0
    visibility: float = 1.0

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    @property
    def is_finite(self) -> bool:
        return bool(np.isfinite(self.as_array()).all())


@dataclass
class PoseFrame:
    """One detected pose for a single video frame.

    Attributes:
        coords: (33, 3) landmark coordinates. NaN marks an unusable value.
        visibility: (33,) per-landmark confidence scores in [0, 1].
        timestamp_ms: Frame timestamp in milliseconds.
    """

    coords: np.ndarray
    visibility: np.ndarray
    timestamp_ms: float

    def __post_init__(self):
        """Validate shapes and types."""
        self.coords = np.asarray(self.coords, dtype=float)
        self.visibility = np.asarray(self.visibility, dtype=float)
        self.timestamp_ms = float(self.timestamp_ms)

        if self.coords.shape != (NUM_LANDMARKS, 3):
            raise ValueError(
                f"coords shape mismatch: expected ({NUM_LANDMARKS}, 3), "
                f"got {self.coords.shape}"
            )

        if self.visibility.shape != (NUM_LANDMARKS,):
            raise ValueError(
                f"visibility shape mismatch: expected ({NUM_LANDMARKS},), "
                f"got {self.visibility.shape}"
            )

    @classmethod
    def from_landmarks(
        cls,
        landmarks: Iterable[Any],
        timestamp_ms: float,
    ) -> "PoseFrame":
        """Build a frame from 33 landmark-like records.

        Each record may be a Landmark, any object exposing ``x``/``y``/``z``/
        ``visibility`` attributes (e.g. MediaPipe NormalizedLandmark), or a
        mapping with the same keys. Missing ``z`` defaults to 0.0 and missing
        visibility to 1.0.

        Raises:
            ValueError: If the number of records is not 33.
        """
        records = list(landmarks)
        if len(records) != NUM_LANDMARKS:
            raise ValueError(
                f"Expected {NUM_LANDMARKS} landmarks per pose, got {len(records)}"
            )

        coords = np.empty((NUM_LANDMARKS, 3), dtype=float)
        visibility = np.empty(NUM_LANDMARKS, dtype=float)
        for i, rec in enumerate(records):
            if rec is None:
                coords[i] = np.nan
                visibility[i] = 0.0
                continue
            coords[i] = (
                _field(rec, "x"),
                _field(rec, "y"),
                _field(rec, "z", 0.0),
            )
            visibility[i] = _field(rec, "visibility", 1.0)

        return cls(coords=coords, visibility=visibility, timestamp_ms=timestamp_ms)

    @classmethod
    def from_array(
        cls,
        coords: np.ndarray,
        timestamp_ms: float,
        visibility: Optional[np.ndarray] = None,
    ) -> "PoseFrame":
        """Build a frame from a (33, 2) or (33, 3) array; 2-D input gets z = 0."""
        coords = np.asarray(coords, dtype=float)
        if coords.ndim == 2 and coords.shape[1] == 2:
            coords = np.concatenate([coords, np.zeros((coords.shape[0], 1))], axis=1)
        if visibility is None:
            visibility = np.ones(coords.shape[0], dtype=float)
        return cls(coords=coords, visibility=visibility, timestamp_ms=timestamp_ms)

    def position(self, key: Union[str, int]) -> np.ndarray:
        """(3,) coordinates of one landmark."""
        return self.coords[landmark_index(key)]

    def landmark(self, key: Union[str, int]) -> Landmark:
        idx = landmark_index(key)
        x, y, z = self.coords[idx]
        return Landmark(float(x), float(y), float(z), float(self.visibility[idx]))

    def is_visible(self, key: Union[str, int], min_visibility: float = 0.5) -> bool:
        """True when the landmark is finite and at least min_visibility confident."""
        idx = landmark_index(key)
        return bool(
            np.isfinite(self.coords[idx]).all() and self.visibility[idx] >= min_visibility
        )

    def is_finite(self, keys: Iterable[Union[str, int]]) -> bool:
        return all(np.isfinite(self.position(k)).all() for k in keys)

    def __len__(self) -> int:
        return NUM_LANDMARKS

    def __getitem__(self, key: Union[str, int, LandmarkIndex]) -> Landmark:
        return self.landmark(key)
