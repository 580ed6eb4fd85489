"""Movement-stability metrics from short joint-position histories.

A joint's stability score is ``max(0, 100 - total_variation * scale_factor)``
where total variation is the summed distance between consecutive positions.
A perfectly still joint scores 100. The scale factor depends on the coordinate
units; 1000 suits normalized 0-1 landmark coordinates.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Iterable, Sequence, Union

import numpy as np

from posekinetics.posedetector.base import PoseFrame
from posekinetics.shared.constants import landmark_index

from .angle_processing import as_point

DEFAULT_SCALE_FACTOR = 1000.0
DEFAULT_WINDOW_SIZE = 30


def _as_trajectory(history: Any) -> np.ndarray:
    """Stack a position history into an (N, D) array, dropping unusable points."""
    if isinstance(history, np.ndarray) and history.ndim == 2:
        arr = np.asarray(history, dtype=float)
        return arr[np.isfinite(arr).all(axis=1)]

    points = [p for p in (as_point(h) for h in history) if p is not None]
    if not points:
        return np.empty((0, 3))
    dims = {p.shape[0] for p in points}
    if len(dims) > 1:
        points = [_to_3d(p) for p in points]
    return np.vstack(points)


def _to_3d(p: np.ndarray) -> np.ndarray:
    return p if p.shape[0] == 3 else np.append(p, 0.0)


def total_variation(history: Any) -> float:
    """Sum of consecutive pairwise distances along a trajectory."""
    traj = _as_trajectory(history)
    if len(traj) < 2:
        return 0.0
    return _path_length(traj)


def _path_length(traj: np.ndarray) -> float:
    return float(np.linalg.norm(np.diff(traj, axis=0), axis=1).sum())


def movement_stability(history: Any, scale_factor: float = DEFAULT_SCALE_FACTOR) -> float:
    """Stability score of one joint's recent trajectory.

    Args:
        history: Ordered positions (point-likes or an (N, D) array).
        scale_factor: Score points lost per unit of travelled distance.

    Returns:
        Score in [0, 100]; 0 when fewer than two usable positions exist.
    """
    traj = _as_trajectory(history)
    if len(traj) < 2:
        return 0.0
    return max(0.0, 100.0 - _path_length(traj) * scale_factor)


def compensatory_movement(
    primary_history: Any,
    compensatory_histories: Sequence[Any],
    scale_factor: float = DEFAULT_SCALE_FACTOR,
) -> float:
    """How much more stable the primary joint is than its compensators.

    A large positive value means motion is being displaced to the
    compensating joints instead of happening at the primary joint.
    Compensating joints with too little history count as stability 0.

    Returns:
        ``max(0, primary_stability - mean(compensatory_stability))``; 0 when
        the compensatory set is empty.
    """
    if len(compensatory_histories) == 0:
        return 0.0

    primary = movement_stability(primary_history, scale_factor)
    scores = [movement_stability(h, scale_factor) for h in compensatory_histories]
    average = sum(scores) / len(scores)
    return max(0.0, primary - average)


class JointHistoryBuffer:
    """Bounded FIFO of recent 3-D positions for one joint."""

    def __init__(self, window_size: int = DEFAULT_WINDOW_SIZE):
        if window_size < 2:
            raise ValueError(f"window_size must be >= 2, got {window_size}")
        self.window_size = int(window_size)
        self._positions: deque = deque(maxlen=self.window_size)

    def append(self, position: Any) -> bool:
        """Add a position; malformed or non-finite positions are ignored.

        Returns:
            True if the position was stored.
        """
        point = as_point(position)
        if point is None:
            return False
        self._positions.append(_to_3d(point))
        return True

    def positions(self) -> np.ndarray:
        """(N, 3) array, oldest first."""
        if not self._positions:
            return np.empty((0, 3))
        return np.vstack(self._positions)

    def stability(self, scale_factor: float = DEFAULT_SCALE_FACTOR) -> float:
        return movement_stability(self.positions(), scale_factor)

    def clear(self) -> None:
        self._positions.clear()

    @property
    def is_full(self) -> bool:
        return len(self._positions) == self.window_size

    def __len__(self) -> int:
        return len(self._positions)


@dataclass(frozen=True)
class SteadinessMetrics:
    """Multi-landmark steadiness over a frame history.

    Attributes:
        steadiness_index: ``max(0, 100 - average_movement * scale_factor)``.
        average_movement: Mean per-frame movement across usable landmarks.
        max_deviation: Largest single-landmark frame-to-frame movement.
    """

    steadiness_index: float
    average_movement: float
    max_deviation: float


def steadiness_metrics(
    frames: Sequence[PoseFrame],
    landmarks: Iterable[Union[str, int]],
    min_visibility: float = 0.5,
    scale_factor: float = DEFAULT_SCALE_FACTOR,
) -> SteadinessMetrics:
    """Frame-to-frame steadiness of a landmark group.

    A landmark contributes to a frame pair only when it is finite and more
    than ``min_visibility`` confident in both frames. With fewer than two
    frames the neutral index 50 is reported.
    """
    frames = list(frames)
    if len(frames) < 2:
        return SteadinessMetrics(steadiness_index=50.0, average_movement=0.0, max_deviation=0.0)

    indices = [landmark_index(lm) for lm in landmarks]
    total_movement = 0.0
    max_deviation = 0.0
    valid_frames = 0

    for prev, curr in zip(frames[:-1], frames[1:]):
        movements = []
        for idx in indices:
            if prev.visibility[idx] <= min_visibility or curr.visibility[idx] <= min_visibility:
                continue
            step = curr.coords[idx] - prev.coords[idx]
            if not np.isfinite(step).all():
                continue
            movements.append(float(np.linalg.norm(step)))

        if movements:
            total_movement += sum(movements) / len(movements)
            max_deviation = max(max_deviation, max(movements))
            valid_frames += 1

    average = total_movement / valid_frames if valid_frames else 0.0
    return SteadinessMetrics(
        steadiness_index=max(0.0, 100.0 - average * scale_factor),
        average_movement=average,
        max_deviation=max_deviation,
    )

