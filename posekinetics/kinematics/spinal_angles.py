"""Trunk and hip angles from a single BlazePose frame.

Angle conventions:
- Lumbar flexion: trunk inclination from vertical at the hip midpoint.
  0° = upright, positive = forward flexion.
- Hip flexion: 180° minus the shoulder-hip-knee angle on one side.
  0° = neutral standing, 90° = thigh perpendicular to trunk.

Landmark y grows downward (image and MediaPipe world coordinates), so a
point "above" a landmark has a smaller y.
"""

from __future__ import annotations

import logging
from typing import Dict, Literal, Optional

import numpy as np

from posekinetics.posedetector.base import PoseFrame
from posekinetics.shared.constants import (
    HIP_FLEXION_LEFT,
    HIP_FLEXION_RIGHT,
    LUMBAR_FLEXION,
    SPINAL_LANDMARKS,
    LandmarkIndex,
)

from .angle_processing import angle_degrees, clamp, midpoint

logger = logging.getLogger(__name__)

Side = Literal["left", "right"]

_HIP_CHAIN = {
    "left": (LandmarkIndex.LEFT_SHOULDER, LandmarkIndex.LEFT_HIP, LandmarkIndex.LEFT_KNEE),
    "right": (LandmarkIndex.RIGHT_SHOULDER, LandmarkIndex.RIGHT_HIP, LandmarkIndex.RIGHT_KNEE),
}


def is_valid_pose(frame: PoseFrame) -> bool:
    """True when shoulders, hips and knees all have finite coordinates."""
    return frame.is_finite(SPINAL_LANDMARKS)


def lumbar_flexion(frame: PoseFrame, vertical_offset: float = 0.1) -> Optional[float]:
    """Forward trunk inclination in degrees.

    Args:
        frame: Pose frame.
        vertical_offset: Distance above the hip midpoint used to build the
            vertical reference (any positive value gives the same angle).

    Returns:
        Angle in [0, 180], or None if the trunk landmarks are unusable.
    """
    shoulder_mid = midpoint(
        frame.position(LandmarkIndex.LEFT_SHOULDER),
        frame.position(LandmarkIndex.RIGHT_SHOULDER),
    )
    hip_mid = midpoint(
        frame.position(LandmarkIndex.LEFT_HIP),
        frame.position(LandmarkIndex.RIGHT_HIP),
    )
    if shoulder_mid is None or hip_mid is None:
        return None

    vertical_ref = hip_mid - np.array([0.0, vertical_offset, 0.0])
    return angle_degrees(vertical_ref, hip_mid, shoulder_mid)


def hip_flexion(frame: PoseFrame, side: Side) -> Optional[float]:
    """Hip flexion on one side in degrees, clamped to [0, 180]."""
    if side not in _HIP_CHAIN:
        raise ValueError(f"side must be 'left' or 'right', got {side!r}")
    shoulder, hip, knee = _HIP_CHAIN[side]

    inner = angle_degrees(frame.position(shoulder), frame.position(hip), frame.position(knee))
    if inner is None:
        return None
    return clamp(180.0 - inner, 0.0, 180.0)


def average_hip_flexion(left: Optional[float], right: Optional[float]) -> Optional[float]:
    """Bilateral hip flexion, averaging whichever sides are available."""
    values = [v for v in (left, right) if v is not None]
    if not values:
        return None
    return round(sum(values) / len(values), 2)


def compute_spinal_angles(frame: PoseFrame) -> Dict[str, Optional[float]]:
    """Raw (unfiltered) angles keyed by channel id."""
    angles = {
        LUMBAR_FLEXION: lumbar_flexion(frame),
        HIP_FLEXION_LEFT: hip_flexion(frame, "left"),
        HIP_FLEXION_RIGHT: hip_flexion(frame, "right"),
    }
    if all(v is None for v in angles.values()):
        logger.debug("No spinal angle available at t=%.1f ms", frame.timestamp_ms)
    return angles
