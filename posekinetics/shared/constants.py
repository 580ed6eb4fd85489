"""Shared constants for the BlazePose 33-landmark skeleton.

The pose detector emits landmarks in a fixed index order. All lookups go
through LandmarkIndex so that no module depends on bare numeric indices.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Tuple, Union

NUM_LANDMARKS = 33


class LandmarkIndex(IntEnum):
    """BlazePose landmark indices (MediaPipe Pose Landmarker order)."""

    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


# Lower-case names in index order ("left_shoulder", ...)
LANDMARK_NAMES: Tuple[str, ...] = tuple(lm.name.lower() for lm in LandmarkIndex)

# Landmarks required for trunk and hip angles
SPINAL_LANDMARKS: Tuple[LandmarkIndex, ...] = (
    LandmarkIndex.LEFT_SHOULDER,
    LandmarkIndex.RIGHT_SHOULDER,
    LandmarkIndex.LEFT_HIP,
    LandmarkIndex.RIGHT_HIP,
    LandmarkIndex.LEFT_KNEE,
    LandmarkIndex.RIGHT_KNEE,
)

# Default angle channel ids produced by kinematics.spinal_angles
LUMBAR_FLEXION = "lumbar_flexion"
HIP_FLEXION_LEFT = "hip_flexion_left"
HIP_FLEXION_RIGHT = "hip_flexion_right"

AXES = ("x", "y", "z")


def landmark_index(key: Union[str, int]) -> LandmarkIndex:
    """Resolve a landmark name or numeric index to a LandmarkIndex.

    Args:
        key: Name such as "left_hip" / "LEFT_HIP", or an int in [0, 32].

    Returns:
        Matching LandmarkIndex.

    Raises:
        KeyError: Unknown landmark name.
        ValueError: Index out of range.
    """
    if isinstance(key, LandmarkIndex):
        return key
    if isinstance(key, str):
        try:
            return LandmarkIndex[key.strip().upper()]
        except KeyError:
            raise KeyError(f"Unknown landmark name: {key!r}") from None
    return LandmarkIndex(int(key))


def landmark_name(key: Union[str, int]) -> str:
    """Canonical lower-case name for a landmark."""
    return LANDMARK_NAMES[landmark_index(key)]
