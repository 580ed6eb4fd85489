"""Shared constants for the posekinetics pipeline.

- constants: BlazePose landmark index table and default channel ids
"""

from .constants import (
    AXES,
    HIP_FLEXION_LEFT,
    HIP_FLEXION_RIGHT,
    LANDMARK_NAMES,
    LUMBAR_FLEXION,
    NUM_LANDMARKS,
    SPINAL_LANDMARKS,
    LandmarkIndex,
    landmark_index,
    landmark_name,
)

__all__ = [
    "AXES",
    "HIP_FLEXION_LEFT",
    "HIP_FLEXION_RIGHT",
    "LANDMARK_NAMES",
    "LUMBAR_FLEXION",
    "NUM_LANDMARKS",
    "SPINAL_LANDMARKS",
    "LandmarkIndex",
    "landmark_index",
    "landmark_name",
]
