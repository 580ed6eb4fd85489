"""Pose containers shared by every stage of the pipeline.

Pose detection itself happens upstream; this package only defines the typed
records the detector output is converted into.

Example:
    >>> from posekinetics.posedetector import PoseFrame
    >>> frame = PoseFrame.from_landmarks(result.pose_world_landmarks[0], timestamp_ms=33.0)
    >>> frame.position("left_hip")
"""

from .base import Landmark, PoseFrame

__all__ = [
    "Landmark",
    "PoseFrame",
]
