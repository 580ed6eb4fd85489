"""Smoothed joint angles and movement stability from pose landmark streams.

Typical use:

    >>> from posekinetics import FrameProcessor, PoseFrame
    >>> processor = FrameProcessor()
    >>> result = processor.process(PoseFrame.from_landmarks(landmarks, timestamp_ms=t))
    >>> result.smoothed_angles["lumbar_flexion"]
"""

from posekinetics.config.processor_config import ProcessorConfig
from posekinetics.filtering.channel_smoother import MultiChannelSmoother
from posekinetics.filtering.one_euro_filter import AdaptiveFilter, FilterConfig
from posekinetics.kinematics.angle_processing import angle_degrees
from posekinetics.kinematics.stability import (
    JointHistoryBuffer,
    compensatory_movement,
    movement_stability,
)
from posekinetics.pipeline.frame_processor import FrameProcessor, FrameResult
from posekinetics.posedetector.base import Landmark, PoseFrame
from posekinetics.shared.constants import LandmarkIndex

__version__ = "0.1.0"

__all__ = [
    "AdaptiveFilter",
    "FilterConfig",
    "FrameProcessor",
    "FrameResult",
    "JointHistoryBuffer",
    "Landmark",
    "LandmarkIndex",
    "MultiChannelSmoother",
    "PoseFrame",
    "ProcessorConfig",
    "angle_degrees",
    "compensatory_movement",
    "movement_stability",
]
