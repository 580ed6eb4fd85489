"""Joint kinematics and movement stability.

This module provides tools for turning BlazePose landmark frames into
biomechanical measurements:
- angle_processing: Three-point joint angles and geometric helpers
- spinal_angles: Lumbar flexion and left/right hip flexion per frame
- stability: Movement-stability and compensatory-movement scores from
  bounded joint-position histories
"""

from .angle_processing import (
    angle_degrees,
    as_point,
    clamp,
    distance,
    midpoint,
    normalize_angle,
)
from .spinal_angles import (
    average_hip_flexion,
    compute_spinal_angles,
    hip_flexion,
    is_valid_pose,
    lumbar_flexion,
)
from .stability import (
    JointHistoryBuffer,
    SteadinessMetrics,
    compensatory_movement,
    movement_stability,
    steadiness_metrics,
    total_variation,
)

__all__ = [
    "angle_degrees",
    "as_point",
    "clamp",
    "distance",
    "midpoint",
    "normalize_angle",
    "average_hip_flexion",
    "compute_spinal_angles",
    "hip_flexion",
    "is_valid_pose",
    "lumbar_flexion",
    "JointHistoryBuffer",
    "SteadinessMetrics",
    "compensatory_movement",
    "movement_stability",
    "steadiness_metrics",
    "total_variation",
]
