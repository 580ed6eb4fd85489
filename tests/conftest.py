"""Shared pose fixtures.

The base pose is an upright subject in normalized image coordinates (y grows
downward): shoulders directly above hips, knees directly below hips.
"""

from __future__ import annotations

import numpy as np
import pytest

from posekinetics.posedetector.base import PoseFrame
from posekinetics.shared.constants import NUM_LANDMARKS, landmark_index

STANDING_POSE = {
    "left_shoulder": (0.46, 0.30, 0.0),
    "right_shoulder": (0.54, 0.30, 0.0),
    "left_hip": (0.46, 0.55, 0.0),
    "right_hip": (0.54, 0.55, 0.0),
    "left_knee": (0.46, 0.75, 0.0),
    "right_knee": (0.54, 0.75, 0.0),
    "left_ankle": (0.46, 0.95, 0.0),
    "right_ankle": (0.54, 0.95, 0.0),
}


def build_frame(overrides=None, timestamp_ms=0.0, visibility=1.0):
    coords = np.full((NUM_LANDMARKS, 3), 0.5, dtype=float)
    coords[:, 2] = 0.0
    for name, pos in STANDING_POSE.items():
        coords[landmark_index(name)] = pos
    for name, pos in (overrides or {}).items():
        coords[landmark_index(name)] = pos
    vis = np.full(NUM_LANDMARKS, visibility, dtype=float)
    return PoseFrame(coords=coords, visibility=vis, timestamp_ms=timestamp_ms)


@pytest.fixture
def make_frame():
    """Factory: make_frame(overrides={"left_knee": (x, y, z)}, timestamp_ms=33.0)."""
    return build_frame


@pytest.fixture
def standing_frame():
    return build_frame()
