"""
Tests for trunk and hip angle extraction from BlazePose frames.
"""

from __future__ import annotations

import numpy as np
import pytest

from posekinetics.kinematics.spinal_angles import (
    average_hip_flexion,
    compute_spinal_angles,
    hip_flexion,
    is_valid_pose,
    lumbar_flexion,
)


def test_upright_trunk_has_no_flexion(standing_frame):
    assert lumbar_flexion(standing_frame) == pytest.approx(0.0, abs=1e-3)


def test_horizontal_trunk_is_ninety_degrees(make_frame):
    """Shoulders level with the hips, displaced forward along x."""
    frame = make_frame(
        {
            "left_shoulder": (0.21, 0.55, 0.0),
            "right_shoulder": (0.29, 0.55, 0.0),
        }
    )
    assert lumbar_flexion(frame) == pytest.approx(90.0)


def test_forty_five_degree_trunk(make_frame):
    frame = make_frame(
        {
            "left_shoulder": (0.36, 0.45, 0.0),
            "right_shoulder": (0.44, 0.45, 0.0),
        }
    )
    # shoulder midpoint (0.40, 0.45) vs hip midpoint (0.50, 0.55)
    assert lumbar_flexion(frame) == pytest.approx(45.0)


def test_standing_hips_are_neutral(standing_frame):
    assert hip_flexion(standing_frame, "left") == pytest.approx(0.0, abs=1e-3)
    assert hip_flexion(standing_frame, "right") == pytest.approx(0.0, abs=1e-3)


def test_raised_knee_gives_ninety_degree_hip_flexion(make_frame):
    frame = make_frame({"left_knee": (0.66, 0.55, 0.0)})
    assert hip_flexion(frame, "left") == pytest.approx(90.0)
    assert hip_flexion(frame, "right") == pytest.approx(0.0, abs=1e-3)


def test_invalid_side_raises(standing_frame):
    with pytest.raises(ValueError):
        hip_flexion(standing_frame, "middle")


def test_missing_landmark_yields_none(make_frame):
    frame = make_frame({"left_knee": (np.nan, np.nan, np.nan)})

    angles = compute_spinal_angles(frame)

    assert angles["hip_flexion_left"] is None
    assert angles["hip_flexion_right"] == pytest.approx(0.0, abs=1e-3)
    assert angles["lumbar_flexion"] == pytest.approx(0.0, abs=1e-3)
    assert not is_valid_pose(frame)


def test_coincident_hip_and_knee_yields_none(make_frame):
    frame = make_frame({"right_knee": (0.54, 0.55, 0.0)})
    assert hip_flexion(frame, "right") is None


def test_is_valid_pose(standing_frame):
    assert is_valid_pose(standing_frame)


def test_average_hip_flexion():
    assert average_hip_flexion(10.0, 20.0) == 15.0
    assert average_hip_flexion(None, 20.0) == 20.0
    assert average_hip_flexion(None, None) is None
    assert average_hip_flexion(1.0 / 3.0, 0.0) == 0.17
