"""
Tests for the per-frame processing pipeline.
"""

from __future__ import annotations

import numpy as np
import pytest

from posekinetics.config.processor_config import ProcessorConfig
from posekinetics.filtering.one_euro_filter import AdaptiveFilter, FilterConfig
from posekinetics.kinematics.spinal_angles import compute_spinal_angles
from posekinetics.pipeline.frame_processor import FrameProcessor
from posekinetics.posedetector.base import Landmark


def _knee_raise(make_frame, t, knee_x):
    return make_frame({"left_knee": (knee_x, 0.75 - (knee_x - 0.46), 0.0)}, timestamp_ms=t)


def test_first_frame_smoothed_equals_raw(standing_frame):
    processor = FrameProcessor(ProcessorConfig.default().replace(round_decimals=None))
    result = processor.process(standing_frame)

    assert result.smoothed_angles == result.raw_angles
    assert set(result.raw_angles) == {"lumbar_flexion", "hip_flexion_left", "hip_flexion_right"}
    assert result.valid_pose


def test_angles_follow_their_channel_filters(make_frame):
    config = ProcessorConfig.default().replace(round_decimals=None)
    processor = FrameProcessor(config)
    reference = AdaptiveFilter(config.angle_channels["hip_flexion_left"])

    for i, knee_x in enumerate([0.46, 0.50, 0.56, 0.60]):
        frame = _knee_raise(make_frame, i * 33.0, knee_x)
        raw = compute_spinal_angles(frame)["hip_flexion_left"]
        result = processor.process(frame)
        assert result.raw_angles["hip_flexion_left"] == pytest.approx(raw)
        assert result.smoothed_angles["hip_flexion_left"] == pytest.approx(
            reference.filter(raw, i * 33.0)
        )


def test_angles_are_rounded_by_default(make_frame):
    processor = FrameProcessor()
    result = processor.process(_knee_raise(make_frame, 0.0, 0.53))
    value = result.raw_angles["hip_flexion_left"]
    assert value == round(value, 2)


def test_missing_landmarks_give_none_without_raising(make_frame):
    processor = FrameProcessor()
    processor.process(make_frame(timestamp_ms=0.0))
    broken = make_frame({"left_knee": (np.nan, np.nan, np.nan)}, timestamp_ms=33.0)

    result = processor.process(broken)

    assert result.raw_angles["hip_flexion_left"] is None
    assert result.smoothed_angles["hip_flexion_left"] is None
    assert result.smoothed_angles["hip_flexion_right"] is not None
    assert not result.valid_pose


def test_duplicate_timestamp_repeats_previous_output(make_frame):
    processor = FrameProcessor()
    processor.process(_knee_raise(make_frame, 0.0, 0.46))
    first = processor.process(_knee_raise(make_frame, 33.0, 0.56))
    repeat = processor.process(_knee_raise(make_frame, 33.0, 0.66))

    assert repeat.smoothed_angles == first.smoothed_angles


def test_stability_scores_for_static_pose(make_frame):
    processor = FrameProcessor()

    first = processor.process(make_frame(timestamp_ms=0.0))
    assert all(score == 0.0 for score in first.stability.values())

    second = processor.process(make_frame(timestamp_ms=33.0))
    assert all(score == 100.0 for score in second.stability.values())
    assert second.compensatory_movement == 0.0


def test_compensatory_movement_detected(make_frame):
    """Left hip stays put while the shoulders sway."""
    processor = FrameProcessor()
    result = None
    for i in range(5):
        sway = 0.01 * (i % 2)
        frame = make_frame(
            {
                "left_shoulder": (0.46 + sway, 0.30, 0.0),
                "right_shoulder": (0.54 + sway, 0.30, 0.0),
            },
            timestamp_ms=i * 33.0,
        )
        result = processor.process(frame)

    # shoulders: 4 steps of 0.01 -> stability 60; right hip still -> 100
    assert result.stability["left_shoulder"] == pytest.approx(60.0)
    assert result.stability["left_hip"] == 100.0
    assert result.compensatory_movement == pytest.approx(100.0 - (60.0 + 60.0 + 100.0) / 3)


def test_low_visibility_positions_stay_out_of_history(make_frame):
    processor = FrameProcessor()
    processor.process(make_frame(timestamp_ms=0.0, visibility=0.2))
    assert len(processor.history("left_hip")) == 0
    processor.process(make_frame(timestamp_ms=33.0))
    assert len(processor.history("left_hip")) == 1


def test_history_window_is_bounded(make_frame):
    processor = FrameProcessor(ProcessorConfig.default().replace(window_size=4))
    for i in range(10):
        processor.process(make_frame(timestamp_ms=i * 33.0))
    assert len(processor.history("left_knee")) == 4
    with pytest.raises(KeyError):
        processor.history("nose")


def test_reset_starts_a_new_session(make_frame):
    processor = FrameProcessor(ProcessorConfig.default().replace(round_decimals=None))
    processor.process(_knee_raise(make_frame, 0.0, 0.46))
    processor.process(_knee_raise(make_frame, 33.0, 0.60))

    processor.reset()
    assert processor.frames_processed == 0
    assert len(processor.history("left_hip")) == 0

    fresh = processor.process(_knee_raise(make_frame, 0.0, 0.56))
    assert fresh.smoothed_angles == fresh.raw_angles


def test_coordinate_channels(make_frame):
    config = ProcessorConfig.default().replace(
        coordinate_landmarks=("left_hip",),
        coordinate_filter=FilterConfig(beta=0.0),
    )
    processor = FrameProcessor(config)
    result = processor.process(make_frame(timestamp_ms=0.0))

    assert result.smoothed_coordinates == {
        "left_hip.x": pytest.approx(0.46),
        "left_hip.y": pytest.approx(0.55),
        "left_hip.z": pytest.approx(0.0),
    }


def test_angle_channels_can_be_disabled(standing_frame):
    config = ProcessorConfig.default().replace(angle_channels={})
    processor = FrameProcessor(config)
    result = processor.process(standing_frame)

    assert processor.smoother is None
    assert result.raw_angles == {}
    assert result.smoothed_angles == {}


def test_process_landmarks_accepts_detector_records():
    records = [Landmark(0.5, 0.5, 0.0, 0.9) for _ in range(33)]
    records[11] = Landmark(0.46, 0.30, 0.0)
    records[12] = Landmark(0.54, 0.30, 0.0)
    records[23] = Landmark(0.46, 0.55, 0.0)
    records[24] = Landmark(0.54, 0.55, 0.0)
    records[25] = Landmark(0.46, 0.75, 0.0)
    records[26] = Landmark(0.54, 0.75, 0.0)

    result = FrameProcessor().process_landmarks(records, timestamp_ms=0.0)

    assert result.raw_angles["lumbar_flexion"] == pytest.approx(0.0, abs=0.01)
    assert result.raw_angles["hip_flexion_left"] == pytest.approx(0.0, abs=0.01)


def test_as_row_flattens_result(standing_frame):
    row = FrameProcessor().process(standing_frame).as_row()

    assert row["timestamp_ms"] == 0.0
    assert "raw_lumbar_flexion" in row
    assert "lumbar_flexion" in row
    assert row["stability_left_hip"] == 0.0
    assert row["valid_pose"] is True


def test_average_hip_flexion_reported_per_frame(make_frame):
    processor = FrameProcessor(ProcessorConfig.default().replace(round_decimals=None))
    frame = make_frame({"left_knee": (0.66, 0.55, 0.0)})

    result = processor.process(frame)

    expected = (result.smoothed_angles["hip_flexion_left"] + result.smoothed_angles["hip_flexion_right"]) / 2
    assert result.average_hip_flexion == pytest.approx(expected, abs=0.005)
    assert result.as_row()["average_hip_flexion"] == result.average_hip_flexion


def test_average_hip_flexion_uses_available_side(make_frame):
    processor = FrameProcessor()
    result = processor.process(make_frame({"left_knee": (np.nan, np.nan, np.nan)}))

    assert result.average_hip_flexion == pytest.approx(result.smoothed_angles["hip_flexion_right"])


def test_steadiness_over_recent_frames(make_frame):
    processor = FrameProcessor()

    first = processor.process(make_frame(timestamp_ms=0.0))
    assert first.steadiness.steadiness_index == 50.0

    moved = processor.process(make_frame({"left_hip": (0.47, 0.55, 0.0)}, timestamp_ms=33.0))
    # left_hip moved 0.01, three other landmarks still: mean 0.0025 -> 97.5
    assert moved.steadiness.average_movement == pytest.approx(0.0025)
    assert moved.steadiness.steadiness_index == pytest.approx(97.5)
    row = moved.as_row()
    assert row["steadiness_index"] == pytest.approx(97.5)
    assert row["steadiness_max_deviation"] == pytest.approx(0.01)


def test_steadiness_window_is_bounded_and_reset(make_frame):
    processor = FrameProcessor(ProcessorConfig.default().replace(window_size=3))
    processor.process(make_frame(timestamp_ms=0.0))
    processor.process(make_frame({"left_hip": (0.9, 0.55, 0.0)}, timestamp_ms=33.0))
    for i in range(2, 5):
        result = processor.process(make_frame({"left_hip": (0.9, 0.55, 0.0)}, timestamp_ms=i * 33.0))

    # the jump has left the three-frame window
    assert result.steadiness.steadiness_index == 100.0

    processor.reset()
    assert processor.process(make_frame(timestamp_ms=0.0)).steadiness.steadiness_index == 50.0


def test_steadiness_can_be_disabled(standing_frame):
    processor = FrameProcessor(ProcessorConfig.default().replace(steadiness_landmarks=()))
    result = processor.process(standing_frame)

    assert result.steadiness is None
    assert "steadiness_index" not in result.as_row()
