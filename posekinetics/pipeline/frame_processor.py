"""Per-frame composition root: landmarks in, smoothed angles and stability out.

For every pose frame the processor

1. computes the raw angles (and optional raw coordinate channels),
2. filters them through its MultiChannelSmoother with the frame timestamp,
3. appends tracked joint positions (and the frame itself) to bounded histories,
4. scores per-joint stability, compensatory movement and the steadiness of a
   landmark group, and averages the smoothed hip flexion of both sides.

One processor corresponds to one analysis session. Call ``reset()`` when a new
capture starts so that filter and history state from a previous session does
not leak into the next one.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

import numpy as np

from posekinetics.config.processor_config import ProcessorConfig
from posekinetics.filtering.channel_smoother import (
    MultiChannelSmoother,
    coordinate_channel,
    coordinate_channels,
)
from posekinetics.kinematics.spinal_angles import (
    average_hip_flexion,
    compute_spinal_angles,
    is_valid_pose,
)
from posekinetics.kinematics.stability import (
    JointHistoryBuffer,
    SteadinessMetrics,
    compensatory_movement,
    steadiness_metrics,
)
from posekinetics.posedetector.base import PoseFrame
from posekinetics.shared.constants import AXES, HIP_FLEXION_LEFT, HIP_FLEXION_RIGHT

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """Output of one processed frame.

    Attributes:
        timestamp_ms: Frame timestamp.
        raw_angles: Unfiltered angles; None = unavailable this frame.
        smoothed_angles: Filtered angles; None = unavailable this frame.
        smoothed_coordinates: Filtered coordinate channels (``left_hip.x``...).
        stability: Stability score per tracked joint.
        compensatory_movement: Primary-vs-compensatory score, or None when
            no primary joint is configured.
        average_hip_flexion: Mean of the available smoothed hip flexion
            angles, or None when neither side is available.
        steadiness: Steadiness of the configured landmark group over the
            recent frame window, or None when no group is configured.
        valid_pose: Whether shoulders, hips and knees were all usable.
    """

    timestamp_ms: float
    raw_angles: Dict[str, Optional[float]] = field(default_factory=dict)
    smoothed_angles: Dict[str, Optional[float]] = field(default_factory=dict)
    smoothed_coordinates: Dict[str, Optional[float]] = field(default_factory=dict)
    stability: Dict[str, float] = field(default_factory=dict)
    compensatory_movement: Optional[float] = None
    average_hip_flexion: Optional[float] = None
    steadiness: Optional[SteadinessMetrics] = None
    valid_pose: bool = True

    def as_row(self) -> Dict[str, Any]:
        """Flatten into one table row (missing values become NaN)."""
        row: Dict[str, Any] = {"timestamp_ms": self.timestamp_ms}
        for name, value in self.raw_angles.items():
            row[f"raw_{name}"] = np.nan if value is None else value
        for name, value in self.smoothed_angles.items():
            row[name] = np.nan if value is None else value
        for name, value in self.smoothed_coordinates.items():
            row[name] = np.nan if value is None else value
        for joint, score in self.stability.items():
            row[f"stability_{joint}"] = score
        row["compensatory_movement"] = (
            np.nan if self.compensatory_movement is None else self.compensatory_movement
        )
        row["average_hip_flexion"] = (
            np.nan if self.average_hip_flexion is None else self.average_hip_flexion
        )
        if self.steadiness is not None:
            row["steadiness_index"] = self.steadiness.steadiness_index
            row["steadiness_max_deviation"] = self.steadiness.max_deviation
        row["valid_pose"] = self.valid_pose
        return row


class FrameProcessor:
    """Turns a stream of PoseFrames into smoothed measurements.

    Args:
        config: Session configuration (default: ProcessorConfig.default()).
    """

    def __init__(self, config: Optional[ProcessorConfig] = None):
        self.config = config or ProcessorConfig.default()

        channels = dict(self.config.angle_channels)
        channels.update(
            coordinate_channels(self.config.coordinate_landmarks, self.config.coordinate_filter)
        )
        self._smoother: Optional[MultiChannelSmoother] = (
            MultiChannelSmoother(channels) if channels else None
        )
        self._histories: Dict[str, JointHistoryBuffer] = {
            joint: JointHistoryBuffer(self.config.window_size)
            for joint in self.config.tracked_joints
        }
        self._recent_frames: deque = deque(maxlen=self.config.window_size)
        self._frames_processed = 0

    @property
    def smoother(self) -> Optional[MultiChannelSmoother]:
        return self._smoother

    @property
    def frames_processed(self) -> int:
        return self._frames_processed

    def history(self, joint: str) -> JointHistoryBuffer:
        try:
            return self._histories[joint]
        except KeyError:
            raise KeyError(f"Joint {joint!r} is not tracked") from None

    def process(self, frame: PoseFrame) -> FrameResult:
        """Process one frame. Frames must arrive in timestamp order."""
        cfg = self.config

        all_angles = compute_spinal_angles(frame)
        raw_angles = {name: all_angles[name] for name in cfg.angle_channels}
        raw_coords = self._raw_coordinates(frame)

        smoothed: Dict[str, Optional[float]] = {}
        if self._smoother is not None:
            smoothed = self._smoother.filter_frame({**raw_angles, **raw_coords}, frame.timestamp_ms)

        for joint, buffer in self._histories.items():
            if frame.is_visible(joint, cfg.min_visibility):
                buffer.append(frame.position(joint))

        stability = {
            joint: buffer.stability(cfg.stability_scale_factor)
            for joint, buffer in self._histories.items()
        }

        compensatory = None
        if cfg.primary_joint is not None:
            compensatory = compensatory_movement(
                self._histories[cfg.primary_joint].positions(),
                [self._histories[j].positions() for j in cfg.compensatory_joints],
                cfg.stability_scale_factor,
            )

        steadiness = None
        self._recent_frames.append(frame)
        if cfg.steadiness_landmarks:
            steadiness = steadiness_metrics(
                self._recent_frames,
                cfg.steadiness_landmarks,
                min_visibility=cfg.min_visibility,
                scale_factor=cfg.stability_scale_factor,
            )

        average_hip = average_hip_flexion(
            smoothed.get(HIP_FLEXION_LEFT), smoothed.get(HIP_FLEXION_RIGHT)
        )

        valid = is_valid_pose(frame)
        if not valid:
            logger.debug("Incomplete pose at t=%.1f ms", frame.timestamp_ms)

        self._frames_processed += 1
        return FrameResult(
            timestamp_ms=frame.timestamp_ms,
            raw_angles={k: self._round(v) for k, v in raw_angles.items()},
            smoothed_angles={k: self._round(smoothed.get(k)) for k in raw_angles},
            smoothed_coordinates={k: smoothed.get(k) for k in raw_coords},
            stability=stability,
            compensatory_movement=compensatory,
            average_hip_flexion=average_hip,
            steadiness=steadiness,
            valid_pose=valid,
        )

    def process_landmarks(self, landmarks: Iterable[Any], timestamp_ms: float) -> FrameResult:
        """Convenience wrapper for raw detector output (33 landmark records)."""
        return self.process(PoseFrame.from_landmarks(landmarks, timestamp_ms))

    def reset(self) -> None:
        """Start a new session: clear every filter and joint history."""
        if self._smoother is not None:
            self._smoother.reset_all()
        for buffer in self._histories.values():
            buffer.clear()
        self._recent_frames.clear()
        self._frames_processed = 0
        logger.info("Frame processor reset for a new session")

    def _raw_coordinates(self, frame: PoseFrame) -> Dict[str, Optional[float]]:
        values: Dict[str, Optional[float]] = {}
        for lm in self.config.coordinate_landmarks:
            pos = frame.position(lm)
            for i, axis in enumerate(AXES):
                v = float(pos[i])
                values[coordinate_channel(lm, axis)] = v if np.isfinite(v) else None
        return values

    def _round(self, value: Optional[float]) -> Optional[float]:
        if value is None or self.config.round_decimals is None:
            return value
        return round(value, self.config.round_decimals)
