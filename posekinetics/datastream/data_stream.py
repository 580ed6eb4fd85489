"""Landmark CSV input and result CSV output.

Landmark files use long format, one row per landmark per frame:

    Frame,Landmark,X,Y,Z,Visibility,Timestamp_ms

``Landmark`` holds the BlazePose index (0-32) or its name. ``Visibility`` and
``Timestamp_ms`` are optional; without timestamps, frame times are derived from
the frame number and the nominal frame rate.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from posekinetics.posedetector.base import PoseFrame
from posekinetics.shared.constants import NUM_LANDMARKS, landmark_index

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Frame", "Landmark", "X", "Y", "Z")


class DataStream:
    def __init__(self, data_path: Path) -> None:
        self.data_path: Path = Path(data_path)

    def save_to_csv(self, frames: Iterable[PoseFrame]) -> None:
        """Save pose frames to a landmark CSV file."""
        with open(self.data_path, "w", newline="", encoding="utf-8") as file:
            writer = csv.writer(file)
            writer.writerow(
                ["Frame", "Landmark", "X", "Y", "Z", "Visibility", "Timestamp_ms"]
            )

            rows = [
                [frame_idx, landmark_idx, x, y, z, frame.visibility[landmark_idx], frame.timestamp_ms]
                for frame_idx, frame in enumerate(frames)
                for landmark_idx, (x, y, z) in enumerate(frame.coords)
            ]
            writer.writerows(rows)

    def load(self, fps: float = 30.0) -> List[PoseFrame]:
        return load_pose_frames(self.data_path, fps=fps)


def _resolve_landmark(value) -> Optional[int]:
    try:
        if isinstance(value, str) and not value.strip().lstrip("-").isdigit():
            return int(landmark_index(value))
        return int(landmark_index(int(float(value))))
    except (KeyError, ValueError, TypeError):
        return None


def load_pose_frames(csv_path: Path, fps: float = 30.0) -> List[PoseFrame]:
    """Read a landmark CSV into PoseFrames ordered by frame number.

    Landmarks absent from a frame get NaN coordinates and zero visibility.

    Args:
        csv_path: Path to the landmark CSV.
        fps: Frame rate used when the file has no Timestamp_ms column.

    Returns:
        List of PoseFrame objects.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is empty or lacks required columns.
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Landmark CSV not found: {csv_path}")
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")

    try:
        df = pd.read_csv(csv_path)
    except pd.errors.EmptyDataError:
        raise ValueError(f"No data rows found in {csv_path}") from None

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{csv_path} is missing required column(s): {', '.join(missing)}")
    if df.empty:
        raise ValueError(f"No data rows found in {csv_path}")

    df = df.copy()
    df["_idx"] = df["Landmark"].map(_resolve_landmark)
    unknown = int(df["_idx"].isna().sum())
    if unknown:
        logger.warning("Skipping %d rows with unknown landmark ids in %s", unknown, csv_path)
        df = df[df["_idx"].notna()]

    for col in ("X", "Y", "Z"):
        df[col] = pd.to_numeric(df[col], errors="coerce")
    if "Visibility" in df.columns:
        df["Visibility"] = pd.to_numeric(df["Visibility"], errors="coerce").fillna(0.0)
    else:
        df["Visibility"] = 1.0
    has_timestamps = "Timestamp_ms" in df.columns

    frames: List[PoseFrame] = []
    for frame_number, group in df.groupby("Frame", sort=True):
        coords = np.full((NUM_LANDMARKS, 3), np.nan, dtype=float)
        visibility = np.zeros(NUM_LANDMARKS, dtype=float)
        idx = group["_idx"].astype(int).to_numpy()
        coords[idx] = group[["X", "Y", "Z"]].to_numpy(dtype=float)
        visibility[idx] = group["Visibility"].to_numpy(dtype=float)

        timestamp_ms = float(frame_number) / fps * 1000.0
        if has_timestamps:
            ts = pd.to_numeric(group["Timestamp_ms"], errors="coerce").dropna()
            if not ts.empty:
                timestamp_ms = float(ts.iloc[0])

        frames.append(PoseFrame(coords=coords, visibility=visibility, timestamp_ms=timestamp_ms))

    logger.info("Loaded %d frames from %s", len(frames), csv_path)
    return frames


def write_results_csv(df: pd.DataFrame, output_path: Path) -> Path:
    """Write a per-frame results table to CSV."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False, float_format="%.6f")
    return output_path
