"""Batch runner shared by the CLI and library callers."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import numpy as np
import pandas as pd

from posekinetics.config.processor_config import ProcessorConfig
from posekinetics.datastream.data_stream import load_pose_frames, write_results_csv
from posekinetics.pipeline.frame_processor import FrameProcessor
from posekinetics.posedetector.base import PoseFrame

logger = logging.getLogger(__name__)

OUTPUT_ROOT = Path("data/output")


def process_frames(
    frames: Iterable[PoseFrame],
    config: Optional[ProcessorConfig] = None,
    processor: Optional[FrameProcessor] = None,
) -> pd.DataFrame:
    """Run a whole session through a FrameProcessor.

    Args:
        frames: Pose frames in timestamp order.
        config: Session config (ignored when ``processor`` is given).
        processor: Existing processor to continue a session with.

    Returns:
        DataFrame with one row per frame (see FrameResult.as_row).
    """
    processor = processor or FrameProcessor(config)
    rows = [processor.process(frame).as_row() for frame in frames]
    df = pd.DataFrame(rows)

    if not df.empty:
        invalid = int((~df["valid_pose"].astype(bool)).sum())
        if invalid:
            logger.warning("%d of %d frames had an incomplete pose", invalid, len(df))
    return df


def summarize_session(df: pd.DataFrame, config: Optional[ProcessorConfig] = None) -> Dict[str, Any]:
    """Small summary of a processed session.

    Returns:
        Dict with frame count, duration, per-angle mean/max of the smoothed
        values, final stability per joint, final compensatory score, mean
        bilateral hip flexion and final steadiness index.
    """
    config = config or ProcessorConfig.default()
    summary: Dict[str, Any] = {
        "frames": int(len(df)),
        "duration_ms": float(df["timestamp_ms"].iloc[-1] - df["timestamp_ms"].iloc[0]) if len(df) else 0.0,
        "angles": {},
        "stability": {},
        "compensatory_movement": None,
        "average_hip_flexion": None,
        "steadiness_index": None,
    }
    if df.empty:
        return summary

    for channel in config.angle_channels:
        if channel not in df.columns:
            continue
        series = df[channel].dropna()
        summary["angles"][channel] = {
            "mean": float(series.mean()) if not series.empty else None,
            "max": float(series.max()) if not series.empty else None,
        }

    last = df.iloc[-1]
    for joint in config.tracked_joints:
        col = f"stability_{joint}"
        if col in df.columns:
            summary["stability"][joint] = float(last[col])
    if "compensatory_movement" in df.columns and not np.isnan(last["compensatory_movement"]):
        summary["compensatory_movement"] = float(last["compensatory_movement"])
    if "average_hip_flexion" in df.columns:
        hips = df["average_hip_flexion"].dropna()
        if not hips.empty:
            summary["average_hip_flexion"] = float(hips.mean())
    if "steadiness_index" in df.columns:
        summary["steadiness_index"] = float(last["steadiness_index"])
    return summary


def add_pipeline_arguments(parser: argparse.ArgumentParser) -> None:
    """Register pipeline CLI arguments on the provided parser."""
    parser.add_argument("--landmarks", required=True, help="Input landmark CSV file")
    parser.add_argument(
        "--output",
        default=None,
        help="Output CSV path (default: data/output/<input stem>_angles.csv)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON file overriding ProcessorConfig defaults",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=30.0,
        help="Frame rate used when the CSV has no Timestamp_ms column (default 30)",
    )
    parser.add_argument(
        "--window-size",
        type=int,
        default=None,
        help="Stability history length in frames (overrides config)",
    )
    parser.add_argument(
        "--scale-factor",
        type=float,
        default=None,
        help="Stability score points lost per unit of joint travel (overrides config)",
    )
    parser.add_argument(
        "--raw-output",
        action="store_true",
        help="Report unrounded angles",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default WARNING)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the pipeline argument parser."""
    parser = argparse.ArgumentParser(
        description="Smoothed joint angles and movement stability from BlazePose landmark CSVs."
    )
    add_pipeline_arguments(parser)
    return parser


def config_from_args(args: argparse.Namespace) -> ProcessorConfig:
    config = ProcessorConfig.from_json(Path(args.config)) if args.config else ProcessorConfig.default()
    overrides: Dict[str, Any] = {}
    if args.window_size is not None:
        overrides["window_size"] = args.window_size
    if args.scale_factor is not None:
        overrides["stability_scale_factor"] = args.scale_factor
    if args.raw_output:
        overrides["round_decimals"] = None
    return config.replace(**overrides) if overrides else config


def run_pipeline(args: argparse.Namespace) -> Path:
    """Run the batch pipeline with the provided CLI arguments."""
    landmarks_path = Path(args.landmarks)
    if not landmarks_path.exists():
        print(f"[main] landmark CSV not found: {landmarks_path}", file=sys.stderr)
        sys.exit(1)

    try:
        config = config_from_args(args)
    except (ValueError, FileNotFoundError) as e:
        print(f"[main] invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    frames = load_pose_frames(landmarks_path, fps=args.fps)
    print(f"[main] loaded {len(frames)} frames from {landmarks_path}")

    df = process_frames(frames, config)

    output_path = (
        Path(args.output)
        if args.output
        else OUTPUT_ROOT / f"{landmarks_path.stem}_angles.csv"
    )
    write_results_csv(df, output_path)
    print(f"[main] wrote {len(df)} rows -> {output_path}")

    summary = summarize_session(df, config)
    for channel, stats in summary["angles"].items():
        if stats["mean"] is not None:
            print(f"[main] {channel}: mean {stats['mean']:.2f} deg, max {stats['max']:.2f} deg")
    if summary["compensatory_movement"] is not None:
        print(f"[main] compensatory movement: {summary['compensatory_movement']:.2f}")
    if summary["steadiness_index"] is not None:
        print(f"[main] steadiness index: {summary['steadiness_index']:.2f}")
    return output_path
