"""Landmark CSV input and per-frame result output."""

from .data_stream import DataStream, load_pose_frames, write_results_csv

__all__ = [
    "DataStream",
    "load_pose_frames",
    "write_results_csv",
]
