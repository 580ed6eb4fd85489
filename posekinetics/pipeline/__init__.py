"""Pipeline orchestration module.

Provides the per-frame processor and batch helpers:
- frame_processor: FrameProcessor composition root and FrameResult
- runner: Whole-session processing to DataFrames, CLI wiring
"""

from .frame_processor import FrameProcessor, FrameResult
from .runner import process_frames, summarize_session

__all__ = [
    "FrameProcessor",
    "FrameResult",
    "process_frames",
    "summarize_session",
]
