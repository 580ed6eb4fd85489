"""Session configuration."""

from .processor_config import ANGLE_CHANNELS, ProcessorConfig

__all__ = [
    "ANGLE_CHANNELS",
    "ProcessorConfig",
]
