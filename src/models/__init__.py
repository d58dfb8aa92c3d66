"""
Typed models for the video object detector.
"""

from .frame import FrameData
from .detection import Box, Detection, detections_to_numpy
from .config import (
    Config,
    SourceConfig,
    NetworkConfig,
    DetectorConfig,
    AnnotationConfig,
    PipelineConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Box",
    "Detection",
    "detections_to_numpy",
    # Config
    "Config",
    "SourceConfig",
    "NetworkConfig",
    "DetectorConfig",
    "AnnotationConfig",
    "PipelineConfig",
]
