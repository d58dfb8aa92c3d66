"""
Processing pipeline: the per-frame loop and the sinks it feeds.
"""

from .engine import PipelineEngine, PipelineStats, create_sinks_from_config
from .sinks import DisplaySink, FrameSink, VideoFileSink

__all__ = [
    "PipelineEngine",
    "PipelineStats",
    "create_sinks_from_config",
    "DisplaySink",
    "FrameSink",
    "VideoFileSink",
]
