"""
Inference engines: blob in, raw output tensors out.
"""

from .backend import InferenceEngine, make_blob
from .darknet_backend import DarknetConfig, DarknetEngine, SUPPORTED_BACKENDS

__all__ = [
    "InferenceEngine",
    "make_blob",
    "DarknetConfig",
    "DarknetEngine",
    "SUPPORTED_BACKENDS",
]
