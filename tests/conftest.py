"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


COCO_HEAD = ["person", "bicycle", "car", "motorbike", "aeroplane"]


def make_row(cx, cy, w, h, scores, objectness=1.0):
    """Build one Darknet output row: [cx, cy, w, h, objectness, scores...]."""
    return [cx, cy, w, h, objectness] + list(scores)


def one_hot(num_classes, class_id, score):
    scores = [0.0] * num_classes
    scores[class_id] = score
    return scores


class MockEngine:
    """Inference engine double returning canned tensors and recording blobs."""

    def __init__(self, outputs=None):
        self.outputs = outputs if outputs is not None else []
        self.blobs = []

    def forward(self, blob):
        self.blobs.append(blob)
        return [np.array(o, dtype=np.float32) for o in self.outputs]


@pytest.fixture
def class_labels():
    return tuple(COCO_HEAD)


@pytest.fixture
def labels_file(tmp_path):
    path = tmp_path / "coco.names"
    path.write_text("\n".join(COCO_HEAD) + "\n")
    return str(path)


@pytest.fixture
def frame():
    return np.zeros((480, 640, 3), dtype=np.uint8)


@pytest.fixture
def reference_row():
    """Centered 0.2 x 0.3 box, class 3 at 0.9 (80 classes)."""
    return make_row(0.5, 0.5, 0.2, 0.3, one_hot(80, 3, 0.9))


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
source:
  device_id: 0

network:
  cfg: "data/yolo.cfg"
  weights: "data/yolo.weights"
  classes: "data/coco.names"
  backend: "cpu"
  blob_size: 416

detector:
  confidence_threshold: 0.4
  score_threshold: 0.5
  iou_threshold: 0.4

pipeline:
  display: false

log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "source": {
            "video": None,
            "device_id": 0,
        },
        "network": {
            "cfg": "data/yolo.cfg",
            "weights": "data/yolo.weights",
            "classes": "data/coco.names",
            "backend": "cpu",
            "blob_size": 416,
        },
        "detector": {
            "confidence_threshold": 0.4,
            "score_threshold": 0.5,
            "iou_threshold": 0.4,
        },
        "pipeline": {
            "display": False,
        },
        "log_path": None,
        "log_level": "INFO",
    }
