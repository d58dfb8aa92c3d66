"""
Detection Module

Turns raw network output into labelled, de-duplicated detections and draws
them onto video frames.
"""

from .annotator import Annotator, LabelLayout
from .decoder import decode, decode_box
from .detector import ObjectDetector, create_detector
from .labels import label_for, load_class_labels
from .suppression import iou, suppress

__all__ = [
    'Annotator',
    'LabelLayout',
    'decode',
    'decode_box',
    'ObjectDetector',
    'create_detector',
    'label_for',
    'load_class_labels',
    'iou',
    'suppress',
]
