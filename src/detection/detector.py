"""
Object detector: preprocessing, inference, decoding, suppression and
annotation for one frame at a time.

The detector owns the inference engine handle and the class label table for
the lifetime of the process. Both are fixed at construction.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from inference.backend import InferenceEngine, make_blob
from inference.darknet_backend import DarknetConfig, DarknetEngine
from models.config import AnnotationConfig, Config, DetectorConfig
from models.detection import Detection
from .annotator import Annotator
from .decoder import decode
from .labels import label_for, load_class_labels
from .suppression import suppress


class ObjectDetector:
    """
    Runs the per-frame detection pipeline against an injected engine.

    Example:
        detector = ObjectDetector(engine, labels, DetectorConfig())
        detections = detector.process(frame)  # frame is annotated in place
    """

    def __init__(
        self,
        engine: InferenceEngine,
        class_labels: Sequence[str] = (),
        config: Optional[DetectorConfig] = None,
        style: Optional[AnnotationConfig] = None,
        blob_size: int = 416,
        swap_rb: bool = True,
    ):
        self._engine = engine
        self._class_labels = tuple(class_labels)
        self.config = config or DetectorConfig()
        self.blob_size = blob_size
        self.swap_rb = swap_rb
        self._annotator = Annotator(self._class_labels, style)

    @property
    def class_labels(self):
        return self._class_labels

    @property
    def annotator(self) -> Annotator:
        return self._annotator

    def preprocess(self, frame: np.ndarray) -> np.ndarray:
        return make_blob(frame, self.blob_size, self.swap_rb)

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """
        Detect objects in a frame.

        Returns:
            Final detections in suppression order (highest confidence first).
        """
        cfg = self.config
        frame_height, frame_width = frame.shape[:2]

        outs = self._engine.forward(self.preprocess(frame))
        class_ids, confidences, boxes = decode(
            outs,
            frame_width,
            frame_height,
            confidence_threshold=cfg.confidence_threshold,
            score_offset=cfg.score_offset,
            num_classes=cfg.num_classes,
        )
        indices = suppress(
            boxes,
            confidences,
            score_threshold=cfg.score_threshold,
            iou_threshold=cfg.iou_threshold,
            class_ids=class_ids,
            class_aware=cfg.class_aware,
            top_k=cfg.top_k,
            eta=cfg.eta,
        )
        logging.debug(f"Suppression kept {len(indices)} of {len(boxes)} candidates")

        return [
            Detection(
                class_id=class_ids[i],
                confidence=confidences[i],
                box=boxes[i],
                class_name=label_for(self._class_labels, class_ids[i]),
            )
            for i in indices
        ]

    def draw(self, frame: np.ndarray, detections: Sequence[Detection]) -> np.ndarray:
        return self._annotator.annotate_all(frame, detections)

    def process(self, frame: np.ndarray) -> List[Detection]:
        """Detect objects and draw them onto the frame in place."""
        detections = self.detect(frame)
        self.draw(frame, detections)
        return detections


def create_detector(config: Config) -> ObjectDetector:
    """
    Build a detector backed by the Darknet engine described in config.

    Raises:
        RuntimeError: If the network cannot be loaded.
    """
    net_cfg = config.network
    labels = load_class_labels(net_cfg.classes)
    engine = DarknetEngine(
        DarknetConfig(
            cfg_path=net_cfg.cfg,
            weights_path=net_cfg.weights,
            backend=net_cfg.backend,
        )
    )
    return ObjectDetector(
        engine,
        labels,
        config=config.detector,
        style=config.annotation,
        blob_size=net_cfg.blob_size,
        swap_rb=net_cfg.swap_rb,
    )
