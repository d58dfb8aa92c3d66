"""
Overlay rendering for final detections.

Each detection gets a circular marker at its box center and a
"<class>: <confidence>" label on a filled background at its top-left corner.
Geometry is never clamped: OpenCV clips every primitive at the frame border,
so boxes partly or fully outside the frame are safe to draw.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import cv2
import numpy as np

from models.config import AnnotationConfig
from models.detection import Detection
from .labels import label_for

Point = Tuple[int, int]


@dataclass(frozen=True)
class LabelLayout:
    """Where a label's background and text go on the frame."""
    text: str
    origin: Point
    background_top_left: Point
    background_bottom_right: Point


def _color(value: Sequence[int]) -> Tuple[int, int, int]:
    return tuple(int(c) for c in value)


class Annotator:
    """Draws markers and labels for detections onto frames in place."""

    def __init__(
        self,
        class_labels: Sequence[str] = (),
        style: Optional[AnnotationConfig] = None,
    ):
        self._class_labels = tuple(class_labels)
        self.style = style or AnnotationConfig()

    @property
    def class_labels(self) -> Tuple[str, ...]:
        return self._class_labels

    def format_label(self, class_id: int, confidence: float) -> str:
        label = f"{confidence:.2f}"
        name = label_for(self._class_labels, class_id)
        if name is not None:
            label = f"{name}: {label}"
        return label

    def label_layout(self, text: str, left: int, top: int) -> LabelLayout:
        """
        Place a label at a box's top-left corner.

        The text baseline is pushed down to at least the label height so the
        background never starts above row 0 when the box starts near the top
        of the frame.
        """
        (label_width, label_height), baseline = cv2.getTextSize(
            text, self.style.font_face, self.style.font_scale, self.style.text_thickness
        )
        top_text = max(top, label_height)
        return LabelLayout(
            text=text,
            origin=(left, top_text),
            background_top_left=(left, top_text - label_height),
            background_bottom_right=(left + label_width, top_text + baseline),
        )

    def annotate(self, frame: np.ndarray, detection: Detection) -> np.ndarray:
        left, top, right, bottom = detection.box.as_xyxy()
        center = (int((left + right) / 2), int((top + bottom) / 2))
        # Degenerate boxes yield a negative radius, which cv2.circle rejects.
        radius = max(min(right - left, bottom - top), 0)

        cv2.circle(
            frame,
            center,
            radius,
            _color(self.style.marker_color),
            self.style.marker_thickness,
        )

        layout = self.label_layout(
            self.format_label(detection.class_id, detection.confidence), left, top
        )
        cv2.rectangle(
            frame,
            layout.background_top_left,
            layout.background_bottom_right,
            _color(self.style.label_background),
            cv2.FILLED,
        )
        cv2.putText(
            frame,
            layout.text,
            layout.origin,
            self.style.font_face,
            self.style.font_scale,
            _color(self.style.text_color),
            self.style.text_thickness,
        )
        return frame

    def annotate_all(self, frame: np.ndarray, detections: Iterable[Detection]) -> np.ndarray:
        for detection in detections:
            self.annotate(frame, detection)
        return frame
