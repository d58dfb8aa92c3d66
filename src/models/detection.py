"""
Detection models for decoded network output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class Box:
    """
    An axis-aligned box in pixel coordinates of the source frame.

    Boxes come straight from network output and are not clamped to the
    frame, so left/top may be negative and right/bottom may exceed the
    frame size.

    Attributes:
        left: Left edge x coordinate.
        top: Top edge y coordinate.
        width: Box width in pixels.
        height: Box height in pixels.
    """
    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def center(self) -> Tuple[int, int]:
        return (int((self.left + self.right) / 2), int((self.top + self.bottom) / 2))

    def as_xywh(self) -> Tuple[int, int, int, int]:
        """Return as (left, top, width, height) tuple."""
        return (self.left, self.top, self.width, self.height)

    def as_xyxy(self) -> Tuple[int, int, int, int]:
        """Return as (left, top, right, bottom) tuple."""
        return (self.left, self.top, self.right, self.bottom)

    @classmethod
    def from_xyxy(cls, x1: int, y1: int, x2: int, y2: int) -> "Box":
        """Create from (left, top, right, bottom) corners."""
        return cls(left=x1, top=y1, width=x2 - x1, height=y2 - y1)


@dataclass(frozen=True)
class Detection:
    """
    A decoded detection: a candidate before suppression, a final
    detection after it.

    Attributes:
        class_id: Index of the best-scoring class.
        confidence: Best class score (0-1).
        box: Box in pixel coordinates of the source frame.
        class_name: Label for class_id, None when the label table has none.
    """
    class_id: int
    confidence: float
    box: Box
    class_name: Optional[str] = None

    @property
    def left(self) -> int:
        return self.box.left

    @property
    def top(self) -> int:
        return self.box.top

    @property
    def right(self) -> int:
        return self.box.right

    @property
    def bottom(self) -> int:
        return self.box.bottom

    def to_numpy(self) -> np.ndarray:
        """Convert to numpy array [left, top, right, bottom, confidence, class_id]."""
        return np.array([
            self.left, self.top, self.right, self.bottom,
            self.confidence,
            self.class_id,
        ], dtype=float)


def detections_to_numpy(detections: List[Detection]) -> np.ndarray:
    """
    Convert a list of Detection objects to a numpy array.

    Returns:
        Array of shape (N, 6) with [left, top, right, bottom, confidence, class_id].
    """
    if not detections:
        return np.zeros((0, 6))
    return np.array([d.to_numpy() for d in detections])
