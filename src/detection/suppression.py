"""
Greedy non-maximum suppression over decoded candidates.

Candidates are visited in descending confidence order; ties keep the lower
input index first. A candidate survives unless it overlaps an already kept
box by more than the current IoU threshold, the same rule cv2.dnn.NMSBoxes
applies. Suppression is cross-class unless class_aware is set.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from models.detection import Box

DEFAULT_SCORE_THRESHOLD = 0.5
DEFAULT_IOU_THRESHOLD = 0.4


def iou(box_a: Box, box_b: Box) -> float:
    """
    Intersection over Union of two axis-aligned boxes.

    Returns 0.0 for disjoint boxes or a non-positive union.
    """
    x1 = max(box_a.left, box_b.left)
    y1 = max(box_a.top, box_b.top)
    x2 = min(box_a.right, box_b.right)
    y2 = min(box_a.bottom, box_b.bottom)

    if x2 <= x1 or y2 <= y1:
        return 0.0

    intersection = (x2 - x1) * (y2 - y1)
    union = box_a.area + box_b.area - intersection
    if union <= 0:
        return 0.0
    return intersection / union


def _iou_one_to_many(
    box: np.ndarray,
    area: float,
    others: np.ndarray,
    other_areas: np.ndarray,
) -> np.ndarray:
    """IoU of one xyxy box against an (N, 4) xyxy array."""
    iw = np.clip(np.minimum(box[2], others[:, 2]) - np.maximum(box[0], others[:, 0]), 0, None)
    ih = np.clip(np.minimum(box[3], others[:, 3]) - np.maximum(box[1], others[:, 1]), 0, None)
    intersection = iw * ih
    union = area + other_areas - intersection
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(union > 0, intersection / union, 0.0)


def suppress(
    boxes: Sequence[Box],
    confidences: Sequence[float],
    score_threshold: float = DEFAULT_SCORE_THRESHOLD,
    iou_threshold: float = DEFAULT_IOU_THRESHOLD,
    class_ids: Optional[Sequence[int]] = None,
    class_aware: bool = False,
    top_k: int = 0,
    eta: float = 1.0,
) -> List[int]:
    """
    Run non-maximum suppression and return the surviving indices.

    Args:
        boxes: Candidate boxes.
        confidences: Candidate confidences, parallel to boxes.
        score_threshold: Candidates with confidence below this are dropped first.
        iou_threshold: A candidate is suppressed when its IoU with a kept box
            is strictly greater than this.
        class_ids: Candidate class ids, required when class_aware is set.
        class_aware: Only suppress candidates of the kept box's class.
        top_k: Stop after this many survivors (0 = no limit).
        eta: After each kept box, the IoU threshold is multiplied by eta
            while it is above 0.5 (1.0 keeps it fixed).

    Returns:
        Indices into the inputs, in the order they were kept (descending
        confidence, ties by ascending index).
    """
    if len(boxes) != len(confidences):
        raise ValueError(
            f"boxes and confidences differ in length: {len(boxes)} != {len(confidences)}"
        )
    if class_aware and (class_ids is None or len(class_ids) != len(boxes)):
        raise ValueError("class_aware suppression needs one class id per box")
    if not boxes:
        return []

    scores = np.asarray(confidences, dtype=float)
    xyxy = np.array([b.as_xyxy() for b in boxes], dtype=float).reshape(-1, 4)
    areas = (xyxy[:, 2] - xyxy[:, 0]) * (xyxy[:, 3] - xyxy[:, 1])
    labels = np.asarray(class_ids) if class_aware else None

    candidates = np.flatnonzero(scores >= score_threshold)
    order = candidates[np.argsort(-scores[candidates], kind="stable")]

    keep: List[int] = []
    threshold = iou_threshold

    for i in order:
        if keep:
            kept = np.asarray(keep)
            if labels is not None:
                kept = kept[labels[kept] == labels[i]]
            if kept.size:
                overlaps = _iou_one_to_many(xyxy[i], areas[i], xyxy[kept], areas[kept])
                if (overlaps > threshold).any():
                    continue

        keep.append(int(i))
        if top_k > 0 and len(keep) >= top_k:
            break
        if eta < 1.0 and threshold > 0.5:
            threshold *= eta

    return keep
