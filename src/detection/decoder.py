"""
Decoding of raw YOLO output tensors into candidate detections.

Each tensor row is [cx, cy, w, h, objectness, c0, ..., c(K-1)] with the
geometry normalized to the blob. The best class score is the candidate's
confidence; objectness is not used. Boxes are scaled to the source frame and
truncated to integer pixels, never clamped.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from models.detection import Box

DEFAULT_CONFIDENCE_THRESHOLD = 0.4
DARKNET_SCORE_OFFSET = 5

Candidates = Tuple[List[int], List[float], List[Box]]


def _as_rows(tensor: np.ndarray) -> np.ndarray:
    """View a tensor as 2-D rows over its last axis."""
    arr = np.asarray(tensor)
    if arr.ndim == 1:
        return arr.reshape(1, -1)
    if arr.ndim > 2:
        return arr.reshape(-1, arr.shape[-1])
    return arr


def decode_box(
    cx: float,
    cy: float,
    w: float,
    h: float,
    frame_width: int,
    frame_height: int,
) -> Box:
    """
    Scale one normalized center/size box to integer pixel coordinates.

    The products are taken in float32, the precision of the network output.
    """
    fw = np.float32(frame_width)
    fh = np.float32(frame_height)
    center_x = int(np.float32(cx) * fw)
    center_y = int(np.float32(cy) * fh)
    width = int(np.float32(w) * fw)
    height = int(np.float32(h) * fh)
    left = center_x - int(width / 2)
    top = center_y - int(height / 2)
    return Box(left=left, top=top, width=width, height=height)


def decode(
    raw_tensors: Sequence[np.ndarray],
    frame_width: int,
    frame_height: int,
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    score_offset: int = DARKNET_SCORE_OFFSET,
    num_classes: Optional[int] = None,
) -> Candidates:
    """
    Convert raw output tensors into parallel candidate lists.

    Args:
        raw_tensors: Network outputs, one row per candidate.
        frame_width: Source frame width in pixels.
        frame_height: Source frame height in pixels.
        confidence_threshold: Rows whose best class score is <= this are dropped.
        score_offset: Column where the class scores start.
        num_classes: Expected class count. When set, only that many score
            columns are read and narrower tensors are skipped.

    Returns:
        (class_ids, confidences, boxes), same length, in tensor then row order.
    """
    class_ids: List[int] = []
    confidences: List[float] = []
    boxes: List[Box] = []

    for tensor_index, tensor in enumerate(raw_tensors):
        rows = _as_rows(tensor)
        if rows.size == 0:
            continue

        n_cols = rows.shape[1]
        if n_cols <= score_offset:
            logging.warning(
                f"Skipping output tensor {tensor_index}: {n_cols} columns, "
                f"no class scores after column {score_offset}"
            )
            continue
        if num_classes is not None and n_cols < score_offset + num_classes:
            logging.warning(
                f"Skipping output tensor {tensor_index}: {n_cols} columns, "
                f"expected {score_offset + num_classes} for {num_classes} classes"
            )
            continue

        scores = rows[:, score_offset:]
        if num_classes is not None:
            scores = scores[:, :num_classes]
        row_confidences = scores.max(axis=1)
        row_class_ids = scores.argmax(axis=1)

        skipped = 0
        for j in np.flatnonzero(row_confidences > confidence_threshold):
            cx, cy, w, h = rows[j, :4]
            if not np.isfinite((cx, cy, w, h)).all():
                skipped += 1
                continue
            class_ids.append(int(row_class_ids[j]))
            confidences.append(float(row_confidences[j]))
            boxes.append(decode_box(cx, cy, w, h, frame_width, frame_height))

        if skipped:
            logging.warning(
                f"Skipped {skipped} rows with non-finite geometry in output tensor {tensor_index}"
            )

    logging.debug(f"Decoded {len(boxes)} candidates from {len(raw_tensors)} tensors")
    return class_ids, confidences, boxes
