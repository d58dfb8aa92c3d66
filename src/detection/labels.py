"""
Class label table loading.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Sequence, Tuple


def load_class_labels(path: Optional[str]) -> Tuple[str, ...]:
    """
    Load a newline-delimited class label file.

    Line order defines the class index. A missing or empty file yields an
    empty table; detections are then labelled with their confidence only.
    """
    if not path:
        logging.warning("No class label file configured, labels will show confidence only")
        return ()
    if not os.path.exists(path):
        logging.warning(f"Class label file not found: {path}, labels will show confidence only")
        return ()

    with open(path, "r", encoding="utf-8", errors="replace") as f:
        labels = tuple(line.rstrip("\r\n") for line in f)

    if any("\ufffd" in label for label in labels):
        logging.warning(f"Class label file is not valid UTF-8: {path}, undecodable bytes replaced")
    if not labels:
        logging.warning(f"Class label file is empty: {path}")
    else:
        logging.info(f"Loaded {len(labels)} class labels from {path}")
    return labels


def label_for(labels: Sequence[str], class_id: int) -> Optional[str]:
    """Return the label for class_id, or None when the table has no entry."""
    if 0 <= class_id < len(labels):
        return labels[class_id]
    return None
