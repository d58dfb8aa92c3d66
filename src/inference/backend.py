"""
Inference engine interface.

Engines take a preprocessed blob and return the network's raw output
tensors. Decoding to pixel-space detections happens downstream, so an engine
never needs to know the source frame size.
"""

from __future__ import annotations

from typing import List, Protocol, Tuple, Union

import cv2
import numpy as np


class InferenceEngine(Protocol):
    def forward(self, blob: np.ndarray) -> List[np.ndarray]:
        ...


def make_blob(
    frame: np.ndarray,
    size: Union[int, Tuple[int, int]] = 416,
    swap_rb: bool = True,
) -> np.ndarray:
    """
    Resize and normalize a frame into an NCHW float blob.

    Pixel values are scaled to [0, 1], no mean is subtracted and the image is
    stretched (not cropped) to the blob size.

    Args:
        frame: BGR frame.
        size: Blob side length, or (width, height).
        swap_rb: Swap the R and B channels (Darknet models expect RGB).
    """
    if isinstance(size, int):
        size = (size, size)
    return cv2.dnn.blobFromImage(
        frame,
        scalefactor=1 / 255.0,
        size=size,
        mean=(0, 0, 0),
        swapRB=swap_rb,
        crop=False,
    )
