"""
OpenCV DNN inference engine for Darknet (YOLO) networks.

Loads a .cfg/.weights pair once and runs a forward pass per blob, returning
every unconnected output layer.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List

import cv2
import numpy as np

from .backend import InferenceEngine


_DNN_PLACEMENTS = {
    "cpu": (cv2.dnn.DNN_BACKEND_OPENCV, cv2.dnn.DNN_TARGET_CPU),
    "cuda": (cv2.dnn.DNN_BACKEND_CUDA, cv2.dnn.DNN_TARGET_CUDA),
    "cuda_fp16": (cv2.dnn.DNN_BACKEND_CUDA, cv2.dnn.DNN_TARGET_CUDA_FP16),
}

SUPPORTED_BACKENDS = tuple(_DNN_PLACEMENTS)


@dataclass(frozen=True)
class DarknetConfig:
    cfg_path: str
    weights_path: str
    backend: str = "cuda"


class DarknetEngine(InferenceEngine):
    """
    Darknet network wrapped by cv2.dnn.

    Construction fails with RuntimeError if the network cannot be loaded;
    there is no partially initialised engine.
    """

    def __init__(self, cfg: DarknetConfig):
        self.cfg = cfg
        if cfg.backend not in _DNN_PLACEMENTS:
            raise ValueError(
                f"Unknown DNN backend '{cfg.backend}', expected one of: {', '.join(SUPPORTED_BACKENDS)}"
            )
        for path in (cfg.cfg_path, cfg.weights_path):
            if not os.path.exists(path):
                raise RuntimeError(f"Network file not found: {path}")

        try:
            net = cv2.dnn.readNetFromDarknet(cfg.cfg_path, cfg.weights_path)
        except cv2.error as e:
            raise RuntimeError(
                f"Failed to load Darknet network from {cfg.cfg_path} / {cfg.weights_path}"
            ) from e
        if net.empty():
            raise RuntimeError(
                f"Darknet network is empty: {cfg.cfg_path} / {cfg.weights_path}"
            )

        dnn_backend, dnn_target = _DNN_PLACEMENTS[cfg.backend]
        net.setPreferableBackend(dnn_backend)
        net.setPreferableTarget(dnn_target)

        self._net = net
        self._output_names = list(net.getUnconnectedOutLayersNames())
        logging.info(
            f"Darknet network loaded: cfg={cfg.cfg_path}, backend={cfg.backend}, "
            f"outputs={self._output_names}"
        )

    @property
    def output_names(self) -> List[str]:
        return list(self._output_names)

    def forward(self, blob: np.ndarray) -> List[np.ndarray]:
        self._net.setInput(blob)
        outs = self._net.forward(self._output_names)
        return [np.asarray(o) for o in outs]
