"""
OpenCV-based observation source.

Supports:
- Cameras (device_id as int, e.g., 0)
- Video files (video_path)

A failed read is end-of-stream for both kinds; there is no reconnection.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional, Union

import cv2

from models.config import SourceConfig
from models.frame import FrameData
from .base import ObservationSource, ObservationConfig


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Configuration for OpenCV-based observation sources.

    Attributes:
        video_path: Video file to play. When None the camera is used.
        device_id: Camera index used when no video file is given.
    """
    video_path: Optional[str] = None
    device_id: int = 0

    @classmethod
    def from_source_config(cls, cfg: SourceConfig) -> "OpenCVSourceConfig":
        """Adapter: Create OpenCVSourceConfig from the typed app config."""
        return cls(
            source_id=cfg.source_id,
            video_path=cfg.video,
            device_id=cfg.device_id,
        )


class OpenCVSource(ObservationSource):
    """
    Wraps cv2.VideoCapture to provide frames as FrameData objects.

    Example:
        config = OpenCVSourceConfig(video_path="drone.mp4")
        with OpenCVSource(config) as source:
            for frame_data in source:
                process(frame_data.frame)
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def target(self) -> Union[int, str]:
        """What is handed to VideoCapture: the file path or the camera index."""
        if self._opencv_config.video_path:
            return self._opencv_config.video_path
        return self._opencv_config.device_id

    @property
    def is_file(self) -> bool:
        return bool(self._opencv_config.video_path)

    @property
    def fps(self) -> float:
        if self._cap is None:
            return 0.0
        fps = self._cap.get(cv2.CAP_PROP_FPS)
        return float(fps) if fps and fps > 0 else 0.0

    def open(self) -> None:
        """Open the capture device or file."""
        if self._is_open:
            return

        if self.is_file:
            cap = cv2.VideoCapture(self.target, cv2.CAP_FFMPEG)
        else:
            cap = cv2.VideoCapture(self.target, cv2.CAP_ANY)

        if not cap.isOpened():
            cap.release()
            raise RuntimeError(f"Failed to open video source: {self.target}")

        self._cap = cap
        self._is_open = True
        self._frame_index = 0

        logging.info(
            f"OpenCVSource opened: source_id={self.source_id}, "
            f"target={self.target}, fps={self.fps}"
        )

    def read(self) -> Optional[FrameData]:
        """Read the next frame; None at end of file or on capture failure."""
        if not self._is_open or self._cap is None:
            return None

        ret, frame = self._cap.read()
        if not ret or frame is None:
            logging.info(f"End of stream reached: source_id={self.source_id}")
            return None

        self._frame_index += 1
        return FrameData.from_numpy(
            frame,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        """Release the capture."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        if self._is_open:
            logging.info(f"OpenCVSource closed: source_id={self.source_id}")
        self._is_open = False


def create_source_from_config(cfg: SourceConfig) -> OpenCVSource:
    """Factory: build an OpenCVSource from the typed source config."""
    return OpenCVSource(OpenCVSourceConfig.from_source_config(cfg))
