"""
Frame sinks: where annotated frames go after processing.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import cv2

from models.frame import FrameData


class FrameSink(ABC):
    """
    Consumes annotated frames, one per pipeline iteration.

    A sink with paces = True waits delay_ms itself; when no sink does, the
    engine sleeps instead.
    """

    paces = False

    @abstractmethod
    def show(self, frame_data: FrameData, delay_ms: int) -> bool:
        """
        Consume one frame.

        Args:
            frame_data: The annotated frame.
            delay_ms: Pacing delay the sink may wait after the frame.

        Returns:
            False to ask the pipeline to stop.
        """
        pass

    def close(self) -> None:
        """Release any resources. Safe to call multiple times."""
        pass


class DisplaySink(FrameSink):
    """
    Shows frames in an OpenCV window.

    Waits delay_ms for a key after each frame; any key press stops the
    pipeline.
    """

    paces = True

    def __init__(self, window_name: str = "Frame"):
        self.window_name = window_name
        self._shown = False

    def show(self, frame_data: FrameData, delay_ms: int) -> bool:
        cv2.imshow(self.window_name, frame_data.frame)
        self._shown = True
        key = cv2.waitKey(max(int(delay_ms), 1))
        if key >= 0:
            logging.info(f"Key {key} pressed, stopping")
            return False
        return True

    def close(self) -> None:
        if self._shown:
            cv2.destroyAllWindows()
            self._shown = False


class VideoFileSink(FrameSink):
    """
    Writes frames to a video file.

    The writer is opened with the first frame so its size matches the source.
    """

    def __init__(self, path: str, fps: float = 30.0, fourcc: str = "mp4v"):
        self.path = path
        self.fps = fps
        self.fourcc = fourcc
        self._writer: Optional[cv2.VideoWriter] = None

    def _open(self, width: int, height: int) -> None:
        out_dir = os.path.dirname(self.path)
        if out_dir and not os.path.exists(out_dir):
            os.makedirs(out_dir)

        writer = cv2.VideoWriter(
            self.path,
            cv2.VideoWriter_fourcc(*self.fourcc),
            self.fps,
            (width, height),
            True,
        )
        if not writer.isOpened():
            raise RuntimeError(f"Failed to open video writer: {self.path}")
        self._writer = writer
        logging.info(f"Video recording started: {self.path} ({width}x{height} @ {self.fps} fps)")

    def show(self, frame_data: FrameData, delay_ms: int) -> bool:
        if self._writer is None:
            self._open(frame_data.width, frame_data.height)
        self._writer.write(frame_data.frame)
        return True

    def close(self) -> None:
        if self._writer is not None:
            self._writer.release()
            self._writer = None
            logging.info(f"Video saved: {self.path}")
