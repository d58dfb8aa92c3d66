"""
Pipeline engine for the video object detector.

This module owns the main processing loop: read a frame, run detection and
annotation, hand the annotated frame to the sinks, repeat. Every stage of a
frame completes before the next frame is read.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from detection.detector import ObjectDetector
from models.config import PipelineConfig
from models.detection import Detection
from models.frame import FrameData
from observation import ObservationSource
from .sinks import DisplaySink, FrameSink, VideoFileSink


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frame_count: int = 0
    detection_count: int = 0
    processing_time: float = 0.0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)

    @property
    def processing_fps(self) -> float:
        """Frames per second of detection work, excluding sink waits."""
        if self.processing_time <= 0:
            return 0.0
        return self.frame_count / self.processing_time


class PipelineEngine:
    """
    Main processing engine.

    This engine:
    - Reads frames from any ObservationSource
    - Detects and annotates each frame in place
    - Passes the annotated frame to every FrameSink
    - Paces file playback by the source frame rate

    Example:
        source = OpenCVSource(OpenCVSourceConfig(video_path="drone.mp4"))
        engine = PipelineEngine(source, detector, PipelineConfig(), [DisplaySink()])
        engine.run()
    """

    def __init__(
        self,
        source: ObservationSource,
        detector: ObjectDetector,
        config: Optional[PipelineConfig] = None,
        sinks: Optional[List[FrameSink]] = None,
    ):
        self.source = source
        self.detector = detector
        self.config = config or PipelineConfig()
        self.sinks: List[FrameSink] = list(sinks or [])
        self.stats = PipelineStats()
        self._running = False
        self._callbacks: List[Callable[[FrameData, List[Detection]], None]] = []

    def add_callback(self, callback: Callable[[FrameData, List[Detection]], None]) -> None:
        """
        Add a callback to be called after each frame is processed.

        Args:
            callback: Function taking (frame_data, detections) as arguments.
        """
        self._callbacks.append(callback)

    def frame_delay_ms(self) -> int:
        """
        Wait after each frame, in milliseconds.

        Files are paced at their own frame rate; live cameras only get the
        minimal wait needed to service the display window.
        """
        if not self.source.is_file:
            return 1
        fps = self.source.fps or self.config.default_fps
        return max(int(1000 / fps), 1)

    def run(self) -> PipelineStats:
        """
        Run the main processing loop.

        Opens the source, processes frames until the source is exhausted or
        a stop is requested, then closes the source and sinks.

        Raises:
            RuntimeError: If the source cannot be opened.
        """
        self.source.open()
        self._running = True
        self.stats = PipelineStats()
        delay_ms = self.frame_delay_ms()
        # Headless file playback still runs at the source frame rate.
        engine_paces = self.source.is_file and not any(s.paces for s in self.sinks)
        logging.info(f"Pipeline started: source={self.source.source_id}, delay={delay_ms}ms")

        try:
            while self._running:
                frame_data = self.source.read()
                if frame_data is None:
                    break

                detections = self._process_frame(frame_data)

                for callback in self._callbacks:
                    try:
                        callback(frame_data, detections)
                    except Exception as e:
                        logging.warning(f"Callback error: {e}")

                if not self._emit(frame_data, delay_ms):
                    break
                if engine_paces:
                    time.sleep(delay_ms / 1000.0)

                self._handle_periodic_tasks()

        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        finally:
            self._cleanup()

        return self.stats

    def stop(self) -> None:
        """Signal the pipeline to stop after the current frame."""
        self._running = False

    def _process_frame(self, frame_data: FrameData) -> List[Detection]:
        """Detect and annotate one frame in place."""
        t0 = time.time()
        detections = self.detector.process(frame_data.frame)
        self.stats.processing_time += time.time() - t0

        self.stats.frame_count += 1
        self.stats.detection_count += len(detections)
        if detections:
            logging.debug(
                f"[DETECT] frame={frame_data.frame_index} "
                f"objects={[(d.class_name or d.class_id, round(d.confidence, 2)) for d in detections]}"
            )
        return detections

    def _emit(self, frame_data: FrameData, delay_ms: int) -> bool:
        """Hand the frame to every sink. Returns False if any sink asked to stop."""
        keep_going = True
        for sink in self.sinks:
            if not sink.show(frame_data, delay_ms):
                keep_going = False
        return keep_going

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            logging.info(
                f"Pipeline stats: frames={self.stats.frame_count}, "
                f"detections={self.stats.detection_count}, "
                f"processing_fps={self.stats.processing_fps:.1f}"
            )
            self.stats.last_stats_log_time = now

    def _cleanup(self) -> None:
        self._running = False

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        for sink in self.sinks:
            try:
                sink.close()
            except Exception as e:
                logging.warning(f"Error closing sink: {e}")

        logging.info(
            f"Pipeline stopped: frames={self.stats.frame_count}, "
            f"detections={self.stats.detection_count}"
        )


def create_sinks_from_config(config: PipelineConfig, fps: float = 0.0) -> List[FrameSink]:
    """
    Build the sinks a pipeline config asks for.

    Args:
        config: Pipeline settings.
        fps: Frame rate for recordings; falls back to config.default_fps.
    """
    sinks: List[FrameSink] = []
    if config.display:
        sinks.append(DisplaySink(config.window_name))
    if config.record_path:
        sinks.append(VideoFileSink(config.record_path, fps=fps or config.default_fps))
    return sinks
