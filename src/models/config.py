"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class SourceConfig:
    """Frame source configuration. A video path wins over the camera index."""
    video: Optional[str] = None
    device_id: int = 0
    source_id: str = "main"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SourceConfig":
        return cls(
            video=d.get("video") or None,
            device_id=d.get("device_id", 0),
            source_id=d.get("source_id", "main"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "video": self.video,
            "device_id": self.device_id,
            "source_id": self.source_id,
        }


@dataclass
class NetworkConfig:
    """Darknet network files and OpenCV DNN placement."""
    cfg: str = "yolo.cfg"
    weights: str = "yolo.weights"
    classes: str = "coco.names"
    backend: str = "cuda"
    blob_size: int = 416
    swap_rb: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "NetworkConfig":
        return cls(
            cfg=d.get("cfg", "yolo.cfg"),
            weights=d.get("weights", "yolo.weights"),
            classes=d.get("classes", "coco.names"),
            backend=d.get("backend", "cuda"),
            blob_size=d.get("blob_size", 416),
            swap_rb=d.get("swap_rb", True),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cfg": self.cfg,
            "weights": self.weights,
            "classes": self.classes,
            "backend": self.backend,
            "blob_size": self.blob_size,
            "swap_rb": self.swap_rb,
        }


@dataclass
class DetectorConfig:
    """
    Decoding and suppression parameters.

    Attributes:
        confidence_threshold: Decoder drops rows whose best class score is <= this.
        score_threshold: Suppression drops candidates whose confidence is < this.
        iou_threshold: Suppression drops boxes overlapping a kept box by more than this.
        score_offset: Column where class scores start (5 for Darknet rows with objectness).
        num_classes: Expected class count; rows narrower than score_offset + num_classes are skipped.
        class_aware: Only suppress overlapping boxes of the same class.
        top_k: Keep at most this many detections per frame (0 = no limit).
        eta: Adaptive IoU threshold decay applied after each kept box (1.0 = off).
    """
    confidence_threshold: float = 0.4
    score_threshold: float = 0.5
    iou_threshold: float = 0.4
    score_offset: int = 5
    num_classes: Optional[int] = None
    class_aware: bool = False
    top_k: int = 0
    eta: float = 1.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectorConfig":
        return cls(
            confidence_threshold=d.get("confidence_threshold", 0.4),
            score_threshold=d.get("score_threshold", 0.5),
            iou_threshold=d.get("iou_threshold", 0.4),
            score_offset=d.get("score_offset", 5),
            num_classes=d.get("num_classes"),
            class_aware=d.get("class_aware", False),
            top_k=d.get("top_k", 0),
            eta=d.get("eta", 1.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "confidence_threshold": self.confidence_threshold,
            "score_threshold": self.score_threshold,
            "iou_threshold": self.iou_threshold,
            "score_offset": self.score_offset,
            "class_aware": self.class_aware,
            "top_k": self.top_k,
            "eta": self.eta,
        }
        if self.num_classes is not None:
            d["num_classes"] = self.num_classes
        return d


@dataclass
class AnnotationConfig:
    """Marker and label appearance. Colors are BGR."""
    marker_color: List[int] = field(default_factory=lambda: [255, 0, 0])
    marker_thickness: int = 3
    font_face: int = 0  # cv2.FONT_HERSHEY_SIMPLEX
    font_scale: float = 0.75
    text_thickness: int = 1
    text_color: List[int] = field(default_factory=lambda: [0, 0, 0])
    label_background: List[int] = field(default_factory=lambda: [255, 255, 255])

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AnnotationConfig":
        return cls(
            marker_color=d.get("marker_color", [255, 0, 0]),
            marker_thickness=d.get("marker_thickness", 3),
            font_face=d.get("font_face", 0),
            font_scale=d.get("font_scale", 0.75),
            text_thickness=d.get("text_thickness", 1),
            text_color=d.get("text_color", [0, 0, 0]),
            label_background=d.get("label_background", [255, 255, 255]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "marker_color": self.marker_color,
            "marker_thickness": self.marker_thickness,
            "font_face": self.font_face,
            "font_scale": self.font_scale,
            "text_thickness": self.text_thickness,
            "text_color": self.text_color,
            "label_background": self.label_background,
        }


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        display: Show annotated frames in an OpenCV window.
        window_name: Title of the display window.
        record_path: Write annotated frames to this video file when set.
        default_fps: Pacing rate for file sources that report no FPS.
        stats_log_interval: Seconds between status log messages.
    """
    display: bool = True
    window_name: str = "Frame"
    record_path: Optional[str] = None
    default_fps: float = 30.0
    stats_log_interval: float = 60.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PipelineConfig":
        return cls(
            display=d.get("display", True),
            window_name=d.get("window_name", "Frame"),
            record_path=d.get("record_path") or None,
            default_fps=d.get("default_fps", 30.0),
            stats_log_interval=d.get("stats_log_interval", 60.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "display": self.display,
            "window_name": self.window_name,
            "default_fps": self.default_fps,
            "stats_log_interval": self.stats_log_interval,
        }
        if self.record_path is not None:
            d["record_path"] = self.record_path
        return d


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    source: SourceConfig = field(default_factory=SourceConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    annotation: AnnotationConfig = field(default_factory=AnnotationConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    log_path: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            source=SourceConfig.from_dict(d.get("source") or {}),
            network=NetworkConfig.from_dict(d.get("network") or {}),
            detector=DetectorConfig.from_dict(d.get("detector") or {}),
            annotation=AnnotationConfig.from_dict(d.get("annotation") or {}),
            pipeline=PipelineConfig.from_dict(d.get("pipeline") or {}),
            log_path=d.get("log_path"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or logging)."""
        return {
            "source": self.source.to_dict(),
            "network": self.network.to_dict(),
            "detector": self.detector.to_dict(),
            "annotation": self.annotation.to_dict(),
            "pipeline": self.pipeline.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
