"""
Run YOLO object detection on a video file or camera stream.

Each frame is run through the network, de-duplicated with non-maximum
suppression, annotated with a marker and label per object, and shown in a
window until the stream ends or a key is pressed.

Usage:
    python src/main.py --video drone.mp4 --weights data/yolo.weights --cfg data/yolo.cfg
    python src/main.py --device 0 --classes data/coco.names

Arguments:
    --video: Path to the video file. If not specified, camera input is used.
    --device: Device index for camera input (default 0).
    --weights / --cfg / --classes: Network weights, network config, class names.
    --config: Path to a YAML settings file (thresholds, display, logging).
"""

import os
import sys
import argparse
import logging
from typing import Any, Dict, Optional, Tuple

import yaml

from detection.detector import create_detector
from inference.darknet_backend import SUPPORTED_BACKENDS
from models.config import Config
from observation import create_source_from_config
from ops.logging import setup_logging
from pipeline.engine import PipelineEngine, create_sinks_from_config

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        # Finally apply explicit config_path if it's not one of the files above
        if (
            os.path.exists(config_path)
            and os.path.abspath(config_path) != os.path.abspath(local_overrides_path)
            and os.path.abspath(config_path) != os.path.abspath(base_path)
        ):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['network', 'detector', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Source settings
    source = config.get('source', {}) or {}
    device_id = source.get('device_id', 0)
    if not isinstance(device_id, int) or isinstance(device_id, bool) or device_id < 0:
        return False, "source.device_id must be a non-negative integer"
    video = source.get('video')
    if video is not None and not isinstance(video, str):
        return False, "source.video must be a file path"

    # Network settings
    network = config.get('network', {}) or {}
    for key in ('cfg', 'weights'):
        if not isinstance(network.get(key), str) or not network.get(key):
            return False, f"network.{key} is required"
    if 'classes' in network and network['classes'] is not None and not isinstance(network['classes'], str):
        return False, "network.classes must be a file path"
    backend = network.get('backend', 'cuda')
    if backend not in SUPPORTED_BACKENDS:
        return False, f"network.backend must be one of: {', '.join(SUPPORTED_BACKENDS)}"
    blob_size = network.get('blob_size', 416)
    if not isinstance(blob_size, int) or blob_size <= 0 or blob_size % 32 != 0:
        return False, "network.blob_size must be a positive multiple of 32"

    # Detector thresholds
    detector = config.get('detector', {}) or {}
    for key in ('confidence_threshold', 'score_threshold', 'iou_threshold'):
        if key in detector:
            value = detector[key]
            if not _is_number(value) or not (0 <= value <= 1):
                return False, f"detector.{key} must be between 0 and 1"
    if 'score_offset' in detector:
        offset = detector['score_offset']
        if not isinstance(offset, int) or offset < 4:
            return False, "detector.score_offset must be an integer >= 4"
    if detector.get('num_classes') is not None:
        nc = detector['num_classes']
        if not isinstance(nc, int) or nc <= 0:
            return False, "detector.num_classes must be a positive integer"
    if 'top_k' in detector:
        if not isinstance(detector['top_k'], int) or detector['top_k'] < 0:
            return False, "detector.top_k must be a non-negative integer"
    if 'eta' in detector:
        eta = detector['eta']
        if not _is_number(eta) or not (0 < eta <= 1):
            return False, "detector.eta must be in (0, 1]"

    # Pipeline settings
    pipeline = config.get('pipeline', {}) or {}
    if 'default_fps' in pipeline:
        if not _is_number(pipeline['default_fps']) or pipeline['default_fps'] <= 0:
            return False, "pipeline.default_fps must be a positive number"

    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def apply_cli_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Fold command-line flags into the config dict; flags win over files."""
    source = config.setdefault('source', {})
    network = config.setdefault('network', {})
    pipeline = config.setdefault('pipeline', {})

    if args.video:
        source['video'] = args.video
    if args.device is not None:
        source['device_id'] = args.device
    if args.weights:
        network['weights'] = args.weights
    if args.cfg:
        network['cfg'] = args.cfg
    if args.classes:
        network['classes'] = args.classes
    if args.backend:
        network['backend'] = args.backend
    if args.no_display:
        pipeline['display'] = False
    if args.record:
        pipeline['record_path'] = args.record
    if args.log_level:
        config['log_level'] = args.log_level
    return config


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Use this script to run YOLO object detection on video input',
        epilog='Usage examples: python src/main.py --video=video.mp4 --device=0',
    )
    parser.add_argument('--video', '-v', type=str, default=None,
                        help='Path to the video file. If not specified, camera input will be used.')
    parser.add_argument('--device', '-d', type=int, default=None,
                        help='Device index for camera input (default is 0).')
    parser.add_argument('--weights', type=str, default=None,
                        help='Path to the YOLO weights file.')
    parser.add_argument('--cfg', type=str, default=None,
                        help='Path to the YOLO config file.')
    parser.add_argument('--classes', type=str, default=None,
                        help='Path to the file with class names.')
    parser.add_argument('--backend', type=str, default=None, choices=SUPPORTED_BACKENDS,
                        help='OpenCV DNN backend/target.')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--no-display', action='store_true',
                        help='Do not open a display window')
    parser.add_argument('--record', type=str, default=None,
                        help='Write annotated video to this path')
    parser.add_argument('--log-level', type=str, default=None, choices=VALID_LOG_LEVELS,
                        help='Override the configured log level')
    return parser


def main(argv=None) -> int:
    """Main application function. Returns the process exit code."""
    args = build_arg_parser().parse_args(argv)

    raw_config = apply_cli_overrides(load_config(args.config), args)

    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        return 1

    config = Config.from_dict(raw_config)
    setup_logging(config.log_path, config.log_level)
    logging.info("Starting video object detector")

    try:
        detector = create_detector(config)
    except (RuntimeError, ValueError) as e:
        logging.error(f"Failed to load network: {e}")
        return 1

    source = create_source_from_config(config.source)
    try:
        source.open()
    except RuntimeError as e:
        logging.error(f"Error opening video stream or file: {e}")
        return 1

    sinks = create_sinks_from_config(config.pipeline, fps=source.fps)
    engine = PipelineEngine(source, detector, config.pipeline, sinks)
    try:
        stats = engine.run()
    except RuntimeError as e:
        logging.error(f"Pipeline failed: {e}")
        return 1

    logging.info(
        f"Finished: frames={stats.frame_count}, detections={stats.detection_count}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
