"""
Tests for detection overlay rendering.
"""

import cv2
import numpy as np
import pytest

from detection.annotator import Annotator
from models.config import AnnotationConfig
from models.detection import Box, Detection

BLUE = (255, 0, 0)
WHITE = (255, 255, 255)


def _has_color(img, color):
    return bool((img == np.array(color, dtype=img.dtype)).all(axis=2).any())


@pytest.fixture
def annotator(class_labels):
    return Annotator(class_labels)


class TestFormatLabel:
    def test_known_class_gets_name_prefix(self, annotator):
        assert annotator.format_label(2, 0.9) == "car: 0.90"

    def test_class_beyond_table_gets_confidence_only(self, annotator, class_labels):
        assert annotator.format_label(len(class_labels), 0.9) == "0.90"
        assert annotator.format_label(79, 0.5) == "0.50"

    def test_negative_class_gets_confidence_only(self, annotator):
        assert annotator.format_label(-1, 0.75) == "0.75"

    def test_empty_table(self):
        assert Annotator().format_label(0, 0.66) == "0.66"


class TestLabelLayout:
    def test_label_near_top_is_pushed_into_frame(self, annotator):
        (_, label_height), _ = cv2.getTextSize("car: 0.90", cv2.FONT_HERSHEY_SIMPLEX, 0.75, 1)

        for top in (-100, -1, 0, 3, label_height - 1):
            layout = annotator.label_layout("car: 0.90", 10, top)
            assert layout.background_top_left[1] >= 0
            assert layout.origin == (10, label_height)

    def test_label_sits_on_box_top_when_room(self, annotator):
        (label_width, label_height), baseline = cv2.getTextSize(
            "car: 0.90", cv2.FONT_HERSHEY_SIMPLEX, 0.75, 1
        )
        layout = annotator.label_layout("car: 0.90", 40, 200)

        assert layout.origin == (40, 200)
        assert layout.background_top_left == (40, 200 - label_height)
        assert layout.background_bottom_right == (40 + label_width, 200 + baseline)

    def test_layout_follows_font_scale(self, class_labels):
        small = Annotator(class_labels, AnnotationConfig(font_scale=0.5)).label_layout("x", 0, 100)
        large = Annotator(class_labels, AnnotationConfig(font_scale=2.0)).label_layout("x", 0, 100)
        assert large.background_bottom_right[0] > small.background_bottom_right[0]


class TestAnnotate:
    def test_draws_in_place(self, annotator, frame):
        det = Detection(class_id=2, confidence=0.9, box=Box(200, 150, 100, 80))

        result = annotator.annotate(frame, det)

        assert result is frame
        assert _has_color(frame, BLUE)
        assert _has_color(frame, WHITE)

    def test_background_drawn_at_frame_top_for_box_at_row_zero(self, annotator, frame):
        det = Detection(class_id=0, confidence=0.9, box=Box(50, 0, 100, 100))
        annotator.annotate(frame, det)

        layout = annotator.label_layout("person: 0.90", 50, 0)
        (x1, y1), (x2, y2) = layout.background_top_left, layout.background_bottom_right
        assert y1 == 0
        assert _has_color(frame[y1:y2, x1:x2], WHITE)

    def test_unnamed_label_is_narrower(self, annotator):
        named = np.zeros((200, 400, 3), dtype=np.uint8)
        unnamed = np.zeros((200, 400, 3), dtype=np.uint8)
        box = Box(10, 100, 50, 50)

        annotator.annotate(named, Detection(class_id=1, confidence=0.9, box=box))
        annotator.annotate(unnamed, Detection(class_id=99, confidence=0.9, box=box))

        def white_columns(img):
            return int((img == 255).all(axis=2).any(axis=0).sum())

        assert white_columns(unnamed) < white_columns(named)

    @pytest.mark.parametrize("box", [
        Box(-500, -500, 100, 100),
        Box(1000, 1000, 50, 50),
        Box(-30, -30, 700, 600),
        Box(10, 10, -5, 20),
        Box(0, 0, 0, 0),
    ])
    def test_out_of_frame_and_degenerate_boxes_do_not_raise(self, annotator, frame, box):
        annotator.annotate(frame, Detection(class_id=0, confidence=0.7, box=box))

    def test_custom_marker_style(self, class_labels, frame):
        style = AnnotationConfig(marker_color=[0, 0, 255], marker_thickness=1)
        Annotator(class_labels, style).annotate(
            frame, Detection(class_id=0, confidence=0.9, box=Box(300, 200, 60, 60))
        )
        assert _has_color(frame, (0, 0, 255))
        assert not _has_color(frame, BLUE)

    def test_annotate_all(self, annotator, frame):
        dets = [
            Detection(class_id=0, confidence=0.9, box=Box(20, 100, 40, 40)),
            Detection(class_id=1, confidence=0.8, box=Box(400, 300, 40, 40)),
        ]
        assert annotator.annotate_all(frame, dets) is frame
        assert _has_color(frame[90:150, 0:200], WHITE)
        assert _has_color(frame[290:350, 380:640], WHITE)
