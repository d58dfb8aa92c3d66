"""
Tests for decoding raw output tensors into candidates.
"""

import numpy as np
import pytest

from detection.decoder import decode, decode_box
from models.detection import Box
from conftest import make_row, one_hot


class TestDecodeArithmetic:
    def test_reference_row(self, reference_row):
        """Centered box on 640x480 decodes with integer truncation."""
        tensor = np.array([reference_row], dtype=np.float32)

        class_ids, confidences, boxes = decode([tensor], 640, 480, confidence_threshold=0.4)

        assert class_ids == [3]
        assert confidences[0] == pytest.approx(0.9)
        assert boxes == [Box(left=256, top=168, width=128, height=144)]

    def test_odd_width_halving_truncates(self):
        # width 101 -> half 50, center 100 -> left 50
        box = decode_box(0.5, 0.5, 0.505, 0.5, 200, 200)
        assert box.width == 101
        assert box.left == 50

    def test_scaling_uses_float32_products(self):
        # float32(0.7) * 100 rounds to 70.0; the float64 product truncates to 69.
        tensor = np.array([[0.5, 0.5, 0.7, 0.7, 1.0, 0.9]], dtype=np.float32)

        _, _, boxes = decode([tensor], 100, 100)

        assert boxes == [Box(left=15, top=15, width=70, height=70)]

    def test_box_may_extend_outside_frame(self):
        """Boxes are not clamped to the frame."""
        box = decode_box(0.05, 0.95, 0.5, 0.5, 640, 480)
        assert box.left < 0
        assert box.bottom > 480

    def test_objectness_is_not_confidence(self):
        row = make_row(0.5, 0.5, 0.1, 0.1, one_hot(3, 1, 0.6), objectness=0.1)
        class_ids, confidences, _ = decode([np.array([row])], 100, 100)
        assert class_ids == [1]
        assert confidences == [pytest.approx(0.6)]

    def test_argmax_picks_first_on_tie(self):
        row = make_row(0.5, 0.5, 0.1, 0.1, [0.2, 0.7, 0.7])
        class_ids, _, _ = decode([np.array([row])], 100, 100)
        assert class_ids == [1]


class TestDecodeThreshold:
    def test_threshold_is_exclusive(self):
        at = make_row(0.5, 0.5, 0.1, 0.1, one_hot(2, 0, 0.5))
        above = make_row(0.5, 0.5, 0.1, 0.1, one_hot(2, 1, 0.51))
        class_ids, _, _ = decode([np.array([at, above])], 100, 100, confidence_threshold=0.5)
        assert class_ids == [1]

    def test_threshold_is_tunable(self, reference_row):
        tensor = np.array([reference_row])
        assert decode([tensor], 640, 480, confidence_threshold=0.95)[0] == []
        assert decode([tensor], 640, 480, confidence_threshold=0.1)[0] == [3]

    def test_rows_at_or_below_threshold_never_emitted(self):
        """Random rows: only rows whose best score beats the threshold survive."""
        rng = np.random.default_rng(1234)
        for _ in range(50):
            n_rows, n_classes = rng.integers(1, 40), rng.integers(1, 12)
            threshold = float(rng.uniform(0.0, 1.0))
            tensor = rng.uniform(0.0, 1.0, size=(n_rows, 5 + n_classes))

            class_ids, confidences, boxes = decode([tensor], 640, 480, confidence_threshold=threshold)

            expected = int((tensor[:, 5:].max(axis=1) > threshold).sum())
            assert len(class_ids) == len(confidences) == len(boxes) == expected
            assert all(c > threshold for c in confidences)


class TestDecodeOrdering:
    def test_tensor_then_row_order(self):
        t0 = np.array([
            make_row(0.1, 0.1, 0.1, 0.1, one_hot(3, 0, 0.5)),
            make_row(0.2, 0.2, 0.1, 0.1, one_hot(3, 1, 0.6)),
        ])
        t1 = np.array([
            make_row(0.3, 0.3, 0.1, 0.1, one_hot(3, 2, 0.7)),
        ])
        class_ids, confidences, _ = decode([t0, t1], 100, 100)
        assert class_ids == [0, 1, 2]
        assert confidences == [pytest.approx(0.5), pytest.approx(0.6), pytest.approx(0.7)]

    def test_empty_inputs(self):
        assert decode([], 640, 480) == ([], [], [])
        assert decode([np.zeros((0, 85))], 640, 480) == ([], [], [])


class TestDecodeMalformed:
    def test_tensor_without_scores_is_skipped(self, reference_row):
        bad = np.array([[0.5, 0.5, 0.2, 0.3, 1.0]])
        good = np.array([reference_row])
        class_ids, _, _ = decode([bad, good], 640, 480)
        assert class_ids == [3]

    def test_tensor_narrower_than_class_count_is_skipped(self):
        narrow = np.array([make_row(0.5, 0.5, 0.1, 0.1, one_hot(3, 2, 0.9))])
        assert decode([narrow], 100, 100, num_classes=80) == ([], [], [])

    def test_num_classes_limits_score_columns(self):
        # Column beyond the known classes is ignored.
        row = make_row(0.5, 0.5, 0.1, 0.1, [0.1, 0.6, 0.99])
        class_ids, _, _ = decode([np.array([row])], 100, 100, num_classes=2)
        assert class_ids == [1]

    def test_non_finite_geometry_row_is_skipped(self):
        rows = np.array([
            make_row(np.nan, 0.5, 0.1, 0.1, one_hot(2, 0, 0.9)),
            make_row(0.5, 0.5, 0.1, 0.1, one_hot(2, 1, 0.8)),
        ])
        class_ids, _, _ = decode([rows], 100, 100)
        assert class_ids == [1]

    def test_one_dimensional_tensor_is_single_row(self, reference_row):
        class_ids, _, _ = decode([np.array(reference_row)], 640, 480)
        assert class_ids == [3]

    def test_batched_tensor_is_flattened(self, reference_row):
        tensor = np.array([[reference_row, reference_row]])
        assert tensor.ndim == 3
        class_ids, _, _ = decode([tensor], 640, 480)
        assert class_ids == [3, 3]

    def test_score_offset_without_objectness(self):
        row = [0.5, 0.5, 0.1, 0.1, 0.2, 0.9]
        class_ids, _, _ = decode([np.array([row])], 100, 100, score_offset=4)
        assert class_ids == [1]
