"""Tests for decoding raw YOLOv8 output tensors."""

import numpy as np
import pytest

from br_recorder.errors import DecodeError
from br_recorder.infer.postprocess import (decode_pose_predictions, decode_predictions,
                                           prediction_rows)
from br_recorder.infer.tasks import POSE_KEYPOINTS, DetectionTask


# ── helpers ──────────────────────────────────────────────────────────────────

def rows(*predictions):
    return np.array(predictions, dtype=np.float32)


def decode(r, num_classes=2, image_size=(640, 640), input_size=(640, 640), threshold=0.25):
    return decode_predictions(r, num_classes, image_size, input_size, threshold)


# ── tests ────────────────────────────────────────────────────────────────────

def test_single_confident_row():
    result = decode(rows([100, 100, 20, 20, 0.9, 0.1]))
    assert len(result) == 2
    assert len(result[0]) == 1 and result[1] == []
    detection = result[0][0]
    assert detection.class_id == 0
    assert detection.confidence == pytest.approx(0.9)


def test_row_below_threshold_is_dropped():
    result = decode(rows([100, 100, 20, 20, 0.2, 0.1]))
    assert result == [[], []]


def test_threshold_is_exclusive():
    result = decode(rows([100, 100, 20, 20, 0.5, 0.0]), threshold=0.5)
    assert result == [[], []]


def test_non_positive_score_is_dropped_even_with_negative_threshold():
    result = decode(rows([100, 100, 20, 20, 0.0, -1.0]), threshold=-0.5)
    assert result == [[], []]


def test_ties_go_to_lowest_class():
    result = decode(rows([100, 100, 20, 20, 0.6, 0.6]))
    assert len(result[0]) == 1 and result[1] == []


def test_corner_conversion():
    box = decode(rows([100, 50, 20, 10, 0.1, 0.8]))[1][0].box
    assert (box.x1, box.y1, box.x2, box.y2) == (90, 45, 110, 55)


def test_non_uniform_scaling():
    # 1280x480 frame squeezed into 640x640 input
    box = decode(rows([100, 100, 20, 20, 0.9, 0.0]),
                 image_size=(1280, 480), input_size=(640, 640))[0][0].box
    assert box.x1 == pytest.approx(180) and box.x2 == pytest.approx(220)
    assert box.y1 == pytest.approx(67.5) and box.y2 == pytest.approx(82.5)


def test_degenerate_boxes_are_discarded():
    result = decode(rows([100, 100, 0, 20, 0.9, 0.0], [100, 100, 20, -4, 0.9, 0.0]))
    assert result == [[], []]


def test_wrong_row_width_raises():
    with pytest.raises(DecodeError):
        decode(rows([100, 100, 20, 20, 0.9, 0.1, 0.3]))


def test_non_2d_tensor_raises():
    with pytest.raises(DecodeError):
        decode(np.zeros((6,), dtype=np.float32))


def test_no_predictions():
    assert decode(np.zeros((0, 6), dtype=np.float32)) == [[], []]


def test_prediction_rows_transposes_model_output():
    output = np.zeros((1, 6, 8400), dtype=np.float32)
    assert prediction_rows(output).shape == (8400, 6)


def test_prediction_rows_rejects_batches():
    with pytest.raises(DecodeError):
        prediction_rows(np.zeros((2, 6, 10), dtype=np.float32))


def test_detect_task_decodes_raw_output():
    output = rows([320, 320, 40, 40, 0.1, 0.2, 0.0, 0.95]).T[np.newaxis]
    result = DetectionTask.DETECT.decode(output, 4, (640, 640), (640, 640), 0.5)
    assert [len(bucket) for bucket in result] == [0, 0, 0, 1]


def test_pose_rows():
    keypoints = np.tile([10.0, 20.0, 0.9], POSE_KEYPOINTS)
    row = np.concatenate([[100, 100, 20, 20, 0.8], keypoints])
    result = decode_pose_predictions(row[np.newaxis], POSE_KEYPOINTS, (1280, 640), (640, 640), 0.5)
    assert len(result) == 1 and len(result[0]) == 1
    kps = result[0][0].keypoints
    assert kps.shape == (POSE_KEYPOINTS, 3)
    assert kps[0].tolist() == pytest.approx([20.0, 20.0, 0.9])


def test_pose_task_wrong_width_raises():
    output = np.zeros((1, 6, 3), dtype=np.float32)
    with pytest.raises(DecodeError):
        DetectionTask.POSE.decode(output, 1, (640, 640), (640, 640), 0.5)
