"""Tests for drawing detections on frames."""

import numpy as np

from br_recorder.infer.geometry import BoundingBox
from br_recorder.infer.postprocess import Detection
from br_recorder.overlay.annotate import BOX_COLOR, draw_detections

NAMES = ["real bullet", "empty bullet"]


def frame_with_one_box(legend_size):
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    detections = [[Detection(BoundingBox(10, 20, 60, 80), 0, 0.87)], []]
    return frame, draw_detections(frame, detections, NAMES, legend_size)


def test_original_frame_is_untouched():
    frame, annotated = frame_with_one_box(14)
    assert frame.max() == 0
    assert annotated.max() > 0


def test_box_outline_drawn():
    _, annotated = frame_with_one_box(0)
    assert tuple(annotated[80, 30]) == BOX_COLOR
    assert tuple(annotated[50, 60]) == BOX_COLOR
    assert annotated[50, 30].max() == 0


def test_pose_keypoints_below_visibility_are_skipped():
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    keypoints = np.zeros((17, 3), dtype=np.float32)
    keypoints[0] = (50, 50, 0.9)
    keypoints[1] = (20, 20, 0.1)
    detections = [[Detection(BoundingBox(5, 5, 95, 95), 0, 0.9, keypoints=keypoints)]]

    annotated = draw_detections(frame, detections, ["person"], legend_size=0)

    assert annotated[50, 50].max() > 0
    assert annotated[20, 20].max() == 0
