"""Tests for greedy per-class non-maximum suppression."""

import itertools

import pytest

from br_recorder.infer.geometry import BoundingBox, iou
from br_recorder.infer.nms import nms, suppress_bucket
from br_recorder.infer.postprocess import Detection


# ── helpers ──────────────────────────────────────────────────────────────────

def det(x1, y1, x2, y2, confidence, class_id=0):
    return Detection(BoundingBox(x1, y1, x2, y2), class_id, confidence)


def overlapping_cluster():
    return [
        det(0, 0, 10, 10, 0.6),
        det(1, 1, 11, 11, 0.9),
        det(2, 0, 12, 10, 0.7),
        det(50, 50, 60, 60, 0.8),
        det(51, 50, 61, 60, 0.3),
    ]


# ── tests ────────────────────────────────────────────────────────────────────

def test_keeps_best_of_each_cluster():
    kept = suppress_bucket(overlapping_cluster(), 0.45)
    assert [d.confidence for d in kept] == [0.9, 0.8]


@pytest.mark.parametrize("threshold", [0.1, 0.3, 0.45, 0.7])
def test_no_kept_pair_reaches_threshold(threshold):
    kept = suppress_bucket(overlapping_cluster(), threshold)
    for a, b in itertools.combinations(kept, 2):
        assert iou(a.box, b.box) < threshold


def test_threshold_one_keeps_everything():
    candidates = overlapping_cluster()
    assert len(suppress_bucket(candidates, 1.0)) == len(candidates)


def test_threshold_one_keeps_exact_duplicates():
    first = det(0, 0, 10, 10, 0.9)
    duplicate = det(0, 0, 10, 10, 0.8)
    assert suppress_bucket([duplicate, first], 1.0) == [first, duplicate]


def test_threshold_zero_keeps_single_best():
    kept = suppress_bucket(overlapping_cluster(), 0.0)
    assert len(kept) == 1
    assert kept[0].confidence == 0.9


def test_kept_in_descending_confidence():
    kept = suppress_bucket(overlapping_cluster(), 1.0)
    confidences = [d.confidence for d in kept]
    assert confidences == sorted(confidences, reverse=True)


def test_equal_confidence_keeps_input_order():
    first = det(0, 0, 10, 10, 0.5)
    second = det(1, 0, 11, 10, 0.5)
    assert suppress_bucket([first, second], 0.5) == [first]
    assert suppress_bucket([second, first], 0.5) == [second]


def test_classes_are_suppressed_independently():
    frame = [
        [det(0, 0, 10, 10, 0.9, 0)],
        [det(0, 0, 10, 10, 0.8, 1)],
        [],
    ]
    result = nms(frame, 0.5)
    assert [len(bucket) for bucket in result] == [1, 1, 0]


def test_empty_bucket():
    assert suppress_bucket([], 0.5) == []
