"""Greedy per-class Non-Maximum Suppression."""
from __future__ import annotations

from typing import List

from br_recorder.infer.geometry import iou
from br_recorder.infer.postprocess import Detection, FrameResult


def suppress_bucket(detections: List[Detection], iou_thresh: float) -> List[Detection]:
    """Keep the most confident detections of one class, dropping overlaps.

    A remaining detection survives a round only while its IoU with the kept
    box is strictly below ``iou_thresh``. A threshold of 1.0 or more keeps
    every candidate, exact duplicates included. The sort is stable, so equal
    confidences are decided in input order.
    """
    remaining = sorted(detections, key=lambda d: d.confidence, reverse=True)
    if iou_thresh >= 1.0:
        return remaining
    kept: List[Detection] = []
    while remaining:
        best = remaining[0]
        kept.append(best)
        remaining = [d for d in remaining[1:] if iou(best.box, d.box) < iou_thresh]
    return kept


def nms(frame: FrameResult, iou_thresh: float) -> FrameResult:
    return [suppress_bucket(bucket, iou_thresh) for bucket in frame]
