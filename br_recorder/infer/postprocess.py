"""Decode raw YOLOv8 output tensors into per-class detections.

The exported model emits a single tensor of shape (1, 4 + C, N): for each of
the N anchor predictions a centre-form box (cx, cy, w, h) in model input
pixels followed by C class scores. The decoder works on the transposed
(N, 4 + C) rows.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from br_recorder.errors import DecodeError
from br_recorder.infer.geometry import BoundingBox


@dataclass
class Detection:
    box: BoundingBox
    class_id: int
    confidence: float
    keypoints: Optional[np.ndarray] = None  # (K, 3) x, y, visibility for pose


# One bucket per class id
FrameResult = List[List[Detection]]


def empty_frame_result(num_classes: int) -> FrameResult:
    return [[] for _ in range(num_classes)]


def prediction_rows(output: np.ndarray) -> np.ndarray:
    """Turn the raw (1, 4 + C, N) model output into (N, 4 + C) rows."""
    output = np.asarray(output, dtype=np.float32)
    if output.ndim == 3:
        if output.shape[0] != 1:
            raise DecodeError(f"expected batch size 1, got output shape {output.shape}")
        output = output[0]
    if output.ndim != 2:
        raise DecodeError(f"expected a 2-D prediction tensor, got shape {output.shape}")
    return output.T


def scale_ratios(image_size: Tuple[int, int], input_size: Tuple[int, int]) -> Tuple[float, float]:
    """Width/height ratios from model input pixels to original image pixels.

    Both sizes are (width, height). The ratios are independent because the
    preprocessing resize is not necessarily uniform.
    """
    img_w, img_h = image_size
    in_w, in_h = input_size
    return img_w / float(in_w), img_h / float(in_h)


def _corner_boxes(rows: np.ndarray, w_ratio: float, h_ratio: float) -> np.ndarray:
    cx, cy, w, h = rows[:, 0], rows[:, 1], rows[:, 2], rows[:, 3]
    boxes = np.stack([cx - w / 2.0, cy - h / 2.0, cx + w / 2.0, cy + h / 2.0], axis=1)
    boxes[:, [0, 2]] *= w_ratio
    boxes[:, [1, 3]] *= h_ratio
    return boxes


def decode_predictions(rows: np.ndarray,
                       num_classes: int,
                       image_size: Tuple[int, int],
                       input_size: Tuple[int, int],
                       confidence_threshold: float) -> FrameResult:
    """Decode detection rows into a FrameResult.

    Args:
        rows: (N, 4 + num_classes) predictions
        num_classes: number of class score columns
        image_size: (width, height) of the captured image
        input_size: (width, height) the image was resized to for the model
        confidence_threshold: rows scoring at or below this are dropped

    Returns:
        One unsorted bucket per class id.
    """
    rows = np.asarray(rows, dtype=np.float32)
    if rows.ndim != 2 or rows.shape[1] != 4 + num_classes:
        raise DecodeError(
            f"expected rows of width {4 + num_classes}, got tensor of shape {rows.shape}"
        )

    result = empty_frame_result(num_classes)
    if rows.shape[0] == 0:
        return result

    scores = rows[:, 4:]
    # argmax keeps the first maximum, so ties go to the lowest class id
    class_ids = np.argmax(scores, axis=1)
    confidences = scores[np.arange(len(scores)), class_ids]

    keep = (confidences > confidence_threshold) & (confidences > 0)
    if not np.any(keep):
        return result

    w_ratio, h_ratio = scale_ratios(image_size, input_size)
    boxes = _corner_boxes(rows[keep], w_ratio, h_ratio)

    for coords, class_id, confidence in zip(boxes, class_ids[keep], confidences[keep]):
        box = BoundingBox(*(float(c) for c in coords))
        if box.is_degenerate():
            continue
        result[int(class_id)].append(Detection(box, int(class_id), float(confidence)))

    return result


def decode_pose_predictions(rows: np.ndarray,
                            num_keypoints: int,
                            image_size: Tuple[int, int],
                            input_size: Tuple[int, int],
                            confidence_threshold: float) -> FrameResult:
    """Decode single-class pose rows: box, one confidence, then x/y/visibility per keypoint."""
    rows = np.asarray(rows, dtype=np.float32)
    expected = 4 + 1 + num_keypoints * 3
    if rows.ndim != 2 or rows.shape[1] != expected:
        raise DecodeError(f"expected pose rows of width {expected}, got tensor of shape {rows.shape}")

    result = empty_frame_result(1)
    if rows.shape[0] == 0:
        return result

    confidences = rows[:, 4]
    keep = confidences > confidence_threshold
    if not np.any(keep):
        return result

    w_ratio, h_ratio = scale_ratios(image_size, input_size)
    kept = rows[keep]
    boxes = _corner_boxes(kept, w_ratio, h_ratio)
    keypoints = kept[:, 5:].reshape(-1, num_keypoints, 3).copy()
    keypoints[:, :, 0] *= w_ratio
    keypoints[:, :, 1] *= h_ratio

    for coords, confidence, kps in zip(boxes, confidences[keep], keypoints):
        box = BoundingBox(*(float(c) for c in coords))
        if box.is_degenerate():
            continue
        result[0].append(Detection(box, 0, float(confidence), keypoints=kps))

    return result
