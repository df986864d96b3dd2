"""Draw detections onto frames for visual checks of the model."""
from __future__ import annotations

from typing import Sequence

import cv2
import numpy as np

from br_recorder.infer.postprocess import FrameResult

BOX_COLOR = (0, 0, 255)        # BGR red
LEGEND_COLOR = (0, 0, 170)
TEXT_COLOR = (255, 255, 255)
KEYPOINT_COLOR = (0, 255, 0)
LIMB_COLOR = (0, 255, 255)
MIN_KEYPOINT_VISIBILITY = 0.6

# COCO skeleton
KP_CONNECTIONS = [
    (0, 1), (0, 2), (1, 3), (2, 4), (5, 6), (5, 11), (6, 12), (11, 12),
    (5, 7), (6, 8), (7, 9), (8, 10), (11, 13), (12, 14), (13, 15), (14, 16),
]


def draw_detections(frame: np.ndarray, detections: FrameResult,
                    class_names: Sequence[str], legend_size: int = 14) -> np.ndarray:
    """Return a copy of ``frame`` (BGR) with boxes, legends and keypoints drawn.

    ``legend_size`` is the legend bar height in pixels; 0 disables legends.
    """
    result_frame = frame.copy()

    for class_id, bucket in enumerate(detections):
        label_name = class_names[class_id] if class_id < len(class_names) else str(class_id)
        for det in bucket:
            x1, y1 = int(det.box.x1), int(det.box.y1)
            x2, y2 = int(det.box.x2), int(det.box.y2)
            cv2.rectangle(result_frame, (x1, y1), (x2, y2), BOX_COLOR, 1)

            if legend_size > 0:
                cv2.rectangle(result_frame, (x1, y1), (x2, y1 + legend_size), LEGEND_COLOR, -1)
                label = f"{label_name}   {det.confidence:.0%}"
                scale = cv2.getFontScaleFromHeight(cv2.FONT_HERSHEY_SIMPLEX, max(1, legend_size - 2))
                cv2.putText(result_frame, label, (x1, y1 + legend_size - 2),
                            cv2.FONT_HERSHEY_SIMPLEX, scale, TEXT_COLOR, 1)

            if det.keypoints is not None:
                _draw_pose(result_frame, det.keypoints)

    return result_frame


def _draw_pose(frame: np.ndarray, keypoints: np.ndarray) -> None:
    for x, y, visibility in keypoints:
        if visibility < MIN_KEYPOINT_VISIBILITY:
            continue
        cv2.circle(frame, (int(x), int(y)), 2, KEYPOINT_COLOR, -1)

    for a, b in KP_CONNECTIONS:
        if a >= len(keypoints) or b >= len(keypoints):
            continue
        kp1, kp2 = keypoints[a], keypoints[b]
        if kp1[2] < MIN_KEYPOINT_VISIBILITY or kp2[2] < MIN_KEYPOINT_VISIBILITY:
            continue
        cv2.line(frame, (int(kp1[0]), int(kp1[1])), (int(kp2[0]), int(kp2[1])), LIMB_COLOR, 1)
