"""Detection task variants and their decoders."""
from __future__ import annotations

from enum import Enum
from typing import Tuple

import numpy as np

from br_recorder.infer.postprocess import (FrameResult, decode_pose_predictions,
                                           decode_predictions, prediction_rows)

POSE_KEYPOINTS = 17


class DetectionTask(Enum):
    DETECT = "detect"
    POSE = "pose"

    def decode(self, output: np.ndarray, num_classes: int, image_size: Tuple[int, int],
               input_size: Tuple[int, int], confidence_threshold: float) -> FrameResult:
        """Decode a raw model output for this task.

        ``num_classes`` is ignored by the pose task, which always yields a
        single bucket.
        """
        rows = prediction_rows(output)
        if self is DetectionTask.POSE:
            return decode_pose_predictions(rows, POSE_KEYPOINTS, image_size, input_size,
                                           confidence_threshold)
        return decode_predictions(rows, num_classes, image_size, input_size, confidence_threshold)
