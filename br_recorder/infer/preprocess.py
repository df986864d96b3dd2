"""Convert captured frames into model input tensors."""
from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np


def compute_input_size(width: int, height: int, target: int = 640,
                       preserve_aspect: bool = False) -> Tuple[int, int]:
    """Pick the (width, height) the frame is resized to before inference.

    The square mode matches a statically exported model. With
    ``preserve_aspect`` the long side becomes ``target`` and the short side
    is floored to a multiple of 32, as YOLOv8 strides require.
    """
    if not preserve_aspect:
        return target, target
    if width < height:
        w = width * target // height
        return max(32, w // 32 * 32), target
    h = height * target // width
    return target, max(32, h // 32 * 32)


def to_rgb(frame: np.ndarray) -> np.ndarray:
    """Screen capture gives BGRA; files loaded by OpenCV give BGR."""
    if frame.ndim == 2:
        return cv2.cvtColor(frame, cv2.COLOR_GRAY2RGB)
    channels = frame.shape[2]
    if channels == 4:
        return cv2.cvtColor(frame, cv2.COLOR_BGRA2RGB)
    if channels == 3:
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
    raise ValueError(f"unsupported frame shape {frame.shape}")


def preprocess_frame(frame: np.ndarray, input_size: Tuple[int, int]) -> np.ndarray:
    """Convert a captured frame to model input format.

    Args:
        frame: BGRA/BGR frame (H, W, C)
        input_size: (width, height) from compute_input_size

    Returns:
        Model input tensor (1, 3, height, width), float32 in [0, 1]
    """
    rgb_frame = to_rgb(np.ascontiguousarray(frame))

    # Bicubic is the closest OpenCV filter to Catmull-Rom
    resized = cv2.resize(rgb_frame, input_size, interpolation=cv2.INTER_CUBIC)

    normalized = resized.astype(np.float32) / 255.0

    # HWC -> CHW, then add batch dimension
    transposed = np.transpose(normalized, (2, 0, 1))
    return np.expand_dims(transposed, axis=0)
