"""Runtime configuration constants.
Edit values here, or drop a detector_config.json next to the executable to
override them without touching code.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

# Game window
WINDOW_TITLE = "Buckshot Roulette"

# Model & inference
MODEL_PATH = Path("model/yolov8n_imgsz640.onnx")
INPUT_SIZE = 640  # model square input, must be a multiple of 32
CONF_THRESHOLD = 0.5
NMS_IOU_THRESHOLD = 0.7
INTRA_OP_THREADS = 2

# Classes (must match the model's training order)
CLASSES = ["real bullet", "empty bullet", "inverter", "bullet display"]
REAL_CLASS = 0
EMPTY_CLASS = 1
DISPLAY_CLASS = len(CLASSES) - 1

# Polling
POLL_INTERVAL_MS = 1000
MIN_VISIBLE_BULLETS = 2

CONFIG_PATH = Path("detector_config.json")


@dataclass
class DetectorConfig:
    window_title: str = WINDOW_TITLE
    model_path: str = str(MODEL_PATH)
    input_size: int = INPUT_SIZE
    preserve_aspect: bool = False
    confidence_threshold: float = CONF_THRESHOLD
    nms_threshold: float = NMS_IOU_THRESHOLD
    intra_op_threads: int = INTRA_OP_THREADS
    poll_interval_ms: int = POLL_INTERVAL_MS
    task: str = "detect"
    class_names: List[str] = field(default_factory=lambda: list(CLASSES))

    @property
    def num_classes(self) -> int:
        return len(self.class_names)

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000.0

    def validate(self) -> None:
        for name in ("confidence_threshold", "nms_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.poll_interval_ms <= 0:
            raise ValueError(f"poll_interval_ms must be positive, got {self.poll_interval_ms}")
        if self.input_size <= 0 or self.input_size % 32:
            raise ValueError(f"input_size must be a positive multiple of 32, got {self.input_size}")
        if self.intra_op_threads < 1:
            raise ValueError(f"intra_op_threads must be at least 1, got {self.intra_op_threads}")
        if self.task not in ("detect", "pose"):
            raise ValueError(f"unknown task {self.task!r}")
        if self.task == "detect" and len(self.class_names) < 3:
            # real, empty and display are all required
            raise ValueError("class_names needs at least real, empty and display classes")


def load_detector_config(path: Optional[Path] = None) -> DetectorConfig:
    """Load the detector configuration, falling back to defaults.

    A missing file yields the defaults. Keys that are not configuration
    fields are ignored with a warning so older files keep loading.
    """
    path = Path(path) if path is not None else CONFIG_PATH
    config = DetectorConfig()
    if not path.exists():
        logger.debug("No detector config at %s, using defaults", path)
        return config

    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")

    known = {f.name for f in fields(DetectorConfig)}
    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown config key %r in %s", key, path)
            continue
        setattr(config, key, value)

    config.validate()
    logger.info("Loaded detector config from %s", path)
    return config


def save_detector_config(config: DetectorConfig, path: Optional[Path] = None) -> None:
    path = Path(path) if path is not None else CONFIG_PATH
    path.write_text(json.dumps(asdict(config), indent=2))
    logger.info("Saved detector config to %s", path)
