#!/usr/bin/env python3
"""Time ONNX inference on a blank input.
Usage: python scripts/benchmark_model.py [model.onnx] [runs]
"""
import logging
import sys
import time

import numpy as np

from br_recorder.config import INPUT_SIZE, MODEL_PATH
from br_recorder.errors import RecorderError
from br_recorder.infer.onnx_engine import BulletModel
from br_recorder.utils.app_logging import setup_logging

logger = logging.getLogger("br_recorder.scripts.benchmark_model")

COUNT = 30


def main(argv=None):
    setup_logging(None)
    argv = sys.argv[1:] if argv is None else argv
    model_path = argv[0] if argv else MODEL_PATH
    runs = int(argv[1]) if len(argv) > 1 else COUNT

    try:
        model = BulletModel.load(model_path)
    except RecorderError as e:
        logger.error("%s", e)
        return 1

    width, height = model.fixed_input_size() or (INPUT_SIZE, INPUT_SIZE)
    tensor = np.zeros((1, 3, height, width), dtype=np.float32)

    total = 0.0
    for _ in range(runs):
        start = time.perf_counter()
        model.infer(tensor)
        elapsed = (time.perf_counter() - start) * 1000
        total += elapsed
        logger.info("Time: %.1fms", elapsed)
    logger.info("Avg Time: %.1fms", total / runs)
    return 0


if __name__ == "__main__":
    sys.exit(main())
