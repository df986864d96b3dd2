#!/usr/bin/env python3
"""Convert trained YOLOv8 weights to the ONNX file the recorder loads.
Usage: python scripts/export_model.py [weights.pt]
"""
import logging
import shutil
import sys
from pathlib import Path

from ultralytics import YOLO

from br_recorder.config import INPUT_SIZE, MODEL_PATH
from br_recorder.errors import ModelLoadError
from br_recorder.infer.onnx_engine import BulletModel
from br_recorder.utils.app_logging import setup_logging

logger = logging.getLogger("br_recorder.scripts.export_model")


def find_latest_model():
    """Find the most recent trained model."""
    model_dir = Path("model")
    best_files = list(model_dir.glob("runs*/weights/best.pt"))

    if not best_files:
        logger.error("No trained models found under %s", model_dir)
        return None

    latest_model = max(best_files, key=lambda x: x.stat().st_mtime)
    logger.info("Found latest model: %s", latest_model)
    return latest_model


def export_model(model_path, output_path=MODEL_PATH):
    """Convert PyTorch weights to a statically shaped ONNX model."""
    logger.info("Converting model: %s", model_path)

    model = YOLO(str(model_path))
    onnx_path = model.export(
        format="onnx",
        opset=17,
        simplify=True,
        dynamic=False,     # fixed input, the recorder resizes to it
        imgsz=INPUT_SIZE,
    )

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy(onnx_path, output_path)

    logger.info("Model copied to %s", output_path)
    return output_path


def test_exported_model(onnx_path):
    """Make sure the converted model loads and reports the expected layout."""
    try:
        model = BulletModel.load(onnx_path)
    except ModelLoadError as e:
        logger.error("Model test failed: %s", e)
        return False

    output = model.session.get_outputs()[0]
    logger.info("Input %s shape %s", model.input_name, model.input_shape)
    logger.info("Output %s shape %s", output.name, output.shape)
    return True


def main(argv=None):
    setup_logging(None)
    argv = sys.argv[1:] if argv is None else argv

    model_path = Path(argv[0]) if argv else find_latest_model()
    if not model_path:
        return 1

    try:
        onnx_path = export_model(model_path)
    except Exception as e:
        logger.error("Export failed: %s", e)
        return 1

    if not test_exported_model(onnx_path):
        logger.warning("Model exported but couldn't be loaded back")
        return 1
    logger.info("Model ready: %s", onnx_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
