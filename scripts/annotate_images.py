#!/usr/bin/env python3
"""Run the detector on image files and write annotated copies (<name>.pp.jpg).
Usage: python scripts/annotate_images.py shot1.png shot2.png --confidence-threshold 0.3
"""
import argparse
import logging
import sys
from pathlib import Path

import cv2

from br_recorder.config import CLASSES, INPUT_SIZE, MODEL_PATH
from br_recorder.errors import RecorderError
from br_recorder.infer.nms import nms
from br_recorder.infer.onnx_engine import BulletModel
from br_recorder.infer.preprocess import compute_input_size, preprocess_frame
from br_recorder.infer.tasks import DetectionTask
from br_recorder.overlay.annotate import draw_detections
from br_recorder.utils.app_logging import setup_logging

logger = logging.getLogger("br_recorder.scripts.annotate_images")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("images", nargs="+")
    parser.add_argument("--model", default=str(MODEL_PATH), help="ONNX model file")
    parser.add_argument("--task", choices=[t.value for t in DetectionTask], default="detect")
    parser.add_argument("--confidence-threshold", type=float, default=0.25,
                        help="threshold for the model confidence level")
    parser.add_argument("--nms-threshold", type=float, default=0.45,
                        help="threshold for non-maximum suppression")
    parser.add_argument("--legend-size", type=int, default=14,
                        help="legend height in pixels, 0 means no legend")
    parser.add_argument("--preserve-aspect", action="store_true",
                        help="resize to a multiple of 32 keeping aspect (dynamic models only)")
    return parser.parse_args(argv)


def annotate_image(model, task, image_path: Path, args) -> Path:
    frame = cv2.imread(str(image_path))
    if frame is None:
        raise RecorderError(f"cannot read image {image_path}")

    image_size = (frame.shape[1], frame.shape[0])
    input_size = compute_input_size(*image_size, target=INPUT_SIZE,
                                    preserve_aspect=args.preserve_aspect)
    output = model.infer(preprocess_frame(frame, input_size))
    detections = nms(task.decode(output, len(CLASSES), image_size, input_size,
                                 args.confidence_threshold), args.nms_threshold)

    names = CLASSES if task is DetectionTask.DETECT else ["person"]
    for class_id, bucket in enumerate(detections):
        for det in bucket:
            logger.info("%s: %.2f at %s", names[class_id], det.confidence,
                        [round(v, 1) for v in det.box.as_list()])

    out_path = image_path.with_suffix(".pp.jpg")
    cv2.imwrite(str(out_path), draw_detections(frame, detections, names, args.legend_size))
    return out_path


def main(argv=None):
    setup_logging(None)
    args = parse_args(argv)
    task = DetectionTask(args.task)

    try:
        model = BulletModel.load(args.model)
    except RecorderError as e:
        logger.error("%s", e)
        return 1

    failures = 0
    for image_name in args.images:
        logger.info("processing %s", image_name)
        try:
            out_path = annotate_image(model, task, Path(image_name), args)
        except RecorderError as e:
            logger.error("%s: %s", image_name, e)
            failures += 1
            continue
        logger.info("writing %s", out_path)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
