"""ONNX Runtime inference engine for the bullet detection model."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

try:
    import onnxruntime as ort
except ImportError:
    ort = None

from br_recorder.config import INTRA_OP_THREADS
from br_recorder.errors import InferenceError, ModelLoadError

logger = logging.getLogger(__name__)

OUTPUT_NAME = "output0"


class BulletModel:
    """Detection model backed by a pre-exported ONNX file."""

    def __init__(self, session, input_name: str, output_name: str):
        self.session = session
        self.input_name = input_name
        self.output_name = output_name

    @classmethod
    def load(cls, model_path, intra_op_threads: int = INTRA_OP_THREADS) -> "BulletModel":
        """Create an inference session for ``model_path``.

        The intra-op pool is kept small so inference does not starve the
        game of CPU while it is running.

        Raises:
            ModelLoadError: the runtime is missing or the model cannot be read
        """
        model_path = Path(model_path)
        if ort is None:
            raise ModelLoadError("onnxruntime is not installed. Install with: pip install onnxruntime")
        if not model_path.exists():
            raise ModelLoadError(
                f"ONNX model not found: {model_path}\n"
                f"Export it first with: python scripts/export_model.py"
            )

        options = ort.SessionOptions()
        options.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL
        options.intra_op_num_threads = intra_op_threads
        try:
            session = ort.InferenceSession(str(model_path), sess_options=options,
                                           providers=["CPUExecutionProvider"])
        except Exception as e:
            raise ModelLoadError(f"Failed to load {model_path}: {e}") from e

        input_name = session.get_inputs()[0].name
        output_names = [output.name for output in session.get_outputs()]
        output_name = OUTPUT_NAME if OUTPUT_NAME in output_names else output_names[0]

        logger.info("Inference model loaded: %s", model_path)
        logger.info("Input %s shape %s, output %s", input_name,
                    session.get_inputs()[0].shape, output_name)
        return cls(session, input_name, output_name)

    @property
    def input_shape(self) -> List:
        return self.session.get_inputs()[0].shape

    def fixed_input_size(self) -> Optional[Tuple[int, int]]:
        """(width, height) when the model was exported with a static shape."""
        shape = self.input_shape
        if len(shape) == 4 and isinstance(shape[2], int) and isinstance(shape[3], int):
            return shape[3], shape[2]
        return None

    def infer(self, tensor: np.ndarray) -> np.ndarray:
        """Run the model on a (1, 3, H, W) tensor and return the raw output."""
        try:
            outputs = self.session.run([self.output_name], {self.input_name: tensor})
        except Exception as e:
            raise InferenceError(f"Inference failed: {e}") from e
        return outputs[0]
