"""Background detector: capture -> inference -> display filter -> peak hold.

One worker thread ticks every ``poll_interval_ms``. Shared state lives in a
single ``SharedDetectorState`` guarded by one lock; the lock is only held to
read or write that state, never across window lookup, capture or inference,
so ``set_enabled`` from the UI thread never waits on the model.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, Tuple

import numpy as np

from br_recorder.capture.window import WindowCapture
from br_recorder.config import DetectorConfig
from br_recorder.errors import CaptureError, DecodeError, InferenceError, ModelLoadError
from br_recorder.gamestate.region import filter_to_display
from br_recorder.gamestate.signals import CycleOutcome, OutcomeKind, signal_for_outcome
from br_recorder.gamestate.state import BulletStabilizer
from br_recorder.infer.nms import nms
from br_recorder.infer.onnx_engine import BulletModel
from br_recorder.infer.postprocess import FrameResult
from br_recorder.infer.preprocess import compute_input_size, preprocess_frame
from br_recorder.infer.tasks import DetectionTask

logger = logging.getLogger(__name__)


def next_tick_after(scheduled: float, now: float, interval: float) -> float:
    """Deadline of the tick after ``scheduled``.

    An overrun cycle skips the missed ticks: the next one is a full interval
    from ``now`` instead of a burst of catch-up ticks.
    """
    next_tick = scheduled + interval
    if next_tick <= now:
        next_tick = now + interval
    return next_tick


class SharedDetectorState:
    """Everything the poll loop and ``set_enabled`` share."""

    def __init__(self):
        self.lock = threading.Lock()
        self.enabled = False
        self.window = None
        self.model = None
        self.stabilizer = BulletStabilizer()
        # Bumped on every off -> on transition so stale cycles can be dropped
        self.session = 0


class BulletDetector:
    """Owns the poll loop and the shared detector state.

    Args:
        config: detector configuration
        sink: object with ``emit(signal)`` receiving at most one signal per cycle
        capture: capture provider (``find_window`` / ``capture``)
        model_loader: zero-arg callable returning an object with ``infer(tensor)``
    """

    def __init__(self, config: DetectorConfig, sink,
                 capture=None,
                 model_loader: Optional[Callable[[], object]] = None,
                 state: Optional[SharedDetectorState] = None):
        self.config = config
        self.task = DetectionTask(config.task)
        if self.task is not DetectionTask.DETECT:
            raise ValueError("The bullet detector needs a detection model, not a pose model")
        self.sink = sink
        self.capture = capture or WindowCapture()
        self.model_loader = model_loader or (
            lambda: BulletModel.load(config.model_path, config.intra_op_threads))
        self.state = state or SharedDetectorState()

        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    # ------------------------ Public API ------------------------ #
    @property
    def enabled(self) -> bool:
        with self.state.lock:
            return self.state.enabled

    def set_enabled(self, enabled: bool) -> None:
        """Turn detection on or off. Idempotent.

        The first enable starts the worker thread. Each off -> on transition
        starts a new display session; cached window and model are kept.
        """
        with self.state.lock:
            if enabled and not self.state.enabled:
                self.state.session += 1
                self.state.stabilizer.reset()
            self.state.enabled = enabled
            start = enabled and self._thread is None
        logger.info("Detection %s", "enabled" if enabled else "disabled")
        if start:
            self.start()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="bullet-detector", daemon=True)
        self._thread.start()

    def shutdown(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_cycle(self) -> CycleOutcome:
        """Run one capture/identify cycle and emit its signal, if any."""
        outcome = self._identify()
        signal = signal_for_outcome(outcome)
        if signal is not None:
            self.sink.emit(signal)
        return outcome

    # --------------------- Internal Helpers --------------------- #
    def _run(self) -> None:
        interval = self.config.poll_interval
        logger.info("Poll loop started (interval %.0f ms)", interval * 1000)
        next_tick = time.monotonic()
        while not self._stop.is_set():
            try:
                self.run_cycle()
            except Exception:
                # A broken sink must not kill the loop
                logger.exception("Unexpected error in poll cycle")

            now = time.monotonic()
            next_tick = next_tick_after(next_tick, now, interval)
            if self._stop.wait(next_tick - now):
                break
        logger.info("Poll loop stopped")

    def _identify(self) -> CycleOutcome:
        with self.state.lock:
            if not self.state.enabled:
                return CycleOutcome.skipped()
            session = self.state.session
            window = self.state.window
            model = self.state.model

        if model is None:
            try:
                model = self.model_loader()
            except ModelLoadError as e:
                logger.error("Model load failed, disabling detection: %s", e)
                with self.state.lock:
                    if self.state.session != session:
                        # Re-enabled while loading; the next cycle retries
                        return CycleOutcome.skipped()
                    self.state.enabled = False
                return CycleOutcome(OutcomeKind.MODEL_FAILURE, message=str(e))
            with self.state.lock:
                self.state.model = model

        try:
            image = self._screenshot(window)
        except CaptureError as e:
            logger.warning("Screenshot failed: %s", e)
            return CycleOutcome(OutcomeKind.CAPTURE_FAILURE, message=str(e))
        except Exception as e:
            logger.exception("Screenshot failed")
            return CycleOutcome(OutcomeKind.CAPTURE_FAILURE, message=str(e))

        try:
            frame = self._detect(model, image)
        except (DecodeError, InferenceError) as e:
            logger.warning("Identify failed: %s", e)
            frame = None
        except Exception:
            logger.exception("Identify failed")
            frame = None

        reading = None
        if frame is not None:
            # The display is always the model's last class
            reading = filter_to_display(frame, display_class=self.config.num_classes - 1)

        with self.state.lock:
            if self.state.session != session or not self.state.enabled:
                logger.debug("Detection toggled during cycle, dropping result")
                return CycleOutcome.skipped()
            if frame is None:
                self.state.stabilizer.reset()
                return CycleOutcome(OutcomeKind.IDENTIFY_FAILURE)
            counts = reading.counts if reading is not None else None
            grown = self.state.stabilizer.update(counts)

        if reading is None:
            logger.debug("No single bullet display in frame")
        else:
            logger.debug("Display holds %d real, %d empty", *reading.counts)
        return CycleOutcome.success(grown)

    def _find_window(self):
        window = self.capture.find_window(self.config.window_title)
        with self.state.lock:
            self.state.window = window
        return window

    def _screenshot(self, window) -> np.ndarray:
        """Capture the game, re-acquiring the window handle once on failure."""
        if window is None:
            window = self._find_window()
        try:
            return self.capture.capture(window)
        except CaptureError as e:
            # The handle may be stale (game restarted); look it up again
            logger.debug("Capture with cached window failed (%s), re-acquiring", e)
            with self.state.lock:
                self.state.window = None
            window = self._find_window()
            return self.capture.capture(window)

    def _detect(self, model, image: np.ndarray) -> FrameResult:
        image_size: Tuple[int, int] = (image.shape[1], image.shape[0])
        input_size = compute_input_size(*image_size, target=self.config.input_size,
                                        preserve_aspect=self.config.preserve_aspect)
        tensor = preprocess_frame(image, input_size)
        output = model.infer(tensor)
        frame = self.task.decode(output, self.config.num_classes, image_size, input_size,
                                 self.config.confidence_threshold)
        return nms(frame, self.config.nms_threshold)
