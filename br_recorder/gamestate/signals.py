"""Signals sent to the UI and the mapping from cycle outcomes to signals."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulletFilling:
    max_real: int
    max_empty: int

    name = "bullet-filling"


@dataclass(frozen=True)
class ScreenshotFailed:
    name = "screenshot-failed"


@dataclass(frozen=True)
class IdentifyFailed:
    name = "identify-failed"


@dataclass(frozen=True)
class ModelLoadFailed:
    message: str = ""

    name = "model-load-failed"


class OutcomeKind(Enum):
    SUCCESS = "success"
    CAPTURE_FAILURE = "capture_failure"
    IDENTIFY_FAILURE = "identify_failure"
    MODEL_FAILURE = "model_failure"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class CycleOutcome:
    kind: OutcomeKind
    counts: Optional[Tuple[int, int]] = None  # set only when the peak grew
    message: str = ""

    @classmethod
    def success(cls, counts=None) -> "CycleOutcome":
        return cls(OutcomeKind.SUCCESS, counts)

    @classmethod
    def skipped(cls) -> "CycleOutcome":
        return cls(OutcomeKind.SKIPPED)


def signal_for_outcome(outcome: CycleOutcome):
    """Return the signal to emit for a finished cycle, or None."""
    if outcome.kind is OutcomeKind.SUCCESS:
        if outcome.counts is None:
            return None
        return BulletFilling(*outcome.counts)
    if outcome.kind is OutcomeKind.CAPTURE_FAILURE:
        return ScreenshotFailed()
    if outcome.kind is OutcomeKind.IDENTIFY_FAILURE:
        return IdentifyFailed()
    if outcome.kind is OutcomeKind.MODEL_FAILURE:
        return ModelLoadFailed(outcome.message)
    return None


class LoggingSink:
    """Signal sink that only logs; used when running without the overlay."""

    def emit(self, signal) -> None:
        if isinstance(signal, BulletFilling):
            logger.info("Bullets: %d real, %d empty", signal.max_real, signal.max_empty)
        else:
            logger.warning("Detector signal: %s", signal.name)
