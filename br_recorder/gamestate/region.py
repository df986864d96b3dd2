"""Restrict bullet detections to the on-screen bullet display."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from br_recorder.config import DISPLAY_CLASS, EMPTY_CLASS, REAL_CLASS
from br_recorder.infer.geometry import BoundingBox
from br_recorder.infer.postprocess import Detection, FrameResult


@dataclass
class DisplayReading:
    display: BoundingBox
    reals: List[Detection] = field(default_factory=list)
    empties: List[Detection] = field(default_factory=list)

    @property
    def counts(self):
        return len(self.reals), len(self.empties)


def centered_in(box: BoundingBox, region: BoundingBox) -> bool:
    cx, cy = box.center
    return region.contains_point(cx, cy)


def filter_to_display(frame: FrameResult,
                      real_class: int = REAL_CLASS,
                      empty_class: int = EMPTY_CLASS,
                      display_class: int = DISPLAY_CLASS) -> Optional[DisplayReading]:
    """Keep the real/empty shells whose centres lie inside the display box.

    Returns None unless exactly one display box was detected; anything else
    means the shells are not being shown (or the frame is ambiguous).
    """
    displays = frame[display_class]
    if len(displays) != 1:
        return None
    display = displays[0].box

    return DisplayReading(
        display=display,
        reals=[d for d in frame[real_class] if centered_in(d.box, display)],
        empties=[d for d in frame[empty_class] if centered_in(d.box, display)],
    )
