"""Axis-aligned box geometry used by suppression and region filtering."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BoundingBox:
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x1 + self.x2) / 2.0, (self.y1 + self.y2) / 2.0

    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains_point(self, x: float, y: float) -> bool:
        """Inclusive on every edge."""
        return self.x1 <= x <= self.x2 and self.y1 <= y <= self.y2

    def scaled(self, sx: float, sy: float) -> "BoundingBox":
        return BoundingBox(self.x1 * sx, self.y1 * sy, self.x2 * sx, self.y2 * sy)

    def as_list(self) -> list:
        return [self.x1, self.y1, self.x2, self.y2]


def intersection_area(a: BoundingBox, b: BoundingBox) -> float:
    # Non-overlapping edges are clamped so the area never goes negative
    w = max(0.0, min(a.x2, b.x2) - max(a.x1, b.x1))
    h = max(0.0, min(a.y2, b.y2) - max(a.y1, b.y1))
    return w * h


def union_area(a: BoundingBox, b: BoundingBox) -> float:
    return a.area + b.area - intersection_area(a, b)


def iou(a: BoundingBox, b: BoundingBox) -> float:
    union = union_area(a, b)
    if union <= 0:
        return 0.0
    return intersection_area(a, b) / union
