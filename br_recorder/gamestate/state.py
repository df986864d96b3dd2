"""Peak-hold tracking of the shells shown in the bullet display.

While the display is up the game animates the shells in and out
(few -> all -> few), so the count in any single frame is unreliable. Holding
the running maximum for the duration of one display session recovers the
real loadout.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from br_recorder.config import MIN_VISIBLE_BULLETS


@dataclass
class BulletStabilizer:
    max_real: int = 0
    max_empty: int = 0
    min_visible: int = MIN_VISIBLE_BULLETS

    @property
    def counts(self) -> Tuple[int, int]:
        return self.max_real, self.max_empty

    def reset(self):
        self.max_real = 0
        self.max_empty = 0

    def update(self, counts: Optional[Tuple[int, int]]) -> Optional[Tuple[int, int]]:
        """Feed one cycle's (reals, empties); None means no display region.

        Returns the new peak pair when either count grew, otherwise None.
        """
        if counts is None:
            self.reset()
            return None

        reals, empties = counts
        if reals + empties < self.min_visible:
            self.reset()
            return None

        new_real = max(self.max_real, reals)
        new_empty = max(self.max_empty, empties)
        increased = new_real > self.max_real or new_empty > self.max_empty
        self.max_real, self.max_empty = new_real, new_empty
        return self.counts if increased else None
