"""Short-term tracker that follows the previous box into a new frame."""

from __future__ import annotations

import math

import numpy as np

from .fbtrack import fbtrack
from .util import Rect


class MedianFlowTracker:
    """Median-flow tracker; ``tracker_bb`` holds the last tracked box."""

    def __init__(self) -> None:
        self.tracker_bb: Rect | None = None

    def clean_previous_data(self) -> None:
        """Forget the last tracked box."""
        self.tracker_bb = None

    def track(self, prev_img, curr_img, prev_bb: Rect | None) -> None:
        """Track ``prev_bb`` from ``prev_img`` into ``curr_img``.

        ``tracker_bb`` is set only when tracking succeeds and the new box
        lies wholly within the current image.
        """
        if prev_bb is None:
            return
        if prev_bb.width <= 0 or prev_bb.height <= 0:
            return

        bb = (
            float(prev_bb.x),
            float(prev_bb.y),
            float(prev_bb.width + prev_bb.x - 1),
            float(prev_bb.height + prev_bb.y - 1),
        )
        result = fbtrack(prev_img, curr_img, bb)
        b = result.bb

        x = math.floor(b[0] + 0.5) if math.isfinite(b[0]) else math.nan
        y = math.floor(b[1] + 0.5) if math.isfinite(b[1]) else math.nan
        w_raw = b[2] - b[0] + 1 + 0.5
        h_raw = b[3] - b[1] + 1 + 0.5
        w = math.floor(w_raw) if math.isfinite(w_raw) else math.nan
        h = math.floor(h_raw) if math.isfinite(h_raw) else math.nan

        rows, cols = np.asarray(curr_img).shape[:2]
        if any(math.isnan(v) for v in (x, y, w, h)):
            return
        if not result.success or x < 0 or y < 0 or w <= 0 or h <= 0:
            return
        if x + w > cols or y + h > rows:
            return
        self.tracker_bb = Rect(int(x), int(y), int(w), int(h))