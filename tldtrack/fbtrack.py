"""Median-flow tracking of a bounding box between two frames."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .bb import filled_bb_points
from .bbpredict import predict_bb
from .lk import DEFAULT_LEVEL, track_lk
from .median import median

GRID_M = 10
GRID_N = 10
GRID_MARGIN = 5
MAX_MEDIAN_FB = 10


@dataclass
class TrackResult:
    """Box predicted in the following frame, as (x1, y1, x2, y2)."""

    bb: tuple[float, float, float, float]
    scale: float
    success: bool
    median_fb: float = math.nan
    median_ncc: float = math.nan


def fbtrack(img_i, img_j, bb: Sequence[float]) -> TrackResult:
    """Track the box ``bb`` (x1, y1, x2, y2) from ``img_i`` into ``img_j``.

    A 10x10 grid of points is tracked; the points with forward-backward
    error at most the median and correlation at least the median drive
    the box prediction.  Tracking fails when the median forward-backward
    error exceeds 10 pixels or too few points survive.
    """
    original = tuple(float(v) for v in bb[:4])
    pts = filled_bb_points(original, GRID_M, GRID_N, GRID_MARGIN)
    lk = track_lk(img_i, img_j, pts, pts.copy(), DEFAULT_LEVEL)

    valid = lk.status
    if not valid.any():
        return TrackResult(bb=original, scale=math.nan, success=False)

    fb = lk.fb[valid]
    ncc = lk.ncc[valid]
    start = pts[valid]
    target = lk.points[valid]

    med_fb = float(median(fb.tolist()))
    med_ncc = float(median(ncc.tolist()))
    keep = (fb <= med_fb) & (ncc >= med_ncc)

    try:
        new_bb, scale = predict_bb(original, start[keep], target[keep])
    except ValueError:
        return TrackResult(
            bb=original, scale=math.nan, success=False, median_fb=med_fb, median_ncc=med_ncc
        )

    return TrackResult(
        bb=new_bb,
        scale=scale,
        success=not med_fb > MAX_MEDIAN_FB,
        median_fb=med_fb,
        median_ncc=med_ncc,
    )