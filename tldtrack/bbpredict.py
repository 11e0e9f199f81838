"""Bounding-box prediction from tracked point pairs."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .median import median


def bb_width(bb: Sequence[float]) -> float:
    """Return the width of an (x1, y1, x2, y2) box, corners inclusive."""
    return abs(bb[2] - bb[0] + 1)


def bb_height(bb: Sequence[float]) -> float:
    """Return the height of an (x1, y1, x2, y2) box, corners inclusive."""
    return abs(bb[3] - bb[1] + 1)


def predict_bb(bb0: Sequence[float], pts0, pts1) -> tuple[tuple[float, float, float, float], float]:
    """Move and rescale ``bb0`` according to the motion of point pairs.

    The translation is the median displacement of the points; the scale
    change is the median ratio of all pairwise point distances.  Returns
    the new box as (x1, y1, x2, y2) and the relative scale change.
    """
    p0 = np.asarray(pts0, dtype=np.float64).reshape(-1, 2)
    p1 = np.asarray(pts1, dtype=np.float64).reshape(-1, 2)
    if p0.shape != p1.shape:
        raise ValueError("point sets differ in length")
    if len(p0) < 2:
        raise ValueError("at least two point pairs are needed")

    flow = p1 - p0
    dx = median(flow[:, 0].tolist())
    dy = median(flow[:, 1].tolist())

    i, j = np.triu_indices(len(p0), 1)
    dist0 = np.hypot(p0[i, 0] - p0[j, 0], p0[i, 1] - p0[j, 1])
    dist1 = np.hypot(p1[i, 0] - p1[j, 0], p1[i, 1] - p1[j, 1])
    with np.errstate(divide="ignore", invalid="ignore"):
        ratios = dist1 / dist0
    shift = float(median(ratios.tolist()))

    s0 = 0.5 * (shift - 1) * bb_width(bb0)
    s1 = 0.5 * (shift - 1) * bb_height(bb0)
    bb1 = (
        bb0[0] - s0 + dx,
        bb0[1] - s1 + dy,
        bb0[2] + s0 + dx,
        bb0[3] + s1 + dy,
    )
    return tuple(float(v) for v in bb1), shift