"""Point grids laid over a bounding box given as (x1, y1, x2, y2)."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def bb_center(bb: Sequence[float]) -> tuple[float, float]:
    """Return the centre of a box given by two corner points."""
    return 0.5 * (bb[0] + bb[2]), 0.5 * (bb[1] + bb[3])


def filled_bb_points(
    bb: Sequence[float], num_m: int, num_n: int, margin: int
) -> np.ndarray:
    """Return a ``num_n`` x ``num_m`` grid of points inside ``bb``.

    ``num_m`` points are spread in height, ``num_n`` in width, after
    shrinking the box by ``margin`` on each side.  The result has shape
    ``(num_n * num_m, 2)``; the point for column ``i`` and row ``j`` is
    at index ``i * num_m + j``.  A single point along an axis sits at the
    centre of that axis.
    """
    if num_m < 1 or num_n < 1:
        raise ValueError("grid dimensions must be at least 1")

    local = (
        bb[0] + margin,
        bb[1] + margin,
        bb[2] - margin,
        bb[3] - margin,
    )
    cx, cy = bb_center(local)

    if num_n == 1:
        xs = [cx]
    else:
        space_n = (local[2] - local[0]) / (num_n - 1)
        xs = [local[0] + i * space_n for i in range(num_n)]

    if num_m == 1:
        ys = [cy]
    else:
        space_m = (local[3] - local[1]) / (num_m - 1)
        ys = [local[1] + j * space_m for j in range(num_m)]

    return np.array([(x, y) for x in xs for y in ys], dtype=np.float32)