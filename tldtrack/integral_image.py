"""Summed-area tables for greyscale images."""

from __future__ import annotations

import numpy as np


def integral_image(img, squared: bool = False) -> np.ndarray:
    """Return the inclusive summed-area table of a 2-D image.

    Entry ``[r, c]`` is the sum of all pixels with row <= r and
    column <= c; with ``squared`` the pixels are squared first.
    """
    arr = np.asarray(img)
    if arr.ndim != 2:
        raise ValueError("expected a single-channel 2-D image")
    values = arr.astype(np.int64)
    if squared:
        values = values * values
    return values.cumsum(axis=0).cumsum(axis=1)