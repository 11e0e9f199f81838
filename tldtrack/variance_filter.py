"""Rejects sliding windows whose grey-level variance is too low."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .detection_result import DetectionResult
from .integral_image import integral_image


class VarianceFilter:
    """First stage of the detector cascade.

    ``window_offsets`` holds six values per window: four indices into the
    flattened integral image (top-left, bottom-left, top-right and
    bottom-right corners, each one pixel up and left of the window), a
    feature pointer, and the window area.
    """

    def __init__(self) -> None:
        self.enabled = True
        self.min_var = 0.0
        self.window_offsets: np.ndarray | None = None
        self.detection_result: DetectionResult | None = None
        self._integral: np.ndarray | None = None
        self._integral_sq: np.ndarray | None = None

    def release(self) -> None:
        """Drop the integral images of the last frame."""
        self._integral = None
        self._integral_sq = None

    def calc_variance(self, off: Sequence[int]) -> float:
        """Return the grey-level variance of the window described by ``off``."""
        if self._integral is None or self._integral_sq is None:
            raise RuntimeError("no image has been processed")
        ii1, ii2 = self._integral, self._integral_sq
        o0, o1, o2, o3 = (int(v) for v in off[:4])
        area = np.float32(off[5])
        sum1 = int(ii1[o3]) - int(ii1[o2]) - int(ii1[o1]) + int(ii1[o0])
        sum2 = int(ii2[o3]) - int(ii2[o2]) - int(ii2[o1]) + int(ii2[o0])
        mean = np.float32(sum1) / area
        mean_sq = np.float32(sum2) / area
        return float(mean_sq - mean * mean)

    def next_iteration(self, img) -> None:
        """Build the integral images for a new frame."""
        if not self.enabled:
            return
        self.release()
        self._integral = integral_image(img).ravel()
        self._integral_sq = integral_image(img, squared=True).ravel()

    def filter(self, i: int) -> bool:
        """Return whether window ``i`` passes; records its variance."""
        if not self.enabled:
            return True
        if self.window_offsets is None:
            raise RuntimeError("window offsets are not set")
        variance = self.calc_variance(np.asarray(self.window_offsets)[i])
        if self.detection_result is not None and self.detection_result.variances is not None:
            self.detection_result.variances[i] = variance
        return not variance < self.min_var