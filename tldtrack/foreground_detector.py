"""Background subtraction producing candidate foreground regions."""

from __future__ import annotations

import numpy as np
from scipy import ndimage

from .detection_result import DetectionResult
from .util import Rect


class ForegroundDetector:
    """Finds blobs that differ from a stored background image.

    The detector is active only once ``bg_img`` is set.  Pixels whose
    absolute difference to the background exceeds ``fg_threshold`` form
    8-connected blobs; blobs smaller than ``min_blob_size`` pixels are
    dropped and the bounding boxes of the rest go to ``fg_list``.
    """

    def __init__(self) -> None:
        self.fg_threshold = 16
        self.min_blob_size = 0
        self.bg_img: np.ndarray | None = None
        self.detection_result: DetectionResult | None = None

    def release(self) -> None:
        """Drop the foreground regions found for the last frame."""
        if self.detection_result is not None:
            self.detection_result.fg_list.clear()

    def next_iteration(self, img) -> None:
        """Compute the foreground regions of ``img``."""
        if self.bg_img is None:
            return
        if self.detection_result is None:
            raise RuntimeError("detection result is not set")
        bg = np.asarray(self.bg_img)
        frame = np.asarray(img)
        if bg.shape != frame.shape:
            raise ValueError("image and background differ in size")

        diff = np.abs(bg.astype(np.int32) - frame.astype(np.int32))
        mask = diff > self.fg_threshold
        labels, count = ndimage.label(mask, structure=np.ones((3, 3), dtype=bool))
        areas = np.bincount(labels.ravel(), minlength=count + 1)[1:]

        fg_list = self.detection_result.fg_list
        fg_list.clear()
        for slices, area in zip(ndimage.find_objects(labels), areas):
            if area < self.min_blob_size:
                continue
            rows, cols = slices
            fg_list.append(
                Rect(cols.start, rows.start, cols.stop - cols.start, rows.stop - rows.start)
            )

    def is_active(self) -> bool:
        """Return whether a background image is set."""
        return self.bg_img is not None