"""Groups confident detector windows into clusters."""

from __future__ import annotations

import math

import numpy as np

from .detection_result import DetectionResult
from .util import Rect, overlap_one


class Clustering:
    """Single-linkage clustering of confident windows by overlap.

    The distance between two windows is one minus their overlap; pairs
    closer than ``cutoff`` join the same cluster.  When exactly one
    cluster results, its mean rectangle becomes the detector's box.
    """

    def __init__(self) -> None:
        self.cutoff = 0.5
        self.windows: np.ndarray | None = None
        self.detection_result: DetectionResult | None = None

    def release(self) -> None:
        """Forget the windows."""
        self.windows = None

    def _calc_distances(self, indices: list[int]) -> list[float]:
        wins = np.asarray(self.windows)
        parts = [
            1 - overlap_one(wins, indices[k], indices[k + 1:]) for k in range(len(indices) - 1)
        ]
        return [float(d) for part in parts for d in part]

    def _cluster(self, distances: list[float], n: int) -> tuple[list[int], int]:
        pairs = [(i, j) for i in range(n) for j in range(i + 1, n)]
        labels = [-1] * n
        next_label = 0
        num_clusters = 0

        # Visiting by ascending distance, ties in pair order.
        for k in sorted(range(len(distances)), key=distances.__getitem__):
            i1, i2 = pairs[k]
            close = distances[k] < self.cutoff
            a, b = labels[i1], labels[i2]
            if a == -1 and b == -1:
                if close:
                    labels[i1] = labels[i2] = next_label
                    next_label += 1
                    num_clusters += 1
                else:
                    labels[i1] = next_label
                    labels[i2] = next_label + 1
                    next_label += 2
                    num_clusters += 2
            elif a == -1:
                if close:
                    labels[i1] = b
                else:
                    labels[i1] = next_label
                    next_label += 1
                    num_clusters += 1
            elif b == -1:
                if close:
                    labels[i2] = a
                else:
                    labels[i2] = next_label
                    next_label += 1
                    num_clusters += 1
            elif a != b and close:
                labels = [a if label == b else label for label in labels]
                num_clusters -= 1
        return labels, num_clusters

    def _mean_rect(self, indices: list[int]) -> Rect:
        boxes = np.asarray(self.windows)[indices, :4].astype(np.float32)
        mean = boxes.sum(axis=0, dtype=np.float32) / np.float32(len(indices))
        x, y, w, h = (int(math.floor(float(v) + 0.5)) for v in mean)
        return Rect(x, y, w, h)

    def cluster_confident_indices(self) -> None:
        """Cluster the result's confident windows and set its cluster data."""
        result = self.detection_result
        if result is None:
            raise RuntimeError("detection result is not set")
        indices = list(result.confident_indices)
        n = len(indices)
        if n == 0:
            result.num_clusters = 0
            return
        if self.windows is None:
            raise RuntimeError("windows are not set")

        if n == 1:
            num_clusters = 1
        else:
            _, num_clusters = self._cluster(self._calc_distances(indices), n)
        result.num_clusters = num_clusters

        if num_clusters == 1:
            result.detector_bb = self._mean_rect(indices)