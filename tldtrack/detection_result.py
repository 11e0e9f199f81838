"""Per-frame output of the detector cascade."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .util import Rect


@dataclass
class DetectionResult:
    """Scores and candidates gathered while scanning one frame.

    ``posteriors`` and ``variances`` hold one value per sliding window,
    ``feature_vectors`` one fern code per window and tree.  ``detector_bb``
    is only meaningful when ``num_clusters`` is 1.
    """

    contains_valid_data: bool = False
    fg_list: list[Rect] = field(default_factory=list)
    posteriors: np.ndarray | None = None
    confident_indices: list[int] = field(default_factory=list)
    feature_vectors: np.ndarray | None = None
    variances: np.ndarray | None = None
    num_clusters: int = 0
    detector_bb: Rect | None = None

    def init(self, num_windows: int, num_trees: int) -> None:
        """Allocate per-window storage."""
        if num_windows < 0 or num_trees < 0:
            raise ValueError("sizes must not be negative")
        self.variances = np.zeros(num_windows, dtype=np.float32)
        self.posteriors = np.zeros(num_windows, dtype=np.float32)
        self.feature_vectors = np.zeros((num_windows, num_trees), dtype=np.int64)
        self.confident_indices = []

    def reset(self) -> None:
        """Forget the results of the previous frame, keeping storage."""
        self.contains_valid_data = False
        self.fg_list.clear()
        self.confident_indices.clear()
        self.num_clusters = 0
        self.detector_bb = None

    def release(self) -> None:
        """Drop all storage and results."""
        self.fg_list.clear()
        self.variances = None
        self.posteriors = None
        self.feature_vectors = None
        self.confident_indices = []
        self.detector_bb = None
        self.contains_valid_data = False