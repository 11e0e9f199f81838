"""Random-fern ensemble classifier over sliding windows."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from .detection_result import DetectionResult

CONFIDENCE_THRESHOLD = 0.5


def _sub2idx(x: np.ndarray, y: np.ndarray, width_step: int) -> np.ndarray:
    xf = np.floor(np.asarray(x, dtype=np.float64) + 0.5)
    yf = np.floor(np.asarray(y, dtype=np.float64) + 0.5)
    return (xf + yf * width_step).astype(np.int64)


class EnsembleClassifier:
    """Second stage of the detector cascade.

    Each of ``num_trees`` ferns compares ``num_features`` random pixel
    pairs inside a window; the comparison bits index a leaf whose
    posterior is the fraction of positive samples seen there, divided by
    the number of trees.  The window confidence is the sum over trees.
    """

    def __init__(self, num_trees: int = 10, num_features: int = 13, seed=None) -> None:
        self.enabled = True
        self.num_trees = num_trees
        self.num_features = num_features
        self.img_width_step: int | None = None
        self.num_scales = 0
        self.scales: list[tuple[int, int]] = []
        self.window_offsets: np.ndarray | None = None
        self.feature_offsets: np.ndarray | None = None
        self.features: np.ndarray | None = None
        self.num_indices = 0
        self.posteriors: np.ndarray | None = None
        self.positives: np.ndarray | None = None
        self.negatives: np.ndarray | None = None
        self.detection_result: DetectionResult | None = None
        self.rng = np.random.default_rng(seed)
        self._img: np.ndarray | None = None

    def init(self) -> None:
        """Draw features and set up offsets and empty posteriors."""
        self.num_indices = 2 ** self.num_features
        self.init_feature_locations()
        self.init_feature_offsets()
        self.init_posteriors()

    def init_feature_locations(self) -> None:
        """Draw random relative pixel pairs (x1, y1, x2, y2) in [0, 1]."""
        size = 4 * self.num_features * self.num_trees
        self.features = self.rng.random(size, dtype=np.float32)

    def init_feature_offsets(self) -> None:
        """Turn relative features into image offsets for every scale.

        Offsets are stored flat in the order scale, tree, feature, pair.
        """
        if self.features is None:
            raise RuntimeError("feature locations are not initialised")
        if self.img_width_step is None:
            raise RuntimeError("image width step is not set")
        feats = self.features.reshape(self.num_trees, self.num_features, 4)
        chunks = []
        for width, height in self.scales[: self.num_scales]:
            sw = np.float32(width - 1)
            sh = np.float32(height - 1)
            first = _sub2idx(sw * feats[..., 0] + 1, sh * feats[..., 1] + 1, self.img_width_step)
            second = _sub2idx(sw * feats[..., 2] + 1, sh * feats[..., 3] + 1, self.img_width_step)
            chunks.append(np.stack([first, second], axis=-1).ravel())
        self.feature_offsets = (
            np.concatenate(chunks) if chunks else np.zeros(0, dtype=np.int64)
        )

    def init_posteriors(self) -> None:
        """Reset all leaf counts and posteriors to zero."""
        shape = (self.num_trees, self.num_indices)
        self.posteriors = np.zeros(shape, dtype=np.float32)
        self.positives = np.zeros(shape, dtype=np.int64)
        self.negatives = np.zeros(shape, dtype=np.int64)

    def release(self) -> None:
        """Drop features, offsets and posteriors."""
        self.features = None
        self.feature_offsets = None
        self.posteriors = None
        self.positives = None
        self.negatives = None

    def next_iteration(self, img) -> None:
        """Remember the pixels of a new frame."""
        if not self.enabled:
            return
        self._img = np.ascontiguousarray(img, dtype=np.uint8).ravel()

    def calc_feature_vector(self, window_idx: int) -> np.ndarray:
        """Return the fern code of every tree for a window."""
        if self._img is None:
            raise RuntimeError("no image has been processed")
        bbox = np.asarray(self.window_offsets)[window_idx]
        count = self.num_trees * self.num_features * 2
        start = int(bbox[4])
        offs = self.feature_offsets[start:start + count].reshape(
            self.num_trees, self.num_features, 2
        )
        base = int(bbox[0])
        fp0 = self._img[base + offs[..., 0]]
        fp1 = self._img[base + offs[..., 1]]
        bits = (fp0 > fp1).astype(np.int64)
        weights = np.int64(1) << np.arange(self.num_features - 1, -1, -1, dtype=np.int64)
        return (bits * weights).sum(axis=1)

    def calc_confidence(self, feature_vector: Sequence[int]) -> float:
        """Sum the leaf posteriors selected by ``feature_vector``."""
        conf = np.float32(0.0)
        for tree, code in enumerate(feature_vector[: self.num_trees]):
            conf += self.posteriors[tree, int(code)]
        return float(conf)

    def classify_window(self, window_idx: int) -> float:
        """Score a window, storing its code and confidence in the result."""
        if self.detection_result is None:
            raise RuntimeError("detection result is not set")
        feature_vector = self.calc_feature_vector(window_idx)
        self.detection_result.feature_vectors[window_idx] = feature_vector
        conf = self.calc_confidence(feature_vector)
        self.detection_result.posteriors[window_idx] = conf
        return conf

    def filter(self, i: int) -> bool:
        """Return whether window ``i`` is confident enough to pass."""
        if not self.enabled:
            return True
        self.classify_window(i)
        return not self.detection_result.posteriors[i] < CONFIDENCE_THRESHOLD

    def update_posterior(self, tree_idx: int, idx: int, positive: bool, amount: int) -> None:
        """Add ``amount`` samples to one leaf and recompute its posterior."""
        counts = self.positives if positive else self.negatives
        counts[tree_idx, idx] += amount
        pos = self.positives[tree_idx, idx]
        total = pos + self.negatives[tree_idx, idx]
        if total == 0:
            self.posteriors[tree_idx, idx] = math.nan
        else:
            self.posteriors[tree_idx, idx] = (
                np.float32(pos) / np.float32(total) / np.float32(self.num_trees)
            )

    def _update_posteriors(self, feature_vector: Sequence[int], positive: bool, amount: int) -> None:
        for tree, code in enumerate(feature_vector[: self.num_trees]):
            self.update_posterior(tree, int(code), positive, amount)

    def learn(self, positive: bool, feature_vector: Sequence[int]) -> None:
        """Update the ferns with a sample the ensemble gets wrong."""
        if not self.enabled:
            return
        conf = self.calc_confidence(feature_vector)
        if (positive and conf < CONFIDENCE_THRESHOLD) or (
            not positive and conf > CONFIDENCE_THRESHOLD
        ):
            self._update_posteriors(feature_vector, positive, 1)