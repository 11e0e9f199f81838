"""Bounding-box geometry, statistics and normalised patch extraction."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

PATCH_SIZE = 15

_COEF_BITS = 11
_COEF_SCALE = 1 << _COEF_BITS


@dataclass
class Rect:
    """Axis-aligned rectangle with integer position and size."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def to_array(self) -> list[int]:
        """Return ``[x, y, width, height]``."""
        return [self.x, self.y, self.width, self.height]

    @classmethod
    def from_array(cls, boundary: Sequence[int]) -> "Rect":
        """Build a rectangle from ``[x, y, width, height]``."""
        return cls(int(boundary[0]), int(boundary[1]), int(boundary[2]), int(boundary[3]))


def is_inside(bb1: Sequence[int], bb2: Sequence[int]) -> bool:
    """Return whether ``bb1`` lies strictly inside ``bb2`` (x, y, w, h)."""
    return (
        bb1[0] > bb2[0]
        and bb1[1] > bb2[1]
        and bb1[0] + bb1[2] < bb2[0] + bb2[2]
        and bb1[1] + bb1[3] < bb2[1] + bb2[3]
    )


def bb_overlap(bb1: Sequence[int], bb2: Sequence[int]) -> float:
    """Return intersection over union of two (x, y, w, h) boxes."""
    if bb1[0] > bb2[0] + bb2[2]:
        return 0.0
    if bb1[1] > bb2[1] + bb2[3]:
        return 0.0
    if bb1[0] + bb1[2] < bb2[0]:
        return 0.0
    if bb1[1] + bb1[3] < bb2[1]:
        return 0.0

    col_int = int(min(bb1[0] + bb1[2], bb2[0] + bb2[2]) - max(bb1[0], bb2[0]))
    row_int = int(min(bb1[1] + bb1[3], bb2[1] + bb2[3]) - max(bb1[1], bb2[1]))
    intersection = col_int * row_int
    area1 = int(bb1[2]) * int(bb1[3])
    area2 = int(bb2[2]) * int(bb2[3])
    union = area1 + area2 - intersection
    if union == 0:
        return float("nan") if intersection == 0 else float("inf")
    return intersection / union


def _overlap_many(boundary: Sequence[int], windows) -> np.ndarray:
    wins = np.asarray(windows, dtype=np.int64).reshape(-1, np.shape(windows)[-1] if len(np.shape(windows)) > 1 else 4)
    wx, wy, ww, wh = (wins[:, k] for k in range(4))
    x, y, w, h = (int(v) for v in boundary[:4])

    disjoint = (x > wx + ww) | (y > wy + wh) | (x + w < wx) | (y + h < wy)
    col = np.minimum(x + w, wx + ww) - np.maximum(x, wx)
    row = np.minimum(y + h, wy + wh) - np.maximum(y, wy)
    inter = col * row
    union = w * h + ww * wh - inter
    with np.errstate(divide="ignore", invalid="ignore"):
        result = inter.astype(np.float32) / union.astype(np.float32)
    result[disjoint] = 0.0
    return result


def overlap_rect_rect(r1: Rect, r2: Rect) -> float:
    """Return intersection over union of two rectangles."""
    return bb_overlap(r1.to_array(), r2.to_array())


def overlap_one(windows, index: int, indices: Sequence[int]) -> np.ndarray:
    """Return the overlap of window ``index`` with each window in ``indices``."""
    wins = np.asarray(windows)
    if len(indices) == 0:
        return np.zeros(0, dtype=np.float32)
    return _overlap_many(wins[index], wins[np.asarray(indices, dtype=np.int64)])


def overlap(windows, boundary: Sequence[int]) -> np.ndarray:
    """Return the overlap of ``boundary`` with every window."""
    wins = np.asarray(windows)
    if wins.size == 0:
        return np.zeros(0, dtype=np.float32)
    return _overlap_many(boundary, wins)


def overlap_rect(windows, rect: Rect) -> np.ndarray:
    """Return the overlap of ``rect`` with every window."""
    return overlap(windows, rect.to_array())


def calc_mean(values: Sequence[float]) -> float:
    """Return the arithmetic mean."""
    arr = np.asarray(values, dtype=np.float32)
    if arr.size == 0:
        raise ValueError("mean of an empty sequence")
    return float(arr.sum(dtype=np.float64) / arr.size)


def calc_variance(values: Sequence[float]) -> float:
    """Return the population variance."""
    arr = np.asarray(values, dtype=np.float32)
    mean = calc_mean(arr)
    return float(((arr - mean) ** 2).sum(dtype=np.float64) / arr.size)


def _linear_coeffs(dsize: int, ssize: int):
    scale = ssize / dsize
    f = ((np.arange(dsize) + 0.5) * scale - 0.5).astype(np.float32)
    s = np.floor(f).astype(np.int64)
    f = f - s
    low = s < 0
    f[low] = 0
    s[low] = 0
    high = s >= ssize - 1
    f[high] = 0
    s[high] = ssize - 1
    s1 = np.minimum(s + 1, ssize - 1)
    return s, s1, f


def resize_bilinear(img, width: int, height: int) -> np.ndarray:
    """Resize a single-channel image with pixel-centre bilinear sampling.

    8-bit images use 11-bit fixed-point weights with rounding; other
    images are interpolated in float32.
    """
    src = np.asarray(img)
    if src.ndim != 2:
        raise ValueError("expected a single-channel 2-D image")
    if width <= 0 or height <= 0:
        raise ValueError("target size must be positive")
    if src.shape[0] == 0 or src.shape[1] == 0:
        raise ValueError("source image is empty")
    if src.shape == (height, width):
        return src.copy()

    xs0, xs1, fx = _linear_coeffs(width, src.shape[1])
    ys0, ys1, fy = _linear_coeffs(height, src.shape[0])

    if src.dtype == np.uint8:
        wx0 = np.rint((1 - fx) * _COEF_SCALE).astype(np.int64)
        wx1 = _COEF_SCALE - wx0
        wy0 = np.rint((1 - fy) * _COEF_SCALE).astype(np.int64)
        wy1 = _COEF_SCALE - wy0
        s = src.astype(np.int64)
        horiz = s[:, xs0] * wx0 + s[:, xs1] * wx1
        vert = horiz[ys0, :] * wy0[:, None] + horiz[ys1, :] * wy1[:, None]
        bits = 2 * _COEF_BITS
        out = (vert + (1 << (bits - 1))) >> bits
        return np.clip(out, 0, 255).astype(np.uint8)

    s = src.astype(np.float32)
    horiz = s[:, xs0] * (1 - fx) + s[:, xs1] * fx
    return (horiz[ys0, :] * (1 - fy)[:, None] + horiz[ys1, :] * fy[:, None]).astype(np.float32)


def normalize_img(img) -> np.ndarray:
    """Resize to a 15x15 patch and subtract its mean.

    Returns a flat float32 array of 225 values in row-major order.
    """
    patch = resize_bilinear(img, PATCH_SIZE, PATCH_SIZE).astype(np.float32)
    mean = np.float32(patch.sum(dtype=np.float64) / (PATCH_SIZE * PATCH_SIZE))
    return (patch - mean).reshape(-1)


def extract_normalized_patch(img, x: int, y: int, w: int, h: int) -> np.ndarray:
    """Cut the region (x, y, w, h) out of ``img`` and normalise it."""
    arr = np.asarray(img)
    rows, cols = arr.shape[:2]
    if w <= 0 or h <= 0 or x < 0 or y < 0 or x + w > cols or y + h > rows:
        raise ValueError(f"region ({x}, {y}, {w}, {h}) lies outside the image")
    return normalize_img(arr[y:y + h, x:x + w])


def extract_normalized_patch_bb(img, boundary: Sequence[int]) -> np.ndarray:
    """Normalised patch for a window given as ``[x, y, w, h, ...]``."""
    x, y, w, h = (int(v) for v in boundary[:4])
    return extract_normalized_patch(img, x, y, w, h)


def extract_normalized_patch_rect(img, rect: Rect) -> np.ndarray:
    """Normalised patch for a rectangle."""
    return extract_normalized_patch(img, rect.x, rect.y, rect.width, rect.height)