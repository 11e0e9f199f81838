"""Pyramidal Lucas-Kanade point tracking with forward-backward check."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from scipy import ndimage

WIN_SIZE_LK = 4
WIN_SIZE_NCC = 10
DEFAULT_LEVEL = 5
MISSING = -1.0

_FLT_EPSILON = float(np.finfo(np.float32).eps)
_PYR_KERNEL = np.array([1, 4, 6, 4, 1], dtype=np.float64) / 16.0


@dataclass
class LKResult:
    """Outcome of tracking points from one image to the next.

    Points, forward-backward errors and correlations of lost points are
    set to -1; ``status`` marks the points that were tracked.
    """

    points: np.ndarray
    fb: np.ndarray
    ncc: np.ndarray
    status: np.ndarray


def euclidean_distance(points1, points2) -> np.ndarray:
    """Return the distance between corresponding points."""
    a = np.asarray(points1, dtype=np.float64).reshape(-1, 2)
    b = np.asarray(points2, dtype=np.float64).reshape(-1, 2)
    if a.shape != b.shape:
        raise ValueError("point sets differ in length")
    return np.hypot(a[:, 0] - b[:, 0], a[:, 1] - b[:, 1]).astype(np.float32)


def _sample(img: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    coords = np.stack([ys.ravel(), xs.ravel()])
    return ndimage.map_coordinates(img, coords, order=1, mode="nearest").reshape(xs.shape)


def get_rect_sub_pix(img, size, center) -> np.ndarray:
    """Extract a patch centred at a sub-pixel position.

    ``size`` is an int or a (width, height) pair.  Pixels outside the
    image repeat the border.  8-bit images give an 8-bit patch.
    """
    src = np.asarray(img)
    if src.ndim != 2:
        raise ValueError("expected a single-channel 2-D image")
    w, h = (size, size) if isinstance(size, (int, np.integer)) else size
    if w <= 0 or h <= 0:
        raise ValueError("patch size must be positive")
    cx, cy = float(center[0]), float(center[1])
    xs = cx - (w - 1) * 0.5 + np.arange(w)
    ys = cy - (h - 1) * 0.5 + np.arange(h)
    grid_y, grid_x = np.meshgrid(ys, xs, indexing="ij")
    values = _sample(src.astype(np.float64), grid_x, grid_y)
    if src.dtype == np.uint8:
        return np.clip(np.rint(values), 0, 255).astype(np.uint8)
    return values.astype(np.float32)


def match_template_ccoeff_normed(a, b) -> float:
    """Normalised correlation coefficient of two equally sized patches."""
    x = np.asarray(a, dtype=np.float64)
    y = np.asarray(b, dtype=np.float64)
    if x.shape != y.shape:
        raise ValueError("patches differ in size")
    x = x - x.mean()
    y = y - y.mean()
    num = float((x * y).sum())
    denom = math.sqrt(float((x * x).sum()) * float((y * y).sum()))
    if abs(num) < denom:
        return num / denom
    if abs(num) < denom * 1.125:
        return 1.0 if num > 0 else -1.0
    return 0.0


def norm_cross_correlation(img_i, img_j, points0, points1, status, winsize) -> np.ndarray:
    """Correlate patches around point pairs; 0 where ``status`` is false."""
    p0 = np.asarray(points0, dtype=np.float64).reshape(-1, 2)
    p1 = np.asarray(points1, dtype=np.float64).reshape(-1, 2)
    flags = np.asarray(status, dtype=bool).reshape(-1)
    if not (len(p0) == len(p1) == len(flags)):
        raise ValueError("inputs differ in length")
    result = np.zeros(len(p0), dtype=np.float32)
    for k in np.flatnonzero(flags):
        rec0 = get_rect_sub_pix(img_i, winsize, p0[k])
        rec1 = get_rect_sub_pix(img_j, winsize, p1[k])
        result[k] = match_template_ccoeff_normed(rec0, rec1)
    return result


def _pyr_down(img: np.ndarray) -> np.ndarray:
    tmp = ndimage.convolve1d(img, _PYR_KERNEL, axis=0, mode="mirror")
    tmp = ndimage.convolve1d(tmp, _PYR_KERNEL, axis=1, mode="mirror")
    return tmp[::2, ::2]


def _build_pyramid(img: np.ndarray, levels: int, win_size: int) -> list[np.ndarray]:
    pyramid = [img]
    while len(pyramid) <= levels:
        rows, cols = pyramid[-1].shape
        if (rows + 1) // 2 < win_size or (cols + 1) // 2 < win_size:
            break
        pyramid.append(_pyr_down(pyramid[-1]))
    return pyramid


def _outside(xs: np.ndarray, ys: np.ndarray, cols: int, rows: int, half: float) -> np.ndarray:
    return (xs < -half) | (ys < -half) | (xs > cols - 1 + half) | (ys > rows - 1 + half)


def calc_optical_flow_pyr_lk(
    img_prev, img_next, points, guesses, win_size, level, max_iter, epsilon
) -> tuple[np.ndarray, np.ndarray]:
    """Track ``points`` from ``img_prev`` into ``img_next``.

    Iterative Lucas-Kanade on a Gaussian pyramid with ``level`` levels
    above the base image, starting from ``guesses`` (or the points
    themselves when ``None``).  Returns the new positions and a boolean
    status per point.
    """
    prev = np.asarray(img_prev, dtype=np.float64)
    nxt_img = np.asarray(img_next, dtype=np.float64)
    if prev.ndim != 2 or prev.shape != nxt_img.shape:
        raise ValueError("images must be 2-D and of equal size")
    if win_size < 1:
        raise ValueError("window size must be positive")
    if level < 0:
        raise ValueError("pyramid level must not be negative")

    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    guess = pts if guesses is None else np.asarray(guesses, dtype=np.float64).reshape(-1, 2)
    if guess.shape != pts.shape:
        raise ValueError("guesses differ in length from points")

    n = len(pts)
    status = np.ones(n, dtype=bool)
    if n == 0:
        return np.zeros((0, 2), dtype=np.float32), status

    pyr_prev = _build_pyramid(prev, level, win_size)
    pyr_next = _build_pyramid(nxt_img, level, win_size)
    top = min(level, len(pyr_prev) - 1, len(pyr_next) - 1)

    half = (win_size - 1) * 0.5
    offsets = np.arange(win_size) - half
    off_y, off_x = np.meshgrid(offsets, offsets, indexing="ij")
    area = float(win_size * win_size)
    eps2 = epsilon * epsilon

    nxt = guess * (0.5 ** top)
    for lvl in range(top, -1, -1):
        img_a, img_b = pyr_prev[lvl], pyr_next[lvl]
        rows, cols = img_a.shape
        grad_y, grad_x = np.gradient(img_a)
        p = pts * (0.5 ** lvl)

        wx = p[:, 0, None, None] + off_x
        wy = p[:, 1, None, None] + off_y
        tmpl = _sample(img_a, wx, wy)
        ix = _sample(grad_x, wx, wy)
        iy = _sample(grad_y, wx, wy)
        gxx = (ix * ix).sum(axis=(1, 2))
        gxy = (ix * iy).sum(axis=(1, 2))
        gyy = (iy * iy).sum(axis=(1, 2))
        det = gxx * gyy - gxy * gxy

        active = ~_outside(p[:, 0], p[:, 1], cols, rows, half)
        active &= det / (area * area) >= _FLT_EPSILON
        if lvl == 0:
            status &= active
        safe_det = np.where(active, det, 1.0)

        for _ in range(max_iter):
            idx = np.flatnonzero(active)
            if idx.size == 0:
                break
            qx, qy = nxt[idx, 0], nxt[idx, 1]
            out = _outside(qx, qy, cols, rows, half)
            if out.any():
                if lvl == 0:
                    status[idx[out]] = False
                active[idx[out]] = False
                idx, qx, qy = idx[~out], qx[~out], qy[~out]
                if idx.size == 0:
                    break
            window = _sample(img_b, qx[:, None, None] + off_x, qy[:, None, None] + off_y)
            diff = tmpl[idx] - window
            bx = (diff * ix[idx]).sum(axis=(1, 2))
            by = (diff * iy[idx]).sum(axis=(1, 2))
            dx = (gyy[idx] * bx - gxy[idx] * by) / safe_det[idx]
            dy = (gxx[idx] * by - gxy[idx] * bx) / safe_det[idx]
            nxt[idx, 0] += dx
            nxt[idx, 1] += dy
            active[idx[dx * dx + dy * dy <= eps2]] = False

        if lvl > 0:
            nxt = nxt * 2.0

    status &= np.isfinite(nxt).all(axis=1)
    return nxt.astype(np.float32), status


def track_lk(img_i, img_j, pts_i, pts_j, level=DEFAULT_LEVEL) -> LKResult:
    """Track points forward and back and score them.

    ``pts_j`` are the initial guesses in ``img_j``.  A ``level`` of -1
    selects the default pyramid depth.  A point is kept only when both
    the forward and the backward track succeed.
    """
    start = np.asarray(pts_i, dtype=np.float32).reshape(-1, 2)
    guesses = np.asarray(pts_j, dtype=np.float32).reshape(-1, 2)
    if len(start) != len(guesses):
        raise ValueError("inconsistent input: point sets differ in length")
    if level == -1:
        level = DEFAULT_LEVEL

    forward, status_fwd = calc_optical_flow_pyr_lk(
        img_i, img_j, start, guesses, WIN_SIZE_LK, level, 20, 0.03
    )
    backward, status_back = calc_optical_flow_pyr_lk(
        img_j, img_i, forward, start, WIN_SIZE_LK, level, 20, 0.03
    )
    status = status_fwd & status_back

    ncc = norm_cross_correlation(img_i, img_j, start, forward, status, WIN_SIZE_NCC)
    fb = euclidean_distance(start, backward)

    points = forward.copy()
    points[~status] = MISSING
    fb[~status] = MISSING
    ncc[~status] = MISSING
    return LKResult(points=points, fb=fb, ncc=ncc, status=status)