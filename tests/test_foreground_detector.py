import numpy as np
import pytest

from tldtrack.detection_result import DetectionResult
from tldtrack.foreground_detector import ForegroundDetector
from tldtrack.util import Rect


def _detector(bg):
    fd = ForegroundDetector()
    fd.bg_img = bg
    fd.detection_result = DetectionResult()
    return fd


def test_inactive_without_background():
    fd = ForegroundDetector()
    fd.detection_result = DetectionResult()
    fd.detection_result.fg_list.append(Rect(1, 1, 1, 1))
    assert fd.is_active() is False
    fd.next_iteration(np.zeros((5, 5), dtype=np.uint8))
    assert fd.detection_result.fg_list == [Rect(1, 1, 1, 1)]


def test_single_blob_bounding_box():
    bg = np.zeros((20, 30), dtype=np.uint8)
    img = bg.copy()
    img[4:8, 10:15] = 100
    fd = _detector(bg)
    assert fd.is_active() is True
    fd.next_iteration(img)
    assert fd.detection_result.fg_list == [Rect(10, 4, 5, 4)]


def test_threshold_is_strict():
    bg = np.full((10, 10), 50, dtype=np.uint8)
    img = bg.copy()
    img[2:4, 2:4] = 50 + 16
    fd = _detector(bg)
    fd.next_iteration(img)
    assert fd.detection_result.fg_list == []
    img[2:4, 2:4] = 50 - 17
    fd.next_iteration(img)
    assert fd.detection_result.fg_list == [Rect(2, 2, 2, 2)]


def test_small_blobs_are_dropped():
    bg = np.zeros((20, 20), dtype=np.uint8)
    img = bg.copy()
    img[1:3, 1:3] = 200
    img[10:16, 10:16] = 200
    fd = _detector(bg)
    fd.min_blob_size = 5
    fd.next_iteration(img)
    assert fd.detection_result.fg_list == [Rect(10, 10, 6, 6)]


def test_separate_blobs_are_reported_separately():
    bg = np.zeros((20, 20), dtype=np.uint8)
    img = bg.copy()
    img[1:3, 1:3] = 200
    img[10:12, 14:17] = 200
    fd = _detector(bg)
    fd.next_iteration(img)
    assert sorted(fd.detection_result.fg_list, key=lambda r: r.x) == [
        Rect(1, 1, 2, 2),
        Rect(14, 10, 3, 2),
    ]


def test_size_mismatch_raises():
    fd = _detector(np.zeros((5, 5), dtype=np.uint8))
    with pytest.raises(ValueError):
        fd.next_iteration(np.zeros((6, 5), dtype=np.uint8))