import numpy as np
from scipy import ndimage

from tldtrack.median_flow_tracker import MedianFlowTracker
from tldtrack.util import Rect


def textured(size=100, seed=3):
    rng = np.random.default_rng(seed)
    noise = ndimage.gaussian_filter(rng.normal(size=(size, size)), 3.0)
    noise = (noise - noise.min()) / (noise.max() - noise.min())
    return (noise * 255).astype(np.uint8)


def test_none_box_leaves_nothing():
    tracker = MedianFlowTracker()
    img = textured()
    tracker.track(img, img, None)
    assert tracker.tracker_bb is None


def test_empty_box_leaves_nothing():
    tracker = MedianFlowTracker()
    img = textured()
    tracker.track(img, img, Rect(10, 10, 0, 20))
    assert tracker.tracker_bb is None


def test_identical_frames_keep_box():
    tracker = MedianFlowTracker()
    img = textured()
    box = Rect(30, 30, 30, 30)
    tracker.track(img, img, box)
    assert tracker.tracker_bb == box


def test_shifted_frame_moves_box():
    tracker = MedianFlowTracker()
    img = textured()
    moved = np.roll(np.roll(img, 1, axis=0), 2, axis=1)
    tracker.track(img, moved, Rect(30, 30, 30, 30))
    bb = tracker.tracker_bb
    assert bb is not None
    assert abs(bb.x - 32) <= 1
    assert abs(bb.y - 31) <= 1
    assert abs(bb.width - 30) <= 1
    assert abs(bb.height - 30) <= 1


def test_featureless_frames_fail():
    tracker = MedianFlowTracker()
    flat = np.full((100, 100), 128, dtype=np.uint8)
    tracker.track(flat, flat, Rect(30, 30, 30, 30))
    assert tracker.tracker_bb is None


def test_clean_previous_data_forgets_box():
    tracker = MedianFlowTracker()
    img = textured()
    tracker.track(img, img, Rect(30, 30, 30, 30))
    assert tracker.tracker_bb is not None and tracker.tracker_bb.width == 30
    tracker.clean_previous_data()
    assert tracker.tracker_bb is None