import numpy as np
import pytest

from tldtrack.bb import bb_center, filled_bb_points


def test_bb_center():
    assert bb_center([0, 0, 10, 20]) == (5.0, 10.0)


def test_grid_shape():
    pts = filled_bb_points([0, 0, 100, 100], 10, 10, 5)
    assert pts.shape == (100, 2)


def test_grid_corners_follow_margin():
    bb = [10.0, 20.0, 110.0, 220.0]
    margin = 5
    pts = filled_bb_points(bb, 10, 10, margin)
    assert pts[0].tolist() == [bb[0] + margin, bb[1] + margin]
    assert pts[-1] == pytest.approx([bb[2] - margin, bb[3] - margin])


def test_grid_ordering_columns_outer():
    pts = filled_bb_points([0, 0, 90, 90], 4, 3, 0)
    # Within the first column x stays fixed while y grows.
    assert np.all(pts[:4, 0] == pts[0, 0])
    assert np.all(np.diff(pts[:4, 1]) > 0)
    # The next column starts at a larger x and the first y again.
    assert pts[4, 0] > pts[0, 0]
    assert pts[4, 1] == pts[0, 1]


def test_single_point_is_center():
    bb = [0.0, 0.0, 40.0, 60.0]
    pts = filled_bb_points(bb, 1, 1, 5)
    assert pts.shape == (1, 2)
    assert tuple(pts[0]) == pytest.approx(bb_center([5.0, 5.0, 35.0, 55.0]))


def test_single_column_uses_center_x():
    bb = [0.0, 0.0, 40.0, 60.0]
    pts = filled_bb_points(bb, 5, 1, 0)
    cx, _ = bb_center(bb)
    assert pts.shape == (5, 2)
    assert np.all(pts[:, 0] == cx)
    assert pts[0, 1] == bb[1]
    assert pts[-1, 1] == pytest.approx(bb[3])


def test_single_row_uses_center_y():
    bb = [0.0, 0.0, 40.0, 60.0]
    pts = filled_bb_points(bb, 1, 5, 0)
    _, cy = bb_center(bb)
    assert np.all(pts[:, 1] == cy)
    assert pts[0, 0] == bb[0]
    assert pts[-1, 0] == pytest.approx(bb[2])


def test_evenly_spaced():
    pts = filled_bb_points([0, 0, 100, 50], 6, 6, 2)
    xs = pts.reshape(6, 6, 2)[:, 0, 0]
    ys = pts.reshape(6, 6, 2)[0, :, 1]
    assert np.allclose(np.diff(xs), np.diff(xs)[0])
    assert np.allclose(np.diff(ys), np.diff(ys)[0])


@pytest.mark.parametrize("num_m,num_n", [(0, 5), (5, 0), (-1, 2)])
def test_invalid_dimensions(num_m, num_n):
    with pytest.raises(ValueError):
        filled_bb_points([0, 0, 10, 10], num_m, num_n, 0)