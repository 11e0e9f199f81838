import numpy as np
import pytest

from tldtrack.util import (
    PATCH_SIZE,
    Rect,
    bb_overlap,
    calc_mean,
    calc_variance,
    extract_normalized_patch,
    extract_normalized_patch_bb,
    extract_normalized_patch_rect,
    is_inside,
    normalize_img,
    overlap,
    overlap_one,
    overlap_rect,
    overlap_rect_rect,
    resize_bilinear,
)


@pytest.fixture
def image():
    rng = np.random.default_rng(42)
    return rng.integers(0, 256, size=(60, 80), dtype=np.uint8)


@pytest.fixture
def windows():
    return np.array(
        [
            [0, 0, 10, 10, 0],
            [5, 0, 10, 10, 0],
            [20, 20, 10, 10, 0],
            [2, 2, 6, 6, 0],
            [0, 0, 10, 10, 1],
        ]
    )


def test_rect_round_trip():
    r = Rect(3, 4, 5, 6)
    assert Rect.from_array(r.to_array()) == r
    assert r.to_array() == [3, 4, 5, 6]


def test_is_inside_strict():
    assert is_inside([2, 2, 4, 4], [0, 0, 10, 10])
    assert not is_inside([0, 2, 4, 4], [0, 0, 10, 10])
    assert not is_inside([2, 2, 8, 4], [0, 0, 10, 10])
    assert not is_inside([0, 0, 10, 10], [2, 2, 4, 4])


def test_overlap_identical_is_one():
    assert bb_overlap([3, 4, 10, 12], [3, 4, 10, 12]) == 1.0


def test_overlap_disjoint_is_zero():
    assert bb_overlap([0, 0, 10, 10], [20, 20, 10, 10]) == 0.0


def test_overlap_half_shift():
    assert bb_overlap([0, 0, 10, 10], [5, 0, 10, 10]) == pytest.approx(1 / 3)


def test_overlap_symmetric():
    a, b = [1, 2, 7, 9], [4, 3, 8, 5]
    assert bb_overlap(a, b) == pytest.approx(bb_overlap(b, a))
    assert 0.0 < bb_overlap(a, b) < 1.0


def test_overlap_rect_rect_matches_arrays():
    r1, r2 = Rect(1, 2, 7, 9), Rect(4, 3, 8, 5)
    assert overlap_rect_rect(r1, r2) == pytest.approx(bb_overlap(r1.to_array(), r2.to_array()))


def test_overlap_vector_matches_scalar(windows):
    boundary = [1, 1, 12, 9]
    result = overlap(windows, boundary)
    assert result.shape == (len(windows),)
    for value, window in zip(result, windows):
        assert value == pytest.approx(bb_overlap(boundary, window))


def test_overlap_rect_matches_overlap(windows):
    rect = Rect(1, 1, 12, 9)
    assert np.allclose(overlap_rect(windows, rect), overlap(windows, rect.to_array()))


def test_overlap_one(windows):
    result = overlap_one(windows, 0, [1, 2, 4])
    assert result[0] == pytest.approx(bb_overlap(windows[0], windows[1]))
    assert result[1] == 0.0
    assert result[2] == pytest.approx(1.0)


def test_overlap_one_empty(windows):
    assert overlap_one(windows, 0, []).shape == (0,)


def test_mean_and_variance():
    assert calc_mean([1, 2, 3, 4]) == pytest.approx(2.5)
    assert calc_variance([5.0] * 10) == 0.0
    values = [1.0, 3.0]
    assert calc_variance(values) == pytest.approx(calc_mean([(v - calc_mean(values)) ** 2 for v in values]))


def test_mean_empty_raises():
    with pytest.raises(ValueError):
        calc_mean([])


def test_resize_same_size_is_copy(image):
    out = resize_bilinear(image, image.shape[1], image.shape[0])
    assert np.array_equal(out, image)
    assert out is not image


def test_resize_shape_and_range(image):
    out = resize_bilinear(image, 15, 15)
    assert out.shape == (15, 15)
    assert out.dtype == np.uint8
    assert out.min() >= image.min()
    assert out.max() <= image.max()


def test_resize_constant_image_stays_constant():
    img = np.full((37, 23), 77, dtype=np.uint8)
    assert np.all(resize_bilinear(img, 15, 15) == 77)
    fimg = np.full((10, 12), 3.5, dtype=np.float32)
    assert np.allclose(resize_bilinear(fimg, 30, 25), 3.5)


def test_resize_invalid_size(image):
    with pytest.raises(ValueError):
        resize_bilinear(image, 0, 5)


def test_normalize_img_zero_mean(image):
    out = normalize_img(image)
    assert out.shape == (PATCH_SIZE * PATCH_SIZE,)
    assert abs(float(out.sum())) < 1e-2


def test_normalize_img_identity_size(image):
    patch = image[:PATCH_SIZE, :PATCH_SIZE]
    out = normalize_img(patch).reshape(PATCH_SIZE, PATCH_SIZE)
    expected = patch.astype(np.float32) - patch.astype(np.float64).mean()
    assert np.allclose(out, expected, atol=1e-3)


def test_normalize_constant_is_zero():
    assert np.all(normalize_img(np.full((30, 40), 9, dtype=np.uint8)) == 0)


def test_extract_normalized_patch(image):
    out = extract_normalized_patch(image, 10, 5, 30, 20)
    assert np.array_equal(out, normalize_img(image[5:25, 10:40]))


def test_extract_variants_agree(image):
    direct = extract_normalized_patch(image, 4, 6, 25, 31)
    assert np.array_equal(extract_normalized_patch_bb(image, [4, 6, 25, 31, 2]), direct)
    assert np.array_equal(extract_normalized_patch_rect(image, Rect(4, 6, 25, 31)), direct)


@pytest.mark.parametrize("region", [(-1, 0, 10, 10), (0, 0, 81, 10), (70, 50, 20, 20), (0, 0, 0, 5)])
def test_extract_out_of_bounds(image, region):
    with pytest.raises(ValueError):
        extract_normalized_patch(image, *region)