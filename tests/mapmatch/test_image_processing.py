import numpy as np
import pytest
from PIL import Image

from mapmatch.core import image_processing
from mapmatch.core.image_processing import (
    apply_mask,
    apply_spotlight_effect,
    apply_void_filter,
    downscale,
    ensure_rgba,
    generate_circular_mask,
    luma,
)
from mapmatch.models import InvalidImageError


def test_ensure_rgba_returns_same_buffer_when_already_rgba():
    image = np.zeros((4, 5, 4), dtype=np.uint8)
    assert ensure_rgba(image) is image


def test_ensure_rgba_is_idempotent_for_rgb_input():
    rgb = np.arange(2 * 3 * 3, dtype=np.uint8).reshape(2, 3, 3)
    once = ensure_rgba(rgb)
    twice = ensure_rgba(once)

    assert once.shape == (2, 3, 4)
    assert twice is once
    assert np.array_equal(once[..., :3], rgb)
    assert np.all(once[..., 3] == 255)


def test_ensure_rgba_converts_grayscale():
    gray = np.array([[0, 128], [200, 255]], dtype=np.uint8)
    rgba = ensure_rgba(gray)
    assert rgba.shape == (2, 2, 4)
    assert rgba[1, 0].tolist() == [200, 200, 200, 255]


def test_ensure_rgba_accepts_pil_image():
    image = Image.new("RGB", (3, 2), (10, 20, 30))
    rgba = ensure_rgba(image)
    assert rgba.shape == (2, 3, 4)
    assert rgba[0, 0].tolist() == [10, 20, 30, 255]


def test_ensure_rgba_makes_strided_views_contiguous():
    image = np.arange(4 * 6 * 4, dtype=np.uint8).reshape(4, 6, 4)
    view = image[:, ::2]
    rgba = ensure_rgba(view)
    assert rgba.flags.c_contiguous
    assert np.array_equal(rgba, view)


@pytest.mark.parametrize(
    "image",
    [
        np.zeros((2, 2, 4), dtype=np.float32),
        np.zeros((2, 2, 2), dtype=np.uint8),
        np.zeros((2, 2, 2, 2), dtype=np.uint8),
        [[0, 0], [0, 0]],
    ],
)
def test_ensure_rgba_rejects_unsupported_input(image):
    with pytest.raises(InvalidImageError):
        ensure_rgba(image)


def test_load_image_converts_bgra_files_to_rgba(tmp_path):
    import cv2 as cv

    rgba = np.zeros((3, 4, 4), dtype=np.uint8)
    rgba[..., 0] = 200
    rgba[..., 2] = 10
    rgba[..., 3] = 255
    path = tmp_path / "map.png"
    cv.imwrite(str(path), cv.cvtColor(rgba, cv.COLOR_RGBA2BGRA))

    loaded = image_processing.load_image(path)
    assert np.array_equal(loaded, rgba)


def test_load_image_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        image_processing.load_image(tmp_path / "missing.png")


def test_downscale_by_one_is_pixel_identical():
    rng = np.random.default_rng(0)
    image = rng.integers(0, 256, size=(9, 7, 4), dtype=np.uint8)
    result = downscale(image, 1)
    assert result is not image
    assert np.array_equal(result, image)


def test_downscale_dimensions_and_nearest_sampling():
    rng = np.random.default_rng(1)
    image = rng.integers(0, 256, size=(23, 37, 4), dtype=np.uint8)
    result = downscale(image, 3)

    assert result.shape == (23 // 3, 37 // 3, 4)
    assert np.array_equal(result[2, 5], image[6, 15])
    assert np.array_equal(result[-1, -1], image[18, 33])


def test_downscale_writes_into_destination():
    image = np.arange(8 * 8 * 4, dtype=np.uint8).reshape(8, 8, 4)
    dst = np.zeros((4, 4, 4), dtype=np.uint8)

    result = downscale(image, 2, dst)
    assert result is dst
    assert np.array_equal(dst, image[::2, ::2])


def test_downscale_rejects_wrong_destination_shape():
    image = np.zeros((8, 8, 4), dtype=np.uint8)
    with pytest.raises(ValueError):
        downscale(image, 2, np.zeros((3, 4, 4), dtype=np.uint8))


@pytest.mark.parametrize("scale", [0, -2])
def test_downscale_rejects_non_positive_scale(scale):
    with pytest.raises(ValueError):
        downscale(np.zeros((4, 4, 4), dtype=np.uint8), scale)


@pytest.mark.parametrize(("width", "height"), [(40, 40), (41, 41), (40, 30), (33, 50)])
def test_circular_mask_is_centrally_symmetric(width, height):
    mask = generate_circular_mask(width, height)
    assert mask.shape == (height, width)
    assert np.array_equal(mask, mask[::-1, ::-1])


def test_circular_mask_outer_boundary_is_inclusive():
    # Pixel (20, 41) sits exactly on the outer radius of 20.5.
    mask = generate_circular_mask(41, 42)
    assert mask[41, 20] == 255
    assert mask[41, 19] == 0


def test_circular_mask_excludes_inner_radius():
    mask = generate_circular_mask(41, 41)
    assert mask[20, 20] == 0
    assert mask[20, 30] == 0  # distance exactly 10
    assert mask[20, 31] == 255
    assert mask[0, 0] == 0


def test_apply_mask_clears_pixels_outside_mask():
    image = np.full((2, 2, 4), 200, dtype=np.uint8)
    mask = np.array([[255, 0], [0, 255]], dtype=np.uint8)

    masked = apply_mask(image, mask)
    assert masked[0, 1].tolist() == [0, 0, 0, 0]
    assert masked[1, 1].tolist() == [200, 200, 200, 200]
    assert np.all(image == 200)


def test_apply_mask_rejects_shape_mismatch():
    with pytest.raises(ValueError):
        apply_mask(np.zeros((2, 2, 4), dtype=np.uint8), np.zeros((3, 2), dtype=np.uint8))


def test_luma_uses_integer_weights():
    image = np.array([[[100, 200, 50, 255]]], dtype=np.uint8)
    assert int(luma(image)[0, 0]) == (300 + 1200 + 50) // 10


def _filter_fixture():
    return np.array(
        [
            [[10, 10, 10, 255], [200, 200, 200, 255]],
            [[5, 5, 5, 0], [30, 30, 30, 255]],
        ],
        dtype=np.uint8,
    )


def test_spotlight_effect_clears_dark_opaque_pixels_only():
    image = _filter_fixture()
    apply_spotlight_effect(image, 20)

    assert image[0, 0].tolist() == [0, 0, 0, 0]
    assert image[0, 1].tolist() == [200, 200, 200, 255]
    assert image[1, 0].tolist() == [5, 5, 5, 0]  # already transparent, untouched
    assert image[1, 1].tolist() == [30, 30, 30, 255]


def test_void_filter_clears_every_dark_pixel():
    image = _filter_fixture()
    apply_void_filter(image, 20)

    assert image[0, 0].tolist() == [0, 0, 0, 0]
    assert image[1, 0].tolist() == [0, 0, 0, 0]
    assert image[1, 1].tolist() == [30, 30, 30, 255]


@pytest.mark.parametrize("transform", [apply_spotlight_effect, apply_void_filter])
def test_luma_filters_are_idempotent(transform):
    rng = np.random.default_rng(2)
    image = rng.integers(0, 256, size=(16, 16, 4), dtype=np.uint8)
    transform(image, 90)
    once = image.copy()
    transform(image, 90)
    assert np.array_equal(image, once)


def test_luma_filters_reject_rgb_buffers():
    with pytest.raises(InvalidImageError):
        apply_void_filter(np.zeros((2, 2, 3), dtype=np.uint8), 10)
