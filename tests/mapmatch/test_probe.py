import numpy as np
import pytest

from mapmatch.core import build_probe
from mapmatch.core.probe import icon_mask
from mapmatch.models import InvalidImageError, ProbePoint


def _full_mask(width, height):
    return np.full((height, width), 255, dtype=np.uint8)


@pytest.fixture
def cross_image():
    """3x3 crop whose single interior pixel has known neighbours."""
    image = np.zeros((3, 3, 4), dtype=np.uint8)
    image[..., 3] = 255
    image[1, 1, :3] = (80, 60, 40)
    image[1, 0, :3] = (0, 0, 0)
    image[1, 2, :3] = (100, 100, 100)
    image[0, 1, :3] = (10, 10, 10)
    image[2, 1, :3] = (50, 50, 50)
    return image


def test_build_probe_records_colour_saturation_and_gradient(cross_image):
    probe = build_probe(cross_image, _full_mask(3, 3))

    assert (probe.width, probe.height) == (3, 3)
    assert len(probe) == 1
    assert probe[0] == ProbePoint(x=1, y=1, r=80, g=60, b=40, saturation=40, grad_mag=100 + 40)


@pytest.mark.parametrize("colour", [(200, 200, 50), (40, 40, 200), (160, 220, 20)])
def test_build_probe_skips_hud_icons(cross_image, colour):
    cross_image[1, 1, :3] = colour
    assert build_probe(cross_image, _full_mask(3, 3)).is_empty


def test_build_probe_keeps_pale_warm_pixels(cross_image):
    cross_image[1, 1, :3] = (200, 200, 170)
    probe = build_probe(cross_image, _full_mask(3, 3))
    assert len(probe) == 1


def test_build_probe_skips_masked_and_transparent_pixels(cross_image):
    mask = _full_mask(3, 3)
    mask[1, 1] = 0
    assert build_probe(cross_image, mask).is_empty

    cross_image[1, 1, 3] = 0
    assert build_probe(cross_image, _full_mask(3, 3)).is_empty


def test_build_probe_excludes_border_and_keeps_scan_order():
    image = np.full((4, 5, 4), 120, dtype=np.uint8)
    probe = build_probe(image, _full_mask(5, 4))

    coords = [(point.x, point.y) for point in probe]
    assert coords == [(1, 1), (2, 1), (3, 1), (1, 2), (2, 2), (3, 2)]
    assert all(point.grad_mag == 0 for point in probe)


def test_build_probe_gradient_reads_transparent_neighbours(cross_image):
    cross_image[1, 2] = 0
    probe = build_probe(cross_image, _full_mask(3, 3))
    assert probe[0].grad_mag == 0 + 40


def test_build_probe_tiny_crop_is_empty():
    image = np.full((2, 2, 4), 120, dtype=np.uint8)
    probe = build_probe(image, _full_mask(2, 2))
    assert probe.is_empty
    assert (probe.width, probe.height) == (2, 2)


def test_build_probe_rejects_mismatched_mask():
    image = np.full((4, 4, 4), 120, dtype=np.uint8)
    with pytest.raises(ValueError):
        build_probe(image, _full_mask(3, 4))


def test_build_probe_rejects_rgb_input():
    with pytest.raises(InvalidImageError):
        build_probe(np.zeros((4, 4, 3), dtype=np.uint8), _full_mask(4, 4))


def test_probe_points_are_read_only(cross_image):
    probe = build_probe(cross_image, _full_mask(3, 3))
    with pytest.raises(ValueError):
        probe.points[0, 0] = 5


def test_icon_mask_matches_both_icon_families():
    rgb = np.array([[[200, 200, 50], [40, 40, 200], [120, 120, 120], [90, 200, 20]]], dtype=np.int32)
    assert icon_mask(rgb).tolist() == [[True, True, False, False]]
