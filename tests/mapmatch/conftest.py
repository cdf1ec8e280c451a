import numpy as np
import pytest

from mapmatch.core import build_probe


def _noise(seed, width, height):
    rng = np.random.default_rng(seed)
    image = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    image[..., 3] = 255
    return image


def _probe_from(image, x, y, width, height):
    crop = image[y : y + height, x : x + width]
    return build_probe(crop, np.full((height, width), 255, dtype=np.uint8))


@pytest.fixture
def noise_factory():
    """Return a builder of seeded, fully opaque RGBA noise images."""
    return _noise


@pytest.fixture
def probe_factory():
    """Return a builder of probes cut from an image with an all-valid mask."""
    return _probe_from
