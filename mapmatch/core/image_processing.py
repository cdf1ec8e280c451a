"""Helpers for image preparation.

Every other module works on packed RGBA ``uint8`` buffers of shape
``(H, W, 4)``. This module normalizes arbitrary pixel sources into that layout
and provides the cheap per-call transforms applied before matching: integer
downscaling, the circular minimap mask, and luma-based transparency filters.

Array inputs are expected in RGB/RGBA channel order; files read from disk with
OpenCV are converted from BGR on load.
"""

from __future__ import annotations

__all__ = (
    "apply_mask",
    "apply_spotlight_effect",
    "apply_void_filter",
    "downscale",
    "ensure_rgba",
    "generate_circular_mask",
    "load_image",
    "luma",
)

import logging
from pathlib import Path
from typing import Final, TypeAlias, cast

import cv2 as cv
import numpy as np
import numpy.typing as npt
from PIL import Image

from mapmatch.constants import INNER_MASK_RADIUS
from mapmatch.models import InvalidImageError

from .decorators import check_positive, check_valid_image

logger = logging.getLogger(__name__)

ImageRGBA: TypeAlias = npt.NDArray[np.uint8]
Mask: TypeAlias = npt.NDArray[np.uint8]
LumaPlane: TypeAlias = npt.NDArray[np.int32]
ImageLike: TypeAlias = ImageRGBA | npt.NDArray[np.uint8] | Image.Image

GRAY_NDIM: Final[int] = 2
COLOR_NDIM: Final[int] = 3
RGB_CHANNELS: Final[int] = 3
RGBA_CHANNELS: Final[int] = 4
MASK_VALID: Final[int] = 255

_LUMA_WEIGHTS: Final[tuple[int, int, int]] = (3, 6, 1)
_LUMA_DIVISOR: Final[int] = 10


def ensure_rgba(image: ImageLike) -> ImageRGBA:
    """Normalize a pixel source into a packed RGBA buffer.

    Args:
        image: PIL image, grayscale ``(H, W)`` array, RGB ``(H, W, 3)`` array, or RGBA ``(H, W, 4)`` array.

    Returns:
        The input itself when it is already a C-contiguous RGBA ``uint8`` buffer; otherwise a new buffer.

    Raises:
        InvalidImageError: If the array has an unsupported dtype or shape.
    """
    if isinstance(image, Image.Image):
        return np.array(image.convert("RGBA"), dtype=np.uint8)

    if not isinstance(image, np.ndarray):
        raise InvalidImageError(type(image).__name__)
    if image.dtype != np.uint8:
        raise InvalidImageError(f"dtype {image.dtype}")

    if image.ndim == COLOR_NDIM and image.shape[-1] == RGBA_CHANNELS:
        if image.flags.c_contiguous:
            return image
        return np.ascontiguousarray(image)
    if image.ndim == COLOR_NDIM and image.shape[-1] == RGB_CHANNELS:
        return cast("ImageRGBA", cv.cvtColor(np.ascontiguousarray(image), cv.COLOR_RGB2RGBA))
    if image.ndim == GRAY_NDIM:
        return cast("ImageRGBA", cv.cvtColor(np.ascontiguousarray(image), cv.COLOR_GRAY2RGBA))

    raise InvalidImageError(f"shape {image.shape}")


def load_image(path: str | Path) -> ImageRGBA:
    """Read an image file into a packed RGBA buffer.

    Args:
        path: File to read.

    Returns:
        RGBA buffer.

    Raises:
        FileNotFoundError: If the file is missing or OpenCV cannot decode it.
    """
    image = cv.imread(str(path), cv.IMREAD_UNCHANGED)
    if image is None:
        msg = f"Unable to read image: {path}"
        raise FileNotFoundError(msg)

    logger.debug("Loaded %s with shape %s.", path, image.shape)
    if image.dtype != np.uint8:
        image = cv.convertScaleAbs(image, alpha=255.0 / float(np.iinfo(image.dtype).max))
    if image.ndim == GRAY_NDIM:
        return cast("ImageRGBA", cv.cvtColor(image, cv.COLOR_GRAY2RGBA))
    if image.shape[-1] == RGBA_CHANNELS:
        return cast("ImageRGBA", cv.cvtColor(image, cv.COLOR_BGRA2RGBA))
    return cast("ImageRGBA", cv.cvtColor(image, cv.COLOR_BGR2RGBA))


@check_positive("scale")
def downscale(image: ImageLike, scale: int, dst: ImageRGBA | None = None) -> ImageRGBA:
    """Decimate an image by an integer factor with nearest-neighbour sampling.

    Output pixel ``(x, y)`` is source pixel ``(x * scale, y * scale)``.

    Args:
        image: Source image; normalized with :func:`ensure_rgba`.
        scale: Integer factor, at least one.
        dst: Optional destination of shape ``(H // scale, W // scale, 4)`` written in place.

    Returns:
        The downscaled buffer (``dst`` when supplied). With ``scale == 1`` and no ``dst`` this is a copy.

    Raises:
        ValueError: If ``scale`` is below one or ``dst`` has the wrong shape.
    """
    src = ensure_rgba(image)
    height, width = src.shape[:2]
    new_h, new_w = height // scale, width // scale
    sampled = src[: new_h * scale : scale, : new_w * scale : scale]

    if dst is None:
        return np.ascontiguousarray(sampled) if scale > 1 else src.copy()

    if dst.shape != (new_h, new_w, RGBA_CHANNELS) or dst.dtype != np.uint8:
        msg = f"dst must have shape {(new_h, new_w, RGBA_CHANNELS)} and dtype uint8 (received {dst.shape}, {dst.dtype})."
        raise ValueError(msg)
    np.copyto(dst, sampled)
    return dst


def generate_circular_mask(width: int, height: int) -> Mask:
    """Create the validity mask of a circular minimap.

    A pixel, measured from its centre, is valid when its squared distance to the
    image centre lies in ``(INNER_MASK_RADIUS², radius²]`` where
    ``radius = min(width, height) / 2``. The inner disc hides the player arrow.

    Args:
        width: Mask width.
        height: Mask height.

    Returns:
        ``(height, width)`` mask, 255 for valid pixels and 0 otherwise.
    """
    radius = min(width, height) / 2.0
    cx, cy = width / 2.0, height / 2.0

    dy, dx = np.ogrid[:height, :width]
    dist_sq = (dx - cx + 0.5) ** 2 + (dy - cy + 0.5) ** 2

    valid = (dist_sq <= radius * radius) & (dist_sq > INNER_MASK_RADIUS * INNER_MASK_RADIUS)
    return np.where(valid, MASK_VALID, 0).astype(np.uint8)


@check_valid_image
def apply_mask(image: ImageRGBA, mask: Mask, dst: ImageRGBA | None = None) -> ImageRGBA:
    """Copy an image, turning every pixel outside ``mask`` transparent black.

    Args:
        image: RGBA source.
        mask: ``(H, W)`` validity mask.
        dst: Optional destination of the same shape as ``image``.

    Returns:
        Masked copy (``dst`` when supplied).

    Raises:
        ValueError: If the mask or destination shape does not match the image.
    """
    if mask.shape != image.shape[:2]:
        msg = f"Mask shape {mask.shape} does not match image shape {image.shape[:2]}."
        raise ValueError(msg)
    if dst is None:
        dst = np.empty_like(image)
    elif dst.shape != image.shape:
        msg = f"dst shape {dst.shape} does not match image shape {image.shape}."
        raise ValueError(msg)

    np.copyto(dst, image)
    dst[mask == 0] = 0
    return dst


@check_valid_image
def luma(image: ImageRGBA) -> LumaPlane:
    """Return the integer luma plane ``(3R + 6G + B) // 10``."""
    rgb = image[..., :RGB_CHANNELS].astype(np.int32)
    wr, wg, wb = _LUMA_WEIGHTS
    return (rgb[..., 0] * wr + rgb[..., 1] * wg + rgb[..., 2] * wb) // _LUMA_DIVISOR


@check_valid_image
def apply_spotlight_effect(image: ImageRGBA, luma_threshold: int) -> None:
    """Make dark, still-opaque pixels fully transparent, in place.

    Used on candidate maps so empty regions score as black instead of their dim texture.
    Pixels that are already transparent are left untouched.

    Args:
        image: RGBA buffer to modify.
        luma_threshold: Pixels with luma below this value are cleared.
    """
    dark = (luma(image) < luma_threshold) & (image[..., 3] != 0)
    image[dark] = 0
    logger.debug("Spotlight cleared %d pixel(s) below luma %d.", int(np.count_nonzero(dark)), luma_threshold)


@check_valid_image
def apply_void_filter(image: ImageRGBA, luma_threshold: int) -> None:
    """Clear every pixel whose luma is below ``luma_threshold``, in place.

    Used on the minimap crop to drop the dark void around the playable area.

    Args:
        image: RGBA buffer to modify.
        luma_threshold: Pixels with luma below this value are cleared.
    """
    dark = luma(image) < luma_threshold
    image[dark] = 0
    logger.debug("Void filter cleared %d pixel(s) below luma %d.", int(np.count_nonzero(dark)), luma_threshold)
