"""Geometry helpers for rectangles.

Rectangles are ``(x, y, w, h)`` tuples. The helpers here clip regions of
interest against an image and map coordinates between the full-resolution
frame and its downscaled copy.
"""

from __future__ import annotations

__all__ = ("crop_image", "intersect_rect", "scale_point")

from typing import TypeAlias

import numpy as np
import numpy.typing as npt

Point: TypeAlias = tuple[int, int]
Rect: TypeAlias = tuple[int, int, int, int]  # (x, y, w, h)


def intersect_rect(rect: Rect, width: int, height: int) -> Rect | None:
    """Clip a rectangle to the ``width`` x ``height`` image area.

    Args:
        rect: Rectangle as ``(x, y, w, h)``.
        width: Image width.
        height: Image height.

    Returns:
        The clipped rectangle, or ``None`` when nothing of it lies inside the image.
    """
    x, y, w, h = rect
    left, top = max(x, 0), max(y, 0)
    right, bottom = min(x + w, width), min(y + h, height)
    if right <= left or bottom <= top:
        return None
    return left, top, right - left, bottom - top


def crop_image(image: npt.NDArray[np.uint8], rect: Rect) -> npt.NDArray[np.uint8] | None:
    """Copy the part of ``image`` covered by ``rect``.

    The rectangle is clipped to the image first; the returned buffer is owned by
    the caller and independent of ``image``.

    Args:
        image: Source image.
        rect: Region as ``(x, y, w, h)``.

    Returns:
        The cropped copy, or ``None`` when the rectangle misses the image entirely.
    """
    height, width = image.shape[:2]
    clipped = intersect_rect(rect, width, height)
    if clipped is None:
        return None
    x, y, w, h = clipped
    return image[y : y + h, x : x + w].copy()


def scale_point(point: Point, scale: int) -> Point:
    """Map a point from a downscaled image back to full resolution."""
    return point[0] * scale, point[1] * scale
