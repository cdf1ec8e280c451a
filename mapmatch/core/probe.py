"""Template probe construction.

:func:`build_probe` turns a masked, void-filtered minimap crop into a
:class:`~mapmatch.models.TemplateProbe`: one sample per usable interior pixel,
carrying its colour, saturation, and luma gradient magnitude. HUD icons drawn
over the minimap are rejected by their chroma signature so they never take
part in matching.
"""

from __future__ import annotations

__all__ = ("build_probe", "icon_mask")

import logging
from typing import TYPE_CHECKING, Final

import numpy as np

from mapmatch.constants import ICON_BRIGHTNESS_FLOOR, ICON_CHROMA_DIFF
from mapmatch.models import TemplateProbe

from .decorators import check_valid_image
from .image_processing import luma

if TYPE_CHECKING:
    import numpy.typing as npt

    from .image_processing import ImageRGBA, Mask

logger = logging.getLogger(__name__)

_MIN_SIDE: Final[int] = 3


def icon_mask(rgb: npt.NDArray[np.int32]) -> npt.NDArray[np.bool_]:
    """Flag pixels that look like HUD icons.

    Two icon families are recognised: warm icons, where red and green are both
    bright and exceed blue by more than ``ICON_CHROMA_DIFF``, and blue icons,
    where a bright blue exceeds both red and green by the same margin.

    Args:
        rgb: ``(..., 3)`` integer array in RGB order.

    Returns:
        Boolean array, ``True`` for icon pixels.
    """
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    warm = (r > ICON_BRIGHTNESS_FLOOR) & (g > ICON_BRIGHTNESS_FLOOR) & (np.minimum(r, g) - b > ICON_CHROMA_DIFF)
    blue = (b > ICON_BRIGHTNESS_FLOOR) & (b - np.maximum(r, g) > ICON_CHROMA_DIFF)
    return warm | blue


@check_valid_image
def build_probe(image: ImageRGBA, mask: Mask) -> TemplateProbe:
    """Extract probe points from a masked minimap crop.

    Only interior pixels are scanned; the one-pixel border is reserved for the
    gradient. A pixel is skipped when the mask rejects it, it is fully
    transparent, or it is a HUD icon. The gradient reads the four neighbours
    as they are, whatever their alpha.

    Args:
        image: RGBA crop, already masked and filtered.
        mask: ``(H, W)`` validity mask of the crop.

    Returns:
        The probe, in row-major scan order. It is empty when every pixel was filtered out.

    Raises:
        ValueError: If the mask shape does not match the image.
    """
    height, width = image.shape[:2]
    if mask.shape != (height, width):
        msg = f"Mask shape {mask.shape} does not match image shape {(height, width)}."
        raise ValueError(msg)
    if height < _MIN_SIDE or width < _MIN_SIDE:
        logger.debug("Crop %dx%d has no interior pixels.", width, height)
        return TemplateProbe.empty(width, height)

    inner = (slice(1, -1), slice(1, -1))
    rgb = image[inner][..., :3].astype(np.int32)
    icons = icon_mask(rgb)
    keep = (mask[inner] != 0) & (image[inner][..., 3] != 0) & ~icons

    gray = luma(image)
    grad_x = gray[1:-1, 2:] - gray[1:-1, :-2]
    grad_y = gray[2:, 1:-1] - gray[:-2, 1:-1]
    grad_mag = np.abs(grad_x) + np.abs(grad_y)
    saturation = rgb.max(axis=-1) - rgb.min(axis=-1)

    ys, xs = np.nonzero(keep)
    points = np.column_stack(
        (
            xs + 1,
            ys + 1,
            rgb[ys, xs, 0],
            rgb[ys, xs, 1],
            rgb[ys, xs, 2],
            saturation[ys, xs],
            grad_mag[ys, xs],
        ),
    ).astype(np.int32)

    logger.debug(
        "Built probe with %d point(s) from %dx%d crop (%d icon pixel(s) rejected).",
        points.shape[0],
        width,
        height,
        int(np.count_nonzero(icons & (mask[inner] != 0))),
    )
    return TemplateProbe(points, width, height)
