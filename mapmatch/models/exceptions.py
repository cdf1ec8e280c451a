"""Exception classes used across mapmatch.

These lightweight subclasses communicate invalid input encountered while
validating image buffers or template probes.
"""

from __future__ import annotations

__all__ = (
    "EmptyProbeError",
    "InvalidImageError",
)

from typing import Final

from typing_extensions import Self

_INVALID_IMAGE_MESSAGE: Final[str] = "Invalid image: {detail}. Expected a packed RGBA uint8 buffer of shape (H, W, 4)."
_EMPTY_PROBE_MESSAGE: Final[str] = "Template probe of size {width}x{height} has no usable points."


class InvalidImageError(Exception):
    """Raised when an image buffer does not have the packed RGBA layout.

    Attributes:
        detail: Short description of what was received.
    """

    def __init__(self: Self, detail: str) -> None:
        """Initialise the error with a description of the offending buffer.

        Args:
            detail: Description of the received shape or dtype.
        """
        self.detail: str = detail
        super().__init__(_INVALID_IMAGE_MESSAGE.format(detail=detail))


class EmptyProbeError(Exception):
    """Raised when matching is requested with a probe that holds no points.

    An empty probe means the crop was fully masked out. It is distinct from a
    low-confidence match and must never be replaced by a default offset.

    Attributes:
        width: Width of the crop the probe was built from.
        height: Height of the crop the probe was built from.
    """

    def __init__(self: Self, width: int, height: int) -> None:
        """Initialise the error with the probe dimensions.

        Args:
            width: Probe width in pixels.
            height: Probe height in pixels.
        """
        self.width: int = width
        self.height: int = height
        super().__init__(_EMPTY_PROBE_MESSAGE.format(width=width, height=height))
