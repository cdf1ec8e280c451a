"""Validation decorators for image buffers and sampling strides.

These helpers guard functions that require a packed RGBA buffer or positive
integer strides, raising domain-specific exceptions before any scoring loop
runs so the loops themselves stay free of error handling.
"""

from __future__ import annotations

__all__ = (
    "check_positive",
    "check_valid_image",
)

import functools
import inspect
from typing import TYPE_CHECKING, Final, ParamSpec, TypeVar, cast

import numpy as np

from mapmatch.models import InvalidImageError

if TYPE_CHECKING:
    from collections.abc import Callable

    import numpy.typing as npt


P = ParamSpec("P")
R = TypeVar("R")

_RGBA_NDIM: Final[int] = 3
_RGBA_CHANNELS: Final[int] = 4


def _validate_image(image: object) -> npt.NDArray[np.uint8]:
    """Return ``image`` when it is a packed RGBA buffer or raise ``InvalidImageError``.

    Args:
        image: Candidate buffer.

    Returns:
        npt.NDArray[np.uint8]: The validated buffer.

    Raises:
        InvalidImageError: If the buffer is not an ``(H, W, 4)`` ``uint8`` array.
    """
    if not isinstance(image, np.ndarray):
        raise InvalidImageError(type(image).__name__)
    if image.dtype != np.uint8:
        raise InvalidImageError(f"dtype {image.dtype}")
    if image.ndim != _RGBA_NDIM or image.shape[-1] != _RGBA_CHANNELS:
        raise InvalidImageError(f"shape {image.shape}")
    return cast("npt.NDArray[np.uint8]", image)


def check_valid_image(func: Callable[P, R]) -> Callable[P, R]:
    """Ensure the first positional argument is a packed RGBA buffer before calling.

    Args:
        func: Function whose first parameter is an RGBA image.

    Returns:
        Callable[..., R]: Wrapped callable that validates the image first.
    """
    image_param = next(iter(inspect.signature(func).parameters))

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        _validate_image(args[0] if args else kwargs.get(image_param))
        return func(*args, **kwargs)

    return wrapper


def check_positive(*names: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Ensure the named integer parameters are at least one before calling.

    Defaults declared by the wrapped function are validated too.

    Args:
        *names: Parameter names to check.

    Returns:
        Decorator applying the check.

    Raises:
        TypeError: If a name does not belong to the decorated function's signature.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        signature = inspect.signature(func)
        missing = [name for name in names if name not in signature.parameters]
        if missing:
            msg = f"{func.__qualname__} has no parameter(s) named {', '.join(missing)}."
            raise TypeError(msg)

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            bound = signature.bind(*args, **kwargs)
            bound.apply_defaults()
            for name in names:
                value = bound.arguments[name]
                if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
                    msg = f"{name} must be a positive integer (received {value!r})."
                    raise ValueError(msg)
            return func(*args, **kwargs)

        return wrapper

    return decorator
