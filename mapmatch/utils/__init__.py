"""Utility helpers shared across mapmatch.

The :mod:`mapmatch.utils` package provides small helpers that are useful
throughout the project. Public symbols are re-exported here for convenience.
"""

from __future__ import annotations

__all__ = ("crop_image", "intersect_rect", "scale_point")

from .geometry import crop_image, intersect_rect, scale_point
