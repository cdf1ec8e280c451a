"""Shared constants.

The :mod:`mapmatch.constants` module centralizes the tuning values used by the
matching engine (mask geometry, icon rejection, scoring penalties, and the
parallel search fan-out).
"""

from __future__ import annotations

from typing import Final

__all__ = (
    "CHROMA_THRESHOLD",
    "CHROMA_WEIGHT",
    "GRADIENT_THRESHOLD",
    "ICON_BRIGHTNESS_FLOOR",
    "ICON_CHROMA_DIFF",
    "INNER_MASK_RADIUS",
    "MIN_COVERAGE_PERCENT",
    "MIN_EDGE_WEIGHT",
    "MIN_QUADRANT_SAMPLES",
    "SATURATION_MAP_MAX",
    "SATURATION_PROBE_MIN",
    "SATURATION_WEIGHT",
    "WORKER_COUNT",
    "ZSCORE_MIN_STDDEV",
)

# Minimap mask
INNER_MASK_RADIUS: Final[float] = 10.0

# HUD icon rejection
ICON_BRIGHTNESS_FLOOR: Final[int] = 100
ICON_CHROMA_DIFF: Final[int] = 40

# Scoring penalties
CHROMA_THRESHOLD: Final[int] = 45
CHROMA_WEIGHT: Final[int] = 15
SATURATION_PROBE_MIN: Final[int] = 30
SATURATION_MAP_MAX: Final[int] = 25
SATURATION_WEIGHT: Final[int] = 6
GRADIENT_THRESHOLD: Final[int] = 15
MIN_EDGE_WEIGHT: Final[float] = 0.1

# Search
MIN_COVERAGE_PERCENT: Final[int] = 85
WORKER_COUNT: Final[int] = 8

# Confidence
MIN_QUADRANT_SAMPLES: Final[int] = 3
ZSCORE_MIN_STDDEV: Final[float] = 0.001
