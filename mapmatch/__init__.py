"""Minimap localization matching engine and metadata exports.

Importing this package re-exports the matching primitives, the zone
localization pipeline, the data models, and project metadata.
"""

from __future__ import annotations

from ._about import (
    __author__,
    __copyright__,
    __license__,
    __maintainer__,
    __url__,
    __version__,
)
from .core import (
    apply_mask,
    apply_spotlight_effect,
    apply_void_filter,
    build_probe,
    downscale,
    ensure_rgba,
    generate_circular_mask,
    load_image,
    local_consistency,
    match,
    match_weighted,
    z_score,
)
from .localization import locate, prepare_map, prepare_minimap
from .models import (
    NO_MATCH,
    EmptyProbeError,
    InvalidImageError,
    LocalizationResult,
    LocalizationStatus,
    LocatorSettings,
    MatchResult,
    ProbePoint,
    TemplateProbe,
    ZoneMatch,
)

__all__ = (
    "NO_MATCH",
    "EmptyProbeError",
    "InvalidImageError",
    "LocalizationResult",
    "LocalizationStatus",
    "LocatorSettings",
    "MatchResult",
    "ProbePoint",
    "TemplateProbe",
    "ZoneMatch",
    "__author__",
    "__copyright__",
    "__license__",
    "__maintainer__",
    "__url__",
    "__version__",
    "apply_mask",
    "apply_spotlight_effect",
    "apply_void_filter",
    "build_probe",
    "downscale",
    "ensure_rgba",
    "generate_circular_mask",
    "load_image",
    "local_consistency",
    "locate",
    "match",
    "match_weighted",
    "prepare_map",
    "prepare_minimap",
    "z_score",
)
