"""The core package of mapmatch provides the matching engine.

It includes modules for image preparation, template probe construction, the
translation search itself, and the confidence measures evaluated on a result.

Every function here is a pure transform over its explicit inputs; nothing is
cached between calls.

Modules:
- image_processing: Pixel-format normalization, downscaling, masks, and luma filters.
- probe: Conversion of a masked minimap crop into a template probe.
- matching: Uniform and edge-weighted translation search.
- confidence: Z-score separation and quadrant consistency.
"""

__all__ = (
    "apply_mask",
    "apply_spotlight_effect",
    "apply_void_filter",
    "build_probe",
    "check_positive",
    "check_valid_image",
    "downscale",
    "ensure_rgba",
    "generate_circular_mask",
    "load_image",
    "local_consistency",
    "luma",
    "match",
    "match_weighted",
    "z_score",
)


from .confidence import local_consistency, z_score
from .decorators import check_positive, check_valid_image
from .image_processing import (
    apply_mask,
    apply_spotlight_effect,
    apply_void_filter,
    downscale,
    ensure_rgba,
    generate_circular_mask,
    load_image,
    luma,
)
from .matching import match, match_weighted
from .probe import build_probe
