"""Confidence measures for a finished match.

Two complementary signals are provided:

- :func:`z_score` tells how far the winning score stands out from the scores
  of competing hypotheses (for example, the same probe matched on every
  candidate map).
- :func:`local_consistency` checks that the winning alignment is equally good
  in all four quadrants of the probe instead of one sub-region carrying it.
"""

from __future__ import annotations

__all__ = ("local_consistency", "z_score")

import logging
from typing import TYPE_CHECKING, Final

import numpy as np

from mapmatch.constants import MIN_QUADRANT_SAMPLES, ZSCORE_MIN_STDDEV

from .decorators import check_positive, check_valid_image

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mapmatch.models import TemplateProbe

    from .image_processing import ImageRGBA

logger = logging.getLogger(__name__)

_CHANNELS: Final[int] = 3
_QUADRANTS: Final[int] = 4
_MIN_SCORES: Final[int] = 2


def z_score(best_score: float, scores: Sequence[float]) -> float:
    """Return how many standard deviations ``best_score`` lies below the mean of ``scores``.

    Args:
        best_score: Score of the winning hypothesis (lower is better).
        scores: Scores of every competing hypothesis, the winner included.

    Returns:
        ``(mean - best_score) / stddev`` using the population standard deviation; ``0.0``
        with fewer than two scores or when all scores are (nearly) equal.
    """
    if len(scores) < _MIN_SCORES:
        return 0.0

    values = np.asarray(scores, dtype=np.float64)
    stddev = float(values.std())
    if stddev < ZSCORE_MIN_STDDEV:
        return 0.0
    return (float(values.mean()) - best_score) / stddev


@check_valid_image
@check_positive("step")
def local_consistency(target: ImageRGBA, probe: TemplateProbe, x: int, y: int, step: int = 4) -> float:
    """Measure how evenly a match fits across the probe's quadrants.

    Every ``step``-th probe point is assigned to a quadrant by the probe's
    midlines and compared with the map pixel under it. Points falling outside
    the target are skipped; transparent map pixels are compared by their RGB
    values like any other. Each quadrant's mean difference per channel is
    computed, quadrants with ``MIN_QUADRANT_SAMPLES`` samples or fewer are dropped.

    Args:
        target: RGBA map the probe was matched on.
        probe: The matched probe.
        x: Column of the probe origin on the target.
        y: Row of the probe origin on the target.
        step: Probe sampling stride.

    Returns:
        Population standard deviation of the quadrant means; ``0.0`` when fewer than two quadrants remain.
    """
    sampled = probe.points[::step]
    height, width = target.shape[:2]

    map_x = sampled[:, 0] + x
    map_y = sampled[:, 1] + y
    inside = (map_x >= 0) & (map_x < width) & (map_y >= 0) & (map_y < height)
    sampled, map_x, map_y = sampled[inside], map_x[inside], map_y[inside]

    pixels = target[map_y, map_x].astype(np.int32)

    diffs = np.abs(pixels[:, :_CHANNELS] - sampled[:, 2:5]).sum(axis=1)
    quadrant = (sampled[:, 0] >= probe.width // 2).astype(np.intp) + 2 * (sampled[:, 1] >= probe.height // 2)

    sums = np.bincount(quadrant, weights=diffs, minlength=_QUADRANTS)
    counts = np.bincount(quadrant, minlength=_QUADRANTS)
    kept = counts > MIN_QUADRANT_SAMPLES
    if np.count_nonzero(kept) < _MIN_SCORES:
        return 0.0

    means = sums[kept] / (counts[kept] * _CHANNELS)
    spread = float(means.std())
    logger.debug("Quadrant means %s at (%d, %d) spread %.3f.", np.round(means, 2).tolist(), x, y, spread)
    return spread
