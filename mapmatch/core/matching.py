"""Translation search of a template probe over a larger image.

Two independent estimators are provided:

- :func:`match` scores every candidate offset with a penalised sum of absolute
  differences (colour SAD plus chroma, saturation, and gradient penalties).
- :func:`match_weighted` uses the colour, chroma, and saturation terms only and
  averages them with per-point edge weights so textured samples dominate.

Both visit offsets on a ``step`` lattice in row-major order and sample every
``probe_step``-th probe point. Map pixels are scored by their RGB values
whatever their alpha, so regions cleared by the spotlight filter score as
black. A probe point is skipped only when its map position falls outside the
target; a candidate needs in-bounds correspondences for at least
``MIN_COVERAGE_PERCENT`` of its sampled points. Candidates are ranked by their
mean cost over the scored points.

Each lattice row is scored in one vectorised pass, block by block. After every
block, candidates whose running sum already exceeds ``bound * total_weight``
are dropped; since the scored weight never exceeds the total weight, such a
candidate cannot end below ``bound``.

With ``concurrent=True`` the lattice rows are split into ``WORKER_COUNT``
consecutive bands scanned on a thread pool. Every band prunes against the
lock-guarded shared minimum and offers each improvement to it; the minimum
only accepts strictly lower scores. When two bands hold exactly equal scores,
the winner depends on which band reports first; this ordering is left
unspecified.
"""

from __future__ import annotations

__all__ = ("match", "match_weighted")

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, NamedTuple

import numpy as np
import numpy.typing as npt
from typing_extensions import Self

from mapmatch.constants import (
    CHROMA_THRESHOLD,
    CHROMA_WEIGHT,
    GRADIENT_THRESHOLD,
    MIN_COVERAGE_PERCENT,
    MIN_EDGE_WEIGHT,
    SATURATION_MAP_MAX,
    SATURATION_PROBE_MIN,
    SATURATION_WEIGHT,
    WORKER_COUNT,
)
from mapmatch.models import NO_MATCH, EmptyProbeError, MatchResult, TemplateProbe

from .decorators import check_positive, check_valid_image
from .image_processing import luma

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .image_processing import ImageRGBA

logger = logging.getLogger(__name__)

IntArray = npt.NDArray[np.int32]
FloatArray = npt.NDArray[np.float64]

_CHANNELS: Final[int] = 3
_BLOCK_SIZE: Final[int] = 128
_MAX_CHANNEL: Final[float] = 255.0
_MIN_GRADIENT_SIDE: Final[int] = 3

# Row order of the stacked target planes.
_R, _G, _B, _SAT, _GRAD = range(5)
_PLANE_COUNT: Final[int] = 5


class _Candidate(NamedTuple):
    """Best offset of a scan. ``score`` is the (weighted) mean cost per scored point."""

    x: int
    y: int
    score: float
    matched: int


_NO_CANDIDATE: Final[_Candidate] = _Candidate(-1, -1, math.inf, 0)


@dataclass(frozen=True, slots=True)
class _Block:
    """A run of sampled probe points prepared for vectorised scoring.

    ``contained`` is set when every point lies inside the probe box, so no
    lattice offset can push it off the target.
    """

    offsets: npt.NDArray[np.intp]
    px: IntArray
    py: IntArray
    r: IntArray
    g: IntArray
    b: IntArray
    rg: IntArray
    bg: IntArray
    sat: IntArray
    grad: IntArray
    sat_hot: npt.NDArray[np.bool_]
    grad_hot: npt.NDArray[np.bool_]
    weight: FloatArray
    contained: bool


@dataclass(frozen=True, slots=True)
class _SearchSpace:
    """Read-only state shared by every worker of one search."""

    planes: IntArray
    width: int
    height: int
    xs: npt.NDArray[np.intp]
    rows: range
    blocks: tuple[_Block, ...]
    sampled: int
    total_weight: float
    with_gradient: bool


class _SharedMinimum:
    """Lock-guarded running minimum fed by the band workers."""

    def __init__(self: Self) -> None:
        self._lock = threading.Lock()
        self.best: _Candidate = _NO_CANDIDATE

    @property
    def score(self: Self) -> float:
        with self._lock:
            return self.best.score

    def offer(self: Self, candidate: _Candidate) -> None:
        with self._lock:
            if candidate.score < self.best.score:
                self.best = candidate


def _target_planes(target: ImageRGBA, *, with_gradient: bool) -> IntArray:
    """Stack the per-pixel quantities read during scoring into a ``(5, H * W)`` array.

    Border pixels, and every pixel when ``with_gradient`` is ``False``, carry a
    gradient of ``GRADIENT_THRESHOLD`` so they never take the gradient penalty.
    """
    height, width = target.shape[:2]
    rgb = target[..., :_CHANNELS].astype(np.int32)

    planes = np.empty((_PLANE_COUNT, height, width), dtype=np.int32)
    planes[_R] = rgb[..., 0]
    planes[_G] = rgb[..., 1]
    planes[_B] = rgb[..., 2]
    planes[_SAT] = rgb.max(axis=-1) - rgb.min(axis=-1)
    planes[_GRAD] = GRADIENT_THRESHOLD

    if with_gradient and height >= _MIN_GRADIENT_SIDE and width >= _MIN_GRADIENT_SIDE:
        gray = luma(target)
        planes[_GRAD, 1:-1, 1:-1] = np.abs(gray[1:-1, 2:] - gray[1:-1, :-2]) + np.abs(gray[2:, 1:-1] - gray[:-2, 1:-1])

    return planes.reshape(_PLANE_COUNT, -1)


def _probe_blocks(probe: TemplateProbe, sampled: IntArray, width: int, gamma: float | None) -> tuple[_Block, ...]:
    """Split the sampled probe points into scoring blocks.

    Args:
        probe: Probe the points belong to.
        sampled: ``(N, 7)`` probe rows that take part in the search.
        width: Target width, used to turn point coordinates into flat offsets.
        gamma: Edge-weight exponent, or ``None`` for uniform weights.

    Returns:
        Blocks of at most ``_BLOCK_SIZE`` points, in probe order.
    """
    x, y, r, g, b, sat, grad = (np.ascontiguousarray(column) for column in sampled.T)
    offsets = y.astype(np.intp) * width + x.astype(np.intp)
    if gamma is None:
        weight = np.ones(len(x), dtype=np.float64)
    else:
        weight = np.maximum(MIN_EDGE_WEIGHT, (grad / _MAX_CHANNEL) ** gamma)
    inside = (x >= 0) & (x < probe.width) & (y >= 0) & (y < probe.height)

    rg = r - g
    bg = b - g
    sat_hot = sat > SATURATION_PROBE_MIN
    grad_hot = grad > GRADIENT_THRESHOLD

    blocks: list[_Block] = []
    for start in range(0, len(x), _BLOCK_SIZE):
        part = slice(start, start + _BLOCK_SIZE)
        blocks.append(
            _Block(
                offsets=offsets[part],
                px=x[part],
                py=y[part],
                r=r[part],
                g=g[part],
                b=b[part],
                rg=rg[part],
                bg=bg[part],
                sat=sat[part],
                grad=grad[part],
                sat_hot=sat_hot[part],
                grad_hot=grad_hot[part],
                weight=weight[part],
                contained=bool(inside[part].all()),
            ),
        )
    return tuple(blocks)


def _point_costs(pixels: IntArray, block: _Block, *, with_gradient: bool) -> IntArray:
    """Score a block of probe points against the gathered map pixels.

    ``pixels`` holds the target planes gathered as ``(planes, candidates, points)``.
    Per point: colour SAD, then the chroma penalty, then the saturation
    penalty, then (uniform variant only) the gradient penalty. Every term is
    non-negative.
    """
    r, g, b = pixels[_R], pixels[_G], pixels[_B]
    cost = np.abs(r - block.r) + np.abs(g - block.g) + np.abs(b - block.b)

    chroma = np.abs(block.rg - (r - g)) + np.abs(block.bg - (b - g))
    cost += np.where(chroma > CHROMA_THRESHOLD, (chroma - CHROMA_THRESHOLD) * CHROMA_WEIGHT, 0)

    map_sat = pixels[_SAT]
    cost += np.where(block.sat_hot & (map_sat < SATURATION_MAP_MAX), (block.sat - map_sat) * SATURATION_WEIGHT, 0)

    if with_gradient:
        map_grad = pixels[_GRAD]
        cost += np.where(block.grad_hot & (map_grad < GRADIENT_THRESHOLD), block.grad - map_grad, 0)
    return cost


def _scan_row(space: _SearchSpace, y: int, bound: float) -> _Candidate:
    """Score every lattice offset of row ``y`` and return the best one below ``bound``.

    Ties resolve to the leftmost offset.
    """
    xs = space.xs
    origins = y * space.width + xs
    weighted_sum = np.zeros(len(xs), dtype=np.float64)
    weight_sum = np.zeros(len(xs), dtype=np.float64)
    matched = np.zeros(len(xs), dtype=np.intp)
    limit = bound * space.total_weight

    for block in space.blocks:
        index = origins[:, np.newaxis] + block.offsets
        if block.contained:
            weights = np.broadcast_to(block.weight, index.shape)
            matched += len(block.offsets)
        else:
            map_x = xs[:, np.newaxis] + block.px
            map_y = y + block.py
            valid = (map_x >= 0) & (map_x < space.width) & (map_y >= 0) & (map_y < space.height)
            index = np.where(valid, index, 0)
            weights = np.where(valid, block.weight, 0.0)
            matched += valid.sum(axis=1)

        costs = _point_costs(space.planes[:, index], block, with_gradient=space.with_gradient)
        weighted_sum += (costs * weights).sum(axis=1)
        weight_sum += weights.sum(axis=1)

        keep = weighted_sum <= limit
        if not keep.all():
            xs, origins = xs[keep], origins[keep]
            weighted_sum, weight_sum, matched = weighted_sum[keep], weight_sum[keep], matched[keep]
            if not len(xs):
                return _NO_CANDIDATE

    covered = (matched * 100 >= space.sampled * MIN_COVERAGE_PERCENT) & (weight_sum > 0)
    if not covered.any():
        return _NO_CANDIDATE

    scores = np.full(len(xs), math.inf)
    scores[covered] = weighted_sum[covered] / weight_sum[covered]
    best = int(np.argmin(scores))
    return _Candidate(int(xs[best]), y, float(scores[best]), int(matched[best]))


def _scan_rows(space: _SearchSpace, rows: Sequence[int], shared: _SharedMinimum | None = None) -> _Candidate:
    """Branch-and-bound scan of ``rows``.

    Args:
        space: Search state.
        rows: Lattice rows to visit, in order.
        shared: Minimum shared with the other bands; pruning uses the lower of
            the local and shared bests, and every local improvement is offered to it.

    Returns:
        The best candidate found in ``rows``, or ``_NO_CANDIDATE``.
    """
    best = _NO_CANDIDATE
    for y in rows:
        bound = best.score if shared is None else min(best.score, shared.score)
        candidate = _scan_row(space, y, bound)
        if candidate.score < best.score:
            best = candidate
            if shared is not None:
                shared.offer(candidate)
    return best


def _row_bands(rows: Sequence[int], count: int = WORKER_COUNT) -> list[Sequence[int]]:
    """Split lattice rows into ``count`` consecutive, equally sized bands (the last ones may be short or empty)."""
    per_band = -(-len(rows) // count)
    return [rows[index * per_band : (index + 1) * per_band] for index in range(count)]


def _search(space: _SearchSpace, *, concurrent: bool) -> _Candidate:
    """Scan the whole lattice, optionally on a fixed-size thread pool."""
    if not concurrent:
        return _scan_rows(space, space.rows)

    shared = _SharedMinimum()
    with ThreadPoolExecutor(max_workers=WORKER_COUNT, thread_name_prefix="mapmatch-band") as pool:
        futures = [pool.submit(_scan_rows, space, band, shared) for band in _row_bands(space.rows)]
        for future in futures:
            future.result()
    return shared.best


def _prepare_search(
    target: ImageRGBA,
    probe: TemplateProbe,
    step: int,
    probe_step: int,
    gamma: float | None,
) -> _SearchSpace | None:
    """Build the shared search state, or return ``None`` when no offset exists.

    Raises:
        EmptyProbeError: If the probe has no points.
    """
    if probe.is_empty:
        raise EmptyProbeError(probe.width, probe.height)

    height, width = target.shape[:2]
    max_x = width - probe.width
    max_y = height - probe.height
    if max_x < 0 or max_y < 0:
        logger.debug("Probe %dx%d does not fit in target %dx%d.", probe.width, probe.height, width, height)
        return None

    sampled = probe.points[::probe_step]
    blocks = _probe_blocks(probe, sampled, width, gamma)
    return _SearchSpace(
        planes=_target_planes(target, with_gradient=gamma is None),
        width=width,
        height=height,
        xs=np.arange(0, max_x + 1, step, dtype=np.intp),
        rows=range(0, max_y + 1, step),
        blocks=blocks,
        sampled=len(sampled),
        total_weight=float(sum(block.weight.sum() for block in blocks)),
        with_gradient=gamma is None,
    )


@check_valid_image
@check_positive("step", "probe_step")
def match(
    target: ImageRGBA,
    probe: TemplateProbe,
    step: int = 1,
    probe_step: int = 1,
    *,
    concurrent: bool = False,
) -> MatchResult:
    """Find the offset where ``probe`` best aligns with ``target`` using the uniform score.

    Args:
        target: RGBA map to search.
        probe: Probe built from the minimap crop.
        step: Lattice spacing of candidate offsets.
        probe_step: Every ``probe_step``-th probe point is scored.
        concurrent: Scan row bands on a thread pool.

    Returns:
        Best offset with ``score = total_cost / (matched_points * 3)``, or
        :data:`~mapmatch.models.NO_MATCH` when the probe does not fit or no
        candidate passes the coverage gate.

    Raises:
        EmptyProbeError: If the probe has no points.
        ValueError: If ``step`` or ``probe_step`` is below one.
    """
    space = _prepare_search(target, probe, step, probe_step, None)
    if space is None:
        return NO_MATCH

    best = _search(space, concurrent=concurrent)
    if not best.matched:
        logger.debug("No candidate offset reached %d%% coverage.", MIN_COVERAGE_PERCENT)
        return NO_MATCH

    result = MatchResult(best.x, best.y, best.score / _CHANNELS, best.matched)
    logger.debug(
        "Uniform match at (%d, %d) with score %.3f over %d point(s).",
        result.x,
        result.y,
        result.score,
        result.matched_points,
    )
    return result


@check_valid_image
@check_positive("step", "probe_step")
def match_weighted(
    target: ImageRGBA,
    probe: TemplateProbe,
    step: int = 1,
    probe_step: int = 1,
    *,
    concurrent: bool = False,
    gamma: float = 2.0,
) -> MatchResult:
    """Find the best offset using the edge-weighted mean score.

    Each point is weighted by ``max(MIN_EDGE_WEIGHT, (grad_mag / 255) ** gamma)``.

    Args:
        target: RGBA map to search.
        probe: Probe built from the minimap crop.
        step: Lattice spacing of candidate offsets.
        probe_step: Every ``probe_step``-th probe point is scored.
        concurrent: Scan row bands on a thread pool.
        gamma: Weight exponent; 1 is linear, 2 recommended, 3 aggressive.

    Returns:
        Best offset with the weighted mean difference per channel as score, or
        :data:`~mapmatch.models.NO_MATCH`.

    Raises:
        EmptyProbeError: If the probe has no points.
        ValueError: If ``step`` or ``probe_step`` is below one, or ``gamma`` is not positive.
    """
    if gamma <= 0:
        msg = f"gamma must be positive (received {gamma!r})."
        raise ValueError(msg)

    space = _prepare_search(target, probe, step, probe_step, gamma)
    if space is None:
        return NO_MATCH

    best = _search(space, concurrent=concurrent)
    if not best.matched:
        logger.debug("No candidate offset reached %d%% coverage.", MIN_COVERAGE_PERCENT)
        return NO_MATCH

    result = MatchResult(best.x, best.y, best.score / _CHANNELS, best.matched)
    logger.debug(
        "Weighted match (gamma=%.2f) at (%d, %d) with score %.3f over %d point(s).",
        gamma,
        result.x,
        result.y,
        result.score,
        result.matched_points,
    )
    return result
