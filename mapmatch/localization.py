"""Minimap localization across candidate zone maps.

This module composes the primitives from :mod:`mapmatch.core` into the
pipeline a recognition handler runs on every frame: prepare the minimap crop,
build its probe, match it against every zone map with both variants, and
judge the winner with the confidence measures.

Prepared maps are plain arrays owned by the caller; :func:`locate` keeps
nothing between calls. Callers that localize repeatedly can run
:func:`prepare_map` once per zone and pass ``prepared_maps=True``.
"""

from __future__ import annotations

__all__ = ("locate", "prepare_map", "prepare_minimap")

import logging
from typing import TYPE_CHECKING, Final

from .core import (
    apply_mask,
    apply_spotlight_effect,
    apply_void_filter,
    build_probe,
    downscale,
    ensure_rgba,
    generate_circular_mask,
    local_consistency,
    match,
    match_weighted,
    z_score,
)
from .models import LocalizationResult, LocalizationStatus, LocatorSettings, ZoneMatch
from .utils import crop_image, scale_point

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .core.image_processing import ImageLike, ImageRGBA, Mask
    from .models import TemplateProbe
    from .utils.geometry import Rect

logger = logging.getLogger(__name__)

_MIN_COMPETING_ZONES: Final[int] = 2


def prepare_map(image: ImageLike, settings: LocatorSettings | None = None) -> ImageRGBA:
    """Prepare a zone map for matching.

    The map is normalized to RGBA, downscaled by ``settings.scale``, and its dark
    empty regions are cleared to transparent black, which the void-filtered
    minimap never contains.

    Args:
        image: Full-resolution zone map.
        settings: Pipeline settings; defaults are used when ``None``.

    Returns:
        A new RGBA buffer; ``image`` is left untouched.
    """
    settings = settings or LocatorSettings()
    prepared = downscale(image, settings.scale)
    apply_spotlight_effect(prepared, settings.luma_threshold)
    return prepared


def prepare_minimap(
    image: ImageLike,
    settings: LocatorSettings | None = None,
    roi: Rect | None = None,
) -> tuple[ImageRGBA, Mask] | None:
    """Prepare the live minimap crop for probe extraction.

    Args:
        image: Captured frame, or the minimap itself when ``roi`` is ``None``.
        settings: Pipeline settings; defaults are used when ``None``.
        roi: Optional minimap region of the frame as ``(x, y, w, h)``.

    Returns:
        The masked, void-filtered crop and its circular mask, or ``None`` when the
        region misses the frame or shrinks to nothing after downscaling.
    """
    settings = settings or LocatorSettings()
    frame = ensure_rgba(image)
    if roi is not None:
        cropped = crop_image(frame, roi)
        if cropped is None:
            logger.warning("Minimap region %s lies outside the %dx%d frame.", roi, frame.shape[1], frame.shape[0])
            return None
        frame = cropped

    small = downscale(frame, settings.scale)
    height, width = small.shape[:2]
    if height == 0 or width == 0:
        logger.warning("Minimap collapses to %dx%d at scale %d.", width, height, settings.scale)
        return None

    mask = generate_circular_mask(width, height)
    crop = apply_mask(small, mask)
    apply_void_filter(crop, settings.luma_threshold)
    return crop, mask


def _match_zone(zone: str, target: ImageRGBA, probe: TemplateProbe, settings: LocatorSettings) -> ZoneMatch:
    uniform = match(target, probe, settings.step, settings.probe_step, concurrent=settings.concurrent)
    weighted = match_weighted(
        target,
        probe,
        settings.step,
        settings.probe_step,
        concurrent=settings.concurrent,
        gamma=settings.gamma,
    )
    logger.debug(
        "Zone %r: uniform %s score %.3f, weighted %s score %.3f.",
        zone,
        uniform.offset(),
        uniform.score,
        weighted.offset(),
        weighted.score,
    )
    return ZoneMatch(zone, uniform, weighted)


def locate(
    minimap: ImageLike,
    maps: Mapping[str, ImageLike],
    settings: LocatorSettings | None = None,
    *,
    roi: Rect | None = None,
    prepared_maps: bool = False,
) -> LocalizationResult:
    """Find which zone map the minimap shows and where.

    The winning zone is the one whose uniform match has the lowest score. The
    result is confident when both variants agree within one search step, the
    score and quadrant spread stay under their limits, and, when several zones
    compete, the winner's z-score reaches ``settings.min_z_score``.

    Args:
        minimap: Captured frame or minimap crop.
        maps: Zone name to zone map.
        settings: Pipeline settings; defaults are used when ``None``.
        roi: Optional minimap region of ``minimap`` as ``(x, y, w, h)``.
        prepared_maps: Whether ``maps`` already went through :func:`prepare_map`.

    Returns:
        The localization decision. ``status`` is ``EMPTY_PROBE`` when the crop has no
        usable pixels and ``NO_MATCH`` when no zone produced an alignment.
    """
    settings = settings or LocatorSettings()

    prepared = prepare_minimap(minimap, settings, roi)
    if prepared is None:
        return LocalizationResult.failed(LocalizationStatus.NO_MATCH)

    crop, mask = prepared
    probe = build_probe(crop, mask)
    if probe.is_empty:
        logger.warning("Minimap crop produced an empty probe; nothing to match.")
        return LocalizationResult.failed(LocalizationStatus.EMPTY_PROBE)

    targets: dict[str, ImageRGBA] = {}
    zone_matches: list[ZoneMatch] = []
    for zone, image in maps.items():
        targets[zone] = ensure_rgba(image) if prepared_maps else prepare_map(image, settings)
        zone_matches.append(_match_zone(zone, targets[zone], probe, settings))
    candidates = tuple(zone_matches)

    found = [candidate for candidate in candidates if candidate.found]
    if not found:
        logger.info("No zone out of %d produced an alignment.", len(candidates))
        return LocalizationResult.failed(LocalizationStatus.NO_MATCH, candidates)

    winner = min(found, key=lambda candidate: candidate.uniform.score)
    uniform, weighted = winner.uniform, winner.weighted

    separation = z_score(uniform.score, [candidate.uniform.score for candidate in found])
    spread = local_consistency(targets[winner.zone], probe, uniform.x, uniform.y, settings.consistency_step)
    cross_validated = weighted.found and max(abs(uniform.x - weighted.x), abs(uniform.y - weighted.y)) <= settings.step
    confident = (
        cross_validated
        and uniform.score <= settings.max_avg_diff
        and spread <= settings.max_consistency
        and (len(found) < _MIN_COMPETING_ZONES or separation >= settings.min_z_score)
    )

    x, y = scale_point(uniform.offset(), settings.scale)
    logger.info(
        "Located zone %r at (%d, %d): score=%.3f z=%.3f spread=%.3f cross_validated=%s confident=%s.",
        winner.zone,
        x,
        y,
        uniform.score,
        separation,
        spread,
        cross_validated,
        confident,
    )
    return LocalizationResult(
        status=LocalizationStatus.LOCATED,
        zone=winner.zone,
        x=x,
        y=y,
        width=probe.width * settings.scale,
        height=probe.height * settings.scale,
        avg_diff=uniform.score,
        weighted_diff=weighted.score,
        z_score=separation,
        consistency=spread,
        cross_validated=cross_validated,
        confident=confident,
        candidates=candidates,
    )
