"""Localization result models.

:class:`LocalizationResult` is what the zone pipeline hands back to a
recognition handler: the winning zone and offset plus every signal used to
judge it, in a form that serialises straight to the handler's JSON detail.
"""

from __future__ import annotations

__all__ = ("LocalizationResult", "LocalizationStatus", "ZoneMatch")

import enum
import math
from dataclasses import dataclass, field
from typing import Any

from typing_extensions import Self

from .match_result import NO_MATCH, MatchResult


class LocalizationStatus(str, enum.Enum):
    """Outcome of a localization attempt."""

    LOCATED = "located"
    EMPTY_PROBE = "empty_probe"
    NO_MATCH = "no_match"


@dataclass(frozen=True, slots=True)
class ZoneMatch:
    """Results of both matching variants against one candidate map.

    Attributes:
        zone: Name of the candidate map.
        uniform: Result of the uniform variant, in downscaled coordinates.
        weighted: Result of the edge-weighted variant, in downscaled coordinates.
    """

    zone: str
    uniform: MatchResult
    weighted: MatchResult

    @property
    def found(self: Self) -> bool:
        """Whether the uniform variant produced an alignment."""
        return self.uniform.found

    def to_dict(self: Self) -> dict[str, Any]:
        """Return a JSON-friendly dictionary."""
        return {
            "zone": self.zone,
            "uniform": _match_to_dict(self.uniform),
            "weighted": _match_to_dict(self.weighted),
        }


@dataclass(frozen=True, slots=True)
class LocalizationResult:
    """Decision of the localization pipeline.

    Attributes:
        status: Outcome of the attempt.
        zone: Winning zone, or ``None`` when nothing was located.
        x: Column of the minimap origin on the winning map, at full resolution.
        y: Row of the minimap origin on the winning map, at full resolution.
        width: Minimap width at full resolution.
        height: Minimap height at full resolution.
        avg_diff: Uniform score of the winner.
        weighted_diff: Edge-weighted score of the winner.
        z_score: Separation of the winner from the competing zones.
        consistency: Quadrant spread of the winning alignment.
        cross_validated: Whether both variants agree within one search step.
        confident: Whether every configured acceptance threshold holds.
        candidates: Per-zone results in input order.
    """

    status: LocalizationStatus
    zone: str | None = None
    x: int = -1
    y: int = -1
    width: int = 0
    height: int = 0
    avg_diff: float = math.inf
    weighted_diff: float = math.inf
    z_score: float = 0.0
    consistency: float = 0.0
    cross_validated: bool = False
    confident: bool = False
    candidates: tuple[ZoneMatch, ...] = field(default_factory=tuple)

    @classmethod
    def failed(cls: type[Self], status: LocalizationStatus, candidates: tuple[ZoneMatch, ...] = ()) -> Self:
        """Return a result that carries no location."""
        return cls(status=status, candidates=candidates)

    @property
    def located(self: Self) -> bool:
        """Whether a zone and offset were found."""
        return self.status is LocalizationStatus.LOCATED

    @property
    def center(self: Self) -> tuple[int, int] | None:
        """Map position under the centre of the minimap, or ``None``."""
        if not self.located:
            return None
        return self.x + self.width // 2, self.y + self.height // 2

    def to_dict(self: Self) -> dict[str, Any]:
        """Return a JSON-friendly dictionary."""
        return {
            "status": self.status.value,
            "zone": self.zone,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "center": list(self.center) if self.center is not None else None,
            "avg_diff": _finite_or_none(self.avg_diff),
            "weighted_diff": _finite_or_none(self.weighted_diff),
            "z_score": self.z_score,
            "consistency": self.consistency,
            "cross_validated": self.cross_validated,
            "confident": self.confident,
            "candidates": [candidate.to_dict() for candidate in self.candidates],
        }


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def _match_to_dict(result: MatchResult) -> dict[str, Any]:
    if not result.found:
        result = NO_MATCH
    return {
        "x": result.x,
        "y": result.y,
        "score": _finite_or_none(result.score),
        "matched_points": result.matched_points,
    }
