"""Match result model.

:class:`MatchResult` is returned by both matching variants. Scores are
dissimilarities: lower is better and ``0`` is a perfect match.
"""

from __future__ import annotations

__all__ = ("NO_MATCH", "MatchResult")

import math
from typing import Final, NamedTuple

from typing_extensions import Self


class MatchResult(NamedTuple):
    """Best translation found for a probe.

    Attributes:
        x: Column of the probe origin within the target.
        y: Row of the probe origin within the target.
        score: Dissimilarity of the alignment.
        matched_points: Number of sampled probe points with a valid map correspondence.
    """

    x: int
    y: int
    score: float
    matched_points: int

    @property
    def found(self: Self) -> bool:
        """Whether the search produced an alignment at all.

        Callers must check this rather than the numeric score; the "no match"
        value carries an infinite score and a ``(-1, -1)`` origin.
        """
        return self.matched_points > 0

    def offset(self: Self) -> tuple[int, int]:
        """Return ``(x, y)``."""
        return self.x, self.y


NO_MATCH: Final[MatchResult] = MatchResult(-1, -1, math.inf, 0)
