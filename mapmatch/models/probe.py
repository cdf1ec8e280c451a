"""Template probe data structures.

A probe is the sparse set of reference samples extracted from a masked minimap
crop. Points are stored in a single contiguous ``int32`` array so the matching
loops can gather whole columns at once; :class:`ProbePoint` is the per-point
view handed out when iterating.
"""

from __future__ import annotations

__all__ = ("PROBE_COLUMNS", "ProbePoint", "TemplateProbe")

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, NamedTuple, overload

import numpy as np
import numpy.typing as npt
from typing_extensions import Self

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class ProbePoint(NamedTuple):
    """A single probe sample.

    Attributes:
        x: Column offset within the probe.
        y: Row offset within the probe.
        r: Red component.
        g: Green component.
        b: Blue component.
        saturation: ``max(r, g, b) - min(r, g, b)``.
        grad_mag: Luma gradient magnitude ``|gradX| + |gradY|``.
    """

    x: int
    y: int
    r: int
    g: int
    b: int
    saturation: int
    grad_mag: int


PROBE_COLUMNS: Final[dict[str, int]] = {name: index for index, name in enumerate(ProbePoint._fields)}
_POINTS_NDIM: Final[int] = 2


@dataclass(frozen=True, slots=True, eq=False)
class TemplateProbe:
    """Ordered probe points together with the size of the crop they came from.

    Attributes:
        points: Read-only ``(N, 7)`` ``int32`` array, columns in :class:`ProbePoint` order.
        width: Width of the source crop.
        height: Height of the source crop.
    """

    points: npt.NDArray[np.int32]
    width: int
    height: int

    def __post_init__(self: Self) -> None:
        """Validate the point array and freeze it."""
        if self.points.ndim != _POINTS_NDIM or self.points.shape[1] != len(PROBE_COLUMNS):
            msg = f"Probe points must have shape (N, {len(PROBE_COLUMNS)}) (received {self.points.shape})."
            raise ValueError(msg)
        points = np.array(self.points, dtype=np.int32, order="C")
        points.setflags(write=False)
        object.__setattr__(self, "points", points)

    @classmethod
    def from_points(cls: type[Self], points: Iterable[ProbePoint | tuple[int, ...]], width: int, height: int) -> Self:
        """Build a probe from an iterable of points.

        Args:
            points: Probe points in scan order.
            width: Width of the source crop.
            height: Height of the source crop.

        Returns:
            A new probe.
        """
        rows = [tuple(point) for point in points]
        array = np.array(rows, dtype=np.int32).reshape(len(rows), len(PROBE_COLUMNS))
        return cls(array, width, height)

    @classmethod
    def empty(cls: type[Self], width: int = 0, height: int = 0) -> Self:
        """Return a probe without points."""
        return cls(np.empty((0, len(PROBE_COLUMNS)), dtype=np.int32), width, height)

    @property
    def is_empty(self: Self) -> bool:
        """Whether the probe holds no points."""
        return self.points.shape[0] == 0

    def column(self: Self, name: str) -> npt.NDArray[np.int32]:
        """Return one field of every point as a 1-D view.

        Args:
            name: A :class:`ProbePoint` field name.

        Returns:
            Read-only view of the requested column.
        """
        return self.points[:, PROBE_COLUMNS[name]]

    def __len__(self: Self) -> int:
        return int(self.points.shape[0])

    def __iter__(self: Self) -> Iterator[ProbePoint]:
        for row in self.points.tolist():
            yield ProbePoint(*row)

    @overload
    def __getitem__(self: Self, index: int) -> ProbePoint: ...

    @overload
    def __getitem__(self: Self, index: slice) -> list[ProbePoint]: ...

    def __getitem__(self: Self, index: int | slice) -> ProbePoint | list[ProbePoint]:
        if isinstance(index, slice):
            return [ProbePoint(*row) for row in self.points[index].tolist()]
        return ProbePoint(*self.points[index].tolist())

    def __repr__(self: Self) -> str:
        return f"TemplateProbe(points={len(self)}, width={self.width}, height={self.height})"
