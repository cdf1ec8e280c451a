"""Localization settings dataclass.

The :class:`~mapmatch.models.settings.LocatorSettings` model collects the
parameters of the localization pipeline. Host automation frameworks hand these
over as a JSON object, so the model can be built from a mapping or a JSON
string and validates itself on construction.
"""

from __future__ import annotations

__all__ = ("LocatorSettings",)

import json
from dataclasses import asdict, dataclass, fields
from typing import TYPE_CHECKING, Any, Final

from typing_extensions import Self

if TYPE_CHECKING:
    from collections.abc import Mapping

_MAX_LUMA: Final[int] = 255


@dataclass(slots=True)
class LocatorSettings:
    """Parameters of the minimap localization pipeline.

    Attributes:
        scale: Integer downscale factor applied to the minimap and every map. Defaults to 1.
        step: Lattice spacing of the translation search. Defaults to 2.
        probe_step: Every ``probe_step``-th probe point is scored. Defaults to 2.
        consistency_step: Probe sampling stride of the quadrant consistency check. Defaults to 4.
        gamma: Edge-weight exponent of the weighted variant. Defaults to 2.0.
        luma_threshold: Pixels darker than this are treated as empty map. Defaults to 25.
        concurrent: Scan row bands on a thread pool. Defaults to False.
        max_avg_diff: Highest uniform score accepted as confident. Defaults to 40.0.
        min_z_score: Lowest z-score accepted as confident when several zones compete. Defaults to 1.0.
        max_consistency: Highest quadrant spread accepted as confident. Defaults to 15.0.
    """

    scale: int = 1
    step: int = 2
    probe_step: int = 2
    consistency_step: int = 4
    gamma: float = 2.0
    luma_threshold: int = 25
    concurrent: bool = False
    max_avg_diff: float = 40.0
    min_z_score: float = 1.0
    max_consistency: float = 15.0

    def __post_init__(self: Self) -> None:
        """Validate the settings.

        Raises:
            ValueError: If a stride or factor is below one, ``gamma`` is not positive, or
                ``luma_threshold`` lies outside ``0..255``.
        """
        for name in ("scale", "step", "probe_step", "consistency_step"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                msg = f"{name} must be a positive integer (received {value!r})."
                raise ValueError(msg)
        if self.gamma <= 0:
            msg = f"gamma must be positive (received {self.gamma!r})."
            raise ValueError(msg)
        if not 0 <= self.luma_threshold <= _MAX_LUMA:
            msg = f"luma_threshold must be within 0..{_MAX_LUMA} (received {self.luma_threshold!r})."
            raise ValueError(msg)

    @classmethod
    def from_mapping(cls: type[Self], params: Mapping[str, Any]) -> Self:
        """Build settings from a mapping, ignoring ``None`` values.

        Args:
            params: Parameter names and values.

        Returns:
            Validated settings.

        Raises:
            ValueError: If an unknown parameter is supplied or a value is invalid.
        """
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(params) - known)
        if unknown:
            msg = f"Unknown locator setting(s): {', '.join(unknown)}."
            raise ValueError(msg)
        return cls(**{key: value for key, value in params.items() if value is not None})

    @classmethod
    def from_json(cls: type[Self], payload: str) -> Self:
        """Build settings from a JSON object string; an empty string yields the defaults.

        Raises:
            ValueError: If the payload is not a JSON object or holds invalid settings.
        """
        if not payload.strip():
            return cls()
        params = json.loads(payload)
        if not isinstance(params, dict):
            msg = "Locator settings payload must be a JSON object."
            raise ValueError(msg)  # noqa: TRY004
        return cls.from_mapping(params)

    def to_dict(self: Self) -> dict[str, Any]:
        """Return the settings as a plain dictionary."""
        return asdict(self)
