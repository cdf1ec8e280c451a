"""Data structures and domain exceptions used by mapmatch.

This package centralises the small, shared models (probes, match results,
settings, and localization decisions) and the project-specific exception
types raised throughout the codebase.
"""

from __future__ import annotations

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
)

from .exceptions import EmptyProbeError, InvalidImageError
from .localization import LocalizationResult, LocalizationStatus, ZoneMatch
from .match_result import NO_MATCH, MatchResult
from .probe import ProbePoint, TemplateProbe
from .settings import LocatorSettings
