"""
Tunable constants for curve evaluation.

The defaults reproduce the behaviour of the editor tool the engine was
extracted from: a 1024-sample arc-length index searched in steps of
``1e-5`` and a 1024-sample closest-point scan.  The index and
closest-point resolutions are deliberately separate settings so that
query accuracy can be traded against cost independently of the index.

Values can be overridden through ``SPLINE_*`` environment variables
when the service starts (see :func:`load_settings`).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplineSettings:
    """Accuracy and cost parameters shared by every curve.

    Attributes:
        index_resolution: Number of near-equidistant spans the
            arc-length index divides the curve into.
        closest_point_resolution: Number of spans scanned by
            ``closest_point`` (``resolution + 1`` samples).
        index_search_step: Raw-parameter increment used while building
            the index, both for its length estimate and its search.
        length_step: Default step for user-facing length estimates.
        frame_epsilon: Half-width of the central difference used for
            tangents and normals.
        max_search_steps: Cap on parameter advances during one index
            build.  Exceeding it produces a two-point fallback index.
        min_index_length: Curves shorter than this are indexed with the
            fallback instead of being searched.
    """

    index_resolution: int = 1024
    closest_point_resolution: int = 1024
    index_search_step: float = 0.00001
    length_step: float = 0.001
    frame_epsilon: float = 0.001
    max_search_steps: int = 2_000_000
    min_index_length: float = 1e-9

    def __post_init__(self) -> None:
        if self.index_resolution < 1:
            raise ValueError("index_resolution must be at least 1")
        if self.closest_point_resolution < 1:
            raise ValueError("closest_point_resolution must be at least 1")
        if not 0.0 < self.index_search_step < 1.0:
            raise ValueError("index_search_step must lie in (0, 1)")
        if not 0.0 < self.length_step < 1.0:
            raise ValueError("length_step must lie in (0, 1)")
        if self.frame_epsilon <= 0.0:
            raise ValueError("frame_epsilon must be positive")
        if self.max_search_steps < 1:
            raise ValueError("max_search_steps must be at least 1")


# Environment variable -> (field name, converter)
_ENV_OVERRIDES = {
    "SPLINE_INDEX_RESOLUTION": ("index_resolution", int),
    "SPLINE_CLOSEST_RESOLUTION": ("closest_point_resolution", int),
    "SPLINE_SEARCH_STEP": ("index_search_step", float),
    "SPLINE_LENGTH_STEP": ("length_step", float),
    "SPLINE_MAX_SEARCH_STEPS": ("max_search_steps", int),
}


def load_settings(base: SplineSettings | None = None) -> SplineSettings:
    """Return settings with any ``SPLINE_*`` environment overrides applied.

    Args:
        base: Settings to start from.  Defaults to ``SplineSettings()``.

    Returns:
        A new :class:`SplineSettings` instance.

    Raises:
        ValueError: If an override cannot be converted or is out of range.
    """
    settings = base or SplineSettings()
    overrides = {}
    for env_name, (field_name, convert) in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is None or raw.strip() == "":
            continue
        try:
            overrides[field_name] = convert(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid value for {env_name}: {raw!r}") from exc
    if overrides:
        logger.info("Spline settings overridden from environment: %s", overrides)
        settings = replace(settings, **overrides)
    return settings


DEFAULT_SETTINGS = SplineSettings()
