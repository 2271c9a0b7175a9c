"""
Length estimation and the arc-length index.

A spline's raw parameter does not move at constant speed: segments
between widely spaced control points are traversed faster than short
ones.  The arc-length index fixes this by resampling the raw curve
into a polyline whose consecutive samples are (nearly) equally far
apart, then treating those samples as control points of a new curve.
Evaluating that curve at ``t`` lands approximately ``t * length``
along the raw curve.

Building the index is the expensive step.  The raw curve is evaluated
on a dense parameter grid (``index_search_step`` apart) in one
vectorised call, then walked from sample to sample until the distance
from the last accepted sample exceeds ``length / index_resolution``.
The walk is bounded by the grid and by ``max_search_steps``; when the
cap is hit, or the curve has no measurable length, the builder falls
back to a two-point index through the curve's end points.

Debug messages for each build are emitted when the ``SPLINE_DEBUG``
environment variable is set.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, List

import numpy as np

from .interpolation import ParamLike, SplineMode, evaluate_points
from .spline_errors import IndexBuildLimitError
from .spline_settings import DEFAULT_SETTINGS, SplineSettings

logger = logging.getLogger(__name__)

# Evaluator over an array of raw parameters returning an (m, 3) array.
CurveEvaluator = Callable[[np.ndarray], np.ndarray]

# Initial number of grid points inspected per search window.
_SEARCH_WINDOW = 64


def estimate_length(evaluate: CurveEvaluator, step: float = DEFAULT_SETTINGS.length_step) -> float:
    """Approximate curve length by summing chords at a fixed step.

    The raw parameter is walked from 0 in increments of ``step`` while
    it stays below 1, so the final partial chord up to ``t = 1`` is not
    included.  Smaller steps are more accurate and proportionally more
    expensive.

    Args:
        evaluate: Vectorised curve evaluator.
        step: Parameter increment, in ``(0, 1)``.

    Returns:
        The summed chord length.
    """
    if not 0.0 < step < 1.0:
        raise ValueError(f"Length step must lie in (0, 1), got {step}")
    ts = np.arange(0.0, 1.0, step)
    pts = np.asarray(evaluate(ts), dtype=np.float64).reshape(-1, 3)
    if len(pts) < 2:
        return 0.0
    return float(np.linalg.norm(np.diff(pts, axis=0), axis=1).sum())


@dataclass(frozen=True)
class ArcLengthIndex:
    """Near-equidistant resampling of a curve.

    Attributes:
        samples: ``(k, 3)`` array of resampled points, in the same frame
            as the control points they were built from.
        closed: Whether the resampled curve wraps.
        mode: Blend re-applied over the samples.
        length: Curve length estimate the spacing was derived from.
        fallback: True when the index is the two-point fallback rather
            than a searched resampling.
    """

    samples: np.ndarray
    closed: bool
    mode: SplineMode
    length: float
    fallback: bool = False

    def __len__(self) -> int:
        return len(self.samples)

    def point(self, t: ParamLike) -> np.ndarray:
        """Evaluate the uniform-speed curve at ``t``."""
        return evaluate_points(self.samples, t, self.closed, self.mode)


def build_arc_length_index(
    evaluate: CurveEvaluator,
    closed: bool,
    mode: SplineMode,
    settings: SplineSettings = DEFAULT_SETTINGS,
) -> ArcLengthIndex:
    """Resample the raw curve into an :class:`ArcLengthIndex`.

    Args:
        evaluate: Vectorised raw-parameter evaluator of the curve.
        closed: Closed flag of the curve.
        mode: Blend mode of the curve, re-used over the samples.
        settings: Resolution, search step and search cap.

    Returns:
        The resampled index, or the two-point fallback for curves with
        no measurable length or whose search exceeded the cap.
    """
    step = settings.index_search_step
    length = estimate_length(evaluate, step)
    if not np.isfinite(length) or length <= settings.min_index_length:
        logger.warning("Arc-length index: curve length %.3g too small, using end points", length)
        return _fallback_index(evaluate, closed, mode, length)

    spacing = length / settings.index_resolution
    threshold = spacing * spacing
    grid_steps = int(round(1.0 / step))
    dense = np.asarray(evaluate(np.linspace(0.0, 1.0, grid_steps + 1)), dtype=np.float64)

    try:
        samples = _walk_samples(dense, threshold, closed, settings.max_search_steps)
    except IndexBuildLimitError as exc:
        logger.warning("Arc-length index: %s, using end points", exc)
        return _fallback_index(evaluate, closed, mode, length)

    if os.getenv("SPLINE_DEBUG"):
        logger.debug(
            "Arc-length index built: length=%.6f spacing=%.6f samples=%d closed=%s mode=%s",
            length,
            spacing,
            len(samples),
            closed,
            SplineMode(mode).value,
        )
    return ArcLengthIndex(np.array(samples), bool(closed), SplineMode(mode), length)


def _walk_samples(dense: np.ndarray, threshold: float, closed: bool, max_steps: int) -> List[np.ndarray]:
    """Greedily pick grid points more than ``sqrt(threshold)`` apart.

    Starting from the first grid point, advance along the grid until a
    point's squared distance from the last accepted sample exceeds
    ``threshold``, accept it and continue.  Points are inspected in
    windows to keep the loop vectorised; the window grows with the
    observed gap between samples.
    """
    last = len(dense) - 1
    samples = [dense[0]]
    anchor = 0
    cursor = 0
    steps = 0
    window = _SEARCH_WINDOW
    while cursor < last:
        stop = min(cursor + window, last)
        d2 = np.sum((dense[cursor + 1 : stop + 1] - dense[anchor]) ** 2, axis=1)
        hits = np.flatnonzero(d2 > threshold)
        advanced = int(hits[0]) + 1 if hits.size else stop - cursor
        steps += advanced
        if steps > max_steps:
            raise IndexBuildLimitError(steps, max_steps)
        if hits.size:
            gap = cursor + advanced - anchor
            anchor = cursor = cursor + advanced
            samples.append(dense[anchor])
            window = max(_SEARCH_WINDOW, 2 * gap)
        else:
            cursor = stop

    if closed and np.allclose(dense[last], dense[0]):
        # the wrap joins the last sample to the first; drop one crowding it
        if len(samples) > 1 and np.sum((samples[-1] - samples[0]) ** 2) < threshold / 4.0:
            samples.pop()
    elif anchor < last:
        samples.append(dense[last])
    return samples


def _fallback_index(evaluate: CurveEvaluator, closed: bool, mode: SplineMode, length: float) -> ArcLengthIndex:
    ends = np.asarray(evaluate(np.array([0.0, 1.0])), dtype=np.float64).reshape(2, 3)
    return ArcLengthIndex(ends, bool(closed), SplineMode(mode), float(length), fallback=True)
