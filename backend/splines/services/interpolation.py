"""
Interpolation kernels shared by raw curve and arc-length index evaluation.

Two blends are supported: a Catmull–Rom form cubic Hermite through the
middle pair of four points, and a plain linear blend between two
points.  :func:`evaluate_points` selects the segment for a parameter
``t`` over an arbitrary point sequence and applies the configured
blend.  The same routine evaluates the user's control points and the
resampled points of the arc-length index, so both curves always share
one segment-selection rule.

All functions accept numpy arrays and broadcast, so a whole batch of
parameters can be evaluated in one call.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

import numpy as np

Vector3 = np.ndarray
ParamLike = Union[float, np.ndarray]


class SplineMode(str, Enum):
    """Blend applied between control points."""

    LINEAR = "linear"
    HERMITE = "hermite"


def as_vector3(value) -> Vector3:
    """Coerce a 3-sequence into a float64 vector of shape ``(3,)``."""
    vec = np.asarray(value, dtype=np.float64).reshape(-1)
    if vec.shape != (3,):
        raise ValueError(f"Expected a 3D vector, got shape {vec.shape}")
    return vec


def interpolate_cubic(a, b, c, d, u):
    """Evaluate the Catmull–Rom form cubic through ``b`` and ``c``.

    ``a`` and ``d`` only shape the tangents at ``b`` and ``c``.  ``u``
    is not clamped; values outside ``[0, 1]`` extrapolate.
    """
    u2 = u * u
    u3 = u2 * u
    return 0.5 * (
        (-a + 3.0 * b - 3.0 * c + d) * u3
        + (2.0 * a - 5.0 * b + 4.0 * c - d) * u2
        + (-a + c) * u
        + 2.0 * b
    )


def interpolate_linear(a, b, u):
    """Blend ``a`` towards ``b`` by ``u`` (unclamped)."""
    return a + (b - a) * u


def wrap_index(index, count: int):
    """Map segment or point indices onto ``[0, count)``.

    Negative indices count back from the end, so ``-1`` is the last
    point and ``count`` the first.  Works on ints and integer arrays.
    """
    if count <= 0:
        raise ValueError("Cannot wrap an index into an empty point sequence")
    return index % count


def segment_count(count: int, closed: bool, mode: SplineMode) -> int:
    """Number of evaluable segments for ``count`` points.

    Open cubic curves lose one segment at each end to the tangent
    points; open linear curves lose only the final point.
    """
    if closed:
        return count
    return count - (1 if mode == SplineMode.LINEAR else 3)


def evaluate_points(points: np.ndarray, t: ParamLike, closed: bool, mode: SplineMode) -> np.ndarray:
    """Evaluate the curve defined by ``points`` at parameter(s) ``t``.

    Args:
        points: Array of shape ``(n, 3)``.  Order defines the curve.
        t: Scalar parameter or array of parameters, nominally in ``[0, 1]``.
        closed: Whether the sequence wraps back to its first point.
        mode: Linear or cubic Hermite blending.

    Returns:
        A ``(3,)`` vector for scalar ``t``, otherwise an ``(m, 3)`` array.

    Fewer than four points are handled by fixed rules regardless of
    ``mode``: none gives the origin, one gives that point, two blend
    linearly and three collapse onto the middle point.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    ts = np.asarray(t, dtype=np.float64)
    scalar = ts.ndim == 0
    ts = np.atleast_1d(ts).reshape(-1)
    n = len(pts)

    if n == 0:
        out = np.zeros((len(ts), 3))
    elif n == 1:
        out = np.repeat(pts[:1], len(ts), axis=0)
    elif n == 2:
        out = interpolate_linear(pts[0], pts[1], ts[:, None])
    elif n == 3:
        out = np.repeat(pts[1:2], len(ts), axis=0)
    else:
        out = _evaluate_segments(pts, ts, closed, mode)
    return out[0] if scalar else out


def _evaluate_segments(pts: np.ndarray, ts: np.ndarray, closed: bool, mode: SplineMode) -> np.ndarray:
    n = len(pts)
    sections = segment_count(n, closed, mode)
    scaled = ts * sections
    i = np.minimum(np.floor(scaled).astype(np.int64), sections - 1)
    if not closed:
        # open curves never wrap; out-of-range t extrapolates the end segment
        i = np.maximum(i, 0)
    u = (scaled - i)[:, None]
    if mode == SplineMode.LINEAR:
        return interpolate_linear(pts[wrap_index(i, n)], pts[wrap_index(i + 1, n)], u)
    return interpolate_cubic(
        pts[wrap_index(i, n)],
        pts[wrap_index(i + 1, n)],
        pts[wrap_index(i + 2, n)],
        pts[wrap_index(i + 3, n)],
        u,
    )
