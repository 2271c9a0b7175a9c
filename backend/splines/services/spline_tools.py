"""
Editing and sampling helpers built on :class:`SplineCurve`.

These are the geometric operations an editor performs on a curve
besides moving individual control points: flattening it onto the
ground plane, recentring it, sampling a polyline to draw, laying out
evenly spaced frames and inserting a new control point where the user
clicked near the curve.
"""

from __future__ import annotations

import logging
import math
from typing import List, Tuple

import numpy as np

from .interpolation import SplineMode, Vector3, as_vector3, segment_count, wrap_index
from .spline_engine import SplineCurve

logger = logging.getLogger(__name__)

# Polyline resolutions used when drawing an unselected / selected curve.
LOW_RES_STEPS: int = 64
HIGH_RES_STEPS: int = 1024

# Raw-parameter samples scanned by closest_raw_parameter.
CLOSEST_RAW_STEPS: int = 1000


def default_control_points() -> List[Vector3]:
    """Four evenly spaced points along +Z; the starting shape of a new curve."""
    return [np.array([0.0, 0.0, 3.0 * k]) for k in range(1, 5)]


def flatten(curve: SplineCurve) -> None:
    """Project every control point onto the local ``y = 0`` plane."""
    pts = np.array(curve.control_points, dtype=np.float64)
    pts[:, 1] = 0.0
    curve.set_control_points(pts)


def center_around_origin(curve: SplineCurve) -> Vector3:
    """Translate the control points so their centroid is the local origin.

    Returns:
        The centroid that was subtracted.
    """
    pts = np.array(curve.control_points, dtype=np.float64)
    if len(pts) == 0:
        return np.zeros(3)
    center = pts.mean(axis=0)
    curve.set_control_points(pts - center)
    return center


def sample_polyline(curve: SplineCurve, step_count: int = LOW_RES_STEPS) -> np.ndarray:
    """Sample the raw curve at ``step_count`` equal parameter steps.

    Returns an ``(step_count + 1, 3)`` array of world positions starting
    at ``t = 0`` and ending at ``t = 1``; empty for a curve without
    control points.
    """
    if step_count < 1:
        raise ValueError("step_count must be at least 1")
    if curve.control_point_count == 0:
        return np.zeros((0, 3))
    return curve.raw_points(np.linspace(0.0, 1.0, step_count + 1))


def layout_frames(curve: SplineCurve, count: int) -> List[Tuple[Vector3, Vector3]]:
    """Place ``count`` positions at uniform parameters ``i / count``.

    Returns:
        ``(position, right_normal)`` pairs in world space.
    """
    if count < 0:
        raise ValueError("count must not be negative")
    frames = []
    for i in range(count):
        t = i / count
        frames.append((curve.uniform_point(t), curve.right_normal(t)))
    return frames


def closest_raw_parameter(curve: SplineCurve, point, steps: int = CLOSEST_RAW_STEPS) -> float:
    """Raw parameter of the sampled curve point nearest ``point`` (world space)."""
    if steps < 1:
        raise ValueError("steps must be at least 1")
    target = as_vector3(point)
    ts = np.arange(steps + 1) / steps
    d2 = np.sum((curve.raw_points(ts) - target) ** 2, axis=1)
    return float(ts[int(np.argmin(d2))])


def insert_near(curve: SplineCurve, point, snap_distance: float = 5.0) -> int:
    """Insert a control point where ``point`` meets the curve.

    On a closed curve the new control point is placed on the curve at
    the nearest raw sample, in the segment that sample belongs to.  On
    an open curve the same happens, except that a ``point`` within
    ``snap_distance`` of either end extends the curve: ``point``
    itself becomes the new first or last interior point.

    Args:
        curve: Curve to edit.  Needs at least four control points.
        point: World-space location picked by the user.
        snap_distance: Radius around the end points that triggers
            extension on open curves.

    Returns:
        Index of the inserted control point.
    """
    count = curve.control_point_count
    if count < 4:
        raise ValueError("insert_near needs a curve with at least four control points")
    target = as_vector3(point)
    t = closest_raw_parameter(curve, target)
    # cubic segments start one point in, after the leading tangent point
    lead = 0 if curve.mode == SplineMode.LINEAR else 1
    sections = segment_count(count, curve.closed, curve.mode)

    if curve.closed:
        segment = min(math.floor(t * sections), sections - 1)
        index = wrap_index(segment + lead + 1, count)
        curve.insert_control_point(index, curve.transform.to_local(curve.raw_point(t)))
        return index

    snap2 = snap_distance * snap_distance
    if np.sum((target - curve.raw_point(0.0)) ** 2) < snap2:
        index = lead
    elif np.sum((target - curve.raw_point(1.0)) ** 2) < snap2:
        index = count - lead
    else:
        segment = min(math.floor(t * sections), sections - 1)
        index = segment + lead + 1
        curve.insert_control_point(index, curve.transform.to_local(curve.raw_point(t)))
        return index

    logger.debug("insert_near: extending open curve at index %d", index)
    curve.insert_control_point(index, curve.transform.to_local(target))
    return index
