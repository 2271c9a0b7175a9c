"""
Spline curve engine.

:class:`SplineCurve` is the public face of the spline services.  It
owns a :class:`~.control_points.ControlPointStore`, a coordinate
transform and a :class:`~.spline_cache.DerivedCache`, and answers the
geometric queries an editor or path planner needs:

* ``raw_point(t)``: position at the native (non-uniform) parameter.
* ``uniform_point(t)``: position at an approximately arc-length
  proportional parameter, served from the arc-length index.
* ``distance_point(d)``: position ``d`` world units along the curve.
* ``tangent``/``right_normal``/``up_normal`` and their negations:
  directions from a central difference of ``uniform_point``.
* ``length(step)``: on-demand length estimate.
* ``closest_point(p)``: brute-force nearest sample to ``p``.

Control points are local-space; every returned position is world
space.  The index is built over local-space samples and mapped to
world space on the way out, while lengths are measured in world space
so that ``distance_point`` works in world units.

Instances are not thread-safe.  Callers that share a curve between
threads must serialise access themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from .arc_length import ArcLengthIndex, build_arc_length_index, estimate_length
from .control_points import ControlPointStore
from .interpolation import ParamLike, SplineMode, Vector3, as_vector3, evaluate_points
from .spline_cache import CacheState, DerivedCache
from .spline_errors import DegenerateGeometryError
from .spline_settings import DEFAULT_SETTINGS, SplineSettings
from .transforms import IdentityTransform, Transform

logger = logging.getLogger(__name__)

# Vectors shorter than this normalise to zero.
_NORMALIZE_EPSILON = 1e-5


@dataclass(frozen=True)
class SplineFrame:
    """Position and orientation at one uniform parameter."""

    t: float
    position: Vector3
    forward: Vector3
    right: Vector3
    up: Vector3

    @property
    def backward(self) -> Vector3:
        return -self.forward

    @property
    def left(self) -> Vector3:
        return -self.right

    @property
    def down(self) -> Vector3:
        return -self.up


@dataclass(frozen=True)
class ClosestSample:
    """Result of a nearest-point scan."""

    t: float
    position: Vector3
    distance: float


class SplineCurve:
    """A Catmull–Rom (or polyline) curve with uniform-speed queries.

    Args:
        points: Initial local-space control points.
        closed: Whether the curve loops.
        mode: ``SplineMode.HERMITE`` (default) or ``SplineMode.LINEAR``.
        transform: Local-to-world transform; identity when omitted.
        settings: Resolution and accuracy parameters.
    """

    def __init__(
        self,
        points: Optional[Iterable] = None,
        closed: bool = False,
        mode: SplineMode = SplineMode.HERMITE,
        transform: Optional[Transform] = None,
        settings: SplineSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.store = ControlPointStore(points, closed=closed, mode=mode)
        self.settings = settings
        self._transform: Transform = transform or IdentityTransform()
        self._cache = DerivedCache()
        self.store.subscribe(self._cache.invalidate)

    def __repr__(self) -> str:
        return (
            f"SplineCurve(points={self.control_point_count}, closed={self.closed}, "
            f"mode={self.mode.value!r})"
        )

    # ------------------------------------------------------------------
    # Configuration

    @property
    def closed(self) -> bool:
        return self.store.closed

    @closed.setter
    def closed(self, value: bool) -> None:
        self.store.closed = value

    @property
    def mode(self) -> SplineMode:
        return self.store.mode

    @mode.setter
    def mode(self, value: SplineMode) -> None:
        self.store.mode = value

    @property
    def transform(self) -> Transform:
        return self._transform

    @transform.setter
    def transform(self, value: Optional[Transform]) -> None:
        self._transform = value or IdentityTransform()
        # world-space lengths depend on the transform
        self._cache.invalidate()

    @property
    def index_state(self) -> CacheState:
        return self._cache.index.state

    @property
    def length_state(self) -> CacheState:
        return self._cache.total_length.state

    # ------------------------------------------------------------------
    # Control points (local space)

    @property
    def control_point_count(self) -> int:
        return self.store.count()

    @property
    def control_points(self) -> np.ndarray:
        return self.store.points

    def get_control_point(self, index: int) -> Vector3:
        return self.store.get(index)

    def set_control_point(self, index: int, position) -> None:
        self.store.set(index, position)

    def insert_control_point(self, index: int, position) -> int:
        return self.store.insert(index, position)

    def remove_control_point(self, index: int) -> Vector3:
        return self.store.remove(index)

    def set_control_points(self, points: Iterable) -> None:
        self.store.replace(points)

    # ------------------------------------------------------------------
    # Evaluation

    def _local_raw(self, t: ParamLike) -> np.ndarray:
        return evaluate_points(self.store.points, t, self.store.closed, self.store.mode)

    def _world_raw(self, t: ParamLike) -> np.ndarray:
        return self._transform.to_world(self._local_raw(t))

    def raw_point(self, t: float) -> Vector3:
        """World position at raw parameter ``t``."""
        return self._world_raw(float(t))

    def raw_points(self, ts) -> np.ndarray:
        """World positions for an array of raw parameters, shape ``(m, 3)``."""
        return self._world_raw(np.asarray(ts, dtype=np.float64).reshape(-1))

    @property
    def index(self) -> ArcLengthIndex:
        """The arc-length index for the current control points."""
        return self._cache.index.get(self.store.version, self._build_index)

    def _build_index(self) -> ArcLengthIndex:
        index = build_arc_length_index(self._local_raw, self.store.closed, self.store.mode, self.settings)
        logger.debug(
            "Rebuilt arc-length index: %d samples, length %.6f%s",
            len(index),
            index.length,
            " (fallback)" if index.fallback else "",
        )
        return index

    def uniform_point(self, t: float) -> Vector3:
        """World position at uniform parameter ``t`` in ``[0, 1]``."""
        return self._transform.to_world(self.index.point(float(t)))

    def uniform_points(self, ts) -> np.ndarray:
        """World positions for an array of uniform parameters."""
        return self._transform.to_world(self.index.point(np.asarray(ts, dtype=np.float64).reshape(-1)))

    @property
    def total_length(self) -> float:
        """Cached world-space length, estimated at ``settings.length_step``."""
        return self._cache.total_length.get(
            self.store.version, lambda: estimate_length(self._world_raw, self.settings.length_step)
        )

    def distance_point(self, distance: float) -> Vector3:
        """World position ``distance`` units along the curve.

        Raises:
            DegenerateGeometryError: If the curve has zero length.
        """
        total = self.total_length
        if total <= 0.0:
            raise DegenerateGeometryError("Cannot locate a distance along a zero-length curve")
        return self.uniform_point(distance / total)

    def length(self, step: Optional[float] = None) -> float:
        """Estimate the world-space length without touching the cache.

        ``step`` defaults to ``settings.length_step``, the step
        :attr:`total_length` is cached at.
        """
        return estimate_length(self._world_raw, self.settings.length_step if step is None else step)

    # ------------------------------------------------------------------
    # Directions

    def _delta(self, t: float) -> Vector3:
        eps = self.settings.frame_epsilon
        ends = self.uniform_points([t - eps, t + eps])
        return ends[1] - ends[0]

    def tangent(self, t: float) -> Vector3:
        """Unit direction of travel at ``t``."""
        return _normalize(self._delta(t))

    def backward(self, t: float) -> Vector3:
        return -self.tangent(t)

    def right_normal(self, t: float) -> Vector3:
        """Horizontal unit normal, assuming Y is up."""
        delta = self._delta(t)
        return _normalize(np.array([-delta[2], 0.0, delta[0]]))

    def left_normal(self, t: float) -> Vector3:
        return -self.right_normal(t)

    def up_normal(self, t: float) -> Vector3:
        delta = self._delta(t)
        right = _normalize(np.array([-delta[2], 0.0, delta[0]]))
        return np.cross(_normalize(delta), right)

    def down_normal(self, t: float) -> Vector3:
        return -self.up_normal(t)

    def frame(self, t: float) -> SplineFrame:
        """Position plus forward/right/up at ``t`` from a single difference."""
        delta = self._delta(t)
        forward = _normalize(delta)
        right = _normalize(np.array([-delta[2], 0.0, delta[0]]))
        return SplineFrame(
            t=float(t),
            position=self.uniform_point(t),
            forward=forward,
            right=right,
            up=np.cross(forward, right),
        )

    # ------------------------------------------------------------------
    # Nearest point

    def closest_sample(self, query) -> ClosestSample:
        """Scan evenly spaced uniform samples for the one nearest ``query``.

        ``query`` is a world-space point.  Accuracy is bounded by the
        sample spacing, ``length / closest_point_resolution``.
        """
        target = as_vector3(query)
        steps = self.settings.closest_point_resolution
        ts = np.arange(steps + 1) / steps
        pts = self.uniform_points(ts)
        d2 = np.sum((pts - target) ** 2, axis=1)
        best = int(np.argmin(d2))
        return ClosestSample(t=float(ts[best]), position=pts[best], distance=float(np.sqrt(d2[best])))

    def closest_point(self, query) -> Vector3:
        """World position on the curve nearest ``query`` (approximate)."""
        return self.closest_sample(query).position


def _normalize(vec: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(vec))
    if norm <= _NORMALIZE_EPSILON:
        return np.zeros(3)
    return vec / norm
