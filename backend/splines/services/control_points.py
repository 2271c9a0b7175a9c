"""
Ordered control point storage for a spline.

The store owns the control points (in the curve's local space), the
closed flag and the blend mode.  It holds no derived data.  Instead
every mutation bumps :attr:`ControlPointStore.version` and notifies
subscribers, so whatever caches geometry built from the points can
tell that its snapshot is stale.

The store does not enforce a minimum number of points.  Editors that
need at least four points for a cubic curve guard removal themselves.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional

import numpy as np

from .interpolation import SplineMode, Vector3, as_vector3
from .spline_errors import ControlPointIndexError

logger = logging.getLogger(__name__)

Listener = Callable[[int], None]


class ControlPointStore:
    """Versioned sequence of 3D control points.

    Args:
        points: Initial control points; any iterable of 3-sequences.
        closed: Whether the last point connects back to the first.
        mode: Blend used between points.
    """

    def __init__(
        self,
        points: Optional[Iterable] = None,
        closed: bool = False,
        mode: SplineMode = SplineMode.HERMITE,
    ) -> None:
        self._points = _to_point_array(points)
        self._closed = bool(closed)
        self._mode = SplineMode(mode)
        self._version = 0
        self._listeners: List[Listener] = []

    # -- observation -----------------------------------------------------

    @property
    def version(self) -> int:
        """Counter incremented by every mutation."""
        return self._version

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener(version)`` after every mutation."""
        self._listeners.append(listener)

    def _changed(self, reason: str) -> None:
        self._version += 1
        logger.debug("control points changed (%s), version=%d", reason, self._version)
        for listener in list(self._listeners):
            listener(self._version)

    # -- reading ---------------------------------------------------------

    def count(self) -> int:
        return len(self._points)

    def __len__(self) -> int:
        return len(self._points)

    @property
    def points(self) -> np.ndarray:
        """Read-only view of the ``(n, 3)`` point array."""
        view = self._points.view()
        view.flags.writeable = False
        return view

    def get(self, index: int) -> Vector3:
        self._check_index(index)
        return self._points[index].copy()

    # -- mutation --------------------------------------------------------

    def set(self, index: int, position) -> None:
        self._check_index(index)
        self._points[index] = as_vector3(position)
        self._changed(f"set {index}")

    def insert(self, index: int, position) -> int:
        """Insert ``position`` before ``index``.

        An index at or past the end appends.  Returns the index the
        point ended up at.
        """
        if index < 0:
            raise ControlPointIndexError(index, len(self._points))
        vec = as_vector3(position)
        index = min(index, len(self._points))
        self._points = np.insert(self._points, index, vec, axis=0)
        self._changed(f"insert {index}")
        return index

    def remove(self, index: int) -> Vector3:
        """Remove and return the point at ``index``."""
        self._check_index(index)
        removed = self._points[index].copy()
        self._points = np.delete(self._points, index, axis=0)
        self._changed(f"remove {index}")
        return removed

    def replace(self, points: Iterable) -> None:
        """Swap in a whole new point sequence."""
        self._points = _to_point_array(points)
        self._changed("replace")

    @property
    def closed(self) -> bool:
        return self._closed

    @closed.setter
    def closed(self, value: bool) -> None:
        value = bool(value)
        if value != self._closed:
            self._closed = value
            self._changed("closed" if value else "opened")

    @property
    def mode(self) -> SplineMode:
        return self._mode

    @mode.setter
    def mode(self, value: SplineMode) -> None:
        value = SplineMode(value)
        if value != self._mode:
            self._mode = value
            self._changed(f"mode {value.value}")

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._points):
            raise ControlPointIndexError(index, len(self._points))


def _to_point_array(points: Optional[Iterable]) -> np.ndarray:
    if points is None:
        return np.zeros((0, 3))
    arr = np.array([as_vector3(p) for p in points], dtype=np.float64)
    return arr.reshape(-1, 3)
