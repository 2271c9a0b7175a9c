"""
Exception types raised by the spline services.

All errors derive from :class:`SplineError` so the API layer can map
the whole family onto HTTP responses in one place.  Each concrete
error also inherits from the closest built-in exception so callers
that only know about ``IndexError`` or ``ValueError`` still catch
them.
"""

from __future__ import annotations


class SplineError(Exception):
    """Base class for spline engine failures."""


class ControlPointIndexError(SplineError, IndexError):
    """A control point index fell outside ``[0, count)``."""

    def __init__(self, index: int, count: int) -> None:
        super().__init__(f"Control point index {index} out of range for {count} points")
        self.index = index
        self.count = count


class DegenerateGeometryError(SplineError, ValueError):
    """The curve has no usable length for the requested query."""


class IndexBuildLimitError(SplineError, RuntimeError):
    """The arc-length search exceeded its step cap."""

    def __init__(self, steps: int, limit: int) -> None:
        super().__init__(f"Arc-length search used {steps} steps (limit {limit})")
        self.steps = steps
        self.limit = limit


class SplineNotFoundError(SplineError, KeyError):
    """No curve is registered under the requested identifier."""

    def __init__(self, spline_id: str) -> None:
        super().__init__(spline_id)
        self.spline_id = spline_id

    def __str__(self) -> str:
        return f"Spline '{self.spline_id}' not found"
