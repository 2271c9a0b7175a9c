"""
Coordinate transforms between a curve's local space and world space.

Control points are stored in local space; every position a curve
returns is in world space.  The host supplies the mapping through the
:class:`Transform` protocol.  Two implementations are provided: the
identity, and an affine transform backed by a 4x4 matrix.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

import numpy as np


class Transform(Protocol):
    """Maps points between local and world space.

    Both methods accept a single ``(3,)`` point or an ``(m, 3)`` batch
    and return an array of the same shape.
    """

    def to_world(self, points: np.ndarray) -> np.ndarray: ...

    def to_local(self, points: np.ndarray) -> np.ndarray: ...


class IdentityTransform:
    """Local space is world space."""

    def to_world(self, points: np.ndarray) -> np.ndarray:
        return np.asarray(points, dtype=np.float64)

    def to_local(self, points: np.ndarray) -> np.ndarray:
        return np.asarray(points, dtype=np.float64)

    def __repr__(self) -> str:
        return "IdentityTransform()"


class AffineTransform:
    """Affine transform defined by a 4x4 homogeneous matrix.

    Args:
        matrix: Local-to-world matrix.  The last row must be
            ``(0, 0, 0, 1)`` and the upper 3x3 block invertible.
    """

    def __init__(self, matrix: Sequence[Sequence[float]]) -> None:
        m = np.asarray(matrix, dtype=np.float64)
        if m.shape != (4, 4):
            raise ValueError(f"Transform matrix must be 4x4, got {m.shape}")
        if not np.allclose(m[3], (0.0, 0.0, 0.0, 1.0)):
            raise ValueError("Transform matrix must be affine (last row 0, 0, 0, 1)")
        if abs(np.linalg.det(m[:3, :3])) < 1e-12:
            raise ValueError("Transform matrix is singular")
        self.matrix = m
        self.inverse = np.linalg.inv(m)

    @classmethod
    def from_components(
        cls,
        translation: Sequence[float] = (0.0, 0.0, 0.0),
        rotation: Optional[Sequence[Sequence[float]]] = None,
        scale: Sequence[float] = (1.0, 1.0, 1.0),
    ) -> "AffineTransform":
        """Compose ``translate * rotate * scale``.

        ``rotation`` is a 3x3 rotation matrix; identity when omitted.
        """
        m = np.eye(4)
        rot = np.eye(3) if rotation is None else np.asarray(rotation, dtype=np.float64)
        m[:3, :3] = rot @ np.diag(np.asarray(scale, dtype=np.float64))
        m[:3, 3] = np.asarray(translation, dtype=np.float64)
        return cls(m)

    def to_world(self, points: np.ndarray) -> np.ndarray:
        return _apply(self.matrix, points)

    def to_local(self, points: np.ndarray) -> np.ndarray:
        return _apply(self.inverse, points)

    def __repr__(self) -> str:
        return f"AffineTransform({self.matrix.tolist()!r})"


def _apply(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    pts = np.asarray(points, dtype=np.float64)
    return pts @ matrix[:3, :3].T + matrix[:3, 3]
