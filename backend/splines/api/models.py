"""
Pydantic data models for the spline API.

These models define the shapes of requests and responses used by the
backend.  Field names are camelCase to match the JSON conventions of
the editor frontend; the services layer works with numpy arrays and
the routers convert at the boundary.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class SplinePoint(BaseModel):
    """Single 3D point or direction."""

    x: float
    y: float
    z: float

    @classmethod
    def from_vector(cls, vec) -> "SplinePoint":
        return cls(x=float(vec[0]), y=float(vec[1]), z=float(vec[2]))

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


class TransformModel(BaseModel):
    """Local-to-world transform of a spline.

    Either supply a full 4x4 ``matrix`` or any of ``translation``,
    ``rotation`` (3x3) and ``scale``.  The matrix wins when both are
    given.
    """

    matrix: Optional[List[List[float]]] = Field(
        default=None, description="Row-major 4x4 affine local-to-world matrix"
    )
    translation: Optional[SplinePoint] = Field(default=None, description="World offset of the local origin")
    rotation: Optional[List[List[float]]] = Field(default=None, description="3x3 rotation matrix")
    scale: Optional[SplinePoint] = Field(default=None, description="Per-axis scale")


SplineModeName = Literal["linear", "hermite"]


class SplineCreateRequest(BaseModel):
    """Request body for creating a spline."""

    controlPoints: Optional[List[SplinePoint]] = Field(
        default=None,
        description="Local-space control points.  Omit to start from the default four-point curve.",
    )
    closed: bool = Field(default=False, description="Whether the curve loops back to its first point")
    mode: SplineModeName = Field(default="hermite", description="Interpolation between control points")
    transform: Optional[TransformModel] = Field(default=None, description="Local-to-world transform")


class SplineUpdateRequest(BaseModel):
    """Partial update of a spline's settings.  Omitted fields are unchanged."""

    controlPoints: Optional[List[SplinePoint]] = None
    closed: Optional[bool] = None
    mode: Optional[SplineModeName] = None
    transform: Optional[TransformModel] = None


class SplineResponse(BaseModel):
    """Summary of a stored spline."""

    splineId: str = Field(..., description="Unique identifier for the spline")
    controlPoints: List[SplinePoint] = Field(..., description="Local-space control points in order")
    closed: bool
    mode: SplineModeName
    length: float = Field(..., description="World-space length estimate")


class SplineListResponse(BaseModel):
    splineIds: List[str]


class ControlPointRequest(BaseModel):
    """Body for setting a single control point."""

    point: SplinePoint


class ControlPointInsertRequest(BaseModel):
    """Body for inserting a control point.  An index past the end appends."""

    index: int = Field(..., ge=0, description="Position to insert before")
    point: SplinePoint


class ControlPointResponse(BaseModel):
    index: int
    point: SplinePoint
    count: int = Field(..., description="Number of control points after the operation")


class PointResponse(BaseModel):
    """A world-space point on the curve."""

    t: float = Field(..., description="Parameter the point was evaluated at")
    point: SplinePoint


class FrameResponse(BaseModel):
    """Position and the six unit directions at a uniform parameter."""

    t: float
    position: SplinePoint
    forward: SplinePoint
    backward: SplinePoint
    right: SplinePoint
    left: SplinePoint
    up: SplinePoint
    down: SplinePoint


class LengthResponse(BaseModel):
    length: float
    step: float


class ClosestPointRequest(BaseModel):
    point: SplinePoint = Field(..., description="World-space query location")


class ClosestPointResponse(BaseModel):
    t: float = Field(..., description="Uniform parameter of the nearest sample")
    point: SplinePoint
    distance: float


class PolylineResponse(BaseModel):
    points: List[SplinePoint]


class LayoutItem(BaseModel):
    position: SplinePoint
    right: SplinePoint


class LayoutResponse(BaseModel):
    items: List[LayoutItem]


class InsertNearRequest(BaseModel):
    point: SplinePoint = Field(..., description="World-space location picked near the curve")
    snapDistance: float = Field(
        default=5.0, ge=0.0, description="Radius around open-curve ends that extends the curve"
    )
