"""
Routes for creating, editing and querying splines.

The endpoints in this router are a thin layer over the spline
services: they translate JSON bodies into numpy vectors, look curves
up in the in-memory registry and map service errors onto HTTP status
codes.  All positions returned are world space; control points are
sent and received in the curve's local space.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from fastapi import APIRouter, HTTPException, Query, Response

from .models import (
    ClosestPointRequest,
    ClosestPointResponse,
    ControlPointInsertRequest,
    ControlPointRequest,
    ControlPointResponse,
    FrameResponse,
    InsertNearRequest,
    LayoutItem,
    LayoutResponse,
    LengthResponse,
    PointResponse,
    PolylineResponse,
    SplineCreateRequest,
    SplineListResponse,
    SplinePoint,
    SplineResponse,
    SplineUpdateRequest,
    TransformModel,
)
from ..services.interpolation import SplineMode
from ..services.spline_engine import SplineCurve
from ..services.spline_errors import (
    ControlPointIndexError,
    DegenerateGeometryError,
    SplineNotFoundError,
)
from ..services.spline_registry import create_spline, delete_spline, get_spline, list_spline_ids
from ..services.spline_tools import (
    HIGH_RES_STEPS,
    center_around_origin,
    default_control_points,
    flatten,
    insert_near,
    layout_frames,
    sample_polyline,
)
from ..services.transforms import AffineTransform, Transform

logger = logging.getLogger(__name__)

router = APIRouter()

# Editors keep at least this many points so cubic curves stay evaluable.
MIN_EDITABLE_POINTS: int = 4

# Upper bounds on per-request sample counts.
MAX_POLYLINE_STEPS: int = 8192
MAX_LAYOUT_COUNT: int = 4096


def _lookup(spline_id: str) -> SplineCurve:
    try:
        return get_spline(spline_id)
    except SplineNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _build_transform(model: Optional[TransformModel]) -> Optional[Transform]:
    if model is None:
        return None
    try:
        if model.matrix is not None:
            return AffineTransform(model.matrix)
        return AffineTransform.from_components(
            translation=model.translation.to_tuple() if model.translation else (0.0, 0.0, 0.0),
            rotation=model.rotation,
            scale=model.scale.to_tuple() if model.scale else (1.0, 1.0, 1.0),
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=f"Invalid transform: {exc}") from exc


def _summary(spline_id: str, curve: SplineCurve) -> SplineResponse:
    return SplineResponse(
        splineId=spline_id,
        controlPoints=[SplinePoint.from_vector(p) for p in curve.control_points],
        closed=curve.closed,
        mode=curve.mode.value,
        length=curve.length(),
    )


@router.post("/splines", response_model=SplineResponse, status_code=201)
async def create_spline_route(body: SplineCreateRequest) -> SplineResponse:
    """Create a spline.

    When no control points are supplied the curve starts as four points
    spaced three units apart along +Z.
    """
    if body.controlPoints is None:
        points = default_control_points()
    else:
        points = [p.to_tuple() for p in body.controlPoints]
    spline_id, curve = create_spline(
        points,
        closed=body.closed,
        mode=SplineMode(body.mode),
        transform=_build_transform(body.transform),
    )
    return _summary(spline_id, curve)


@router.get("/splines", response_model=SplineListResponse)
async def list_splines() -> SplineListResponse:
    return SplineListResponse(splineIds=list_spline_ids())


@router.get("/splines/{spline_id}", response_model=SplineResponse)
async def get_spline_route(spline_id: str) -> SplineResponse:
    return _summary(spline_id, _lookup(spline_id))


@router.patch("/splines/{spline_id}", response_model=SplineResponse)
async def update_spline(spline_id: str, body: SplineUpdateRequest) -> SplineResponse:
    """Replace control points, toggle closure, switch mode or transform."""
    curve = _lookup(spline_id)
    if body.controlPoints is not None:
        curve.set_control_points([p.to_tuple() for p in body.controlPoints])
    if body.closed is not None:
        curve.closed = body.closed
    if body.mode is not None:
        curve.mode = SplineMode(body.mode)
    if body.transform is not None:
        curve.transform = _build_transform(body.transform)
    return _summary(spline_id, curve)


@router.delete("/splines/{spline_id}", status_code=204)
async def delete_spline_route(spline_id: str) -> Response:
    try:
        delete_spline(spline_id)
    except SplineNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Control points


@router.get("/splines/{spline_id}/points/{index}", response_model=ControlPointResponse)
async def get_control_point(spline_id: str, index: int) -> ControlPointResponse:
    curve = _lookup(spline_id)
    try:
        point = curve.get_control_point(index)
    except ControlPointIndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ControlPointResponse(index=index, point=SplinePoint.from_vector(point), count=curve.control_point_count)


@router.put("/splines/{spline_id}/points/{index}", response_model=ControlPointResponse)
async def set_control_point(spline_id: str, index: int, body: ControlPointRequest) -> ControlPointResponse:
    curve = _lookup(spline_id)
    try:
        curve.set_control_point(index, body.point.to_tuple())
    except ControlPointIndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ControlPointResponse(index=index, point=body.point, count=curve.control_point_count)


@router.post("/splines/{spline_id}/points", response_model=ControlPointResponse, status_code=201)
async def insert_control_point(spline_id: str, body: ControlPointInsertRequest) -> ControlPointResponse:
    curve = _lookup(spline_id)
    index = curve.insert_control_point(body.index, body.point.to_tuple())
    return ControlPointResponse(index=index, point=body.point, count=curve.control_point_count)


@router.delete("/splines/{spline_id}/points/{index}", response_model=ControlPointResponse)
async def remove_control_point(spline_id: str, index: int) -> ControlPointResponse:
    """Remove a control point, refusing to go below four points."""
    curve = _lookup(spline_id)
    if curve.control_point_count <= MIN_EDITABLE_POINTS:
        raise HTTPException(
            status_code=409,
            detail=f"A spline must keep at least {MIN_EDITABLE_POINTS} control points",
        )
    try:
        removed = curve.remove_control_point(index)
    except ControlPointIndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ControlPointResponse(index=index, point=SplinePoint.from_vector(removed), count=curve.control_point_count)


# ---------------------------------------------------------------------------
# Queries


@router.get("/splines/{spline_id}/point", response_model=PointResponse)
async def evaluate_point(
    spline_id: str,
    t: float = Query(..., description="Curve parameter, nominally in [0, 1]"),
    uniform: bool = Query(True, description="Use the arc-length (uniform) parameter instead of the raw one"),
) -> PointResponse:
    curve = _lookup(spline_id)
    point = curve.uniform_point(t) if uniform else curve.raw_point(t)
    return PointResponse(t=t, point=SplinePoint.from_vector(point))


@router.get("/splines/{spline_id}/distance", response_model=PointResponse)
async def evaluate_distance(spline_id: str, d: float = Query(..., description="World distance along the curve")) -> PointResponse:
    curve = _lookup(spline_id)
    try:
        point = curve.distance_point(d)
    except DegenerateGeometryError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return PointResponse(t=d / curve.total_length, point=SplinePoint.from_vector(point))


@router.get("/splines/{spline_id}/frame", response_model=FrameResponse)
async def evaluate_frame(spline_id: str, t: float = Query(...)) -> FrameResponse:
    frame = _lookup(spline_id).frame(t)
    return FrameResponse(
        t=frame.t,
        position=SplinePoint.from_vector(frame.position),
        forward=SplinePoint.from_vector(frame.forward),
        backward=SplinePoint.from_vector(frame.backward),
        right=SplinePoint.from_vector(frame.right),
        left=SplinePoint.from_vector(frame.left),
        up=SplinePoint.from_vector(frame.up),
        down=SplinePoint.from_vector(frame.down),
    )


@router.get("/splines/{spline_id}/length", response_model=LengthResponse)
async def measure_length(
    spline_id: str,
    step: float = Query(0.001, gt=0.0, lt=1.0, description="Raw-parameter step of the estimate"),
) -> LengthResponse:
    return LengthResponse(length=_lookup(spline_id).length(step), step=step)


@router.post("/splines/{spline_id}/closest", response_model=ClosestPointResponse)
async def closest_point(spline_id: str, body: ClosestPointRequest) -> ClosestPointResponse:
    sample = _lookup(spline_id).closest_sample(body.point.to_tuple())
    return ClosestPointResponse(
        t=sample.t, point=SplinePoint.from_vector(sample.position), distance=sample.distance
    )


@router.get("/splines/{spline_id}/polyline", response_model=PolylineResponse)
async def polyline(
    spline_id: str,
    steps: int = Query(HIGH_RES_STEPS, ge=1, le=MAX_POLYLINE_STEPS),
) -> PolylineResponse:
    pts = sample_polyline(_lookup(spline_id), steps)
    return PolylineResponse(points=[SplinePoint.from_vector(p) for p in pts])


@router.get("/splines/{spline_id}/layout", response_model=LayoutResponse)
async def layout(spline_id: str, count: int = Query(..., ge=0, le=MAX_LAYOUT_COUNT)) -> LayoutResponse:
    frames = layout_frames(_lookup(spline_id), count)
    return LayoutResponse(
        items=[LayoutItem(position=SplinePoint.from_vector(p), right=SplinePoint.from_vector(r)) for p, r in frames]
    )


# ---------------------------------------------------------------------------
# Editing tools


@router.post("/splines/{spline_id}/flatten", response_model=SplineResponse)
async def flatten_spline(spline_id: str) -> SplineResponse:
    curve = _lookup(spline_id)
    flatten(curve)
    return _summary(spline_id, curve)


@router.post("/splines/{spline_id}/center", response_model=SplineResponse)
async def center_spline(spline_id: str) -> SplineResponse:
    curve = _lookup(spline_id)
    center = center_around_origin(curve)
    logger.debug("Centred spline %s by %s", spline_id, np.round(center, 6).tolist())
    return _summary(spline_id, curve)


@router.post("/splines/{spline_id}/insert-near", response_model=ControlPointResponse, status_code=201)
async def insert_near_route(spline_id: str, body: InsertNearRequest) -> ControlPointResponse:
    curve = _lookup(spline_id)
    try:
        index = insert_near(curve, body.point.to_tuple(), snap_distance=body.snapDistance)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return ControlPointResponse(
        index=index,
        point=SplinePoint.from_vector(curve.get_control_point(index)),
        count=curve.control_point_count,
    )
