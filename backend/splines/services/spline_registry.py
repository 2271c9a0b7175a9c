"""
In-memory registry of spline curves served by the API.

Curves are keyed by a random hex identifier and kept in an
``OrderedDict`` ordered by last access.  When more than
``MAX_SPLINES`` curves are registered the least recently used one is
dropped.  A reentrant lock guards the dictionary; the curves
themselves are not locked and rely on the API serving requests from
a single event loop.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from threading import RLock
from typing import Iterable, List, Optional

from .interpolation import SplineMode
from .spline_engine import SplineCurve
from .spline_errors import SplineNotFoundError
from .spline_settings import SplineSettings, load_settings
from .transforms import Transform

logger = logging.getLogger(__name__)

MAX_SPLINES: int = 256

_curves: "OrderedDict[str, SplineCurve]" = OrderedDict()
_lock = RLock()
_settings: Optional[SplineSettings] = None


def get_settings() -> SplineSettings:
    """Settings shared by every registered curve, loaded once."""
    global _settings
    with _lock:
        if _settings is None:
            _settings = load_settings()
        return _settings


def create_spline(
    points: Optional[Iterable] = None,
    closed: bool = False,
    mode: SplineMode = SplineMode.HERMITE,
    transform: Optional[Transform] = None,
) -> tuple[str, SplineCurve]:
    """Create and register a curve, returning its identifier and the curve."""
    curve = SplineCurve(points, closed=closed, mode=mode, transform=transform, settings=get_settings())
    spline_id = uuid.uuid4().hex
    with _lock:
        _curves[spline_id] = curve
        if len(_curves) > MAX_SPLINES:
            evicted, _ = _curves.popitem(last=False)
            logger.info("Spline registry full; evicted %s", evicted)
    logger.info("Registered spline %s (%d points)", spline_id, curve.control_point_count)
    return spline_id, curve


def get_spline(spline_id: str) -> SplineCurve:
    """Look up a curve.

    Raises:
        SplineNotFoundError: If no curve has this identifier.
    """
    with _lock:
        curve = _curves.get(spline_id)
        if curve is None:
            raise SplineNotFoundError(spline_id)
        _curves.move_to_end(spline_id)
        return curve


def delete_spline(spline_id: str) -> None:
    with _lock:
        if _curves.pop(spline_id, None) is None:
            raise SplineNotFoundError(spline_id)
    logger.info("Deleted spline %s", spline_id)


def list_spline_ids() -> List[str]:
    with _lock:
        return list(_curves.keys())


def clear_splines() -> None:
    """Remove every registered curve."""
    with _lock:
        _curves.clear()
