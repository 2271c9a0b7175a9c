"""
Unit tests for the interpolation kernels in interpolation.py.

These tests check the Catmull–Rom blend at its end points, the linear
blend, and the shared segment selection used by both the raw curve and
the arc-length index, including the fixed rules for fewer than four
points.
"""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from splines.services.interpolation import (
    SplineMode,
    as_vector3,
    evaluate_points,
    interpolate_cubic,
    interpolate_linear,
    segment_count,
    wrap_index,
)

LINE = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0], [3.0, 0.0, 0.0]])
SQUARE = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 0.0, 1.0], [0.0, 0.0, 1.0]])


def test_cubic_passes_through_middle_points() -> None:
    a, b, c, d = (np.array(p, dtype=float) for p in [(0, 0, 0), (1, 2, 0), (3, 1, 1), (4, 4, 4)])
    np.testing.assert_allclose(interpolate_cubic(a, b, c, d, 0.0), b)
    np.testing.assert_allclose(interpolate_cubic(a, b, c, d, 1.0), c)


def test_cubic_on_evenly_spaced_line_is_linear() -> None:
    a, b, c, d = LINE
    for u in (0.25, 0.5, 0.75):
        np.testing.assert_allclose(interpolate_cubic(a, b, c, d, u), (1.0 + u, 0.0, 0.0), atol=1e-12)


def test_cubic_matches_catmull_rom_midpoint() -> None:
    a, b, c, d = SQUARE
    # the midpoint of a Catmull-Rom segment is (-a + 9b + 9c - d) / 16
    expected = (-a + 9 * b + 9 * c - d) / 16.0
    np.testing.assert_allclose(interpolate_cubic(a, b, c, d, 0.5), expected)


def test_linear_blend_extrapolates() -> None:
    a = np.array([0.0, 0.0, 0.0])
    b = np.array([2.0, 4.0, 0.0])
    np.testing.assert_allclose(interpolate_linear(a, b, 0.5), (1.0, 2.0, 0.0))
    np.testing.assert_allclose(interpolate_linear(a, b, 1.5), (3.0, 6.0, 0.0))


def test_segment_count() -> None:
    assert segment_count(6, False, SplineMode.HERMITE) == 3
    assert segment_count(6, False, SplineMode.LINEAR) == 5
    assert segment_count(6, True, SplineMode.HERMITE) == 6
    assert segment_count(6, True, SplineMode.LINEAR) == 6


def test_degenerate_point_counts() -> None:
    """Fewer than four points follow fixed rules regardless of mode."""
    np.testing.assert_allclose(evaluate_points(np.zeros((0, 3)), 0.7, False, SplineMode.HERMITE), (0, 0, 0))
    np.testing.assert_allclose(evaluate_points(LINE[:1] + 5.0, 0.7, False, SplineMode.HERMITE), (5, 5, 5))
    np.testing.assert_allclose(evaluate_points(LINE[:2], 0.5, False, SplineMode.HERMITE), (0.5, 0, 0))
    for t in (0.0, 0.3, 1.0):
        np.testing.assert_allclose(evaluate_points(LINE[:3], t, True, SplineMode.LINEAR), LINE[1])


def test_open_hermite_spans_inner_points() -> None:
    np.testing.assert_allclose(evaluate_points(SQUARE, 0.0, False, SplineMode.HERMITE), SQUARE[1])
    np.testing.assert_allclose(evaluate_points(SQUARE, 1.0, False, SplineMode.HERMITE), SQUARE[2])


def test_open_linear_spans_all_points() -> None:
    np.testing.assert_allclose(evaluate_points(LINE, 0.0, False, SplineMode.LINEAR), LINE[0])
    np.testing.assert_allclose(evaluate_points(LINE, 1.0, False, SplineMode.LINEAR), LINE[3])
    np.testing.assert_allclose(evaluate_points(LINE, 0.5, False, SplineMode.LINEAR), (1.5, 0, 0))


def test_open_curve_extrapolates_outside_unit_interval() -> None:
    """Out-of-range t on an open curve stays on the end segments."""
    np.testing.assert_allclose(evaluate_points(LINE, -0.1, False, SplineMode.LINEAR), (-0.3, 0, 0), atol=1e-12)
    np.testing.assert_allclose(evaluate_points(LINE, 1.1, False, SplineMode.LINEAR), (3.3, 0, 0), atol=1e-12)


def test_closed_curve_wraps_segments() -> None:
    np.testing.assert_allclose(evaluate_points(SQUARE, 1.0, True, SplineMode.LINEAR), SQUARE[0])
    np.testing.assert_allclose(evaluate_points(SQUARE, -0.25, True, SplineMode.LINEAR), SQUARE[3])
    np.testing.assert_allclose(evaluate_points(SQUARE, 0.875, True, SplineMode.LINEAR), (0.0, 0.0, 0.5))
    # a closed cubic returns to its start at t = 1
    np.testing.assert_allclose(
        evaluate_points(SQUARE, 1.0, True, SplineMode.HERMITE),
        evaluate_points(SQUARE, 0.0, True, SplineMode.HERMITE),
    )


def test_wrap_index_handles_negative_and_overflowing_indices() -> None:
    assert wrap_index(-1, 4) == 3
    assert wrap_index(4, 4) == 0
    assert wrap_index(6, 4) == 2
    np.testing.assert_array_equal(wrap_index(np.array([-2, 0, 5]), 4), [2, 0, 1])
    with pytest.raises(ValueError):
        wrap_index(0, 0)


def test_vectorised_evaluation_matches_scalar() -> None:
    ts = np.linspace(0.0, 1.0, 11)
    batch = evaluate_points(SQUARE, ts, True, SplineMode.HERMITE)
    assert batch.shape == (11, 3)
    for t, p in zip(ts, batch):
        np.testing.assert_allclose(p, evaluate_points(SQUARE, float(t), True, SplineMode.HERMITE))


def test_mode_accepts_plain_strings() -> None:
    np.testing.assert_allclose(evaluate_points(LINE, 0.5, False, "linear"), (1.5, 0, 0))


def test_as_vector3_rejects_wrong_shape() -> None:
    np.testing.assert_allclose(as_vector3([1, 2, 3]), (1.0, 2.0, 3.0))
    with pytest.raises(ValueError):
        as_vector3([1, 2])
