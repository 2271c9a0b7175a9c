"""
Tests for length estimation and arc-length index construction.

A straight four-point line has a known length, so it makes a good
reference for both the chord-sum estimate and the spacing of the
resampled index.  Degenerate curves and an exhausted search cap
must produce the two-point fallback index instead of hanging.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from splines.services.arc_length import build_arc_length_index, estimate_length
from splines.services.interpolation import SplineMode, evaluate_points
from splines.services.spline_settings import SplineSettings

LINE = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0], [3.0, 0.0, 0.0]])
LOOP = np.array([[0.0, 0.0, 0.0], [4.0, 0.0, 0.0], [4.0, 0.0, 4.0], [0.0, 0.0, 4.0]])


def _evaluator(points: np.ndarray, closed: bool, mode: SplineMode):
    return lambda ts: evaluate_points(points, ts, closed, mode)


def test_length_of_straight_line() -> None:
    length = estimate_length(_evaluator(LINE, False, SplineMode.LINEAR), 0.001)
    assert length == pytest.approx(3.0, rel=0.01)
    # the walk stops below t = 1, so the estimate never exceeds the true length
    assert length <= 3.0


def test_finer_step_is_more_accurate() -> None:
    evaluate = _evaluator(LINE, False, SplineMode.LINEAR)
    coarse = estimate_length(evaluate, 0.01)
    fine = estimate_length(evaluate, 0.0001)
    assert abs(3.0 - fine) < abs(3.0 - coarse)


@pytest.mark.parametrize("step", [0.0, -0.1, 1.0])
def test_invalid_step_is_rejected(step: float) -> None:
    with pytest.raises(ValueError):
        estimate_length(_evaluator(LINE, False, SplineMode.LINEAR), step)


def test_index_samples_are_near_equidistant() -> None:
    index = build_arc_length_index(_evaluator(LINE, False, SplineMode.LINEAR), False, SplineMode.LINEAR)
    assert not index.fallback
    assert index.length == pytest.approx(3.0, rel=1e-3)
    spacing = index.length / 1024
    gaps = np.linalg.norm(np.diff(index.samples, axis=0), axis=1)
    # every gap but the closing tail just exceeds the target spacing
    assert np.all(gaps[:-1] > spacing)
    assert np.all(gaps[:-1] < spacing * 1.05)
    assert 1000 <= len(index) <= 1030
    np.testing.assert_allclose(index.samples[0], (0, 0, 0))
    np.testing.assert_allclose(index.samples[-1], (3, 0, 0))


def test_index_resolution_setting_controls_sample_count() -> None:
    settings = SplineSettings(index_resolution=64)
    index = build_arc_length_index(_evaluator(LINE, False, SplineMode.LINEAR), False, SplineMode.LINEAR, settings)
    assert 60 <= len(index) <= 70


def test_closed_index_does_not_duplicate_start() -> None:
    index = build_arc_length_index(_evaluator(LOOP, True, SplineMode.HERMITE), True, SplineMode.HERMITE)
    spacing = index.length / 1024
    closing_gap = np.linalg.norm(index.samples[-1] - index.samples[0])
    assert 0.0 < closing_gap < spacing * 2.1


def test_index_point_follows_samples() -> None:
    index = build_arc_length_index(_evaluator(LINE, False, SplineMode.LINEAR), False, SplineMode.LINEAR)
    np.testing.assert_allclose(index.point(0.0), (0, 0, 0))
    mid = index.point(0.5)
    assert mid[0] == pytest.approx(1.5, abs=0.01)
    assert index.point(np.array([0.1, 0.2])).shape == (2, 3)


def test_zero_length_curve_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    same = np.tile([1.0, 2.0, 3.0], (4, 1))
    with caplog.at_level(logging.WARNING):
        index = build_arc_length_index(_evaluator(same, False, SplineMode.HERMITE), False, SplineMode.HERMITE)
    assert index.fallback
    assert index.samples.shape == (2, 3)
    np.testing.assert_allclose(index.point(0.5), (1, 2, 3))
    assert "too small" in caplog.text


def test_search_cap_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    settings = SplineSettings(max_search_steps=100)
    with caplog.at_level(logging.WARNING):
        index = build_arc_length_index(
            _evaluator(LINE, False, SplineMode.LINEAR), False, SplineMode.LINEAR, settings
        )
    assert index.fallback
    np.testing.assert_allclose(index.samples, [(0, 0, 0), (3, 0, 0)])
    # the fallback still evaluates end to end
    np.testing.assert_allclose(index.point(0.5), (1.5, 0, 0))
    assert "limit 100" in caplog.text
