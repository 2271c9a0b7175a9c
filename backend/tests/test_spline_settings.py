"""
Tests for spline settings validation and environment overrides.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from splines.services.spline_settings import SplineSettings, load_settings


def test_defaults_match_editor_behaviour() -> None:
    settings = SplineSettings()
    assert settings.index_resolution == 1024
    assert settings.closest_point_resolution == 1024
    assert settings.index_search_step == pytest.approx(1e-5)
    assert settings.length_step == pytest.approx(1e-3)
    assert settings.frame_epsilon == pytest.approx(1e-3)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"index_resolution": 0},
        {"closest_point_resolution": 0},
        {"index_search_step": 0.0},
        {"length_step": 1.5},
        {"frame_epsilon": 0.0},
        {"max_search_steps": 0},
    ],
)
def test_invalid_settings_are_rejected(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        SplineSettings(**kwargs)


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPLINE_INDEX_RESOLUTION", "256")
    monkeypatch.setenv("SPLINE_CLOSEST_RESOLUTION", "2048")
    settings = load_settings()
    assert settings.index_resolution == 256
    assert settings.closest_point_resolution == 2048
    # untouched fields keep their defaults
    assert settings.length_step == pytest.approx(1e-3)


def test_bad_environment_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPLINE_SEARCH_STEP", "fast")
    with pytest.raises(ValueError, match="SPLINE_SEARCH_STEP"):
        load_settings()
