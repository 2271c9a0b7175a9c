"""
Tests for the versioned control point store.

The store must report out-of-range indices, append on inserts past the
end and bump its version (and notify listeners) on every mutation.
"""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from splines.services.control_points import ControlPointStore
from splines.services.interpolation import SplineMode
from splines.services.spline_errors import ControlPointIndexError


@pytest.fixture
def store() -> ControlPointStore:
    return ControlPointStore([(0, 0, 0), (1, 0, 0), (2, 0, 0), (3, 0, 0)])


def test_get_and_count(store: ControlPointStore) -> None:
    assert store.count() == 4
    assert len(store) == 4
    np.testing.assert_allclose(store.get(2), (2, 0, 0))


@pytest.mark.parametrize("index", [-1, 4, 10])
def test_out_of_range_indices_raise(store: ControlPointStore, index: int) -> None:
    with pytest.raises(ControlPointIndexError):
        store.get(index)
    with pytest.raises(ControlPointIndexError):
        store.set(index, (0, 0, 0))
    with pytest.raises(IndexError):
        store.remove(index)
    # failed mutations leave the version untouched
    assert store.version == 0


def test_set_replaces_point(store: ControlPointStore) -> None:
    store.set(1, (5, 6, 7))
    np.testing.assert_allclose(store.get(1), (5, 6, 7))


def test_insert_before_and_append(store: ControlPointStore) -> None:
    assert store.insert(1, (0.5, 0, 0)) == 1
    np.testing.assert_allclose(store.points[:3, 0], (0.0, 0.5, 1.0))
    assert store.insert(99, (9, 0, 0)) == 5
    np.testing.assert_allclose(store.get(5), (9, 0, 0))
    with pytest.raises(ControlPointIndexError):
        store.insert(-1, (0, 0, 0))


def test_remove_returns_point(store: ControlPointStore) -> None:
    removed = store.remove(0)
    np.testing.assert_allclose(removed, (0, 0, 0))
    assert store.count() == 3
    np.testing.assert_allclose(store.get(0), (1, 0, 0))


def test_store_does_not_enforce_minimum(store: ControlPointStore) -> None:
    for _ in range(4):
        store.remove(0)
    assert store.count() == 0


def test_every_mutation_bumps_version_and_notifies(store: ControlPointStore) -> None:
    seen = []
    store.subscribe(seen.append)
    store.set(0, (0, 1, 0))
    store.insert(2, (1.5, 0, 0))
    store.remove(2)
    store.closed = True
    store.mode = SplineMode.LINEAR
    store.replace([(0, 0, 0), (1, 1, 1)])
    assert seen == [1, 2, 3, 4, 5, 6]
    assert store.version == 6


def test_setting_unchanged_flags_is_not_a_mutation(store: ControlPointStore) -> None:
    store.closed = False
    store.mode = SplineMode.HERMITE
    assert store.version == 0


def test_points_view_is_read_only(store: ControlPointStore) -> None:
    with pytest.raises(ValueError):
        store.points[0, 0] = 42.0
    # the store itself remains writable
    store.set(0, (42, 0, 0))
    assert store.points[0, 0] == 42.0
