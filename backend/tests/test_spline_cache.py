"""
Tests for the two-state derived-data cache.
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from splines.services.spline_cache import CachedValue, CacheState, DerivedCache


def test_slot_builds_once_per_version() -> None:
    calls = []

    def build() -> int:
        calls.append(1)
        return len(calls)

    slot: CachedValue[int] = CachedValue("counter")
    assert slot.state is CacheState.EMPTY
    assert slot.get(0, build) == 1
    assert slot.get(0, build) == 1
    assert slot.state is CacheState.BUILT
    assert len(calls) == 1
    # a different source version is treated as empty
    assert slot.get(1, build) == 2
    assert len(calls) == 2


def test_invalidate_empties_both_slots() -> None:
    cache = DerivedCache()
    cache.total_length.get(3, lambda: 1.5)
    assert cache.total_length.state is CacheState.BUILT
    cache.invalidate(4)
    assert cache.total_length.state is CacheState.EMPTY
    assert cache.index.state is CacheState.EMPTY
    assert not cache.total_length.is_valid(3)
