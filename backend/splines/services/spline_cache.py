"""
Derived-data cache for a single spline.

Each curve keeps two expensive derived values: its arc-length index
and its total (world-space) length.  Both are built on first use and
reused until the control points change.  Rather than relying on
nullable attributes that callers must remember to reset, every value
lives in a :class:`CachedValue` slot with an explicit two-state
lifecycle::

    EMPTY --(get: build)--> BUILT --(invalidate / version change)--> EMPTY

A slot records the store version it was built from.  A lookup with a
different version is treated exactly like an empty slot, so a stale
snapshot can never be served even if an invalidation notification was
missed.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from .arc_length import ArcLengthIndex

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheState(str, Enum):
    EMPTY = "empty"
    BUILT = "built"


class CachedValue(Generic[T]):
    """A lazily built value tied to a source version."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._state = CacheState.EMPTY
        self._version: Optional[int] = None
        self._value: Optional[T] = None

    @property
    def state(self) -> CacheState:
        return self._state

    def is_valid(self, version: int) -> bool:
        return self._state is CacheState.BUILT and self._version == version

    def get(self, version: int, build: Callable[[], T]) -> T:
        """Return the cached value for ``version``, building it if needed."""
        if not self.is_valid(version):
            if self._state is CacheState.BUILT:
                logger.debug("%s cache stale (built v%s, now v%d)", self.name, self._version, version)
            value = build()
            self._value = value
            self._version = version
            self._state = CacheState.BUILT
            return value
        return self._value  # type: ignore[return-value]

    def invalidate(self) -> None:
        self._state = CacheState.EMPTY
        self._version = None
        self._value = None


class DerivedCache:
    """The index and total-length slots of one curve."""

    def __init__(self) -> None:
        self.index: CachedValue[ArcLengthIndex] = CachedValue("arc-length index")
        self.total_length: CachedValue[float] = CachedValue("total length")

    def invalidate(self, version: Optional[int] = None) -> None:
        """Drop both slots.  Signature matches store listeners."""
        self.index.invalidate()
        self.total_length.invalidate()
