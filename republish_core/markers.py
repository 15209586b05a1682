"""Publish marker generation.

A marker is stamped into the manifest before every publish attempt. Reading it
back from the registry tells whether a reported "version already exists"
conflict was caused by our own earlier attempt or by someone else.
"""

from __future__ import annotations

import threading
import uuid
from collections import OrderedDict
from typing import Callable, Iterable, Iterator, Protocol

__all__ = [
    "MarkerGenerator",
    "UniqueMarkerGenerator",
    "SequenceMarkerGenerator",
    "default_marker_generator",
]


class MarkerGenerator(Protocol):
    def __call__(self) -> str:
        """Return a marker never returned before by this generator."""


class UniqueMarkerGenerator:
    """Thread-safe generator that never hands out the same marker twice.

    The most recent ``max_tracked`` markers are remembered to reject a repeat
    from ``source``. Older ones are forgotten; with 128-bit uuid4 markers a
    repeat after that is not a practical concern.
    """

    def __init__(self, source: Callable[[], str] | None = None, *, max_tracked: int = 65536) -> None:
        if max_tracked < 1:
            raise ValueError("max_tracked must be positive")
        self._source = source or (lambda: uuid.uuid4().hex)
        self._max_tracked = max_tracked
        self._issued: OrderedDict[str, None] = OrderedDict()
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            while True:
                marker = self._source()
                if marker and marker not in self._issued:
                    self._issued[marker] = None
                    if len(self._issued) > self._max_tracked:
                        self._issued.popitem(last=False)
                    return marker

    @property
    def issued(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._issued)


class SequenceMarkerGenerator:
    """Deterministic generator yielding preset markers in order."""

    def __init__(self, markers: Iterable[str]) -> None:
        self._markers: Iterator[str] = iter(markers)
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            try:
                return next(self._markers)
            except StopIteration:
                raise RuntimeError("marker sequence exhausted") from None


_DEFAULT = UniqueMarkerGenerator()


def default_marker_generator() -> UniqueMarkerGenerator:
    return _DEFAULT
