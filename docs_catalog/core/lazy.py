"""Compute-once value cell."""

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")

_UNSET = object()


class LazyValue(Generic[T]):
    """Call a factory on first access, store the result, never recompute.

    Construction is guarded by a lock, so concurrent first accesses from
    several threads still run the factory only once. A factory that raises
    leaves the cell empty and the next access retries.
    """

    def __init__(self, factory: Callable[[], T]):
        self._factory = factory
        self._value = _UNSET
        self._lock = threading.Lock()

    @property
    def is_computed(self) -> bool:
        return self._value is not _UNSET

    @property
    def value(self) -> T:
        if self._value is _UNSET:
            with self._lock:
                if self._value is _UNSET:
                    self._value = self._factory()
        return self._value
