"""
Object Pool for Colibri

Free-list of reusable instances. Rules and Selector objects are acquired
here and must be cleared before they are handed back.
"""

import threading
from typing import Callable, Generic, List, Set, TypeVar

T = TypeVar("T")


class ObjectPool(Generic[T]):
    """
    Thread-safe free-list with ownership transfer on acquire/release

    Args:
        factory: Builds a new instance when the free-list is empty
        max_size: Released instances beyond this count are dropped
    """

    def __init__(self, factory: Callable[[], T], max_size: int = 1024):
        self._factory = factory
        self._max_size = max_size
        self._lock = threading.Lock()
        self._free: List[T] = []
        self._free_ids: Set[int] = set()

    def acquire(self) -> T:
        with self._lock:
            if self._free:
                obj = self._free.pop()
                self._free_ids.discard(id(obj))
                return obj
        return self._factory()

    def release(self, obj: T) -> None:
        with self._lock:
            # already pooled
            if id(obj) in self._free_ids:
                return
            if len(self._free) >= self._max_size:
                return
            self._free.append(obj)
            self._free_ids.add(id(obj))

    def __len__(self) -> int:
        with self._lock:
            return len(self._free)
