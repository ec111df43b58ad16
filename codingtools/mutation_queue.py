"""Per-path locks that serialise concurrent file mutations."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

T = TypeVar("T")

_registry_lock = threading.Lock()
_file_locks: dict[str, threading.Lock] = {}


def _lock_for(path: str) -> threading.Lock:
    with _registry_lock:
        return _file_locks.setdefault(path, threading.Lock())


@contextmanager
def file_mutation_lock(path: str) -> Iterator[None]:
    """Hold the lock for path for the duration of the block."""
    with _lock_for(path):
        yield


def with_file_mutation_queue(path: str, fn: Callable[[], T]) -> T:
    """Call fn while holding the lock for path and return its result."""
    with file_mutation_lock(path):
        return fn()