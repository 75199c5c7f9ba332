"""
Per-round serialization for close/expire and result entry.

The in-process lock stops two requests in the same worker from touching the
same round at once; the SELECT ... FOR UPDATE in the services covers
multiple workers on databases that support row locks. Locks are only kept
while someone holds a reference to them.
"""

import threading
import weakref
from contextlib import contextmanager
from typing import Iterator

_registry_guard = threading.Lock()
_round_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()


def _lock_for(round_id: int) -> threading.Lock:
    with _registry_guard:
        lock = _round_locks.get(round_id)
        if lock is None:
            lock = threading.Lock()
            _round_locks[round_id] = lock
        return lock


@contextmanager
def round_lock(round_id: int) -> Iterator[None]:
    lock = _lock_for(round_id)
    with lock:
        yield
