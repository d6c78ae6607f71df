"""
Keyed Lock

In-process mutual exclusion per string key. Entries are created on demand
and evicted as soon as no thread holds or waits for them, so the table only
grows with concurrent contention, not with the number of keys ever seen.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List


class KeyedLock:
    """Map from key to a reference-counted mutex."""

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of holders and waiters]
        self._locks: Dict[str, List] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            slot = self._locks.get(key)
            if slot is None:
                slot = [threading.Lock(), 0]
                self._locks[key] = slot
            slot[1] += 1

        lock = slot[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
