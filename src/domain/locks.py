"""
Per-key mutual exclusion.

Serializes read-check-write sequences for the same email within a
process while letting distinct emails proceed in parallel.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class KeyedLock:
    """
    Registry of reference-counted locks, one per active key.

    Entries are removed once no thread holds or waits on them, so the
    registry does not grow with the number of distinct keys seen.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, tuple[threading.Lock, int]] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock, users = self._locks.get(key, (threading.Lock(), 0))
            self._locks[key] = (lock, users + 1)

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                lock, users = self._locks[key]
                if users == 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, users - 1)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
