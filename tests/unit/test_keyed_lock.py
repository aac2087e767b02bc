"""Unit tests for KeyedLock per-key serialization."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from src.domain.locks import KeyedLock


class TestKeyedLock:
    def test_same_key_is_serialized(self) -> None:
        lock = KeyedLock()
        active = 0
        max_active = 0
        counter_lock = threading.Lock()

        def critical() -> None:
            nonlocal active, max_active
            with lock.hold("a@x.com"):
                with counter_lock:
                    active += 1
                    max_active = max(max_active, active)
                time.sleep(0.01)
                with counter_lock:
                    active -= 1

        with ThreadPoolExecutor(max_workers=8) as executor:
            for f in [executor.submit(critical) for _ in range(16)]:
                f.result()

        assert max_active == 1

    def test_distinct_keys_do_not_contend(self) -> None:
        lock = KeyedLock()
        inside = threading.Barrier(2, timeout=2)

        def critical(key: str) -> None:
            with lock.hold(key):
                # Both threads must be inside at once to pass the barrier
                inside.wait()

        with ThreadPoolExecutor(max_workers=2) as executor:
            futures = [executor.submit(critical, k) for k in ("a@x.com", "b@x.com")]
            for f in futures:
                f.result()

    def test_idle_entries_are_discarded(self) -> None:
        lock = KeyedLock()
        with lock.hold("a@x.com"):
            assert len(lock) == 1
        assert len(lock) == 0

    def test_released_on_exception(self) -> None:
        lock = KeyedLock()
        try:
            with lock.hold("a@x.com"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert len(lock) == 0
        with lock.hold("a@x.com"):
            pass
