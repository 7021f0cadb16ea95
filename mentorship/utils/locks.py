# mentorship/utils/locks.py
import threading
from contextlib import contextmanager
from typing import Dict, Hashable


class KeyedLock:
    """One re-entrant lock per key, created on demand and dropped when idle"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.RLock] = {}
        self._users: Dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable):
        with self._guard:
            lock = self._locks.setdefault(key, threading.RLock())
            self._users[key] = self._users.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._users[key] -= 1
                if self._users[key] == 0:
                    del self._users[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Serialises mutations of the same task between request handlers and the scheduler
task_locks = KeyedLock()
