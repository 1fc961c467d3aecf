"""Per-key mutual exclusion for commands that must not interleave.

A command is processed inside the lock so the unit of work commits before
the next writer for the same key loads the aggregate. Keys are acquired in
sorted order so two requests locking overlapping keys cannot deadlock, and
every acquisition shares one deadline.

These locks serialize writers within one process. Across processes the
datastore's own transaction guarantees apply.
"""

import threading
import time
from contextlib import contextmanager

import structlog
from protean.utils.globals import current_domain

from storefront.errors import ResourceBusy

logger = structlog.get_logger(__name__)


class KeyedLocks:
    """A registry of re-entrant locks addressed by string keys."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    @contextmanager
    def hold(self, *keys: str, timeout: float):
        """Hold every lock in ``keys`` or raise ResourceBusy after ``timeout`` seconds."""
        deadline = time.monotonic() + timeout
        acquired: list[threading.RLock] = []
        try:
            for key in sorted(set(keys)):
                lock = self._lock_for(key)
                remaining = max(0.0, deadline - time.monotonic())
                if not lock.acquire(timeout=remaining):
                    logger.warning("Lock acquisition timed out", key=key, timeout=timeout)
                    raise ResourceBusy(key)
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def reset(self) -> None:
        with self._guard:
            self._locks.clear()


keyed_locks = KeyedLocks()


def process_exclusively(command, *keys: str, timeout: float):
    """Process ``command`` synchronously while holding ``keys``."""
    with keyed_locks.hold(*keys, timeout=timeout):
        return current_domain.process(command, asynchronous=False)
