"""
Per-owner exclusive locks.

Commands on one owner are serialized for the whole load -> mutate -> save
pipeline; commands on different owners run in parallel. Locks live in a
weak registry, so an owner nobody is working on holds no lock object.
"""

import weakref
from collections.abc import Generator
from contextlib import contextmanager
from threading import Lock


class _OwnerLock:
    """Weak-referenceable wrapper around a threading.Lock."""

    __slots__ = ("_lock", "__weakref__")

    def __init__(self) -> None:
        self._lock = Lock()

    def acquire(self) -> bool:
        return self._lock.acquire()

    def release(self) -> None:
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()


class OwnerLockRegistry:
    """Hands out one lock per owner id while anyone holds a reference to it."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, _OwnerLock] = weakref.WeakValueDictionary()
        self._registry_lock = Lock()

    def lock_for(self, owner_id: str) -> _OwnerLock:
        """Get the lock of an owner, creating it if no one holds it."""
        with self._registry_lock:
            lock = self._locks.get(owner_id)
            if lock is None:
                lock = _OwnerLock()
                self._locks[owner_id] = lock
            return lock

    @contextmanager
    def hold(self, owner_id: str) -> Generator[None]:
        """Context manager holding the owner's lock.

        Example:
            with locks.hold("user-1"):
                portfolio = repository.load("user-1")
                ...
                repository.save(portfolio)
        """
        lock = self.lock_for(owner_id)
        lock.acquire()
        try:
            yield
        finally:
            lock.release()

    def __len__(self) -> int:
        """Number of owners whose lock is currently referenced."""
        with self._registry_lock:
            return len(self._locks)
