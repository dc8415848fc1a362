"""Per-key async mutual exclusion.

Check-then-write operations (liking, following, casting a poll vote) take
the lock for their key so that two requests interleaving at await points in
the same process cannot both pass the "not yet done" check.
"""

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLock:
    """A registry of asyncio.Lock objects keyed by arbitrary hashable keys.

    Locks are created on first use and dropped once no coroutine holds or
    waits on them, so the registry does not grow with every key ever seen.

    Example:
        locks = KeyedLock()
        async with locks.hold(("like", "topic", 5, 7)):
            ...
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Hold the lock for key for the duration of the context."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._waiters[key] = self._waiters.get(key, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
