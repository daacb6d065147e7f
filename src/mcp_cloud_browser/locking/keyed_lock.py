"""Per-key asyncio locks for serialising work on one key without blocking others."""

import asyncio
import contextlib
from typing import Dict, Hashable


class KeyedLock:
    """
    Hands out one ``asyncio.Lock`` per key.

    Locks are created on first use and dropped again once nobody holds or
    waits on them, so the table does not grow with every key ever seen.
    """

    def __init__(self):
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._waiters: Dict[Hashable, int] = {}

    @contextlib.asynccontextmanager
    async def hold(self, key: Hashable):
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


__all__ = ["KeyedLock"]
