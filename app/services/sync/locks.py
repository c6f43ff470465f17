"""Per-key asyncio locks for serializing writes to the same target document.

Two commits that share a dependency (two games with the same team) would
otherwise race on that team's upsert. Each write to
(target_environment, collection, id) takes the lock for that key; writes
to different keys proceed in parallel.

Locks are reference counted and removed once no task holds or waits on
them, so the registry does not grow with the number of documents ever
synced.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Hashable, Tuple


class KeyedLockRegistry:
    """
    Registry of asyncio locks keyed by arbitrary hashable keys.

    Usage:
        locks = KeyedLockRegistry()
        async with locks.hold(("Local", "teams", "t1")):
            await store.upsert(...)
    """

    def __init__(self):
        self._locks: Dict[Hashable, Tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._acquire_ref(key)
        try:
            async with lock:
                yield
        finally:
            self._release_ref(key)

    def is_locked(self, key: Hashable) -> bool:
        entry = self._locks.get(key)
        return entry is not None and entry[0].locked()

    def __len__(self) -> int:
        return len(self._locks)

    def _acquire_ref(self, key: Hashable) -> asyncio.Lock:
        lock, refs = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, refs + 1)
        return lock

    def _release_ref(self, key: Hashable) -> None:
        lock, refs = self._locks[key]
        if refs <= 1:
            del self._locks[key]
        else:
            self._locks[key] = (lock, refs - 1)
