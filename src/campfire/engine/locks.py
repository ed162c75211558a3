"""Per-fire mutual exclusion."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class FireLocks:
    """One asyncio.Lock per fire id.

    Duel transitions and gated writes are read-modify-write sequences against
    the stores; holding the fire's lock for the whole sequence keeps turn order
    and the single-duel rule intact when callers race. Distinct fires never
    wait on each other.

    Locks are never evicted: fires are never deleted, so the map grows with
    the number of fires seen by this process.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def lock_for(self, fire_id: str) -> asyncio.Lock:
        """Get (or create) the lock guarding a fire."""
        lock = self._locks.get(fire_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[fire_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, fire_id: str) -> AsyncIterator[None]:
        """Hold a fire's lock for the duration of the block."""
        async with self.lock_for(fire_id):
            yield
