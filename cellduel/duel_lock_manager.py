from asyncio import Lock
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict
from uuid import UUID


class DuelLockManager:
    """One writer per duel inside this process.

    Tick, Purchase and the scheduler sweep hold the duel's lock for the whole
    read-compute-write cycle; the row lock taken in the transaction covers
    other processes.
    """

    def __init__(self):
        self.locks: Dict[UUID, Lock] = {}  # one Lock per duel_id
        self.lock = Lock()  # protects self.locks

    async def get_lock(self, duel_id: UUID) -> Lock:
        """Get the Lock of the specified duel_id

        Args:
            duel_id (UUID): ID to identify this duel

        Returns:
            Lock: Lock of the specified duel_id
        """
        async with self.lock:
            if duel_id not in self.locks:
                self.locks[duel_id] = Lock()
            return self.locks[duel_id]

    @asynccontextmanager
    async def hold(self, duel_id: UUID) -> AsyncIterator[None]:
        duel_lock = await self.get_lock(duel_id)
        async with duel_lock:
            yield

    async def cleanup(self, duel_id: UUID):
        """Delete the Lock of the specified duel_id

        Args:
            duel_id (UUID): ID to identify this duel
        """
        async with self.lock:
            duel_lock = self.locks.get(duel_id)
            if duel_lock is not None and not duel_lock.locked():
                del self.locks[duel_id]
