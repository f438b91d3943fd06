"""Per-room-type locks serializing check-then-reserve sequences"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class RoomTypeLocks:
    """One asyncio.Lock per room type, alive while anyone holds or waits on it.

    Holders of different room types never wait on each other. Entries are
    dropped when their last user leaves, so room type ids taken from requests
    cannot grow the registry. The registry is process-local; it must be shared
    by every BookingService that writes to the same store.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, room_type_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(room_type_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[room_type_id] = lock
        self._users[room_type_id] = self._users.get(room_type_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[room_type_id] -= 1
            if not self._users[room_type_id]:
                del self._users[room_type_id]
                del self._locks[room_type_id]

    def is_held(self, room_type_id: str) -> bool:
        lock = self._locks.get(room_type_id)
        return lock is not None and lock.locked()
