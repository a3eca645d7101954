"""Per-owner serialization of check-then-write scheduling sequences."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class OwnerLockRegistry:
    """One ``asyncio.Lock`` per owner id.

    Every mutating scheduling operation for an owner runs its reads, its
    decision and its commit while holding that owner's lock, so eligibility,
    slot search and queue renumbering never interleave for the same owner
    inside this process. A lock is dropped once no task holds or waits on it.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        # owner -> tasks holding or waiting on its lock
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def _release(self, owner_id: str) -> None:
        """Forget the owner's lock when its last user leaves."""
        self._users[owner_id] -= 1
        if not self._users[owner_id]:
            del self._users[owner_id]
            del self._locks[owner_id]

    @asynccontextmanager
    async def hold(self, owner_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(owner_id, asyncio.Lock())
        self._users[owner_id] = self._users.get(owner_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._release(owner_id)


_registry = OwnerLockRegistry()


def get_lock_registry() -> OwnerLockRegistry:
    """Get the process-wide lock registry."""
    return _registry
