"""Per-key asyncio locks for read-modify-write of stored records."""

import asyncio


class KeyedLocks:
    """Lazily creates one asyncio.Lock per key.

    Keys whose record is gone for good (a deleted room) are dropped with
    discard() once nobody holds their lock.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def __call__(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def discard(self, key: str) -> bool:
        """Forget the lock for key unless it is held.

        Returns:
            True if the key was dropped.
        """
        lock = self._locks.get(key)
        if lock is None or lock.locked():
            return False
        del self._locks[key]
        return True

    def __contains__(self, key: str) -> bool:
        return key in self._locks

    def __len__(self) -> int:
        return len(self._locks)
