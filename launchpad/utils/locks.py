import asyncio
from contextlib import asynccontextmanager
from typing import Dict, List


class KeyedLocks:
    """
    One ``asyncio.Lock`` per key, kept only while someone holds or waits on it.

    Entries are dropped when their last user leaves, so the map stays bounded by
    the number of in-flight operations rather than the number of keys ever seen.
    """

    def __init__(self):
        # key -> [lock, users]
        self._entries: Dict[str, List] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    @asynccontextmanager
    async def hold(self, key: str):
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = [asyncio.Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._entries[key]
