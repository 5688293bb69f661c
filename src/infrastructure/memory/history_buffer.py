"""In-process buffer for history written while the record-store is down."""

import asyncio
import logging

from domain.entities.history import HistoryEntry

logger = logging.getLogger(__name__)


class DegradedBuffer:
    """Ordered, lock-guarded holding area for buffered history entries.

    ``append`` and the snapshot-and-clear in ``drain`` share one lock, so
    an entry appended during a flush either lands in that flush's snapshot
    or stays here for the next one. Contents are lost on restart.
    """

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []
        self._lock = asyncio.Lock()

    async def append(self, entry: HistoryEntry) -> HistoryEntry:
        """Hold an entry until the record-store comes back."""
        async with self._lock:
            entry.buffered = True
            self._entries.append(entry)
            logger.debug("Buffered history entry %s", entry.id)
            return entry

    async def for_owner(self, owner_id: str) -> list[HistoryEntry]:
        """Return an owner's buffered entries, newest first."""
        async with self._lock:
            owned = [e for e in self._entries if e.owner_id == owner_id]
        return sorted(owned, key=lambda e: e.created_at, reverse=True)

    async def drain(self) -> list[HistoryEntry]:
        """Take every buffered entry in insertion order and empty the buffer."""
        async with self._lock:
            entries = self._entries
            self._entries = []
        return entries

    def __len__(self) -> int:
        return len(self._entries)
