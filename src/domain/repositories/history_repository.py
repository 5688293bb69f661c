"""History store protocol."""

from typing import Protocol

from domain.entities.history import HistoryEntry


class IHistoryStore(Protocol):
    """Durable history storage."""

    async def add(self, entry: HistoryEntry) -> HistoryEntry:
        """Store an entry durably and return it with its stored id."""
        ...

    async def list_for_owner(self, owner_id: str) -> list[HistoryEntry]:
        """Get an owner's entries, newest first."""
        ...
