"""Lookup history service with a degraded-write fallback."""

from typing import Protocol

import structlog

from core.exceptions import AppException, ValidationError
from domain.entities.history import HistoryEntry
from domain.repositories.history_repository import IHistoryStore
from infrastructure.memory.history_buffer import DegradedBuffer

logger = structlog.get_logger()


class IConnectivity(Protocol):
    """Live view of the record-store connection."""

    @property
    def is_connected(self) -> bool:
        ...


class HistoryService:
    """Records lookups durably, or in memory while the record-store is down.

    Buffered entries are written out by ``flush`` on the next transition to
    connected. A crash between draining the buffer and writing it out
    loses the unwritten remainder.
    """

    def __init__(
        self,
        connectivity: IConnectivity,
        store: IHistoryStore,
        buffer: DegradedBuffer,
    ) -> None:
        self._connectivity = connectivity
        self._store = store
        self._buffer = buffer

    async def append(
        self,
        owner_id: str | None,
        term: str | None,
        result_text: str | None,
        secondary_text: str | None = None,
    ) -> HistoryEntry:
        """Record a lookup.

        Never fails for lack of a connection: the entry is buffered instead.

        Raises:
            ValidationError: If owner, term or result text is missing
            BackendError: If a connected write fails for another reason
        """
        if not term or not result_text:
            raise ValidationError("Missing fields")
        if not owner_id:
            raise ValidationError("userId is required to save history")

        entry = HistoryEntry(
            owner_id=owner_id,
            term=term,
            result_text=result_text,
            secondary_text=secondary_text,
        )

        if self._connectivity.is_connected:
            try:
                stored = await self._store.add(entry.as_durable())
            except AppException as e:
                if self._connectivity.is_connected:
                    raise
                logger.warning("history_write_lost_connection", error=e.message)
            else:
                logger.info("history_saved", owner_id=owner_id, entry_id=stored.id)
                return stored

        buffered = await self._buffer.append(entry)
        logger.warning(
            "history_buffered",
            owner_id=owner_id,
            entry_id=buffered.id,
            pending=len(self._buffer),
        )
        return buffered

    async def list_for_owner(self, owner_id: str | None) -> list[HistoryEntry]:
        """Get an owner's history, buffered entries first, each newest first."""
        if not owner_id:
            return []

        buffered = await self._buffer.for_owner(owner_id)
        if not self._connectivity.is_connected:
            return buffered

        try:
            durable = await self._store.list_for_owner(owner_id)
        except AppException as e:
            if self._connectivity.is_connected:
                raise
            logger.warning("history_read_lost_connection", error=e.message)
            return buffered
        return buffered + durable

    async def flush(self) -> int:
        """Write buffered entries to the record-store.

        Entries are taken out of the buffer before writing, so an entry is
        written at most once. Per-entry failures are logged and dropped.

        Returns:
            Number of entries written
        """
        if not self._connectivity.is_connected or not len(self._buffer):
            return 0

        pending = await self._buffer.drain()
        written = 0
        for entry in pending:
            try:
                await self._store.add(entry.as_durable())
            except AppException as e:
                logger.warning("history_flush_item_dropped", entry_id=entry.id, error=e.message)
                continue
            written += 1

        logger.info("history_flushed", written=written, drained=len(pending))
        return written
