"""SQLAlchemy implementation of the history store."""

from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.history import HistoryEntry
from infrastructure.database.models import HistoryEntryModel


class SQLAlchemyHistoryRepository:
    """SQLAlchemy implementation of IHistoryStore."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, entry: HistoryEntry) -> HistoryEntry:
        """Store an entry under a fresh id."""
        model = HistoryEntryModel(
            id=entry.id or uuid4().hex,
            owner_id=entry.owner_id,
            term=entry.term,
            result_text=entry.result_text,
            secondary_text=entry.secondary_text,
            created_at=entry.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def list_for_owner(self, owner_id: str) -> list[HistoryEntry]:
        """Get an owner's entries, newest first."""
        stmt = (
            select(HistoryEntryModel)
            .where(HistoryEntryModel.owner_id == owner_id)
            .order_by(HistoryEntryModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    def _to_entity(self, model: HistoryEntryModel) -> HistoryEntry:
        """Convert ORM model to domain entity."""
        return HistoryEntry(
            id=model.id,
            owner_id=model.owner_id,
            term=model.term,
            result_text=model.result_text,
            secondary_text=model.secondary_text,
            created_at=model.created_at,
            buffered=False,
        )
