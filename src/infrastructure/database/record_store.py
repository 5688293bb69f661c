"""Record-store adapters with one transaction per call."""

from collections.abc import Callable
from typing import Any

from domain.entities.history import HistoryEntry
from domain.entities.profile import UserProfile
from domain.repositories.unit_of_work import IUnitOfWork
from infrastructure.database.connectivity import ConnectionMonitor
from infrastructure.errors import record_store_errors


class RecordProfileStore:
    """IProfileStore over the relational record-store.

    Driver errors are translated at this boundary, and connection-level
    ones mark the monitor disconnected.
    """

    def __init__(
        self, uow_factory: Callable[[], IUnitOfWork], monitor: ConnectionMonitor
    ) -> None:
        self._uow_factory = uow_factory
        self._monitor = monitor

    async def get(self, profile_id: str) -> UserProfile | None:
        with record_store_errors(self._monitor):
            async with self._uow_factory() as uow:
                return await uow.profiles.get(profile_id)

    async def list_all(self) -> list[UserProfile]:
        with record_store_errors(self._monitor):
            async with self._uow_factory() as uow:
                return await uow.profiles.list_all()

    async def list_by_provider(self, provider: str) -> list[UserProfile]:
        with record_store_errors(self._monitor):
            async with self._uow_factory() as uow:
                return await uow.profiles.list_by_provider(provider)

    async def find_by_username(self, username: str) -> UserProfile | None:
        with record_store_errors(self._monitor):
            async with self._uow_factory() as uow:
                return await uow.profiles.find_by_username(username)

    async def create(self, profile: UserProfile) -> UserProfile:
        with record_store_errors(self._monitor):
            async with self._uow_factory() as uow:
                created = await uow.profiles.create(profile)
                await uow.commit()
                return created

    async def update(self, profile_id: str, fields: dict[str, Any]) -> UserProfile | None:
        with record_store_errors(self._monitor):
            async with self._uow_factory() as uow:
                updated = await uow.profiles.update(profile_id, fields)
                await uow.commit()
                return updated

    async def delete(self, profile_id: str) -> bool:
        with record_store_errors(self._monitor):
            async with self._uow_factory() as uow:
                deleted = await uow.profiles.delete(profile_id)
                await uow.commit()
                return deleted


class RecordHistoryStore:
    """IHistoryStore over the relational record-store."""

    def __init__(
        self, uow_factory: Callable[[], IUnitOfWork], monitor: ConnectionMonitor
    ) -> None:
        self._uow_factory = uow_factory
        self._monitor = monitor

    async def add(self, entry: HistoryEntry) -> HistoryEntry:
        with record_store_errors(self._monitor):
            async with self._uow_factory() as uow:
                stored = await uow.history.add(entry)
                await uow.commit()
                return stored

    async def list_for_owner(self, owner_id: str) -> list[HistoryEntry]:
        with record_store_errors(self._monitor):
            async with self._uow_factory() as uow:
                return await uow.history.list_for_owner(owner_id)
