"""Unit of Work protocol for the record-store."""

from typing import Protocol

from domain.repositories.history_repository import IHistoryStore
from domain.repositories.profile_repository import IProfileStore


class IUnitOfWork(Protocol):
    """Unit of Work interface for managing record-store transactions."""

    profiles: IProfileStore
    history: IHistoryStore

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
