"""Profile store protocols."""

from typing import Any, Protocol

from domain.entities.profile import UserProfile


class IProfileReader(Protocol):
    """Read side shared by every backend that can answer profile queries."""

    async def get(self, profile_id: str) -> UserProfile | None:
        """Get a profile by id."""
        ...

    async def list_all(self) -> list[UserProfile]:
        """Get every profile."""
        ...

    async def list_by_provider(self, provider: str) -> list[UserProfile]:
        """Get profiles created by the given authority."""
        ...


class IProfileStore(IProfileReader, Protocol):
    """Repository interface for backends that persist profiles."""

    async def find_by_username(self, username: str) -> UserProfile | None:
        """Get the first profile with this username."""
        ...

    async def create(self, profile: UserProfile) -> UserProfile:
        """Persist a new profile under its id."""
        ...

    async def update(self, profile_id: str, fields: dict[str, Any]) -> UserProfile | None:
        """Merge fields into an existing profile; None if it does not exist."""
        ...

    async def delete(self, profile_id: str) -> bool:
        """Delete a profile and return whether it existed."""
        ...
