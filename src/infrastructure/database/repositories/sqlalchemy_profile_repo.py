"""SQLAlchemy implementation of the profile store."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import AccountProvider, UserProfile
from infrastructure.database.models import UserProfileModel

_UPDATABLE = frozenset(
    {"username", "profile_description", "settings", "password_hash", "updated_at"}
)


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileStore."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, profile_id: str) -> UserProfile | None:
        """Get a profile by ID."""
        model = await self._get_model(profile_id)
        return self._to_entity(model) if model else None

    async def list_all(self) -> list[UserProfile]:
        """Get every profile, newest first."""
        stmt = select(UserProfileModel).order_by(UserProfileModel.created_at.desc())
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def list_by_provider(self, provider: str) -> list[UserProfile]:
        """Get profiles created by one authority."""
        stmt = (
            select(UserProfileModel)
            .where(UserProfileModel.provider == provider)
            .order_by(UserProfileModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def find_by_username(self, username: str) -> UserProfile | None:
        """Get the oldest profile with this username."""
        stmt = (
            select(UserProfileModel)
            .where(UserProfileModel.username == username)
            .order_by(UserProfileModel.created_at)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, profile: UserProfile) -> UserProfile:
        """Create a new profile."""
        model = self._to_model(profile)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, profile_id: str, fields: dict[str, Any]) -> UserProfile | None:
        """Merge fields into a profile."""
        model = await self._get_model(profile_id)
        if not model:
            return None

        for name, value in fields.items():
            if name in _UPDATABLE:
                setattr(model, name, value)

        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, profile_id: str) -> bool:
        """Delete a profile."""
        model = await self._get_model(profile_id)
        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def _get_model(self, profile_id: str) -> UserProfileModel | None:
        stmt = select(UserProfileModel).where(UserProfileModel.id == profile_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: UserProfileModel) -> UserProfile:
        """Convert ORM model to domain entity."""
        return UserProfile(
            id=model.id,
            username=model.username,
            email=model.email,
            provider=AccountProvider.from_stored(model.provider),
            password_hash=model.password_hash,
            profile_description=model.profile_description,
            settings=model.settings,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: UserProfile) -> UserProfileModel:
        """Convert domain entity to ORM model."""
        return UserProfileModel(
            id=entity.id,
            username=entity.username,
            email=entity.email,
            provider=entity.provider.value,
            password_hash=entity.password_hash,
            profile_description=entity.profile_description,
            settings=entity.settings,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
