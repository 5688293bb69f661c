"""Profile service layer with backend-aware business logic."""

from dataclasses import dataclass, field
from typing import Any

import structlog

from core.exceptions import (
    AppException,
    BackendError,
    ServiceUnavailableError,
    UserNotFoundError,
    ValidationError,
)
from core.ids import is_local_id
from domain.entities.profile import UserProfile, utcnow
from domain.services.backend_policy import Backend, BackendRouter, Capability
from infrastructure.auth.passwords import PasswordHasher
from infrastructure.auth.provider import IIdentityProvider

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class DeletionResult:
    """Where a profile was removed from."""

    user_id: str
    identity_deleted: bool
    stores: list[Backend] = field(default_factory=list)

    @property
    def server_fallback(self) -> bool:
        """True when no profile store was available and only the account went."""
        return not self.stores


class ProfileService:
    """Service layer for profile reads and mutations.

    Every operation asks the router for a backend, so the same precedence
    applies everywhere. A read never cross-checks other backends.
    """

    def __init__(
        self,
        router: BackendRouter,
        identity_provider: IIdentityProvider,
        password_hasher: PasswordHasher,
    ) -> None:
        self._router = router
        self._identity = identity_provider
        self._hasher = password_hasher

    async def list_profiles(self) -> list[UserProfile]:
        """Get every profile from the preferred backend."""
        backend, reader = self._router.reader(Capability.LIST)
        profiles = await reader.list_all()
        logger.debug("profiles_listed", backend=backend.value, count=len(profiles))
        return profiles

    async def get(self, user_id: str) -> UserProfile:
        """Get a single profile."""
        _, reader = self._router.reader(Capability.READ)
        profile = await reader.get(user_id)
        if not profile:
            raise UserNotFoundError(user_id)
        return profile

    async def update(
        self,
        user_id: str,
        username: str | None = None,
        profile_description: str | None = None,
        settings: dict[str, Any] | None = None,
        password: str | None = None,
    ) -> UserProfile:
        """Update a profile.

        The store is resolved before anything is touched, so a request
        without a usable store changes nothing. Locally keyed profiles have
        no provider account, so only their stored hash and username change.

        Raises:
            ServiceUnavailableError: If no store is available, or a password
                change needs an identity provider account that is missing
            UserNotFoundError: If the profile is not in the selected store
        """
        backend, store = self._router.store(Capability.WRITE)

        existing = await store.get(user_id)
        if not existing:
            raise UserNotFoundError(user_id)

        fields: dict[str, Any] = {}

        if password:
            if not is_local_id(user_id):
                await self._change_provider_password(user_id, password)
            # Keep the stored hash in step so local verification still works
            fields["password_hash"] = await self._hasher.hash(password)

        if username:
            if not is_local_id(user_id):
                await self._mirror_display_name(user_id, username)
            fields["username"] = username

        if profile_description is not None:
            fields["profile_description"] = profile_description
        if settings is not None:
            fields["settings"] = settings
        fields["updated_at"] = utcnow()

        updated = await store.update(user_id, fields)
        if not updated:
            raise UserNotFoundError(user_id)

        logger.info(
            "profile_updated",
            user_id=user_id,
            backend=backend.value,
            fields=sorted(k for k in fields if k != "password_hash"),
        )
        return updated

    async def delete(self, user_id: str) -> DeletionResult:
        """Delete an account everywhere it exists.

        The identity provider is authoritative and goes first. If a store
        delete then fails the account is already gone; the error says so
        and nothing is rolled back.

        Raises:
            ServiceUnavailableError: If the identity provider is not initialized
            UserNotFoundError: If the id exists nowhere
            BackendError: If a store delete fails
        """
        if not self._identity.initialized:
            raise ServiceUnavailableError(
                "Server misconfiguration: identity provider not initialized",
                details={"backend": Backend.IDENTITY_PROVIDER.value},
            )

        identity_deleted = await self._identity.delete_account(user_id)

        removed_from: list[Backend] = []
        found_in_store = False
        stores = self._router.stores(Capability.DELETE)
        for backend, store in stores:
            try:
                existed = await store.delete(user_id)
            except AppException as e:
                if not identity_deleted:
                    raise
                logger.error(
                    "profile_delete_partial",
                    user_id=user_id,
                    backend=backend.value,
                    error=e.message,
                )
                raise BackendError(
                    "Account deleted but profile delete failed",
                    backend=backend.value,
                    details={"identityDeleted": True, "cause": e.message},
                ) from e
            found_in_store = found_in_store or existed
            removed_from.append(backend)

        if not identity_deleted and not found_in_store:
            raise UserNotFoundError(user_id)

        result = DeletionResult(
            user_id=user_id,
            identity_deleted=identity_deleted,
            stores=removed_from,
        )
        if result.server_fallback:
            logger.warning("profile_delete_identity_only", user_id=user_id)
        else:
            logger.info(
                "profile_deleted",
                user_id=user_id,
                identity_deleted=identity_deleted,
                stores=[b.value for b in removed_from],
            )
        return result

    async def filter_by_provider(self, provider: str | None) -> list[UserProfile]:
        """Get profiles created by one authority."""
        if not provider:
            raise ValidationError("Provider is required")
        _, reader = self._router.reader(Capability.LIST)
        return await reader.list_by_provider(provider)

    async def sort_by_username_desc(self) -> list[UserProfile]:
        """Get profiles ordered by username, Z first, ignoring case."""
        profiles = await self.list_profiles()
        return sorted(profiles, key=lambda p: (p.username or "").lower(), reverse=True)

    async def _change_provider_password(self, user_id: str, password: str) -> None:
        if not self._identity.initialized:
            raise ServiceUnavailableError(
                "Password change requires the identity provider",
                details={"backend": Backend.IDENTITY_PROVIDER.value},
            )
        try:
            await self._identity.update_account(user_id, password=password)
        except UserNotFoundError as e:
            raise ServiceUnavailableError(
                "Profile has no identity provider account to update",
                details={"backend": Backend.IDENTITY_PROVIDER.value, "user_id": user_id},
            ) from e

    async def _mirror_display_name(self, user_id: str, username: str) -> None:
        if not self._identity.initialized:
            return
        try:
            await self._identity.update_account(user_id, display_name=username)
        except AppException as e:
            logger.warning("display_name_mirror_failed", user_id=user_id, error=e.message)
