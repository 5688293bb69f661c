"""Account registration across the identity provider and profile stores."""

from dataclasses import dataclass

import structlog

from core.exceptions import AppException, BackendError, ServiceUnavailableError, ValidationError
from domain.entities.profile import AccountProvider, IdentityAccount, UserProfile, derived_email
from domain.services.backend_policy import Backend, BackendRouter, Capability
from infrastructure.auth.passwords import PasswordHasher
from infrastructure.auth.provider import IIdentityProvider

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class RegistrationResult:
    """Outcome of a registration, including degraded-mode flags."""

    uid: str
    username: str
    provider: AccountProvider
    message: str
    server_fallback: bool = False
    store_error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.server_fallback or self.store_error is not None


class RegistrationService:
    """Creates accounts, keeping a password hash wherever a profile lands.

    The hash is written even when the identity provider owns the account
    so that login can still be verified locally if the provider's web key
    is not configured.

    Not idempotent: registering the same username twice creates two
    records. Usernames are not de-duplicated.
    """

    def __init__(
        self,
        router: BackendRouter,
        identity_provider: IIdentityProvider,
        password_hasher: PasswordHasher,
        email_domain: str = "example.com",
    ) -> None:
        self._router = router
        self._identity = identity_provider
        self._hasher = password_hasher
        self._email_domain = email_domain

    async def register(
        self,
        username: str | None,
        password: str | None,
        confirm_password: str | None,
    ) -> RegistrationResult:
        """Register a user.

        Raises:
            ValidationError: If a field is missing or the passwords differ
            BackendError: If nothing could be persisted
        """
        if not username or not password or not confirm_password:
            raise ValidationError("All fields are required")
        if password != confirm_password:
            raise ValidationError("Passwords do not match")

        email = derived_email(username, self._email_domain)
        account = await self._create_provider_account(email, password, username)
        password_hash = await self._hasher.hash(password)

        try:
            backend, store = self._router.store(Capability.WRITE)
        except ServiceUnavailableError:
            return self._without_store(account, username)

        profile = UserProfile(username=username, email=email, password_hash=password_hash)
        if account:
            profile.id = account.uid
            profile.provider = AccountProvider.FIREBASE

        try:
            await store.create(profile)
        except AppException as e:
            logger.warning(
                "registration_profile_write_failed",
                backend=backend.value,
                uid=profile.id,
                error=e.message,
            )
            if account:
                return RegistrationResult(
                    uid=account.uid,
                    username=username,
                    provider=AccountProvider.FIREBASE,
                    message="User created (auth-only). Profile write failed.",
                    store_error=e.message,
                )
            raise BackendError(
                "Failed to create user: profile write failed",
                backend=backend.value,
                details={"firestoreError": e.message},
            ) from e

        logger.info(
            "user_registered",
            uid=profile.id,
            provider=profile.provider.value,
            backend=backend.value,
        )
        return RegistrationResult(
            uid=profile.id,
            username=username,
            provider=profile.provider,
            message="User created",
        )

    async def _create_provider_account(
        self, email: str, password: str, username: str
    ) -> IdentityAccount | None:
        if not self._identity.initialized:
            return None
        try:
            return await self._identity.create_account(email, password, username)
        except AppException as e:
            # The profile may still be persisted locally
            logger.warning(
                "registration_provider_failed",
                backend=Backend.IDENTITY_PROVIDER.value,
                error=e.message,
            )
            return None

    def _without_store(
        self, account: IdentityAccount | None, username: str
    ) -> RegistrationResult:
        if account is None:
            raise BackendError("Failed to create user: no persistence available")
        logger.warning("registration_auth_only", uid=account.uid)
        return RegistrationResult(
            uid=account.uid,
            username=username,
            provider=AccountProvider.FIREBASE,
            message="User created (auth-only, no profile store)",
            server_fallback=True,
        )
