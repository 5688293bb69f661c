"""Login across delegated, local-hash and provider-lookup verification."""

from dataclasses import dataclass
from enum import StrEnum

import structlog

from core.exceptions import (
    AppException,
    InvalidCredentialsError,
    ServiceUnavailableError,
    UserNotFoundError,
    ValidationError,
)
from domain.entities.profile import UserProfile, derived_email
from domain.services.backend_policy import BackendRouter, Capability
from infrastructure.auth.passwords import PasswordHasher
from infrastructure.auth.provider import IIdentityProvider, IPasswordGrant

logger = structlog.get_logger()


class LoginMethod(StrEnum):
    """Which verification path produced a login."""

    DELEGATED = "delegated"
    LOCAL_PASSWORD = "local-password"
    PROVIDER_LOOKUP = "provider-lookup"


@dataclass(frozen=True, slots=True)
class LoginResult:
    """Outcome of a successful login."""

    uid: str
    method: LoginMethod
    message: str
    username: str | None = None
    token: str | None = None

    @property
    def server_fallback(self) -> bool:
        return self.method is not LoginMethod.DELEGATED


class LoginService:
    """Verifies credentials with the best path the deployment supports.

    Paths, first success wins:

    1. Delegated: the provider checks the password through its web key.
    2. Local password: compare against the hash stored at registration.
       Only used when no web key is configured.
    3. Provider lookup: trust that the provider account exists. This does
       NOT check the password. It is an operator break-glass path for
       deployments without a web key or stored hashes and must not be
       exposed for untrusted self-service login. Disable it with
       ``allow_unverified_provider_login=False``.
    """

    def __init__(
        self,
        router: BackendRouter,
        identity_provider: IIdentityProvider,
        password_hasher: PasswordHasher,
        password_grant: IPasswordGrant | None = None,
        email_domain: str = "example.com",
        allow_unverified_provider_login: bool = True,
    ) -> None:
        self._router = router
        self._identity = identity_provider
        self._hasher = password_hasher
        self._password_grant = password_grant
        self._email_domain = email_domain
        self._allow_provider_lookup = allow_unverified_provider_login

    async def login(self, username: str | None, password: str | None) -> LoginResult:
        """Authenticate a user.

        Raises:
            ValidationError: If username or password is missing
            InvalidCredentialsError: If a verifying path rejects the password
            ServiceUnavailableError: If no path is configured or all failed
        """
        if not username or not password:
            raise ValidationError("Username and password are required")

        email = derived_email(username, self._email_domain)

        if self._password_grant is not None:
            return await self._login_delegated(self._password_grant, email, username, password)

        result = await self._login_local_password(username, password)
        if result is not None:
            return result

        return await self._login_provider_lookup(email, username)

    async def _login_delegated(
        self, password_grant: IPasswordGrant, email: str, username: str, password: str
    ) -> LoginResult:
        grant = await password_grant.sign_in_with_password(email, password)

        profile = await self._best_effort_profile(grant.local_id)
        logger.info("login_succeeded", uid=grant.local_id, method=LoginMethod.DELEGATED.value)
        return LoginResult(
            uid=grant.local_id,
            method=LoginMethod.DELEGATED,
            message="Login successful",
            username=(profile.username if profile else None) or username,
            token=grant.id_token,
        )

    async def _login_local_password(self, username: str, password: str) -> LoginResult | None:
        try:
            backend, store = self._router.store(Capability.CREDENTIALS)
            profile = await store.find_by_username(username)
        except AppException as e:
            logger.warning("login_local_lookup_failed", error=e.message)
            return None

        if profile is None or not profile.password_hash:
            return None

        if not await self._hasher.verify(password, profile.password_hash):
            logger.info("login_rejected", method=LoginMethod.LOCAL_PASSWORD.value)
            raise InvalidCredentialsError()

        token = await self._best_effort_token(profile.id)
        logger.info(
            "login_succeeded",
            uid=profile.id,
            method=LoginMethod.LOCAL_PASSWORD.value,
            backend=backend.value,
        )
        return LoginResult(
            uid=profile.id,
            method=LoginMethod.LOCAL_PASSWORD,
            message="Login successful (server-password)",
            username=profile.username,
            token=token,
        )

    async def _login_provider_lookup(self, email: str, username: str) -> LoginResult:
        if not self._identity.initialized:
            raise ServiceUnavailableError(
                "Server misconfiguration: missing Firebase web API key and Admin SDK "
                "not initialized. Provide FIREBASE_API_KEY or a service account.",
                details={"webKeyConfigured": False, "identityProviderInitialized": False},
            )
        if not self._allow_provider_lookup:
            raise ServiceUnavailableError(
                "Server misconfiguration: missing Firebase web API key and no stored "
                "password hash for this user. Provide FIREBASE_API_KEY.",
                details={"webKeyConfigured": False, "providerLookupAllowed": False},
            )

        try:
            account = await self._identity.get_account_by_email(email)
            if account is None:
                raise UserNotFoundError(email)
            token = await self._identity.create_custom_token(account.uid)
        except AppException as e:
            logger.error("login_provider_lookup_failed", error=e.message)
            raise ServiceUnavailableError(
                "Server misconfiguration: missing or invalid Firebase web API key AND "
                "server fallback failed. Set FIREBASE_API_KEY or provide a valid "
                "service account.",
                details={"webKeyConfigured": False, "identityProviderInitialized": True},
            ) from e

        logger.warning(
            "login_without_password_check",
            uid=account.uid,
            method=LoginMethod.PROVIDER_LOOKUP.value,
        )
        return LoginResult(
            uid=account.uid,
            method=LoginMethod.PROVIDER_LOOKUP,
            message="Server fallback: custom token created",
            username=account.username or username,
            token=token,
        )

    async def _best_effort_profile(self, uid: str) -> UserProfile | None:
        try:
            _, reader = self._router.reader(Capability.READ)
            return await reader.get(uid)
        except AppException as e:
            logger.warning("login_profile_enrichment_failed", uid=uid, error=e.message)
            return None

    async def _best_effort_token(self, uid: str) -> str | None:
        if not self._identity.initialized:
            return None
        try:
            return await self._identity.create_custom_token(uid)
        except AppException as e:
            logger.warning("login_token_mint_failed", uid=uid, error=e.message)
            return None
