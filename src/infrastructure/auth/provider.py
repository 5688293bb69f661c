"""Identity provider protocols."""

from dataclasses import dataclass
from typing import Optional, Protocol

from domain.entities.profile import IdentityAccount


@dataclass
class PasswordGrant:
    """Result of a successful delegated password check."""

    local_id: str
    id_token: str
    email: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


class IIdentityProvider(Protocol):
    """Protocol for the managed identity provider.

    Implementations translate their own errors into the application's
    exception taxonomy before raising.
    """

    @property
    def initialized(self) -> bool:
        """Whether the provider SDK came up at startup."""
        ...

    async def create_account(
        self, email: str, password: str, display_name: str
    ) -> IdentityAccount:
        """Create an account and return it."""
        ...

    async def get_account(self, uid: str) -> Optional[IdentityAccount]:
        """Get an account by uid, None if unknown."""
        ...

    async def get_account_by_email(self, email: str) -> Optional[IdentityAccount]:
        """Get an account by email, None if unknown."""
        ...

    async def list_accounts(self) -> list[IdentityAccount]:
        """List accounts up to the configured limit."""
        ...

    async def update_account(
        self,
        uid: str,
        password: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> None:
        """Change an account's password and/or display name."""
        ...

    async def delete_account(self, uid: str) -> bool:
        """Delete an account and return whether it existed."""
        ...

    async def create_custom_token(self, uid: str) -> str:
        """Mint a short-lived token the client exchanges for a session."""
        ...


class IPasswordGrant(Protocol):
    """Protocol for the provider-hosted password check."""

    async def sign_in_with_password(self, email: str, password: str) -> PasswordGrant:
        """Verify credentials at the provider.

        Raises:
            InvalidCredentialsError: If the provider rejects the credentials
        """
        ...
