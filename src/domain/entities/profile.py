"""User profile domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from core.ids import local_id


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class AccountProvider(StrEnum):
    """Authority that created an account."""

    FIREBASE = "firebase"
    LOCAL = "local"

    @classmethod
    def from_stored(cls, value: str | None) -> "AccountProvider":
        """Read a stored provider tag; anything unrecognised counts as local."""
        try:
            return cls(value)
        except ValueError:
            return cls.LOCAL


def derived_email(username: str, domain: str = "example.com") -> str:
    """Synthetic unique handle required by the identity provider.

    Not a real contact address.
    """
    return f"{username}@{domain}"


@dataclass
class UserProfile:
    """Domain entity for a user profile.

    ``id`` is the identity provider uid when the provider created the
    account, otherwise a locally synthesised ``local-...`` id.
    """

    username: str
    id: str = field(default_factory=local_id)
    email: str = ""
    provider: AccountProvider = AccountProvider.LOCAL
    password_hash: str | None = None
    profile_description: str | None = None
    settings: dict[str, Any] | None = None
    created_at: datetime | None = field(default_factory=utcnow)
    updated_at: datetime | None = field(default_factory=utcnow)


@dataclass(frozen=True, slots=True)
class IdentityAccount:
    """Read-only view of an identity provider account."""

    uid: str
    email: str | None = None
    display_name: str | None = None
    created_at: datetime | None = None

    @property
    def username(self) -> str | None:
        """Display name, falling back to the email local part."""
        if self.display_name:
            return self.display_name
        if self.email:
            return self.email.split("@")[0]
        return None

    def to_profile(self) -> UserProfile:
        """Synthesise a profile from the account alone."""
        return UserProfile(
            id=self.uid,
            username=self.username or "",
            email=self.email or "",
            provider=AccountProvider.FIREBASE,
            created_at=self.created_at,
            updated_at=None,
        )
