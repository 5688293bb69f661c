"""Backend selection policy shared by every profile and credential operation.

All operations walk the same precedence order, record-store first,
then document-store, then the identity provider's own account listing.
Each operation names the capability it needs and the first available
backend offering it wins.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from core.exceptions import ServiceUnavailableError
from domain.entities.profile import UserProfile
from domain.repositories.profile_repository import IProfileReader, IProfileStore
from infrastructure.auth.provider import IIdentityProvider


class Backend(StrEnum):
    """Backends a profile can live in."""

    RECORD_STORE = "record-store"
    DOCUMENT_STORE = "document-store"
    IDENTITY_PROVIDER = "identity-provider"


class Capability(StrEnum):
    """What an operation needs from its backend."""

    READ = "read"
    LIST = "list"
    WRITE = "write"
    DELETE = "delete"
    CREDENTIALS = "credentials"


PRECEDENCE: tuple[Backend, ...] = (
    Backend.RECORD_STORE,
    Backend.DOCUMENT_STORE,
    Backend.IDENTITY_PROVIDER,
)

_STORE_CAPABILITIES = frozenset(Capability)
CAPABILITIES: dict[Backend, frozenset[Capability]] = {
    Backend.RECORD_STORE: _STORE_CAPABILITIES,
    Backend.DOCUMENT_STORE: _STORE_CAPABILITIES,
    # The provider knows accounts, not profile fields or password hashes
    Backend.IDENTITY_PROVIDER: frozenset({Capability.READ, Capability.LIST}),
}


@dataclass(frozen=True, slots=True)
class BackendAvailability:
    """Which backends are usable right now."""

    identity_provider: bool = False
    document_store: bool = False
    record_store: bool = False

    def is_available(self, backend: Backend) -> bool:
        if backend is Backend.RECORD_STORE:
            return self.record_store
        if backend is Backend.DOCUMENT_STORE:
            return self.document_store
        return self.identity_provider


class IAvailabilityProbe(Protocol):
    """Reports backend availability for the current request."""

    def snapshot(self) -> BackendAvailability:
        ...


def eligible_backends(
    availability: BackendAvailability, capability: Capability
) -> list[Backend]:
    """All available backends offering the capability, in precedence order."""
    return [
        backend
        for backend in PRECEDENCE
        if capability in CAPABILITIES[backend] and availability.is_available(backend)
    ]


def resolve_backend(availability: BackendAvailability, capability: Capability) -> Backend:
    """Pick the backend an operation should use.

    Raises:
        ServiceUnavailableError: If no available backend offers the capability
    """
    candidates = eligible_backends(availability, capability)
    if not candidates:
        raise ServiceUnavailableError(
            f"Server misconfiguration: no persistence available for {capability.value}",
            details={"capability": capability.value},
        )
    return candidates[0]


class IdentityProfileView:
    """Read-only profile view synthesised from identity provider accounts."""

    def __init__(self, identity_provider: IIdentityProvider) -> None:
        self._identity = identity_provider

    async def get(self, profile_id: str) -> UserProfile | None:
        account = await self._identity.get_account(profile_id)
        return account.to_profile() if account else None

    async def list_all(self) -> list[UserProfile]:
        return [account.to_profile() for account in await self._identity.list_accounts()]

    async def list_by_provider(self, provider: str) -> list[UserProfile]:
        profiles = await self.list_all()
        return [p for p in profiles if p.provider == provider]


class BackendRouter:
    """Binds the resolution policy to concrete backend objects."""

    def __init__(
        self,
        probe: IAvailabilityProbe,
        record_store: IProfileStore,
        document_store: IProfileStore | None,
        identity_provider: IIdentityProvider,
    ) -> None:
        self._probe = probe
        self._record_store = record_store
        self._document_store = document_store
        self._identity_view = IdentityProfileView(identity_provider)

    def availability(self) -> BackendAvailability:
        return self._probe.snapshot()

    def reader(self, capability: Capability) -> tuple[Backend, IProfileReader]:
        """Backend for a read or list operation."""
        backend = resolve_backend(self.availability(), capability)
        return backend, self._reader_for(backend)

    def store(self, capability: Capability) -> tuple[Backend, IProfileStore]:
        """Backend for an operation that needs a persisting store."""
        backend = resolve_backend(self.availability(), capability)
        return backend, self._store_for(backend)

    def stores(self, capability: Capability) -> list[tuple[Backend, IProfileStore]]:
        """Every available persisting store offering the capability."""
        return [
            (backend, self._store_for(backend))
            for backend in eligible_backends(self.availability(), capability)
        ]

    def _reader_for(self, backend: Backend) -> IProfileReader:
        if backend is Backend.IDENTITY_PROVIDER:
            return self._identity_view
        return self._store_for(backend)

    def _store_for(self, backend: Backend) -> IProfileStore:
        if backend is Backend.RECORD_STORE:
            return self._record_store
        if backend is Backend.DOCUMENT_STORE and self._document_store is not None:
            return self._document_store
        raise ServiceUnavailableError(
            f"Server misconfiguration: {backend.value} cannot persist profiles",
            details={"backend": backend.value},
        )
