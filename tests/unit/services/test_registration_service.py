"""Unit tests for RegistrationService."""

import pytest

from core.exceptions import BackendError, ValidationError
from core.ids import is_local_id
from domain.entities.profile import AccountProvider
from domain.services.backend_policy import BackendRouter
from domain.services.registration_service import RegistrationService
from infrastructure.auth.passwords import PasswordHasher
from tests.fakes import FakeIdentityProvider, InMemoryProfileStore, StaticProbe


@pytest.fixture
def service(
    router: BackendRouter, identity: FakeIdentityProvider, hasher: PasswordHasher
) -> RegistrationService:
    return RegistrationService(router, identity, hasher)


class TestValidation:
    @pytest.mark.parametrize(
        "username,password,confirm",
        [
            (None, "pw", "pw"),
            ("alice", "", "pw"),
            ("alice", "pw", None),
        ],
    )
    @pytest.mark.asyncio
    async def test_missing_field(self, service: RegistrationService, username, password, confirm):
        with pytest.raises(ValidationError, match="All fields are required"):
            await service.register(username, password, confirm)

    @pytest.mark.asyncio
    async def test_passwords_must_match(self, service: RegistrationService):
        with pytest.raises(ValidationError, match="Passwords do not match"):
            await service.register("alice", "Secret123", "Secret124")


class TestRegister:
    @pytest.mark.asyncio
    async def test_provider_and_store_succeed(
        self,
        service: RegistrationService,
        identity: FakeIdentityProvider,
        record_store: InMemoryProfileStore,
        hasher: PasswordHasher,
    ):
        result = await service.register("alice", "Secret123", "Secret123")

        account = await identity.get_account_by_email("alice@example.com")
        assert account is not None
        assert result.uid == account.uid
        assert result.username == "alice"
        assert not result.degraded

        stored = record_store.profiles[account.uid]
        assert stored.provider is AccountProvider.FIREBASE
        assert stored.email == "alice@example.com"
        assert stored.password_hash != "Secret123"
        assert await hasher.verify("Secret123", stored.password_hash)

    @pytest.mark.asyncio
    async def test_without_provider_uses_local_id(
        self, router: BackendRouter, record_store: InMemoryProfileStore, hasher: PasswordHasher
    ):
        service = RegistrationService(router, FakeIdentityProvider(initialized=False), hasher)

        result = await service.register("bob", "pw", "pw")

        assert is_local_id(result.uid)
        assert result.provider is AccountProvider.LOCAL
        assert record_store.profiles[result.uid].provider is AccountProvider.LOCAL

    @pytest.mark.asyncio
    async def test_provider_failure_is_not_fatal(
        self,
        service: RegistrationService,
        identity: FakeIdentityProvider,
        record_store: InMemoryProfileStore,
    ):
        identity.fail_with["create_account"] = BackendError("quota", backend="identity-provider")

        result = await service.register("carol", "pw", "pw")

        assert is_local_id(result.uid)
        assert result.uid in record_store.profiles

    @pytest.mark.asyncio
    async def test_uses_document_store_when_record_store_down(
        self,
        service: RegistrationService,
        probe: StaticProbe,
        record_store: InMemoryProfileStore,
        document_store: InMemoryProfileStore,
    ):
        probe.set(record_store=False)

        result = await service.register("dave", "pw", "pw")

        assert result.uid in document_store.profiles
        assert record_store.profiles == {}

    @pytest.mark.asyncio
    async def test_store_write_failure_after_provider_is_auth_only(
        self,
        service: RegistrationService,
        record_store: InMemoryProfileStore,
    ):
        record_store.fail_with["create"] = BackendError("disk full", backend="record-store")

        result = await service.register("erin", "pw", "pw")

        assert result.store_error == "disk full"
        assert result.degraded
        assert not result.server_fallback

    @pytest.mark.asyncio
    async def test_store_write_failure_without_account_is_backend_error(
        self, router: BackendRouter, record_store: InMemoryProfileStore, hasher: PasswordHasher
    ):
        record_store.fail_with["create"] = BackendError("disk full", backend="record-store")
        service = RegistrationService(router, FakeIdentityProvider(initialized=False), hasher)

        with pytest.raises(BackendError) as exc_info:
            await service.register("frank", "pw", "pw")

        assert exc_info.value.status_code == 500
        assert exc_info.value.details["firestoreError"] == "disk full"

    @pytest.mark.asyncio
    async def test_no_store_with_account_is_server_fallback(
        self, service: RegistrationService, probe: StaticProbe
    ):
        probe.set(record_store=False, document_store=False)

        result = await service.register("gina", "pw", "pw")

        assert result.server_fallback
        assert not is_local_id(result.uid)

    @pytest.mark.asyncio
    async def test_nothing_available_fails(self, hasher: PasswordHasher):
        probe = StaticProbe(identity_provider=False, document_store=False, record_store=False)
        identity = FakeIdentityProvider(initialized=False)
        router = BackendRouter(probe, InMemoryProfileStore(), None, identity)
        service = RegistrationService(router, identity, hasher)

        with pytest.raises(BackendError, match="no persistence available"):
            await service.register("hank", "pw", "pw")

    @pytest.mark.asyncio
    async def test_duplicate_usernames_are_not_rejected(
        self, router: BackendRouter, record_store: InMemoryProfileStore, hasher: PasswordHasher
    ):
        service = RegistrationService(router, FakeIdentityProvider(initialized=False), hasher)

        first = await service.register("ivy", "pw", "pw")
        second = await service.register("ivy", "pw", "pw")

        assert first.uid != second.uid
        assert len(record_store.profiles) == 2
