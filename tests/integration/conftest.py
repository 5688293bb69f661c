"""Fixtures wiring the app to the SQLite record-store and fake Firebase."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from api.dependencies.services import (
    get_connection_monitor,
    get_firebase,
    get_history_service,
    get_login_service,
    get_profile_service,
    get_registration_service,
)
from domain.services.backend_policy import BackendRouter
from domain.services.history_service import HistoryService
from domain.services.login_service import LoginService
from domain.services.profile_service import ProfileService
from domain.services.registration_service import RegistrationService
from infrastructure.auth.passwords import PasswordHasher
from infrastructure.availability import BackendProbe
from infrastructure.database.connectivity import ConnectionMonitor
from infrastructure.database.record_store import RecordHistoryStore, RecordProfileStore
from infrastructure.firebase import FirebaseHandles
from infrastructure.memory.history_buffer import DegradedBuffer
from tests.fakes import FakeConnectivity, FakeIdentityProvider, FakePasswordGrant


@pytest.fixture
def connectivity() -> FakeConnectivity:
    """Record-store connectivity as seen by the history service."""
    return FakeConnectivity(connected=True)


@pytest.fixture
def password_grant(identity: FakeIdentityProvider) -> FakePasswordGrant:
    return FakePasswordGrant(identity)


@pytest.fixture
def router(
    monitor: ConnectionMonitor,
    record_profiles: RecordProfileStore,
    identity: FakeIdentityProvider,
) -> BackendRouter:
    """Record-store plus identity provider; no document-store."""
    return BackendRouter(
        probe=BackendProbe(monitor, identity_provider=True, document_store=False),
        record_store=record_profiles,
        document_store=None,
        identity_provider=identity,
    )


@pytest.fixture
async def api_client(
    router: BackendRouter,
    monitor: ConnectionMonitor,
    identity: FakeIdentityProvider,
    password_grant: FakePasswordGrant,
    hasher: PasswordHasher,
    connectivity: FakeConnectivity,
    record_history: RecordHistoryStore,
    history_buffer: DegradedBuffer,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create test client with services built on the test backends.

    The lifespan does not run under ASGITransport, so no background
    connect loop or Firebase initialisation happens here.
    """
    from main import create_app

    app = create_app()

    registration = RegistrationService(router, identity, hasher)
    login = LoginService(router, identity, hasher, password_grant=password_grant)
    profiles = ProfileService(router, identity, hasher)
    history = HistoryService(connectivity, record_history, history_buffer)

    app.dependency_overrides[get_registration_service] = lambda: registration
    app.dependency_overrides[get_login_service] = lambda: login
    app.dependency_overrides[get_profile_service] = lambda: profiles
    app.dependency_overrides[get_history_service] = lambda: history
    app.dependency_overrides[get_connection_monitor] = lambda: monitor
    app.dependency_overrides[get_firebase] = lambda: FirebaseHandles()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
