"""Shared fixtures for unit tests."""

import pytest

from domain.services.backend_policy import BackendRouter
from tests.fakes import FakeIdentityProvider, InMemoryProfileStore, StaticProbe


@pytest.fixture
def probe() -> StaticProbe:
    """Every backend available; tests switch them off as needed."""
    return StaticProbe()


@pytest.fixture
def record_store() -> InMemoryProfileStore:
    """In-memory stand-in for the record-store."""
    return InMemoryProfileStore()


@pytest.fixture
def router(
    probe: StaticProbe,
    record_store: InMemoryProfileStore,
    document_store: InMemoryProfileStore,
    identity: FakeIdentityProvider,
) -> BackendRouter:
    return BackendRouter(
        probe=probe,
        record_store=record_store,
        document_store=document_store,
        identity_provider=identity,
    )
