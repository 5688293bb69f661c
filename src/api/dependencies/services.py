"""Dependency injection factories for the API.

Long-lived collaborators (engine, connection monitor, Firebase handles,
history buffer) are process singletons behind ``lru_cache``; tests swap
them, or the services built on them, through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncEngine

from core.config import is_plausible_web_key, settings
from domain.services.backend_policy import BackendRouter
from domain.services.history_service import HistoryService
from domain.services.login_service import LoginService
from domain.services.profile_service import ProfileService
from domain.services.registration_service import RegistrationService
from infrastructure.auth.firebase_provider import FirebaseIdentityProvider
from infrastructure.auth.password_grant import IdentityToolkitClient
from infrastructure.auth.passwords import PasswordHasher
from infrastructure.availability import BackendProbe
from infrastructure.database.connectivity import ConnectionMonitor
from infrastructure.database.record_store import RecordHistoryStore, RecordProfileStore
from infrastructure.database.session import create_engine, create_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.documents.firestore_profile_store import FirestoreProfileStore
from infrastructure.firebase import FirebaseHandles, init_firebase
from infrastructure.memory.history_buffer import DegradedBuffer


@lru_cache
def get_engine() -> AsyncEngine:
    """Get the record-store engine."""
    return create_engine(settings)


@lru_cache
def get_connection_monitor() -> ConnectionMonitor:
    """Get the record-store connection monitor."""
    return ConnectionMonitor(get_engine(), retry_seconds=settings.db_connect_retry_seconds)


@lru_cache
def get_firebase() -> FirebaseHandles:
    """Get the Firebase handles initialised at startup."""
    return init_firebase(settings)


@lru_cache
def get_history_buffer() -> DegradedBuffer:
    """Get the process-wide degraded history buffer."""
    return DegradedBuffer()


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""
    session_factory = create_session_factory(get_engine())

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@lru_cache
def get_identity_provider() -> FirebaseIdentityProvider:
    """Get the identity provider adapter."""
    return FirebaseIdentityProvider(get_firebase().app, list_limit=settings.provider_list_limit)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Get the password hasher."""
    return PasswordHasher(rounds=settings.password_hash_rounds)


def get_password_grant() -> IdentityToolkitClient | None:
    """Get the delegated password check, or None without a usable web key."""
    if not is_plausible_web_key(settings.firebase_api_key):
        return None
    return IdentityToolkitClient(
        settings.firebase_api_key,
        base_url=settings.identity_toolkit_url,
        timeout=settings.provider_http_timeout_seconds,
    )


@lru_cache
def get_backend_router() -> BackendRouter:
    """Get the backend router shared by all profile operations."""
    firebase = get_firebase()
    monitor = get_connection_monitor()
    document_store = (
        FirestoreProfileStore(firebase.firestore, settings.users_collection)
        if firebase.document_store_initialized
        else None
    )
    return BackendRouter(
        probe=BackendProbe(
            monitor,
            identity_provider=firebase.identity_initialized,
            document_store=firebase.document_store_initialized,
        ),
        record_store=RecordProfileStore(get_uow_factory(), monitor),
        document_store=document_store,
        identity_provider=get_identity_provider(),
    )


@lru_cache
def get_registration_service() -> RegistrationService:
    """Get Registration service instance."""
    return RegistrationService(
        get_backend_router(),
        get_identity_provider(),
        get_password_hasher(),
        email_domain=settings.derived_email_domain,
    )


@lru_cache
def get_login_service() -> LoginService:
    """Get Login service instance."""
    return LoginService(
        get_backend_router(),
        get_identity_provider(),
        get_password_hasher(),
        password_grant=get_password_grant(),
        email_domain=settings.derived_email_domain,
        allow_unverified_provider_login=settings.allow_unverified_provider_login,
    )


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(get_backend_router(), get_identity_provider(), get_password_hasher())


@lru_cache
def get_history_service() -> HistoryService:
    """Get History service instance."""
    monitor = get_connection_monitor()
    return HistoryService(
        monitor,
        RecordHistoryStore(get_uow_factory(), monitor),
        get_history_buffer(),
    )


def clear_dependency_caches() -> None:
    """Drop every cached singleton so the next startup builds fresh ones."""
    for getter in (
        get_engine,
        get_connection_monitor,
        get_firebase,
        get_history_buffer,
        get_identity_provider,
        get_password_hasher,
        get_backend_router,
        get_registration_service,
        get_login_service,
        get_profile_service,
        get_history_service,
    ):
        getter.cache_clear()
