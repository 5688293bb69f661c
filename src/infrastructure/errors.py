"""Translation of backend SDK errors into application exceptions.

Each backend gets a context manager that wraps its calls, so raw driver
exceptions never cross into the domain layer.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

import httpx
from firebase_admin import auth, exceptions as firebase_exceptions
from google.api_core import exceptions as gcp_exceptions
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError

from core.exceptions import (
    AppException,
    BackendError,
    ServiceUnavailableError,
    UserNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

RECORD_STORE = "record-store"
DOCUMENT_STORE = "document-store"
IDENTITY_PROVIDER = "identity-provider"


class IDisconnectable(Protocol):
    """Anything that should hear about a dropped record-store connection."""

    def mark_disconnected(self, reason: str) -> None:
        ...


def is_connection_error(exc: BaseException) -> bool:
    """Whether an error means the database connection itself is gone."""
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, (OSError, ConnectionError))


@contextmanager
def record_store_errors(monitor: IDisconnectable | None = None) -> Iterator[None]:
    """Wrap record-store calls.

    Connection-level failures flip the monitor to disconnected before the
    error propagates, so the caller's own connectivity check sees it.
    """
    try:
        yield
    except AppException:
        raise
    except (SQLAlchemyError, OSError) as e:
        if is_connection_error(e):
            logger.warning("Record-store connection lost: %s", e)
            if monitor is not None:
                monitor.mark_disconnected(str(e))
        raise BackendError(str(e), backend=RECORD_STORE) from e


@contextmanager
def document_store_errors() -> Iterator[None]:
    """Wrap Firestore calls.

    Missing or inaccessible databases are a deployment problem and map to
    503; anything else the store rejects is a 500.
    """
    try:
        yield
    except AppException:
        raise
    except (gcp_exceptions.NotFound, gcp_exceptions.PermissionDenied) as e:
        raise ServiceUnavailableError(
            "Document-store not found or inaccessible",
            details={"backend": DOCUMENT_STORE, "cause": str(e)},
        ) from e
    except gcp_exceptions.GoogleAPIError as e:
        raise BackendError(str(e), backend=DOCUMENT_STORE) from e


@contextmanager
def identity_errors(uid: str | None = None) -> Iterator[None]:
    """Wrap Firebase Admin auth calls."""
    try:
        yield
    except AppException:
        raise
    except auth.UserNotFoundError as e:
        raise UserNotFoundError(uid or "") from e
    except ValueError as e:
        # firebase_admin validates arguments locally and raises ValueError
        raise ValidationError(str(e)) from e
    except firebase_exceptions.FirebaseError as e:
        raise BackendError(str(e), backend=IDENTITY_PROVIDER) from e


@contextmanager
def provider_http_errors() -> Iterator[None]:
    """Wrap transport failures talking to the provider's REST endpoints."""
    try:
        yield
    except AppException:
        raise
    except httpx.HTTPError as e:
        raise BackendError(
            f"Identity provider request failed: {e}", backend=IDENTITY_PROVIDER
        ) from e
