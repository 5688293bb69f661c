"""Firebase Admin SDK initialisation."""

import json
import logging
from dataclasses import dataclass
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore_async

from core.config import Settings

logger = logging.getLogger(__name__)

APP_NAME = "pilosopo"


@dataclass
class FirebaseHandles:
    """What came up at startup. Either handle may be missing."""

    app: firebase_admin.App | None = None
    firestore: Any | None = None

    @property
    def identity_initialized(self) -> bool:
        return self.app is not None

    @property
    def document_store_initialized(self) -> bool:
        return self.firestore is not None


def _load_credential(settings: Settings) -> credentials.Certificate | None:
    """Inline service account JSON wins over the credentials file."""
    if settings.google_service_key:
        try:
            return credentials.Certificate(json.loads(settings.google_service_key))
        except (ValueError, KeyError) as e:
            logger.error("Failed to parse GOOGLE_SERVICE_KEY: %s", e)

    if settings.firebase_credentials_path:
        try:
            return credentials.Certificate(settings.firebase_credentials_path)
        except (OSError, ValueError) as e:
            logger.error(
                "Failed to load service account from %s: %s",
                settings.firebase_credentials_path,
                e,
            )
    return None


def init_firebase(settings: Settings) -> FirebaseHandles:
    """Initialise the Admin SDK and the Firestore client.

    Failures are logged and leave the corresponding handle empty; the
    process keeps running with whatever backends remain.
    """
    if APP_NAME in firebase_admin._apps:
        app = firebase_admin.get_app(APP_NAME)
    else:
        cred = _load_credential(settings)
        if cred is None:
            logger.warning("No Firebase service account configured; Admin SDK disabled")
            return FirebaseHandles()
        options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else {}
        try:
            app = firebase_admin.initialize_app(cred, options, name=APP_NAME)
        except ValueError as e:
            logger.error("Firebase Admin SDK initialisation failed: %s", e)
            return FirebaseHandles()
        logger.info("Firebase Admin SDK initialized (project=%s)", app.project_id)

    try:
        client = firestore_async.client(app)
    except (ValueError, OSError) as e:
        logger.error("Firestore client initialisation failed: %s", e)
        client = None

    return FirebaseHandles(app=app, firestore=client)


def shutdown_firebase(handles: FirebaseHandles) -> None:
    """Release the named app so a later startup can initialise it again."""
    if handles.app is not None:
        firebase_admin.delete_app(handles.app)
