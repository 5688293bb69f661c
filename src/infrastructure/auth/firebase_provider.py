"""Firebase Authentication adapter.

Creates, looks up, updates and deletes provider accounts and mints custom
tokens. The Admin SDK is synchronous, so every call runs in a worker
thread.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import firebase_admin
from firebase_admin import auth

from domain.entities.profile import IdentityAccount
from infrastructure.errors import identity_errors

logger = logging.getLogger(__name__)


class FirebaseIdentityProvider:
    """IIdentityProvider backed by the Firebase Admin SDK.

    Constructed with ``app=None`` when the SDK did not come up; callers
    check ``initialized`` before using it.
    """

    def __init__(self, app: firebase_admin.App | None, list_limit: int = 1000) -> None:
        self._app = app
        self._list_limit = list_limit

    @property
    def initialized(self) -> bool:
        return self._app is not None

    async def create_account(
        self, email: str, password: str, display_name: str
    ) -> IdentityAccount:
        with identity_errors():
            record = await asyncio.to_thread(
                auth.create_user,
                email=email,
                password=password,
                display_name=display_name,
                app=self._app,
            )
        logger.info("Created Firebase account %s", record.uid)
        return self._to_account(record)

    async def get_account(self, uid: str) -> Optional[IdentityAccount]:
        with identity_errors(uid):
            try:
                record = await asyncio.to_thread(auth.get_user, uid, app=self._app)
            except auth.UserNotFoundError:
                return None
        return self._to_account(record)

    async def get_account_by_email(self, email: str) -> Optional[IdentityAccount]:
        with identity_errors():
            try:
                record = await asyncio.to_thread(auth.get_user_by_email, email, app=self._app)
            except auth.UserNotFoundError:
                return None
        return self._to_account(record)

    async def list_accounts(self) -> list[IdentityAccount]:
        with identity_errors():
            page = await asyncio.to_thread(
                auth.list_users, max_results=self._list_limit, app=self._app
            )
        return [self._to_account(record) for record in page.users]

    async def update_account(
        self,
        uid: str,
        password: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> None:
        changes: dict[str, Any] = {}
        if password is not None:
            changes["password"] = password
        if display_name is not None:
            changes["display_name"] = display_name
        if not changes:
            return
        with identity_errors(uid):
            await asyncio.to_thread(auth.update_user, uid, app=self._app, **changes)

    async def delete_account(self, uid: str) -> bool:
        with identity_errors(uid):
            try:
                await asyncio.to_thread(auth.delete_user, uid, app=self._app)
            except auth.UserNotFoundError:
                logger.info("Firebase account %s not found on delete", uid)
                return False
        return True

    async def create_custom_token(self, uid: str) -> str:
        with identity_errors(uid):
            token = await asyncio.to_thread(auth.create_custom_token, uid, app=self._app)
        return token.decode() if isinstance(token, bytes) else str(token)

    @staticmethod
    def _to_account(record: Any) -> IdentityAccount:
        created_at = None
        metadata = getattr(record, "user_metadata", None)
        if metadata is not None and metadata.creation_timestamp:
            created_at = datetime.fromtimestamp(metadata.creation_timestamp / 1000, tz=timezone.utc)
        return IdentityAccount(
            uid=record.uid,
            email=record.email,
            display_name=record.display_name,
            created_at=created_at,
        )
