"""Cloud Firestore implementation of the profile store."""

import logging
from typing import Any

from google.cloud.firestore_v1.base_query import FieldFilter

from domain.entities.profile import AccountProvider, UserProfile
from infrastructure.errors import document_store_errors

logger = logging.getLogger(__name__)

# Entity attribute -> document field
_FIELDS = {
    "username": "username",
    "email": "email",
    "provider": "provider",
    "password_hash": "passwordHash",
    "profile_description": "profileDescription",
    "settings": "settings",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


class FirestoreProfileStore:
    """IProfileStore over one Firestore collection, keyed by profile id."""

    def __init__(self, client: Any, collection: str = "users") -> None:
        self._collection = client.collection(collection)

    async def get(self, profile_id: str) -> UserProfile | None:
        with document_store_errors():
            snapshot = await self._collection.document(profile_id).get()
        return self._to_entity(snapshot.id, snapshot.to_dict()) if snapshot.exists else None

    async def list_all(self) -> list[UserProfile]:
        with document_store_errors():
            return [
                self._to_entity(snapshot.id, snapshot.to_dict())
                async for snapshot in self._collection.stream()
            ]

    async def list_by_provider(self, provider: str) -> list[UserProfile]:
        query = self._collection.where(filter=FieldFilter("provider", "==", provider))
        with document_store_errors():
            return [
                self._to_entity(snapshot.id, snapshot.to_dict())
                async for snapshot in query.stream()
            ]

    async def find_by_username(self, username: str) -> UserProfile | None:
        query = self._collection.where(filter=FieldFilter("username", "==", username)).limit(1)
        with document_store_errors():
            snapshots = await query.get()
        if not snapshots:
            return None
        return self._to_entity(snapshots[0].id, snapshots[0].to_dict())

    async def create(self, profile: UserProfile) -> UserProfile:
        with document_store_errors():
            await self._collection.document(profile.id).set(self._to_document(profile))
        logger.debug("Stored profile document %s", profile.id)
        return profile

    async def update(self, profile_id: str, fields: dict[str, Any]) -> UserProfile | None:
        ref = self._collection.document(profile_id)
        changes = {_FIELDS[name]: value for name, value in fields.items() if name in _FIELDS}
        with document_store_errors():
            snapshot = await ref.get()
            if not snapshot.exists:
                return None
            await ref.set(changes, merge=True)
            snapshot = await ref.get()
        return self._to_entity(snapshot.id, snapshot.to_dict())

    async def delete(self, profile_id: str) -> bool:
        ref = self._collection.document(profile_id)
        with document_store_errors():
            snapshot = await ref.get()
            if not snapshot.exists:
                return False
            await ref.delete()
        return True

    @staticmethod
    def _to_document(profile: UserProfile) -> dict[str, Any]:
        document = {
            _FIELDS[name]: getattr(profile, name)
            for name in _FIELDS
            if getattr(profile, name) is not None
        }
        document["provider"] = profile.provider.value
        return document

    @staticmethod
    def _to_entity(doc_id: str, data: dict[str, Any] | None) -> UserProfile:
        data = data or {}
        return UserProfile(
            id=doc_id,
            username=data.get("username") or "",
            email=data.get("email") or "",
            provider=AccountProvider.from_stored(data.get("provider")),
            password_hash=data.get("passwordHash"),
            profile_description=data.get("profileDescription"),
            settings=data.get("settings"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )
