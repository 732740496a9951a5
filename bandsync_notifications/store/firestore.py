"""Firestore REST adapter for the document store contract."""

from __future__ import annotations

from typing import Any

import httpx
from instrukt_ai_logging import get_logger

from bandsync_notifications.models import Chat, Group, UserProfile, short_token
from bandsync_notifications.store.base import StoreError
from bandsync_notifications.store.memory import profile_from_document

logger = get_logger(__name__)

FIRESTORE_BASE_URL = "https://firestore.googleapis.com/v1"


def decode_value(value: dict[str, Any]) -> Any:
    """Decode one Firestore typed value into plain Python."""
    if "stringValue" in value:
        return value["stringValue"]
    if "booleanValue" in value:
        return value["booleanValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "timestampValue" in value:
        return value["timestampValue"]
    if "nullValue" in value:
        return None
    if "arrayValue" in value:
        return [decode_value(item) for item in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "referenceValue" in value:
        return value["referenceValue"]
    return None


def decode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: decode_value(raw) for key, raw in fields.items()}


class FirestoreStore:
    """Reads chats, groups and user profiles from Firestore over REST.

    The mobile client keeps chats in the Realtime Database; when
    ``realtime_database_url`` is set, chat lookups go there instead of the
    ``chats`` collection.
    """

    def __init__(
        self,
        project_id: str,
        client: httpx.AsyncClient,
        *,
        database: str = "(default)",
        realtime_database_url: str | None = None,
        access_token: str | None = None,
        chats_collection: str = "chats",
        groups_collection: str = "groups",
        users_collection: str = "users",
    ) -> None:
        self._client = client
        self._documents_path = f"projects/{project_id}/databases/{database}/documents"
        self._rtdb_url = realtime_database_url.rstrip("/") if realtime_database_url else None
        self._access_token = access_token
        self._chats = chats_collection
        self._groups = groups_collection
        self._users = users_collection

    def _headers(self) -> dict[str, str]:
        if not self._access_token:
            return {}
        return {"Authorization": f"Bearer {self._access_token}"}

    async def _get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        url = f"{FIRESTORE_BASE_URL}/{self._documents_path}/{collection}/{doc_id}"
        try:
            response = await self._client.get(url, headers=self._headers())
        except httpx.HTTPError as exc:
            raise StoreError(f"Firestore read failed for {collection}/{doc_id}: {exc}") from exc
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise StoreError(f"Firestore read failed for {collection}/{doc_id} (HTTP {response.status_code})")
        return response.json()

    async def get_chat(self, chat_id: str) -> Chat | None:
        if self._rtdb_url:
            data = await self._get_realtime(self._rtdb_url, f"chats/{chat_id}")
        else:
            doc = await self._get_document(self._chats, chat_id)
            data = decode_fields(doc.get("fields", {})) if doc is not None else None
        if not isinstance(data, dict):
            return None
        return Chat(chat_id=chat_id, participant_user_ids=_as_id_list(data.get("participants")))

    async def get_group(self, group_id: str) -> Group | None:
        doc = await self._get_document(self._groups, group_id)
        if doc is None:
            return None
        data = decode_fields(doc.get("fields", {}))
        return Group(group_id=group_id, member_user_ids=_as_id_list(data.get("members")))

    async def get_user_profile(self, user_id: str) -> UserProfile | None:
        doc = await self._get_document(self._users, user_id)
        if doc is None:
            return None
        return profile_from_document(user_id, decode_fields(doc.get("fields", {})))

    async def remove_address(self, user_id: str, token: str) -> None:
        doc = await self._get_document(self._users, user_id)
        if doc is None:
            return
        fields = doc.get("fields", {})
        name = doc["name"]

        # removeAllFromArray matches whole elements, so send back the stored
        # entries for this token verbatim, extra device fields included.
        stale_entries = [
            raw
            for raw in fields.get("fcmTokens", {}).get("arrayValue", {}).get("values", [])
            if "mapValue" in raw and decode_value(raw).get("token") == token
        ]
        writes: list[dict[str, Any]] = []
        if stale_entries:
            writes.append(
                {
                    "transform": {
                        "document": name,
                        "fieldTransforms": [
                            {"fieldPath": "fcmTokens", "removeAllFromArray": {"values": stale_entries}},
                        ],
                    }
                }
            )
        if fields.get("fcmToken", {}).get("stringValue") == token:
            # Masked update with the field absent from the body deletes it.
            writes.append(
                {
                    "update": {"name": name, "fields": {}},
                    "updateMask": {"fieldPaths": ["fcmToken"]},
                    "currentDocument": {"exists": True},
                }
            )
        if not writes:
            return

        url = f"{FIRESTORE_BASE_URL}/{self._documents_path}:commit"
        try:
            response = await self._client.post(url, json={"writes": writes}, headers=self._headers())
        except httpx.HTTPError as exc:
            raise StoreError(f"Firestore commit failed for user {user_id}: {exc}") from exc
        if response.status_code >= 400:
            raise StoreError(f"Firestore commit failed for user {user_id} (HTTP {response.status_code})")
        logger.info("removed push token", user_id=user_id, token=short_token(token), writes=len(writes))

    async def _get_realtime(self, base_url: str, path: str) -> Any:
        params = {"access_token": self._access_token} if self._access_token else None
        try:
            response = await self._client.get(f"{base_url}/{path}.json", params=params)
        except httpx.HTTPError as exc:
            raise StoreError(f"Realtime Database read failed for {path}: {exc}") from exc
        if response.status_code >= 400:
            raise StoreError(f"Realtime Database read failed for {path} (HTTP {response.status_code})")
        return response.json()


def _as_id_list(value: Any) -> list[str]:
    # The Realtime Database returns arrays with gaps as index-keyed objects.
    if isinstance(value, dict):
        value = list(value.values())
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item]
