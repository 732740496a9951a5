"""Dict-backed document store for local runs and tests."""

from __future__ import annotations

from typing import Any

from instrukt_ai_logging import get_logger

from bandsync_notifications.models import Address, Chat, Group, UserProfile, short_token

logger = get_logger(__name__)


class InMemoryStore:
    """Holds raw documents in the same shape the mobile client writes them.

    Documents are keyed by collection then id: ``chats`` carry
    ``participants``, ``groups`` carry ``members`` and ``users`` carry
    ``fcmTokens`` (list of ``{"token": ...}``) and the legacy ``fcmToken``.
    """

    def __init__(self, documents: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self.documents: dict[str, dict[str, dict[str, Any]]] = {"chats": {}, "groups": {}, "users": {}}
        for collection, docs in (documents or {}).items():
            self.documents.setdefault(collection, {}).update(docs)
        self.write_count = 0

    def put(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self.documents.setdefault(collection, {})[doc_id] = data

    async def get_chat(self, chat_id: str) -> Chat | None:
        doc = self.documents["chats"].get(chat_id)
        if doc is None:
            return None
        return Chat(chat_id=chat_id, participant_user_ids=list(doc.get("participants") or []))

    async def get_group(self, group_id: str) -> Group | None:
        doc = self.documents["groups"].get(group_id)
        if doc is None:
            return None
        return Group(group_id=group_id, member_user_ids=list(doc.get("members") or []))

    async def get_user_profile(self, user_id: str) -> UserProfile | None:
        doc = self.documents["users"].get(user_id)
        if doc is None:
            return None
        return profile_from_document(user_id, doc)

    async def remove_address(self, user_id: str, token: str) -> None:
        doc = self.documents["users"].get(user_id)
        if doc is None:
            return
        entries = doc.get("fcmTokens") or []
        kept = [entry for entry in entries if not (isinstance(entry, dict) and entry.get("token") == token)]
        changed = False
        if len(kept) != len(entries):
            doc["fcmTokens"] = kept
            changed = True
        if doc.get("fcmToken") == token:
            del doc["fcmToken"]
            changed = True
        if changed:
            self.write_count += 1
            logger.debug("memory store removed token", user_id=user_id, token=short_token(token))


def profile_from_document(user_id: str, doc: dict[str, Any]) -> UserProfile:
    """Map a raw user document to a profile, skipping malformed token entries."""
    addresses = []
    for entry in doc.get("fcmTokens") or []:
        token = entry.get("token") if isinstance(entry, dict) else None
        if token:
            addresses.append(Address(token=token))
    legacy = doc.get("fcmToken") or None
    return UserProfile(user_id=user_id, registered_addresses=addresses, legacy_token=legacy)
