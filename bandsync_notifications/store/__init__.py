"""Document store collaborators — chats, groups and user profiles."""

from bandsync_notifications.store.base import DocumentStore, StoreError
from bandsync_notifications.store.memory import InMemoryStore

__all__ = ["DocumentStore", "StoreError", "InMemoryStore"]
