"""Read/write contract the pipeline needs from the document database."""

from __future__ import annotations

from typing import Protocol

from bandsync_notifications.models import Chat, Group, UserProfile


class StoreError(Exception):
    """A document store request failed."""


class DocumentStore(Protocol):
    async def get_chat(self, chat_id: str) -> Chat | None: ...

    async def get_group(self, group_id: str) -> Group | None: ...

    async def get_user_profile(self, user_id: str) -> UserProfile | None: ...

    async def remove_address(self, user_id: str, token: str) -> None:
        """Remove ``token`` from the user's address fields, leaving the rest of the profile untouched.

        Removing a token that is not present is a no-op.
        """
        ...
