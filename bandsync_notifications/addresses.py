"""Address book lookup — push tokens registered for a user."""

from __future__ import annotations

from instrukt_ai_logging import get_logger

from bandsync_notifications.models import Address, UserProfile
from bandsync_notifications.store.base import DocumentStore

logger = get_logger(__name__)


def merge_addresses(profile: UserProfile) -> list[Address]:
    """Merge the address list with the legacy single token, deduplicated by token.

    Keeps the order of the list, then appends the legacy token if it is new.
    """
    seen: set[str] = set()
    merged: list[Address] = []
    for address in profile.registered_addresses:
        if address.token and address.token not in seen:
            seen.add(address.token)
            merged.append(address)
    if profile.legacy_token and profile.legacy_token not in seen:
        merged.append(Address(token=profile.legacy_token))
    return merged


class AddressBook:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def addresses_for(self, user_id: str) -> list[Address]:
        profile = await self._store.get_user_profile(user_id)
        if profile is None:
            logger.info("user profile not found", user_id=user_id)
            return []
        addresses = merge_addresses(profile)
        if not addresses:
            logger.info("no push tokens for user", user_id=user_id)
        return addresses
