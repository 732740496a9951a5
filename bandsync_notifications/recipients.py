"""Recipient resolution — who should hear about a domain event."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from instrukt_ai_logging import get_logger

from bandsync_notifications.events import CalendarEventCreated, DomainEvent, MessageCreated, TaskCreated
from bandsync_notifications.store.base import DocumentStore

if TYPE_CHECKING:
    from bandsync_notifications.strategies import StrategyCatalog

logger = get_logger(__name__)


def exclude_actor(user_ids: Iterable[str], actor_id: str) -> set[str]:
    return {user_id for user_id in user_ids if user_id and user_id != actor_id}


async def message_recipients(event: MessageCreated, store: DocumentStore) -> set[str]:
    chat = await store.get_chat(event.chat_id)
    if chat is None:
        logger.info("chat not found; no recipients", chat_id=event.chat_id, message_id=event.message_id)
        return set()
    return exclude_actor(chat.participant_user_ids, event.sender_id)


async def task_recipients(event: TaskCreated, store: DocumentStore) -> set[str]:
    return exclude_actor(event.assigned_user_ids, event.created_by_user_id)


async def calendar_event_recipients(event: CalendarEventCreated, store: DocumentStore) -> set[str]:
    if event.is_personal:
        logger.info("personal event; skipping notification", event_id=event.event_id)
        return set()
    if not event.group_id:
        logger.info("event has no group; no recipients", event_id=event.event_id)
        return set()
    group = await store.get_group(event.group_id)
    if group is None:
        logger.info("group not found; no recipients", group_id=event.group_id, event_id=event.event_id)
        return set()
    return exclude_actor(group.member_user_ids, event.created_by_user_id)


class RecipientResolver:
    """Resolves the audience of an event through its kind's strategy."""

    def __init__(self, store: DocumentStore, catalog: "StrategyCatalog | None" = None) -> None:
        if catalog is None:
            from bandsync_notifications.strategies import build_default_catalog

            catalog = build_default_catalog()
        self._store = store
        self._catalog = catalog

    async def resolve(self, event: DomainEvent) -> set[str]:
        recipients = await self._catalog.for_event(event).resolve_recipients(event, self._store)
        # The actor is never a recipient, whatever the strategy returns.
        recipients.discard(event.actor_id)
        return recipients
