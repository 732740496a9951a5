"""Tests for recipient resolution."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from bandsync_notifications.events import CalendarEventCreated, MessageCreated, TaskCreated
from bandsync_notifications.recipients import RecipientResolver
from bandsync_notifications.store.memory import InMemoryStore


def _message(sender: str = "u1", chat_id: str = "c1") -> MessageCreated:
    return MessageCreated(chat_id=chat_id, message_id="m1", sender_id=sender)


@pytest.mark.asyncio
async def test_message_recipients_are_participants_minus_sender(store: InMemoryStore) -> None:
    resolver = RecipientResolver(store)
    assert await resolver.resolve(_message("u1")) == {"u2", "u3"}


@pytest.mark.asyncio
@pytest.mark.parametrize("participants", [[], ["u1"], ["u1", "u2"], [f"u{i}" for i in range(50)]])
async def test_message_recipients_for_any_participant_count(participants: list[str]) -> None:
    store = InMemoryStore({"chats": {"c9": {"participants": participants}}})
    resolver = RecipientResolver(store)

    result = await resolver.resolve(_message("u1", chat_id="c9"))

    assert result == set(participants) - {"u1"}


@pytest.mark.asyncio
async def test_missing_chat_yields_no_recipients(store: InMemoryStore) -> None:
    resolver = RecipientResolver(store)
    assert await resolver.resolve(_message(chat_id="missing")) == set()


@pytest.mark.asyncio
async def test_task_recipients_exclude_creator(store: InMemoryStore) -> None:
    resolver = RecipientResolver(store)
    event = TaskCreated(task_id="t1", assigned_user_ids=["u5", "u6"], created_by_user_id="u5")
    assert await resolver.resolve(event) == {"u6"}


@pytest.mark.asyncio
async def test_task_with_only_creator_assigned_has_no_recipients(store: InMemoryStore) -> None:
    resolver = RecipientResolver(store)
    event = TaskCreated(task_id="t1", assigned_user_ids=["u5"], created_by_user_id="u5")
    assert await resolver.resolve(event) == set()


@pytest.mark.asyncio
async def test_group_event_recipients_exclude_creator(store: InMemoryStore) -> None:
    resolver = RecipientResolver(store)
    event = CalendarEventCreated(event_id="e1", group_id="g1", created_by_user_id="u2")
    assert await resolver.resolve(event) == {"u1", "u4"}


@pytest.mark.asyncio
async def test_personal_event_has_no_recipients_and_skips_group_read() -> None:
    store = AsyncMock()
    resolver = RecipientResolver(store)
    event = CalendarEventCreated(event_id="e1", group_id="g1", created_by_user_id="u2", is_personal=True)
    assert await resolver.resolve(event) == set()
    store.get_group.assert_not_awaited()


@pytest.mark.asyncio
async def test_event_without_group_or_missing_group_has_no_recipients(store: InMemoryStore) -> None:
    resolver = RecipientResolver(store)
    no_group = CalendarEventCreated(event_id="e1", created_by_user_id="u2")
    missing = CalendarEventCreated(event_id="e2", group_id="nope", created_by_user_id="u2")
    assert await resolver.resolve(no_group) == set()
    assert await resolver.resolve(missing) == set()
