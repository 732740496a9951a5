"""Tests for the notification pipeline."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from bandsync_notifications.events import CalendarEventCreated, MessageCreated, TaskCreated
from bandsync_notifications.models import Chat, OutcomeStatus
from bandsync_notifications.pipeline import NotificationPipeline, PipelineStage
from bandsync_notifications.store.memory import InMemoryStore
from bandsync_notifications.strategies import StrategyCatalog, TaskStrategy


def _pipeline(store, gateway) -> NotificationPipeline:  # type: ignore[no-untyped-def]
    return NotificationPipeline(store, gateway, clock=lambda: 1.0)


@pytest.mark.asyncio
async def test_message_reaches_every_other_participant(store: InMemoryStore, gateway) -> None:
    event = MessageCreated(chat_id="c1", message_id="m1", sender_id="u1", sender_name="Alex", content="hi")

    result = await _pipeline(store, gateway).run(event)

    assert result.stage is PipelineStage.DONE
    assert result.recipients == {"u2", "u3"}
    assert sorted(gateway.sent_tokens) == ["tok-u2a", "tok-u2b", "tok-u3"]
    assert {payload.title for _, payload in gateway.sent} == {"Alex"}


@pytest.mark.asyncio
async def test_payload_is_built_once_per_event(store: InMemoryStore, gateway) -> None:
    event = MessageCreated(chat_id="c1", message_id="m1", sender_id="u1")

    result = await _pipeline(store, gateway).run(event)

    assert result.payload is not None
    assert all(payload is result.payload for _, payload in gateway.sent)


@pytest.mark.asyncio
async def test_personal_event_never_dispatches(store: InMemoryStore) -> None:
    gateway = AsyncMock()
    event = CalendarEventCreated(event_id="e1", group_id="g1", created_by_user_id="u1", is_personal=True)

    result = await _pipeline(store, gateway).run(event)

    assert result.stage is PipelineStage.DONE
    assert result.payload is None
    gateway.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_recipients_without_tokens_are_skipped(store: InMemoryStore, gateway) -> None:
    event = TaskCreated(task_id="t1", assigned_user_ids=["ghost", "u6"], created_by_user_id="u1")

    result = await _pipeline(store, gateway).run(event)

    assert result.recipients == {"ghost", "u6"}
    assert gateway.sent_tokens == ["tok-u6"]
    assert list(result.reports) == ["u6"]


@pytest.mark.asyncio
async def test_invalid_tokens_are_reconciled_per_user(store: InMemoryStore, gateway) -> None:
    gateway.invalid_tokens.update({"tok-u2b", "tok-u3"})
    event = MessageCreated(chat_id="c1", message_id="m1", sender_id="u1")

    result = await _pipeline(store, gateway).run(event)

    assert result.removed_tokens == {"u2": ["tok-u2b"], "u3": ["tok-u3"]}
    assert store.documents["users"]["u2"]["fcmTokens"] == [{"token": "tok-u2a"}]
    assert "fcmToken" not in store.documents["users"]["u3"]
    statuses = {r.token: r.outcome.status for r in result.reports["u2"]}
    assert statuses == {"tok-u2a": OutcomeStatus.SUCCESS, "tok-u2b": OutcomeStatus.INVALID_ADDRESS}


@pytest.mark.asyncio
async def test_lookup_failure_for_one_recipient_spares_the_rest(gateway) -> None:
    store = AsyncMock()
    store.get_chat.return_value = Chat(chat_id="c1", participant_user_ids=["u1", "u2", "u3"])
    profiles = InMemoryStore({"users": {"u3": {"fcmTokens": [{"token": "tok-u3"}]}}})

    async def get_user_profile(user_id: str):  # type: ignore[no-untyped-def]
        if user_id == "u2":
            raise RuntimeError("read timed out")
        return await profiles.get_user_profile(user_id)

    store.get_user_profile.side_effect = get_user_profile
    event = MessageCreated(chat_id="c1", message_id="m1", sender_id="u1")

    result = await _pipeline(store, gateway).run(event)

    assert result.stage is PipelineStage.DONE
    assert gateway.sent_tokens == ["tok-u3"]


@pytest.mark.asyncio
async def test_custom_catalog_is_used(store: InMemoryStore, gateway) -> None:
    catalog = StrategyCatalog()
    catalog.register(TaskStrategy())
    event = TaskCreated(task_id="t1", assigned_user_ids=["u6"], created_by_user_id="u1")

    result = await NotificationPipeline(store, gateway, catalog=catalog).run(event)

    assert result.recipients == {"u6"}
    with pytest.raises(LookupError):
        await NotificationPipeline(store, gateway, catalog=catalog).run(
            MessageCreated(chat_id="c1", message_id="m1", sender_id="u1")
        )
