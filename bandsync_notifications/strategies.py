"""Per-kind strategies — how each event kind resolves its audience and renders its payload."""

from __future__ import annotations

from typing import Protocol

from bandsync_notifications.events import CalendarEventCreated, DomainEvent, EventKind, MessageCreated, TaskCreated
from bandsync_notifications.models import NotificationPayload
from bandsync_notifications.payloads import build_calendar_event_payload, build_message_payload, build_task_payload
from bandsync_notifications.recipients import calendar_event_recipients, message_recipients, task_recipients
from bandsync_notifications.store.base import DocumentStore


class EventStrategy(Protocol):
    kind: EventKind

    async def resolve_recipients(self, event: DomainEvent, store: DocumentStore) -> set[str]: ...

    def build_payload(self, event: DomainEvent, timestamp_ms: int) -> NotificationPayload: ...


class MessageStrategy:
    kind = EventKind.MESSAGE

    async def resolve_recipients(self, event: MessageCreated, store: DocumentStore) -> set[str]:
        return await message_recipients(event, store)

    def build_payload(self, event: MessageCreated, timestamp_ms: int) -> NotificationPayload:
        return build_message_payload(event, timestamp_ms)


class TaskStrategy:
    kind = EventKind.TASK

    async def resolve_recipients(self, event: TaskCreated, store: DocumentStore) -> set[str]:
        return await task_recipients(event, store)

    def build_payload(self, event: TaskCreated, timestamp_ms: int) -> NotificationPayload:
        return build_task_payload(event, timestamp_ms)


class CalendarEventStrategy:
    kind = EventKind.EVENT

    async def resolve_recipients(self, event: CalendarEventCreated, store: DocumentStore) -> set[str]:
        return await calendar_event_recipients(event, store)

    def build_payload(self, event: CalendarEventCreated, timestamp_ms: int) -> NotificationPayload:
        return build_calendar_event_payload(event, timestamp_ms)


class StrategyCatalog:
    def __init__(self) -> None:
        self._registry: dict[EventKind, EventStrategy] = {}

    def register(self, strategy: EventStrategy) -> None:
        if strategy.kind in self._registry:
            raise ValueError(f"Strategy already registered for kind: {strategy.kind.value}")
        self._registry[strategy.kind] = strategy

    def get(self, kind: EventKind) -> EventStrategy | None:
        return self._registry.get(kind)

    def for_event(self, event: DomainEvent) -> EventStrategy:
        strategy = self._registry.get(event.kind)
        if strategy is None:
            raise LookupError(f"No strategy registered for kind: {event.kind.value}")
        return strategy


def build_default_catalog() -> StrategyCatalog:
    catalog = StrategyCatalog()
    catalog.register(MessageStrategy())
    catalog.register(TaskStrategy())
    catalog.register(CalendarEventStrategy())
    return catalog
