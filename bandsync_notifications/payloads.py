"""Payload construction — turns a domain event into a push notification.

Builders are pure: the only input besides the event is the dispatch
timestamp, which callers supply from their clock.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

from bandsync_notifications.events import CalendarEventCreated, DomainEvent, MessageCreated, TaskCreated
from bandsync_notifications.models import AndroidHints, ApnsHints, NotificationPayload, PlatformHints

if TYPE_CHECKING:
    from bandsync_notifications.strategies import StrategyCatalog

PHOTO_PLACEHOLDER = "📷 Photo"
TASK_TITLE = "New Task Assigned"
EVENT_TITLE = "New Event Added"

MENTION_CATEGORY = "MENTION_NOTIFICATION"
CHAT_CATEGORY = "CHAT_NOTIFICATION"
TASK_CATEGORY = "TASK_NOTIFICATION"
EVENT_CATEGORY = "EVENT_NOTIFICATION"

CHAT_CHANNEL = "chat_notifications"
TASK_CHANNEL = "task_notifications"
EVENT_CHANNEL = "event_notifications"


def platform_hints(category: str, channel_id: str, interruption_level: str = "active") -> PlatformHints:
    return PlatformHints(
        apns=ApnsHints(category=category, interruption_level=interruption_level),
        android=AndroidHints(channel_id=channel_id),
    )


def build_message_payload(event: MessageCreated, timestamp_ms: int) -> NotificationPayload:
    body = PHOTO_PLACEHOLDER if event.message_type == "image" else event.content
    mention = event.is_mention
    title = f"{event.sender_name} mentioned you" if mention else event.sender_name
    return NotificationPayload(
        title=title,
        body=body,
        data={
            "type": "mention" if mention else "chat",
            "chatId": event.chat_id,
            "messageId": event.message_id,
            "senderName": event.sender_name,
            "timestamp": str(timestamp_ms),
        },
        hints=platform_hints(
            MENTION_CATEGORY if mention else CHAT_CATEGORY,
            CHAT_CHANNEL,
            "time-sensitive" if mention else "active",
        ),
    )


def build_task_payload(event: TaskCreated, timestamp_ms: int) -> NotificationPayload:
    return NotificationPayload(
        title=TASK_TITLE,
        body=event.title,
        data={"type": "task", "taskId": event.task_id, "timestamp": str(timestamp_ms)},
        hints=platform_hints(TASK_CATEGORY, TASK_CHANNEL),
    )


def build_calendar_event_payload(event: CalendarEventCreated, timestamp_ms: int) -> NotificationPayload:
    return NotificationPayload(
        title=EVENT_TITLE,
        body=event.title,
        data={"type": "event", "eventId": event.event_id, "timestamp": str(timestamp_ms)},
        hints=platform_hints(EVENT_CATEGORY, EVENT_CHANNEL),
    )


class PayloadBuilder:
    def __init__(self, catalog: "StrategyCatalog | None" = None, clock: Callable[[], float] = time.time) -> None:
        if catalog is None:
            from bandsync_notifications.strategies import build_default_catalog

            catalog = build_default_catalog()
        self._catalog = catalog
        self._clock = clock

    def build(self, event: DomainEvent) -> NotificationPayload:
        timestamp_ms = int(self._clock() * 1000)
        return self._catalog.for_event(event).build_payload(event, timestamp_ms)
