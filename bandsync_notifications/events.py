"""Domain events — the records whose creation triggers a notification."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    MESSAGE = "message"
    TASK = "task"
    EVENT = "event"


class Trigger(str, Enum):
    MESSAGE_CREATED = "message-created"
    TASK_CREATED = "task-created"
    EVENT_CREATED = "event-created"


class _DomainEvent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class MessageCreated(_DomainEvent):
    kind: Literal[EventKind.MESSAGE] = EventKind.MESSAGE
    chat_id: str = Field(alias="chatId")
    message_id: str = Field(alias="messageId")
    sender_id: str = Field(alias="senderID")
    sender_name: str = Field(default="Someone", alias="senderName")
    content: str = "New message"
    message_type: str = Field(default="text", alias="type")

    @property
    def actor_id(self) -> str:
        return self.sender_id

    @property
    def is_mention(self) -> bool:
        return "@" in self.content


class TaskCreated(_DomainEvent):
    kind: Literal[EventKind.TASK] = EventKind.TASK
    task_id: str = Field(alias="taskId")
    title: str = "New task"
    assigned_user_ids: list[str] = Field(default_factory=list, alias="assignedTo")
    created_by_user_id: str = Field(alias="createdBy")

    @property
    def actor_id(self) -> str:
        return self.created_by_user_id


class CalendarEventCreated(_DomainEvent):
    kind: Literal[EventKind.EVENT] = EventKind.EVENT
    event_id: str = Field(alias="eventId")
    title: str = "New event"
    group_id: str | None = Field(default=None, alias="groupId")
    created_by_user_id: str = Field(alias="createdBy")
    is_personal: bool = Field(default=False, alias="isPersonal")

    @property
    def actor_id(self) -> str:
        return self.created_by_user_id


DomainEvent = Union[MessageCreated, TaskCreated, CalendarEventCreated]

_TRIGGER_MODELS: dict[Trigger, type[_DomainEvent]] = {
    Trigger.MESSAGE_CREATED: MessageCreated,
    Trigger.TASK_CREATED: TaskCreated,
    Trigger.EVENT_CREATED: CalendarEventCreated,
}


def parse_trigger(trigger: Trigger | str, params: dict[str, str], data: dict[str, Any]) -> DomainEvent:
    """Build a domain event from a trigger's path params and the created record.

    Null or empty-string fields in the record fall back to their defaults,
    matching how the mobile client omits or blanks optional keys. Raises
    ``ValueError`` for unknown triggers and ``pydantic.ValidationError`` for
    malformed records.
    """
    model = _TRIGGER_MODELS[Trigger(trigger)]
    fields = {key: value for key, value in data.items() if value is not None and value != ""}
    fields.pop("kind", None)
    fields.update(params)
    return model.model_validate(fields)  # type: ignore[return-value]
